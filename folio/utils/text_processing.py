"""
Value formatting helpers shared by section renderers.

All helpers are total: missing or malformed input yields an empty string
rather than an exception, so renderers can omit the dependent field.
"""

import html
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Optional


def _to_decimal(value: Any) -> Optional[Decimal]:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        return Decimal(str(value).replace(",", "").replace("$", ""))
    except InvalidOperation:
        return None


def format_currency(value: Any, cents: bool = False) -> str:
    """
    Format a monetary amount in US dollars.

    Examples:
        format_currency(125000)             # "$125,000"
        format_currency(99.5, cents=True)   # "$99.50"
        format_currency(None)               # ""
    """
    amount = _to_decimal(value)
    if amount is None or amount == 0:
        return ""
    if cents:
        return f"${amount:,.2f}"
    return f"${amount:,.0f}"


def format_number(value: Any) -> str:
    """Format a number with thousands separators ("12,500"), or "" when missing."""
    amount = _to_decimal(value)
    if amount is None or amount == 0:
        return ""
    if amount == amount.to_integral_value():
        return f"{amount:,.0f}"
    return f"{amount:,}"


def safe_filename_stem(text: Optional[str], fallback: str = "document") -> str:
    """Replace every non-alphanumeric character with "-" ("Acme HQ #2" -> "Acme-HQ--2")."""
    if not text:
        return fallback
    return re.sub(r"[^a-zA-Z0-9]", "-", str(text))


def truncate_display(text: str, max_len: int) -> str:
    """
    Truncate text for display with ellipsis if needed.

    Args:
        text: Text to truncate
        max_len: Maximum length including ellipsis

    Returns:
        Truncated text with "..." if needed
    """
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


_BLOCK_BREAK_TAGS = re.compile(r"<\s*(br\s*/?|/p|/div|/li|/h[1-6])\s*>", re.IGNORECASE)
_LIST_ITEM_TAGS = re.compile(r"<\s*li[^>]*>", re.IGNORECASE)
_ANY_TAG = re.compile(r"<[^>]*>")


def html_to_text(value: Optional[str]) -> str:
    """
    Reduce stored rich text (editor HTML) to plain text with line structure.

    Block-level closing tags and <br> become newlines, list items become
    "• " lines, all other tags are dropped and entities are decoded. The
    result is plain text and must still be escaped before output.
    """
    if not value:
        return ""
    text = _BLOCK_BREAK_TAGS.sub("\n", str(value))
    text = _LIST_ITEM_TAGS.sub("• ", text)
    text = _ANY_TAG.sub("", text)
    text = html.unescape(text)
    lines = [line.strip() for line in text.splitlines()]
    return re.sub(r"\n{3,}", "\n\n", "\n".join(lines)).strip()
