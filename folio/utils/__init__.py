"""
Shared utilities for FOLIO.

Common functionality used across contexts:
- Logger setup
- Generation event log
- Text and value formatting
- PDF inspection
"""

from folio.utils.timestamp import format_long_date, now, now_exact, parse_date

__all__ = ["format_long_date", "now", "now_exact", "parse_date"]
