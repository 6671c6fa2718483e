"""
Template Variable Substitution

Replaces {{name}} placeholders in free-text template bodies (proposal
boilerplate, cover letters) with values from a flat mapping. This is a
single-pass text substitution, deliberately simpler than the Jinja2
section templates: template authors write plain text, not template code.
"""

import re
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Mapping, Optional

from folio.contexts.templating.records import ProposalRecord
from folio.utils.text_processing import format_currency
from folio.utils.timestamp import format_long_date

PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*([A-Za-z0-9_]+)\s*\}\}")


@dataclass(frozen=True)
class TemplateVariable:
    """A placeholder template authors may use."""

    name: str
    description: str

    @property
    def placeholder(self) -> str:
        return "{{" + self.name + "}}"


AVAILABLE_VARIABLES = (
    # Customer
    TemplateVariable("customer_name", "Customer facility or company name"),
    TemplateVariable("customer_owner", "Customer owner/contact name"),
    TemplateVariable("customer_address", "Customer full address"),
    TemplateVariable("customer_city", "Customer city"),
    TemplateVariable("customer_state", "Customer state"),
    TemplateVariable("customer_zip", "Customer ZIP code"),
    TemplateVariable("customer_phone", "Customer phone number"),
    TemplateVariable("customer_email", "Customer email address"),
    # Proposal
    TemplateVariable("proposal_number", "Auto-generated proposal number"),
    TemplateVariable("proposal_title", "Proposal title"),
    TemplateVariable("project_name", "Project name"),
    TemplateVariable("project_location", "Project location"),
    TemplateVariable("total_amount", "Total proposal amount (formatted currency)"),
    TemplateVariable("valid_until", "Proposal expiration date (formatted)"),
    TemplateVariable("payment_terms", "Payment terms"),
    # Company
    TemplateVariable("company_name", "Your company name"),
    TemplateVariable("company_address", "Your company address"),
    TemplateVariable("company_city", "Your company city"),
    TemplateVariable("company_state", "Your company state"),
    TemplateVariable("company_zip", "Your company ZIP code"),
    TemplateVariable("company_phone", "Your company phone number"),
    TemplateVariable("company_email", "Your company email"),
    TemplateVariable("company_website", "Your company website"),
    # Dates
    TemplateVariable("current_date", "Today's date (formatted)"),
    TemplateVariable("current_year", "Current year"),
    TemplateVariable("current_month", "Current month name"),
    # Author
    TemplateVariable("created_by_name", "Name of person creating proposal"),
    TemplateVariable("created_by_email", "Email of person creating proposal"),
    TemplateVariable("created_by_title", "Title of person creating proposal"),
)

RECOGNIZED_NAMES = frozenset(v.name for v in AVAILABLE_VARIABLES)


def available_variables() -> List[TemplateVariable]:
    """List every recognized placeholder with its description, in display order."""
    return list(AVAILABLE_VARIABLES)


def substitute(text: Optional[str], variables: Mapping[str, Any]) -> str:
    """
    Replace recognized {{name}} placeholders in text.

    Recognized placeholders become the string value from variables, or ""
    when the key is absent or None. Unrecognized placeholders are left
    exactly as written. Replacement values are never re-scanned, so a value
    that itself looks like a placeholder is inserted verbatim.

    Args:
        text: Template body (None is treated as "")
        variables: Flat name -> value mapping

    Returns:
        Text with recognized placeholders replaced
    """
    if not text:
        return ""

    def _replace(match: re.Match) -> str:
        name = match.group(1)
        if name not in RECOGNIZED_NAMES:
            return match.group(0)
        value = variables.get(name)
        return "" if value is None else str(value)

    return PLACEHOLDER_PATTERN.sub(_replace, text)


def placeholders_in(text: Optional[str]) -> List[str]:
    """Names of all placeholders in text (recognized or not), in order of appearance."""
    if not text:
        return []
    return [match.group(1) for match in PLACEHOLDER_PATTERN.finditer(text)]


def build_proposal_variables(proposal: ProposalRecord, today: Optional[date] = None) -> Dict[str, str]:
    """
    Build the variable map for a proposal's free-text bodies.

    Args:
        proposal: Proposal record (customer, company and author info optional)
        today: Date used for the current_* variables (defaults to today)

    Returns:
        Mapping covering every recognized variable name
    """
    today = today or date.today()
    customer = proposal.customer
    company = proposal.company
    author = proposal.author

    def _attr(obj, name: str) -> str:
        value = getattr(obj, name, None) if obj is not None else None
        return "" if value is None else str(value)

    customer_name = proposal.customer_name or _attr(customer, "facility") or _attr(customer, "name")
    amount = format_currency(proposal.total_amount, cents=True)

    return {
        "customer_name": customer_name,
        "customer_owner": proposal.customer_owner or _attr(customer, "owner"),
        "customer_address": proposal.customer_address or _attr(customer, "address"),
        "customer_city": _attr(customer, "city"),
        "customer_state": _attr(customer, "state"),
        "customer_zip": _attr(customer, "zip"),
        "customer_phone": _attr(customer, "phone"),
        "customer_email": _attr(customer, "email"),
        "proposal_number": proposal.proposal_number or "",
        "proposal_title": proposal.title or "",
        "project_name": proposal.project_name or "",
        "project_location": proposal.project_location or "",
        "total_amount": amount or "$0.00",
        "valid_until": format_long_date(proposal.valid_until),
        "payment_terms": proposal.payment_terms or "",
        "company_name": _attr(company, "company_name"),
        "company_address": _attr(company, "address"),
        "company_city": _attr(company, "city"),
        "company_state": _attr(company, "state"),
        "company_zip": _attr(company, "zip"),
        "company_phone": _attr(company, "phone"),
        "company_email": _attr(company, "email"),
        "company_website": _attr(company, "website"),
        "current_date": format_long_date(today),
        "current_year": str(today.year),
        "current_month": f"{today:%B}",
        "created_by_name": _attr(author, "name") or _attr(author, "username") or (proposal.created_by_name or ""),
        "created_by_email": _attr(author, "email"),
        "created_by_title": _attr(author, "title"),
    }
