"""Templating: records, section layouts, kind templates and placeholder substitution."""

from folio.contexts.templating.exceptions import (
    InvalidDocumentRequest,
    SectionCompositionAmbiguity,
    UnknownDocumentKind,
)
from folio.contexts.templating.layout import (
    LayoutConfiguration,
    SectionSpec,
    compose_sections,
    resolve_sections,
    validate_layout,
)
from folio.contexts.templating.markup import DocumentHead, MarkupBlock, MarkupDocument
from folio.contexts.templating.records import DocumentKind, record_from_dict
from folio.contexts.templating.variables import available_variables, substitute

__all__ = [
    "DocumentHead",
    "DocumentKind",
    "InvalidDocumentRequest",
    "LayoutConfiguration",
    "MarkupBlock",
    "MarkupDocument",
    "SectionCompositionAmbiguity",
    "SectionSpec",
    "UnknownDocumentKind",
    "available_variables",
    "compose_sections",
    "record_from_dict",
    "resolve_sections",
    "substitute",
    "validate_layout",
]
