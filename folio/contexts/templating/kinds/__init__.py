"""Built-in document kinds and the default kind registry."""

from typing import Optional

from folio.contexts.templating.kinds.base import DocumentKindSpec, RenderContext
from folio.contexts.templating.kinds.case_study import CaseStudyKind
from folio.contexts.templating.kinds.log_report import LogReportKind
from folio.contexts.templating.kinds.proposal import ProposalKind
from folio.contexts.templating.kinds.resume import ResumeKind
from folio.contexts.templating.kinds.technical_request import TechnicalRequestKind
from folio.contexts.templating.registries import DocumentKindRegistry, LayoutRegistry, TemplateRegistry

BUILTIN_KINDS = (ProposalKind, TechnicalRequestKind, CaseStudyKind, ResumeKind, LogReportKind)


def default_registry(
    templates: Optional[TemplateRegistry] = None,
    layouts: Optional[LayoutRegistry] = None,
) -> DocumentKindRegistry:
    """Registry with every built-in kind, sharing one template and layout registry."""
    templates = templates or TemplateRegistry()
    layouts = layouts or LayoutRegistry()
    return DocumentKindRegistry(kind(templates=templates, layouts=layouts) for kind in BUILTIN_KINDS)


__all__ = [
    "BUILTIN_KINDS",
    "CaseStudyKind",
    "DocumentKindSpec",
    "LogReportKind",
    "ProposalKind",
    "RenderContext",
    "ResumeKind",
    "TechnicalRequestKind",
    "default_registry",
]
