"""
Proposal Document Kind

Client-facing proposal: header with logo, "Prepared For" / "Project Details"
grid, free-text sections (with placeholder substitution), service offerings,
key personnel, terms, footer. Attached case studies are rendered as separate
documents and composed in after the proposal body.
"""

from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from markupsafe import Markup

from folio.contexts.assets.references import AssetName, AssetReference
from folio.contexts.templating.kinds.base import DocumentKindSpec, RenderContext, field_section
from folio.contexts.templating.markup import EMPTY, MarkupBlock, is_empty
from folio.contexts.templating.records import DocumentKind, ProposalRecord
from folio.contexts.templating.variables import build_proposal_variables
from folio.utils.text_processing import safe_filename_stem

LOGO_SLOT = "logo"


class ProposalKind(DocumentKindSpec):
    name = DocumentKind.PROPOSAL
    record_type = ProposalRecord
    template_name = "kinds/proposal.html.jinja"

    def build_section_renderers(self):
        renderers = {
            key: field_section("content_section", key, self, substitute_variables=True)
            for key in (
                "executive_summary",
                "company_overview",
                "scope_of_work",
                "approach_and_methodology",
                "terms_and_conditions",
            )
        }
        renderers["custom_sections"] = self._custom_sections
        renderers["service_offerings"] = self._service_offerings
        renderers["key_personnel"] = self._key_personnel
        return renderers

    def filename(self, record: ProposalRecord) -> str:
        return f"Proposal-{safe_filename_stem(record.proposal_number, 'proposal')}.pdf"

    def title(self, record: ProposalRecord) -> str:
        return f"{record.title} - {record.proposal_number}"

    def asset_references(self, record: ProposalRecord, tenant_id: Optional[str]) -> Dict[str, AssetReference]:
        return {LOGO_SLOT: AssetReference(AssetName.TENANT_LOGO, tenant_id=tenant_id)}

    def variables(self, record: ProposalRecord, today: date) -> Dict[str, str]:
        return build_proposal_variables(record, today=today)

    def embedded_records(self, record: ProposalRecord) -> List[Tuple[DocumentKind, Any]]:
        return [(DocumentKind.CASE_STUDY, case_study) for case_study in record.case_studies]

    def header(self, record: ProposalRecord, context: RenderContext) -> Markup:
        return self.macro("header")(record=record, logo_src=context.asset_src(LOGO_SLOT))

    def footer(self, record: ProposalRecord, context: RenderContext) -> Markup:
        return self.macro("footer")(record=record)

    def arrange(self, record: ProposalRecord, blocks: List[MarkupBlock], context: RenderContext) -> MarkupBlock:
        root = super().arrange(record, blocks, context)
        info = self.macro("info_grid")(record=record)
        if is_empty(info):
            return root
        # Info grid sits directly under the header
        children = list(root.children)
        position = 1 if children and children[0].key == "header" else 0
        children.insert(position, MarkupBlock(key="info_grid", html=info))
        return MarkupBlock(key=root.key, children=tuple(children), css_class=root.css_class)

    # --- Section renderers ---

    def _custom_sections(self, record: ProposalRecord, label: str, context: RenderContext) -> Markup:
        sections = [
            (section.title, context.substitute(section.content))
            for section in sorted(record.sections, key=lambda s: s.display_order or 0)
        ]
        sections = [(title, body) for title, body in sections if not is_empty(body)]
        if not sections:
            return EMPTY
        return self.macro("custom_sections")(sections=sections)

    def _service_offerings(self, record: ProposalRecord, label: str, context: RenderContext) -> Markup:
        offerings = sorted(record.service_offerings, key=lambda o: o.display_order or 0)
        if not offerings:
            return EMPTY
        return self.macro("service_offerings")(label=label, offerings=offerings)

    def _key_personnel(self, record: ProposalRecord, label: str, context: RenderContext) -> Markup:
        resumes = sorted(record.resumes, key=lambda r: r.display_order or 0)
        if not resumes:
            return EMPTY
        return self.macro("key_personnel")(label=label, resumes=resumes)
