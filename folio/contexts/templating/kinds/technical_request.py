"""
Technical Request (RFI) Document Kind

Single request-for-information form. The response and distribution blocks
always print, blank when unanswered, so the recipient can fill them in.
"""

from typing import Dict, Optional

from markupsafe import Markup

from folio.contexts.assets.references import AssetName, AssetReference
from folio.contexts.templating.kinds.base import DocumentKindSpec, RenderContext, field_section
from folio.contexts.templating.markup import EMPTY
from folio.contexts.templating.records import DocumentKind, TechnicalRequestRecord
from folio.utils.text_processing import safe_filename_stem
from folio.utils.timestamp import format_long_date

LOGO_SLOT = "logo"

DISCIPLINES = (
    ("plumbing", "Plumbing"),
    ("hvac", "HVAC"),
    ("piping", "Piping"),
    ("equipment", "Equipment"),
    ("controls", "Controls"),
)

RESPONSE_CLASSIFICATIONS = (
    ("clarification_only", "Clarification Only - No Action Required"),
    ("submit_cor", "Submit COR"),
    ("proceed_suggested", "Proceed as Suggested"),
    ("see_attached", "See Attached"),
)


def discipline_label(record: TechnicalRequestRecord) -> str:
    if not record.discipline:
        return ""
    if record.discipline == "other":
        return record.discipline_other or "Other"
    return dict(DISCIPLINES).get(record.discipline, record.discipline.capitalize())


class TechnicalRequestKind(DocumentKindSpec):
    name = DocumentKind.TECHNICAL_REQUEST
    record_type = TechnicalRequestRecord
    template_name = "kinds/technical_request.html.jinja"

    def build_section_renderers(self):
        return {
            "request_details": self._request_details,
            "references": self._references,
            "question": self._question,
            "suggested_solution": field_section("suggested_solution", "suggested_solution", self),
            "impact": self._impact,
            "attachments": self._attachments,
            "response": self._response,
            "distribution": self._distribution,
        }

    def filename(self, record: TechnicalRequestRecord) -> str:
        return f"RFI-{safe_filename_stem(record.number, 'rfi')}.pdf"

    def title(self, record: TechnicalRequestRecord) -> str:
        return f"RFI #{record.number} - {record.subject}" if record.subject else f"RFI #{record.number}"

    def asset_references(self, record: TechnicalRequestRecord, tenant_id: Optional[str]) -> Dict[str, AssetReference]:
        return {LOGO_SLOT: AssetReference(AssetName.TENANT_LOGO, tenant_id=tenant_id)}

    def header(self, record: TechnicalRequestRecord, context: RenderContext) -> Markup:
        return self.macro("header")(record=record, logo_src=context.asset_src(LOGO_SLOT))

    def footer(self, record: TechnicalRequestRecord, context: RenderContext) -> Markup:
        return self.macro("footer")(record=record, generated_on=format_long_date(context.today))

    # --- Section renderers ---

    def _request_details(self, record: TechnicalRequestRecord, label: str, context: RenderContext) -> Markup:
        fields = (
            record.project_name,
            record.project_number,
            record.recipient_company_name,
            record.recipient_contact_name,
            record.created_by_name,
            record.issuer_name,
        )
        if not any(fields):
            return EMPTY
        return self.macro("request_details")(label=label, record=record)

    def _references(self, record: TechnicalRequestRecord, label: str, context: RenderContext) -> Markup:
        if not any((record.spec_section, record.drawing_sheet, record.detail_grid_ref, record.discipline)):
            return EMPTY
        return self.macro("references")(
            label=label,
            record=record,
            disciplines=DISCIPLINES,
            discipline=discipline_label(record),
        )

    def _question(self, record: TechnicalRequestRecord, label: str, context: RenderContext) -> Markup:
        if not record.subject and not record.question:
            return EMPTY
        return self.macro("question")(label=label, record=record)

    def _impact(self, record: TechnicalRequestRecord, label: str, context: RenderContext) -> Markup:
        if not (record.schedule_impact or record.cost_impact or record.affects_other_trades):
            return EMPTY
        return self.macro("impact")(label=label, record=record)

    def _attachments(self, record: TechnicalRequestRecord, label: str, context: RenderContext) -> Markup:
        flags = (
            record.has_sketches,
            record.has_photos,
            record.has_spec_pages,
            record.has_shop_drawings,
            record.attachment_notes,
        )
        if not any(flags):
            return EMPTY
        return self.macro("attachments")(label=label, record=record)

    def _response(self, record: TechnicalRequestRecord, label: str, context: RenderContext) -> Markup:
        return self.macro("response")(label=label, record=record, classifications=RESPONSE_CLASSIFICATIONS)

    def _distribution(self, record: TechnicalRequestRecord, label: str, context: RenderContext) -> Markup:
        return self.macro("distribution")(label=label, record=record)
