"""
Log Report Document Kind

Tabular RFI log for a project: summary line, status counts, and one row per
entry with days outstanding for entries that are still open.
"""

from collections import Counter
from datetime import date
from typing import Dict, List, Optional

from markupsafe import Markup

from folio.contexts.assets.references import AssetName, AssetReference
from folio.contexts.templating.kinds.base import DocumentKindSpec, RenderContext
from folio.contexts.templating.markup import EMPTY
from folio.contexts.templating.records import DocumentKind, LogEntry, LogReportRecord
from folio.utils.text_processing import safe_filename_stem
from folio.utils.timestamp import format_long_date, format_short_date, parse_date

LOGO_SLOT = "logo"
OVERDUE_AFTER_DAYS = 7
STATUSES = ("open", "answered", "closed")


def days_outstanding(entry: LogEntry, as_of: date) -> Optional[int]:
    """Whole days an open entry has been outstanding; None for answered/closed entries."""
    if entry.status != "open":
        return None
    created = parse_date(entry.created_at)
    if created is None:
        return None
    return abs((as_of - created).days)


def is_overdue(entry: LogEntry, as_of: date) -> bool:
    days = days_outstanding(entry, as_of)
    return days is not None and days > OVERDUE_AFTER_DAYS


class LogReportKind(DocumentKindSpec):
    name = DocumentKind.LOG_REPORT
    record_type = LogReportRecord
    template_name = "kinds/log_report.html.jinja"

    def build_section_renderers(self):
        return {
            "summary": self._summary,
            "status_breakdown": self._status_breakdown,
            "entries": self._entries,
        }

    def filename(self, record: LogReportRecord) -> str:
        return f"RFI-Log-{safe_filename_stem(record.project_name, 'All-Projects')}.pdf"

    def title(self, record: LogReportRecord) -> str:
        return f"RFI Log Report - {record.project_name or 'All Projects'}"

    def asset_references(self, record: LogReportRecord, tenant_id: Optional[str]) -> Dict[str, AssetReference]:
        return {LOGO_SLOT: AssetReference(AssetName.TENANT_LOGO, tenant_id=tenant_id)}

    def as_of(self, record: LogReportRecord, context: RenderContext) -> date:
        return record.as_of or context.today

    def header(self, record: LogReportRecord, context: RenderContext) -> Markup:
        return self.macro("header")(record=record, logo_src=context.asset_src(LOGO_SLOT))

    def footer(self, record: LogReportRecord, context: RenderContext) -> Markup:
        return self.macro("footer")(record=record, generated_on=format_long_date(context.today))

    # --- Section renderers ---

    def _summary(self, record: LogReportRecord, label: str, context: RenderContext) -> Markup:
        return self.macro("summary")(
            label=label,
            project_name=record.project_name or "All Projects",
            report_date=format_short_date(self.as_of(record, context)),
            total=len(record.entries),
        )

    def _status_breakdown(self, record: LogReportRecord, label: str, context: RenderContext) -> Markup:
        if not record.entries:
            return EMPTY
        as_of = self.as_of(record, context)
        counts = Counter(entry.status for entry in record.entries)
        breakdown = [(status.capitalize(), counts.get(status, 0)) for status in STATUSES]
        overdue = sum(1 for entry in record.entries if is_overdue(entry, as_of))
        return self.macro("status_breakdown")(label=label, breakdown=breakdown, overdue=overdue)

    def _entries(self, record: LogReportRecord, label: str, context: RenderContext) -> Markup:
        if not record.entries:
            return EMPTY
        as_of = self.as_of(record, context)
        rows: List[dict] = []
        for entry in record.entries:
            days = days_outstanding(entry, as_of)
            rows.append(
                {
                    "entry": entry,
                    "days": "-" if days is None else f"{days} {'day' if days == 1 else 'days'}",
                    "overdue": days is not None and days > OVERDUE_AFTER_DAYS,
                }
            )
        return self.macro("entries")(label=label, rows=rows)
