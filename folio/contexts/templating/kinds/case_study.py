"""
Case Study Document Kind

Published project case study in one of two layouts:
    standard: sequential titled sections under a header with the tenant logo
    magazine: hero banner over two-column grids, with the photo strip and
              metrics bar as full-width bands

Both layouts share one section plan; the magazine layout assigns each
visible section to a column from its "column" setting, falling back to
DEFAULT_COLUMN for layouts saved before columns existed. Section order is
the configured order in both layouts.
"""

import re
from typing import Dict, List, Optional, Tuple

from markupsafe import Markup

from folio.contexts.assets.references import AssetName, AssetReference
from folio.contexts.templating.kinds.base import DocumentKindSpec, RenderContext
from folio.contexts.templating.markup import EMPTY, MarkupBlock, is_empty
from folio.contexts.templating.records import CaseStudyRecord, DocumentKind
from folio.utils.text_processing import format_currency, format_number, html_to_text, safe_filename_stem
from folio.utils.timestamp import format_long_date

LOGO_SLOT = "logo"
CUSTOMER_LOGO_SLOT = "customer_logo"

MAGAZINE = "magazine"
STANDARD = "standard"

DEFAULT_COLUMN = {
    "company_info": "left",
    "project_info": "left",
    "executive_summary": "left",
    "services_provided": "left",
    "challenge": "right",
    "solution": "right",
    "results": "right",
}

NARRATIVE_FIELDS = ("executive_summary", "challenge", "solution", "results")

MAX_GALLERY_IMAGES = 6
MAX_STRIP_IMAGES = 3

# Magazine sections that span both columns
FULL_WIDTH_SECTIONS = ("images", "metrics")

DEFAULT_ACCENT = "#c0392b"
_COLOR = re.compile(r"^#[0-9a-fA-F]{3,8}$")


def is_magazine(record: CaseStudyRecord) -> bool:
    return record.options.layout_style == MAGAZINE


def accent_color(record: CaseStudyRecord) -> str:
    color = (record.options.accent_color or "").strip()
    return color if _COLOR.match(color) else DEFAULT_ACCENT


def project_dates(record: CaseStudyRecord) -> str:
    start = format_long_date(record.project_start_date)
    end = format_long_date(record.project_end_date)
    if start and end:
        return f"{start} – {end}"
    return start or end


def project_facts(record: CaseStudyRecord, include_names: bool) -> List[Tuple[str, str]]:
    """(label, value) pairs for the project information block, skipping empty values."""
    facts = []
    if include_names:
        facts.append(("Customer", record.customer_name or ""))
        facts.append(("Project", record.project_name or ""))
    facts.extend(
        [
            ("Market", record.market or ""),
            ("Project Value", format_currency(record.project_value)),
            ("Square Footage", f"{format_number(record.project_square_footage)} SF" if format_number(record.project_square_footage) else ""),
            ("Project Dates", project_dates(record)),
            ("Construction Type", record.construction_type or ""),
            ("Project Size", record.project_size or ""),
        ]
    )
    return [(label, value) for label, value in facts if value]


def key_metrics(record: CaseStudyRecord) -> List[Tuple[str, str, str]]:
    """(value, label, color) triples for the metrics that have data."""
    metrics = []
    if format_currency(record.cost_savings):
        metrics.append((format_currency(record.cost_savings), "Cost Savings", "#10b981"))
    if record.timeline_improvement_days:
        metrics.append((f"{record.timeline_improvement_days} days", "Timeline Improvement", "#3b82f6"))
    if format_number(record.quality_score):
        metrics.append((f"{format_number(record.quality_score)}%", "Quality Score", "#f59e0b"))
    return metrics


def magazine_rows(blocks: List[MarkupBlock]) -> List[MarkupBlock]:
    """
    Lay out magazine sections as full-width bands and two-column grids.

    Blocks arrive in configured order. The photo strip and metrics bar span the
    page where they fall; other sections fill a two-column grid, and a new grid
    starts whenever a left-column section follows a right-column one, so
    reading each grid left column first reproduces the configured order.
    """
    rows: List[object] = []
    grid: Optional[Tuple[List[MarkupBlock], List[MarkupBlock]]] = None
    for block in blocks:
        if block.key in FULL_WIDTH_SECTIONS:
            rows.append(block)
            grid = None
            continue
        right = (block.region or DEFAULT_COLUMN.get(block.key, "left")) == "right"
        if grid is None or (not right and grid[1]):
            grid = ([], [])
            rows.append(grid)
        grid[1 if right else 0].append(block)

    arranged = []
    grids = 0
    for row in rows:
        if isinstance(row, MarkupBlock):
            arranged.append(row)
            continue
        grids += 1
        left, right = row
        arranged.append(
            MarkupBlock(
                key="body-grid" if grids == 1 else f"body-grid-{grids}",
                css_class="body-grid",
                children=(
                    MarkupBlock(key="left", css_class="column", children=tuple(left)),
                    MarkupBlock(key="right", css_class="column", children=tuple(right)),
                ),
            )
        )
    return arranged


class CaseStudyKind(DocumentKindSpec):
    name = DocumentKind.CASE_STUDY
    record_type = CaseStudyRecord
    template_name = "kinds/case_study.html.jinja"

    def build_section_renderers(self):
        renderers = {key: self._narrative(key) for key in NARRATIVE_FIELDS}
        renderers.update(
            {
                "company_info": self._company_info,
                "project_info": self._project_info,
                "metrics": self._metrics,
                "images": self._images,
                "services_provided": self._services_provided,
            }
        )
        return renderers

    def filename(self, record: CaseStudyRecord) -> str:
        return f"Case-Study-{safe_filename_stem(record.title, 'case-study')}.pdf"

    def title(self, record: CaseStudyRecord) -> str:
        return record.title

    def asset_references(self, record: CaseStudyRecord, tenant_id: Optional[str]) -> Dict[str, AssetReference]:
        references = {}
        if record.options.show_logo:
            references[LOGO_SLOT] = AssetReference(AssetName.TENANT_LOGO, tenant_id=tenant_id)
        if is_magazine(record) and record.customer_logo_key:
            references[CUSTOMER_LOGO_SLOT] = AssetReference(
                AssetName.CUSTOMER_LOGO, tenant_id=tenant_id, key=record.customer_logo_key
            )
        return references

    def root_class(self, record: CaseStudyRecord) -> str:
        layout = MAGAZINE if is_magazine(record) else STANDARD
        return f"doc-case_study layout-{layout}"

    def hero_src(self, record: CaseStudyRecord, context: RenderContext) -> str:
        hero = next((image for image in record.images if image.is_hero_image), None)
        return context.rewrite(hero.stored_reference) if hero else ""

    def header(self, record: CaseStudyRecord, context: RenderContext) -> Markup:
        logo_src = context.asset_src(LOGO_SLOT) if record.options.show_logo else ""
        if is_magazine(record):
            return self.macro("magazine_header")(
                record=record,
                hero_src=self.hero_src(record, context),
                customer_logo_src=context.asset_src(CUSTOMER_LOGO_SLOT),
            )
        return self.macro("header")(record=record, logo_src=logo_src)

    def footer(self, record: CaseStudyRecord, context: RenderContext) -> Markup:
        return self.macro("footer")(generated_on=format_long_date(context.today))

    def arrange(self, record: CaseStudyRecord, blocks: List[MarkupBlock], context: RenderContext) -> MarkupBlock:
        if not is_magazine(record):
            return MarkupBlock(
                key=self.name.value,
                children=super().arrange(record, blocks, context).children,
                css_class=self.root_class(record),
                style=f"--cs-accent: {accent_color(record)}",
            )

        children = [MarkupBlock(key="header", html=self.header(record, context))]
        children.extend(magazine_rows(blocks))

        logo_src = context.asset_src(LOGO_SLOT) if record.options.show_logo else ""
        if logo_src:
            children.append(MarkupBlock(key="logo-area", html=self.macro("logo_area")(logo_src=logo_src)))
        children.append(MarkupBlock(key="footer", html=self.footer(record, context)))

        return MarkupBlock(
            key=self.name.value,
            children=tuple(children),
            css_class=self.root_class(record),
            style=f"--cs-accent: {accent_color(record)}",
        )

    # --- Section renderers ---

    def _layout_macro(self, record: CaseStudyRecord, base: str):
        prefix = "magazine_" if is_magazine(record) else ""
        return self.macro(prefix + base)

    def _narrative(self, attribute: str):
        def render(record: CaseStudyRecord, label: str, context: RenderContext) -> Markup:
            text = getattr(record, attribute)
            if not html_to_text(text):
                return EMPTY
            return self._layout_macro(record, "narrative")(label=label, body=text)

        return render

    def _company_info(self, record: CaseStudyRecord, label: str, context: RenderContext) -> Markup:
        if not record.customer_name and not record.project_name:
            return EMPTY
        return self._layout_macro(record, "company_info")(label=label, record=record)

    def _project_info(self, record: CaseStudyRecord, label: str, context: RenderContext) -> Markup:
        # Layouts saved before company_info existed show the names here
        include_names = not context.has_configured_section("company_info")
        if is_magazine(record):
            facts = project_facts(record, include_names=False)
            show_names = include_names and bool(record.project_name)
            if not facts and not show_names:
                return EMPTY
            return self.macro("magazine_project_info")(record=record, facts=facts, show_names=show_names)

        facts = project_facts(record, include_names=include_names)
        if not facts:
            return EMPTY
        return self.macro("project_info")(label=label, facts=facts)

    def _metrics(self, record: CaseStudyRecord, label: str, context: RenderContext) -> Markup:
        if not record.options.show_metrics:
            return EMPTY
        metrics = key_metrics(record)
        if not metrics:
            return EMPTY
        return self._layout_macro(record, "metrics")(label=label, metrics=metrics)

    def _images(self, record: CaseStudyRecord, label: str, context: RenderContext) -> Markup:
        if not record.options.show_images or not record.images:
            return EMPTY
        images = sorted(record.images, key=lambda image: image.display_order or 0)
        others = [
            (context.rewrite(image.stored_reference), image.caption or "")
            for image in images
            if not image.is_hero_image and image.stored_reference
        ]

        if is_magazine(record):
            # Hero goes in the banner; the strip shows the first few others
            others = others[:MAX_STRIP_IMAGES]
            if not others:
                return EMPTY
            return self.macro("magazine_images")(images=others)

        hero_src = self.hero_src(record, context)
        others = others[:MAX_GALLERY_IMAGES]
        if not hero_src and not others:
            return EMPTY
        return self.macro("images")(label=label, hero_src=hero_src, images=others)

    def _services_provided(self, record: CaseStudyRecord, label: str, context: RenderContext) -> Markup:
        services = [s for s in record.services_provided if not is_empty(s)]
        if not services:
            return EMPTY
        return self._layout_macro(record, "services_provided")(label=label, services=services)
