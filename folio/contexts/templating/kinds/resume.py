"""
Resume Document Kind

Two-column employee resume: a dark sidebar with photo, name and contact
details, and a main column with summary, project experience, education,
skills and languages.
"""

from typing import Dict, List, Optional

from markupsafe import Markup

from folio.contexts.assets.references import AssetName, AssetReference
from folio.contexts.templating.kinds.base import DocumentKindSpec, RenderContext
from folio.contexts.templating.markup import EMPTY, MarkupBlock, is_empty
from folio.contexts.templating.records import DocumentKind, ResumeRecord
from folio.utils.text_processing import safe_filename_stem
from folio.utils.timestamp import parse_date

PHOTO_SLOT = "photo"

SIDEBAR = "sidebar"
MAIN = "main"
SIDEBAR_SECTIONS = frozenset({"contact", "references", "hobbies"})


def month_year(value) -> str:
    parsed = parse_date(value)
    return f"{parsed:%b} {parsed.year}" if parsed else ""


class ResumeKind(DocumentKindSpec):
    name = DocumentKind.RESUME
    record_type = ResumeRecord
    template_name = "kinds/resume.html.jinja"

    def build_section_renderers(self):
        return {
            "contact": self._contact,
            "references": self._list_section("references", "references"),
            "hobbies": self._list_section("hobbies", "hobbies"),
            "summary": self._summary,
            "projects": self._projects,
            "education": self._education,
            "skills": self._list_section("skills", "skills"),
            "languages": self._list_section("languages", "languages"),
        }

    def filename(self, record: ResumeRecord) -> str:
        return f"Resume-{safe_filename_stem(record.employee_name, 'employee')}.pdf"

    def title(self, record: ResumeRecord) -> str:
        return f"{record.employee_name} - Resume"

    def asset_references(self, record: ResumeRecord, tenant_id: Optional[str]) -> Dict[str, AssetReference]:
        if not record.photo_key:
            return {}
        owner_id = str(record.employee_id) if record.employee_id not in (None, "") else None
        return {
            PHOTO_SLOT: AssetReference(
                AssetName.EMPLOYEE_PHOTO, tenant_id=tenant_id, key=record.photo_key, owner_id=owner_id
            )
        }

    def header(self, record: ResumeRecord, context: RenderContext) -> Markup:
        return self.macro("identity")(record=record, photo_src=context.asset_src(PHOTO_SLOT))

    def footer(self, record: ResumeRecord, context: RenderContext) -> Markup:
        return EMPTY

    def arrange(self, record: ResumeRecord, blocks: List[MarkupBlock], context: RenderContext) -> MarkupBlock:
        sidebar = [MarkupBlock(key="identity", html=self.header(record, context))]
        main = []
        for block in blocks:
            region = block.region or (SIDEBAR if block.key in SIDEBAR_SECTIONS else MAIN)
            (sidebar if region == SIDEBAR else main).append(block)

        container = MarkupBlock(
            key="resume-container",
            css_class="resume-container",
            children=(
                MarkupBlock(key=SIDEBAR, css_class="sidebar", children=tuple(sidebar)),
                MarkupBlock(key=MAIN, css_class="main-content", children=tuple(main)),
            ),
        )
        return MarkupBlock(key=self.name.value, children=(container,), css_class=self.root_class(record))

    # --- Section renderers ---

    def _list_section(self, attribute: str, macro_name: str):
        def render(record: ResumeRecord, label: str, context: RenderContext) -> Markup:
            items = [item for item in getattr(record, attribute) if item]
            if not items:
                return EMPTY
            return self.macro(macro_name)(label=label, items=items)

        return render

    def _contact(self, record: ResumeRecord, label: str, context: RenderContext) -> Markup:
        if not (record.phone or record.email or record.address):
            return EMPTY
        return self.macro("contact")(label=label, record=record)

    def _summary(self, record: ResumeRecord, label: str, context: RenderContext) -> Markup:
        if is_empty(record.summary):
            return EMPTY
        return self.macro("summary")(label=label, body=record.summary)

    def _projects(self, record: ResumeRecord, label: str, context: RenderContext) -> Markup:
        if not record.projects:
            return EMPTY
        projects = [
            {
                "project": project,
                "dates": (
                    f"{month_year(project.start_date)} - {month_year(project.end_date) or 'Present'}"
                    if project.start_date or project.end_date
                    else ""
                ),
            }
            for project in record.projects
        ]
        return self.macro("projects")(label=label, projects=projects)

    def _education(self, record: ResumeRecord, label: str, context: RenderContext) -> Markup:
        if is_empty(record.education) and not record.certifications:
            return EMPTY
        return self.macro("education")(label=label, education=record.education, certifications=record.certifications)
