"""Unit tests for the built-in document kinds."""

from dataclasses import replace
from datetime import date

import pytest

from folio.contexts.assets.references import AssetName, AssetReference, ResolvedAsset
from folio.contexts.templating.exceptions import InvalidDocumentRequest
from folio.contexts.templating.kinds.case_study import accent_color, project_facts
from folio.contexts.templating.kinds.log_report import days_outstanding, is_overdue
from folio.contexts.templating.layout import LayoutConfiguration, SectionSpec
from folio.contexts.templating.records import (
    CaseStudyImage,
    CaseStudyOptions,
    DocumentKind,
    LogEntry,
    ProposalRecord,
    ProposalSection,
)

LOGO = ResolvedAsset.inline(AssetReference(AssetName.TENANT_LOGO, "t1"), b"\x89PNG....", "image/png", "test")
NO_LOGO = ResolvedAsset.unavailable(AssetReference(AssetName.TENANT_LOGO, "t1"))


# --- Proposal ---


@pytest.mark.unit
def test_proposal_scope_present_offerings_absent(registry, proposal_record, today):
    """$125,000 proposal with a scope of work and no service offerings."""
    kind = registry.get(DocumentKind.PROPOSAL)

    document = kind.render(proposal_record, assets={"logo": NO_LOGO}, today=today)
    html = document.to_html()

    assert "Scope of Work" in document.headings()
    assert "Service Offerings" not in document.headings()
    assert "Service Offerings" not in html
    assert "$125,000" in html
    assert "<img" not in html


@pytest.mark.unit
def test_proposal_substitutes_variables(registry, proposal_record, today):
    document = registry.get("proposal").render(proposal_record, today=today)

    summary = document.block("executive_summary").html
    assert "Riverside Medical Center" in summary
    assert "$125,000.00" in summary
    assert "{{" not in summary


@pytest.mark.unit
def test_proposal_section_order_follows_layout(registry, proposal_record, today):
    layout = LayoutConfiguration.parse(
        [
            {"key": "scope_of_work", "label": "What We Will Do", "order": 1},
            {"key": "executive_summary", "label": "Summary", "order": 2},
        ]
    )

    document = registry.get("proposal").render(proposal_record, layout=layout, today=today)

    assert document.headings() == ["What We Will Do", "Summary"]


@pytest.mark.unit
def test_proposal_header_and_info_grid_order(registry, proposal_record, today):
    document = registry.get("proposal").render(proposal_record, assets={"logo": LOGO}, today=today)
    root = document.body[0]

    assert [child.key for child in root.children][:2] == ["header", "info_grid"]
    assert root.children[-1].key == "footer"
    assert 'src="data:image/png;base64,' in document.to_html()


@pytest.mark.unit
def test_proposal_custom_sections_and_offerings(registry, proposal_record, today):
    record = replace(
        proposal_record,
        sections=[
            ProposalSection(title="Warranty", content="Two years for {{company_name}}.", display_order=2),
            ProposalSection(title="Safety", content="OSHA 30 crew.", display_order=1),
            ProposalSection(title="Empty", content="   ", display_order=3),
        ],
        service_offerings=[],
    )

    document = registry.get("proposal").render(record, today=today)
    html = document.block("custom_sections").html

    assert html.index("Safety") < html.index("Warranty")
    assert "Two years for Northwind Mechanical." in html
    assert "Empty" not in html


@pytest.mark.unit
def test_proposal_null_display_order_renders(registry, proposal_record, today):
    """Rows whose display_order column is NULL sort as 0 instead of failing."""
    record = ProposalRecord.from_dict(
        {
            "proposal_number": proposal_record.proposal_number,
            "title": proposal_record.title,
            "sections": [
                {"title": "Warranty", "content": "Two years.", "display_order": 2},
                {"title": "Safety", "content": "OSHA 30 crew.", "display_order": None},
            ],
            "service_offerings": [
                {"name": "Balancing", "display_order": "3"},
                {"name": "Controls", "display_order": None},
            ],
            "resumes": [{"employee_name": "Jordan Lee", "display_order": None}],
        }
    )

    assert [o.display_order for o in record.service_offerings] == [3, 0]
    document = registry.get("proposal").render(record, today=today)

    offerings = document.block("service_offerings").html
    assert offerings.index("Controls") < offerings.index("Balancing")
    custom = document.block("custom_sections").html
    assert custom.index("Safety") < custom.index("Warranty")
    assert "Jordan Lee" in document.block("key_personnel").html


@pytest.mark.unit
def test_proposal_directly_built_sections_tolerate_none_order(registry, proposal_record, today):
    record = replace(
        proposal_record,
        sections=[
            ProposalSection(title="Late", content="Second.", display_order=1),
            ProposalSection(title="Unordered", content="First.", display_order=None),
        ],
    )

    html = registry.get("proposal").render(record, today=today).block("custom_sections").html

    assert html.index("Unordered") < html.index("Late")


@pytest.mark.unit
def test_proposal_embedded_records(registry, proposal_record, case_study_record):
    record = replace(proposal_record, case_studies=[case_study_record])

    assert registry.get("proposal").embedded_records(record) == [(DocumentKind.CASE_STUDY, case_study_record)]


@pytest.mark.unit
def test_proposal_filename(registry, proposal_record):
    assert registry.get("proposal").filename(proposal_record) == "Proposal-P-2026-014.pdf"


@pytest.mark.unit
def test_wrong_record_type_raises(registry, resume_record):
    with pytest.raises(InvalidDocumentRequest, match="ProposalRecord"):
        registry.get("proposal").plan(resume_record)


# --- Case study ---


@pytest.mark.unit
def test_case_study_standard_layout(registry, case_study_record, today):
    kind = registry.get(DocumentKind.CASE_STUDY)

    document = kind.render(case_study_record, today=today, rewrite=lambda ref: f"rewritten:{ref}")
    root = document.body[0]
    html = document.to_html()

    assert root.css_class == "doc-case_study layout-standard"
    assert root.style == "--cs-accent: #c0392b"
    # Empty narrative is omitted
    assert "solution" not in document.section_keys()
    assert "challenge" in document.section_keys()
    assert "rewritten:C:\\app\\uploads\\case-studies\\plant.jpg" in html
    assert "<b>" not in document.block("challenge").html
    assert "four hours" in document.block("challenge").html


@pytest.mark.unit
def test_case_study_magazine_columns(registry, case_study_record, today):
    record = replace(case_study_record, options=CaseStudyOptions(layout_style="magazine"))

    document = registry.get("case_study").render(record, today=today)
    grid = document.block("body-grid")
    left = [b.key for b in grid.children[0].children]
    right = [b.key for b in grid.children[1].children]

    assert document.body[0].css_class == "doc-case_study layout-magazine"
    assert left == ["company_info", "project_info"]
    assert right == ["executive_summary", "challenge", "results"]
    keys = [b.key for b in document.body[0].children]
    assert keys[:5] == ["header", "body-grid", "metrics", "images", "body-grid-2"]
    assert [b.key for b in document.block("body-grid-2").children[1].children] == ["services_provided"]
    assert document.section_keys() == [
        "company_info",
        "project_info",
        "executive_summary",
        "challenge",
        "results",
        "metrics",
        "images",
        "services_provided",
    ]


@pytest.mark.unit
def test_case_study_magazine_follows_configured_order(registry, case_study_record, today):
    """A right-column section ordered before a left-column one is read first."""
    record = replace(case_study_record, options=CaseStudyOptions(layout_style="magazine"))
    layout = LayoutConfiguration(
        sections=(
            SectionSpec("executive_summary", "Summary", order=1, column="right"),
            SectionSpec("company_info", "Company", order=2, column="left"),
            SectionSpec("images", "Photos", order=3),
            SectionSpec("metrics", "Metrics", order=4),
            SectionSpec("results", "Results", order=5, column="left"),
        )
    )

    document = registry.get("case_study").render(record, layout=layout, today=today)

    assert document.section_keys() == ["executive_summary", "company_info", "images", "metrics", "results"]
    keys = [b.key for b in document.body[0].children]
    assert keys[:6] == ["header", "body-grid", "body-grid-2", "images", "metrics", "body-grid-3"]


@pytest.mark.unit
def test_case_study_magazine_without_columns_uses_fallback(registry, case_study_record, today):
    record = replace(case_study_record, options=CaseStudyOptions(layout_style="magazine"))
    layout = LayoutConfiguration(
        sections=(SectionSpec("challenge", "Challenge", order=1), SectionSpec("project_info", "Info", order=2))
    )

    document = registry.get("case_study").render(record, layout=layout, today=today)
    first = document.block("body-grid")
    second = document.block("body-grid-2")

    assert [b.key for b in first.children[1].children] == ["challenge"]
    assert [b.key for b in second.children[0].children] == ["project_info"]
    assert document.section_keys() == ["challenge", "project_info"]


@pytest.mark.unit
def test_case_study_null_image_order_renders(registry, case_study_record, today):
    record = replace(
        case_study_record,
        images=[
            CaseStudyImage.from_dict({"image_url": "https://cdn.example.com/second.jpg", "display_order": 1}),
            CaseStudyImage.from_dict({"image_url": "https://cdn.example.com/first.jpg", "display_order": None}),
        ],
    )

    html = registry.get("case_study").render(record, today=today).to_html()

    assert record.images[1].display_order == 0
    assert html.index("first.jpg") < html.index("second.jpg")


@pytest.mark.unit
def test_case_study_asset_references(registry, case_study_record):
    kind = registry.get("case_study")
    magazine = replace(
        case_study_record,
        customer_logo_key="logos/riverside.png",
        options=CaseStudyOptions(layout_style="magazine", show_logo=False),
    )

    assert set(kind.asset_references(case_study_record, "t1")) == {"logo"}
    references = kind.asset_references(magazine, "t1")
    assert set(references) == {"customer_logo"}
    assert references["customer_logo"].key == "logos/riverside.png"


@pytest.mark.unit
def test_accent_color_rejects_non_colors(case_study_record):
    hostile = replace(case_study_record, options=CaseStudyOptions(accent_color="red; background: url(x)"))

    assert accent_color(hostile) == "#c0392b"
    assert accent_color(replace(case_study_record, options=CaseStudyOptions(accent_color="#1e40af"))) == "#1e40af"


@pytest.mark.unit
def test_project_facts_skip_empty_values(case_study_record):
    facts = dict(project_facts(case_study_record, include_names=False))

    assert facts["Project Value"] == "$2,400,000"
    assert "Square Footage" not in facts
    assert "Customer" not in facts


@pytest.mark.unit
def test_case_study_filename(registry, case_study_record):
    assert registry.get("case_study").filename(case_study_record) == "Case-Study-Hospital-Central-Plant.pdf"


# --- Resume ---


@pytest.mark.unit
def test_resume_sidebar_and_main(registry, resume_record, today):
    document = registry.get("resume").render(resume_record, today=today)
    sidebar = document.block("sidebar")
    main = document.block("main")

    assert [b.key for b in sidebar.children] == ["identity", "contact"]
    assert [b.key for b in main.children] == ["summary", "projects", "skills"]
    assert "Jan 2025 - Present" in document.block("projects").html


@pytest.mark.unit
def test_resume_photo_reference(registry, resume_record):
    kind = registry.get("resume")

    assert kind.asset_references(resume_record, "t1") == {}
    with_photo = replace(resume_record, photo_key="photos/jordan.jpg")
    assert kind.asset_references(with_photo, "t1")["photo"].name is AssetName.EMPLOYEE_PHOTO


@pytest.mark.unit
def test_resume_photo_reference_carries_employee(registry, resume_record):
    record = replace(resume_record, photo_key="photos/jordan.jpg", employee_id=417)

    reference = registry.get("resume").asset_references(record, "t1")["photo"]

    assert reference.owner_id == "417"
    assert reference.key == "photos/jordan.jpg"
    assert reference.describe() == "employee-photo tenant=t1 owner=417 key=photos/jordan.jpg"


@pytest.mark.unit
def test_resume_filename(registry, resume_record):
    assert registry.get("resume").filename(resume_record) == "Resume-Jordan-Lee.pdf"


# --- Technical request ---


@pytest.mark.unit
def test_technical_request_sections(registry, technical_request_record, today):
    document = registry.get("technical_request").render(technical_request_record, today=today)
    keys = document.section_keys()

    assert keys == ["request_details", "references", "question", "response", "distribution"]
    assert "☑</span> HVAC" in document.block("references").html
    assert "☐</span> Plumbing" in document.block("references").html
    assert "March 15, 2026" in document.block("footer").html


@pytest.mark.unit
def test_technical_request_filename(registry, technical_request_record):
    assert registry.get("technical_request").filename(technical_request_record) == "RFI-42.pdf"


# --- Log report ---


@pytest.mark.unit
def test_days_outstanding_only_for_open_entries():
    as_of = date(2026, 3, 15)

    assert days_outstanding(LogEntry(status="open", created_at="2026-03-01"), as_of) == 14
    assert days_outstanding(LogEntry(status="closed", created_at="2026-03-01"), as_of) is None
    assert days_outstanding(LogEntry(status="open"), as_of) is None
    assert is_overdue(LogEntry(status="open", created_at="2026-03-01"), as_of)
    assert not is_overdue(LogEntry(status="open", created_at="2026-03-14"), as_of)


@pytest.mark.unit
def test_log_report_rows(registry, log_report_record, today):
    document = registry.get("log_report").render(log_report_record, today=today)
    entries = document.block("entries").html

    assert "14 days" in entries
    assert "1 day<" in entries
    assert entries.count("days-warning") == 1
    assert ">1</div>" in document.block("status_breakdown").html


@pytest.mark.unit
def test_log_report_without_entries(registry, log_report_record, today):
    document = registry.get("log_report").render(replace(log_report_record, entries=[]), today=today)

    assert document.section_keys() == ["summary"]


@pytest.mark.unit
def test_log_report_filename(registry, log_report_record):
    assert registry.get("log_report").filename(log_report_record) == "RFI-Log-Central-Plant-Upgrade.pdf"
