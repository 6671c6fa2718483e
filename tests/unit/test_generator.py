"""Unit tests for the end-to-end document generator (fake engine, offline assets)."""

from dataclasses import replace

import pytest

from folio.contexts.composition.generator import DocumentGenerator, DocumentRequest
from folio.contexts.rendering.adapter import RenderEngineAdapter
from folio.contexts.rendering.exceptions import RenderEngineFailure
from folio.contexts.templating.exceptions import InvalidDocumentRequest, UnknownDocumentKind
from folio.contexts.templating.records import DocumentKind
from folio.utils.event_logging import get_recent_events


class ExplodingResolver:
    """Fails the test if anything tries to fetch an asset."""

    def resolve_all(self, references):
        raise AssertionError(f"asset fetch attempted for {sorted(references)}")


@pytest.fixture
def generator(registry, offline_resolver, fake_engine):
    return DocumentGenerator(
        registry=registry,
        resolver=offline_resolver,
        adapter=RenderEngineAdapter(fake_engine, max_instances=2),
    )


def pages_by_marker(html):
    """Four pages for the proposal, plus two and three for the embedded case studies."""
    pages = 4
    if "embedded-0-case_study" in html:
        pages += 2
    if "embedded-1-case_study" in html:
        pages += 3
    return pages


@pytest.mark.unit
def test_proposal_with_two_case_studies_is_one_pdf(generator, fake_engine, proposal_record, case_study_record, today):
    fake_engine.pages_for = pages_by_marker
    second = replace(case_study_record, title="Lab Exhaust Retrofit")
    record = replace(proposal_record, case_studies=[case_study_record, second])

    result = generator.generate(DocumentRequest(DocumentKind.PROPOSAL, record, tenant_id="t1"), today=today)

    assert result.page_count == 9
    assert result.filename == "Proposal-P-2026-014.pdf"
    assert fake_engine.launched == 1
    html = fake_engine.loaded[0]
    assert html.count("<html") == 1
    assert html.index("Chiller Plant Replacement") < html.index("Hospital Central Plant") < html.index("Lab Exhaust Retrofit")


@pytest.mark.unit
def test_prepare_attaches_kind_embedded_records(generator, proposal_record, case_study_record, today):
    record = replace(proposal_record, case_studies=[case_study_record])

    prepared = generator.prepare(DocumentRequest(DocumentKind.PROPOSAL, record), today=today)

    assert prepared.attached == 1
    assert prepared.document.block("embedded-0-case_study") is not None
    stylesheet_kinds = [kind for kind, _ in prepared.document.head.stylesheets]
    assert stylesheet_kinds == ["proposal", "case_study"]


@pytest.mark.unit
def test_explicit_embedded_requests_take_precedence(generator, proposal_record, case_study_record, resume_record):
    record = replace(proposal_record, case_studies=[case_study_record])
    request = DocumentRequest(
        DocumentKind.PROPOSAL,
        record,
        embedded=(DocumentRequest(DocumentKind.RESUME, resume_record),),
        tenant_id="t1",
    )

    embedded = generator.embedded_requests(request)

    assert [sub.kind for sub in embedded] == [DocumentKind.RESUME]
    assert embedded[0].tenant_id == "t1"


@pytest.mark.unit
def test_failing_embedded_request_is_skipped(generator, proposal_record, resume_record, case_study_record, today):
    request = DocumentRequest(
        DocumentKind.PROPOSAL,
        proposal_record,
        embedded=(
            DocumentRequest(DocumentKind.CASE_STUDY, resume_record),
            DocumentRequest(DocumentKind.CASE_STUDY, case_study_record),
        ),
    )

    prepared = generator.prepare(request, today=today)

    assert prepared.attached == 1
    assert prepared.document.block("embedded-1-case_study") is not None
    assert any("embedded document 0" in line and "InvalidDocumentRequest" in line for line in prepared.diagnostics)


@pytest.mark.unit
def test_unavailable_assets_become_diagnostics(generator, fake_engine, proposal_record, case_study_record, today):
    record = replace(proposal_record, case_studies=[case_study_record])

    result = generator.generate(DocumentRequest(DocumentKind.PROPOSAL, record, tenant_id="t1"), today=today)

    assert "asset 'logo' unavailable: tenant-logo tenant=t1" in result.diagnostics
    assert any(line.startswith("embedded case_study: asset 'logo' unavailable") for line in result.diagnostics)
    assert "<img" not in fake_engine.loaded[0].split("embedded-0")[0]


@pytest.mark.unit
def test_invalid_request_fails_before_any_io(registry, fake_engine, resume_record):
    generator = DocumentGenerator(
        registry=registry,
        resolver=ExplodingResolver(),
        adapter=RenderEngineAdapter(fake_engine),
    )

    with pytest.raises(InvalidDocumentRequest):
        generator.generate(DocumentRequest(DocumentKind.PROPOSAL, resume_record))

    assert fake_engine.launched == 0


@pytest.mark.unit
def test_unknown_kind(generator, proposal_record):
    with pytest.raises(UnknownDocumentKind):
        generator.generate(DocumentRequest("invoice", proposal_record))


@pytest.mark.unit
def test_generation_events_are_appended(generator, monkeypatch, tmp_path, resume_record, today):
    events_file = tmp_path / "events.jsonl"
    monkeypatch.setattr("folio.utils.event_logging.GENERATION_EVENTS_FILE", events_file)

    generator.generate(DocumentRequest(DocumentKind.RESUME, resume_record), today=today)

    events = get_recent_events(events_file=events_file)
    assert [e["event_type"] for e in events] == ["render_started", "render_completed"]
    assert events[-1]["document_kind"] == "resume"
    assert events[-1]["page_count"] == 1
    assert events[-1]["filename"] == "Resume-Jordan-Lee.pdf"


@pytest.mark.unit
def test_engine_failure_is_logged_and_raised(generator, fake_engine, monkeypatch, tmp_path, resume_record, today):
    events_file = tmp_path / "events.jsonl"
    monkeypatch.setattr("folio.utils.event_logging.GENERATION_EVENTS_FILE", events_file)
    fake_engine.launch_error = OSError("no browser")

    with pytest.raises(RenderEngineFailure) as exc_info:
        generator.generate(DocumentRequest(DocumentKind.RESUME, resume_record), today=today)

    assert exc_info.value.state == "launching"
    failed = get_recent_events(events_file=events_file, event_type="render_failed")
    assert failed[0]["state"] == "launching"
    assert failed[0]["error_type"] == "RenderEngineFailure"
