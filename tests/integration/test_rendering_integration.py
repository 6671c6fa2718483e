"""
Integration tests for rendering context - tests real Chromium rendering.

Skipped when Playwright's Chromium is not installed (playwright install chromium).
"""

from dataclasses import replace

import pytest

from folio.contexts.composition.generator import DocumentGenerator, DocumentRequest
from folio.contexts.rendering.adapter import RenderEngineAdapter
from folio.contexts.rendering.engine import PlaywrightEngine
from folio.contexts.templating.records import DocumentKind
from folio.utils.pdf_processing import looks_like_pdf, page_count


@pytest.fixture(scope="module")
def chromium_engine():
    engine = PlaywrightEngine()
    try:
        session = engine.launch()
    except Exception as e:
        pytest.skip(f"Chromium not available: {type(e).__name__}: {e}")
    session.close()
    return engine


@pytest.fixture
def generator(registry, offline_resolver, chromium_engine):
    return DocumentGenerator(
        registry=registry,
        resolver=offline_resolver,
        adapter=RenderEngineAdapter(chromium_engine, max_instances=2, request_timeout_s=120),
    )


@pytest.mark.integration
@pytest.mark.browser
def test_render_simple_html(chromium_engine):
    adapter = RenderEngineAdapter(chromium_engine)

    result = adapter.render("<html><body><h1>Hello</h1></body></html>", "hello.pdf")

    assert looks_like_pdf(result.content)
    assert result.page_count == 1
    assert result.transitions[-1] == "closed"
    assert adapter.live_instances == 0


@pytest.mark.integration
@pytest.mark.browser
@pytest.mark.parametrize(
    "kind, fixture_name",
    [
        (DocumentKind.PROPOSAL, "proposal_record"),
        (DocumentKind.CASE_STUDY, "case_study_record"),
        (DocumentKind.RESUME, "resume_record"),
        (DocumentKind.TECHNICAL_REQUEST, "technical_request_record"),
        (DocumentKind.LOG_REPORT, "log_report_record"),
    ],
)
def test_every_kind_renders_to_pdf(generator, request, kind, fixture_name, today):
    record = request.getfixturevalue(fixture_name)

    result = generator.generate(DocumentRequest(kind, record), today=today)

    assert looks_like_pdf(result.content)
    assert result.page_count >= 1


@pytest.mark.integration
@pytest.mark.browser
def test_embedded_documents_add_their_own_pages(generator, proposal_record, case_study_record, today):
    """Composed page count is the primary's pages plus each embedded document's pages."""
    second = replace(case_study_record, title="Lab Exhaust Retrofit")

    primary_pages = generator.generate(DocumentRequest(DocumentKind.PROPOSAL, proposal_record), today=today).page_count
    embedded_pages = [
        generator.generate(DocumentRequest(DocumentKind.CASE_STUDY, cs), today=today).page_count
        for cs in (case_study_record, second)
    ]

    composed = generator.generate(
        DocumentRequest(DocumentKind.PROPOSAL, replace(proposal_record, case_studies=[case_study_record, second])),
        today=today,
    )

    assert composed.page_count == primary_pages + sum(embedded_pages)
    assert page_count(composed.content) == composed.page_count


@pytest.mark.integration
@pytest.mark.browser
def test_unreachable_image_does_not_block_render(chromium_engine):
    adapter = RenderEngineAdapter(chromium_engine, settle_grace_s=0.2)
    html = '<html><body><img src="http://127.0.0.1:9/missing.png" /><p>Text</p></body></html>'

    result = adapter.render(html, "img.pdf")

    assert looks_like_pdf(result.content)
