"""Shared fixtures: record fixtures, a fake rendering engine, PDF helpers."""

import io
import threading
import time
from datetime import date

import pytest
from PyPDF2 import PdfWriter

from folio.contexts.assets import AssetResolver
from folio.contexts.rendering.engine import EngineSession, RenderEngine
from folio.contexts.templating.kinds import default_registry
from folio.contexts.templating.records import (
    CaseStudyRecord,
    LogReportRecord,
    ProposalRecord,
    ResumeRecord,
    TechnicalRequestRecord,
)

TODAY = date(2026, 3, 15)


def build_pdf(pages: int) -> bytes:
    writer = PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=612, height=792)
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


class FakeSession(EngineSession):
    def __init__(self, engine: "FakeEngine"):
        self.engine = engine
        self.html = ""

    def load(self, html, timeout_s):
        self.html = html
        self.engine.on_load(self, html)
        if self.engine.load_delay_s:
            time.sleep(self.engine.load_delay_s)
        if self.engine.gate is not None:
            self.engine.gate.wait(timeout=5)
        if self.engine.load_timeout:
            raise TimeoutError("content did not load")
        if self.engine.fail_marker and self.engine.fail_marker in html:
            raise RuntimeError("content failed to load")

    def settle(self, grace_s):
        if self.engine.settle_error is not None:
            raise self.engine.settle_error

    def paginate(self):
        if self.engine.paginate_output is not None:
            return self.engine.paginate_output
        return build_pdf(self.engine.pages_for(self.html))

    def close(self):
        with self.engine.lock:
            self.engine.closed += 1
            self.engine.active -= 1


class FakeEngine(RenderEngine):
    """
    In-process stand-in for a browser.

    Counts launches, closes and peak concurrency; behavior is switched by
    plain attributes.
    """

    def __init__(self):
        self.lock = threading.Lock()
        self.launched = 0
        self.closed = 0
        self.active = 0
        self.peak = 0
        self.loaded = []
        self.launch_error = None
        self.load_timeout = False
        self.load_delay_s = 0.0
        self.fail_marker = None
        self.settle_error = None
        self.paginate_output = None
        self.gate = None
        self.load_started = threading.Event()
        self.on_load_hook = None
        self.pages_for = lambda html: 1

    def launch(self):
        if self.launch_error is not None:
            raise self.launch_error
        with self.lock:
            self.launched += 1
            self.active += 1
            self.peak = max(self.peak, self.active)
        return FakeSession(self)

    def on_load(self, session, html):
        with self.lock:
            self.loaded.append(html)
        self.load_started.set()
        if self.on_load_hook is not None:
            self.on_load_hook(session, html)


@pytest.fixture
def make_pdf():
    return build_pdf


@pytest.fixture
def fake_engine():
    return FakeEngine()


@pytest.fixture(scope="session")
def registry():
    return default_registry()


@pytest.fixture
def offline_resolver():
    """Resolver with no sources: every asset resolves unavailable."""
    return AssetResolver(chains={})


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def proposal_record():
    return ProposalRecord.from_dict(
        {
            "proposal_number": "P-2026-014",
            "title": "Chiller Plant Replacement",
            "created_at": "2026-03-01",
            "valid_until": "2026-04-30",
            "customer_name": "Riverside Medical Center",
            "customer_owner": "Dana Whitfield",
            "project_name": "Central Plant Upgrade",
            "project_location": "Riverside, CA",
            "total_amount": 125000,
            "payment_terms": "Net 30",
            "executive_summary": "We propose to replace the chillers at {{customer_name}} for {{total_amount}}.",
            "scope_of_work": "Demolition, installation and commissioning of two 500-ton chillers.",
            "created_by_name": "Sam Ortiz",
            "company": {"company_name": "Northwind Mechanical", "phone": "555-0100"},
        }
    )


@pytest.fixture
def case_study_record():
    return CaseStudyRecord.from_dict(
        {
            "title": "Hospital Central Plant",
            "subtitle": "Zero-downtime chiller swap",
            "customer_name": "Riverside Medical Center",
            "project_name": "Central Plant Upgrade",
            "market": "Healthcare",
            "project_value": 2400000,
            "project_start_date": "2025-01-06",
            "project_end_date": "2025-09-30",
            "executive_summary": "<p>Replaced two chillers while the hospital stayed open.</p>",
            "challenge": "<p>The plant could not go offline.</p><p>Work windows were <b>four hours</b>.</p>",
            "solution": "",
            "results": "<p>Delivered 12 days early.</p>",
            "cost_savings": 180000,
            "timeline_improvement_days": 12,
            "services_provided": '["HVAC", "Controls"]',
            "images": [
                {"image_url": "https://cdn.example.com/hero.jpg", "is_hero_image": True, "display_order": 0},
                {"file_path": "C:\\app\\uploads\\case-studies\\plant.jpg", "caption": "New plant", "display_order": 1},
            ],
        }
    )


@pytest.fixture
def resume_record():
    return ResumeRecord.from_dict(
        {
            "employee_name": "Jordan Lee",
            "job_title": "Senior Project Manager",
            "years_experience": 14,
            "summary": "Fourteen years delivering hospital mechanical projects.",
            "phone": "555-0142",
            "email": "jordan.lee@example.com",
            "skills": ["Scheduling", "Commissioning"],
            "hobbies": "[]",
            "projects": [
                {
                    "project_name": "Central Plant Upgrade",
                    "customer_name": "Riverside Medical Center",
                    "start_date": "2025-01-06",
                }
            ],
        }
    )


@pytest.fixture
def technical_request_record():
    return TechnicalRequestRecord.from_dict(
        {
            "number": 42,
            "subject": "Chiller pad elevation",
            "question": "Drawing M-101 and S-201 disagree on the pad elevation. Which governs?",
            "project_name": "Central Plant Upgrade",
            "recipient_company_name": "Acme Architects",
            "created_at": "2026-03-02",
            "discipline": "hvac",
            "drawing_sheet": "M-101",
            "issuer_name": "Northwind Mechanical",
        }
    )


@pytest.fixture
def log_report_record():
    return LogReportRecord.from_dict(
        {
            "project_name": "Central Plant Upgrade",
            "as_of": date(2026, 3, 15),
            "issuer_name": "Northwind Mechanical",
            "entries": [
                {"number": 1, "subject": "Pad elevation", "status": "open", "created_at": "2026-03-01"},
                {"number": 2, "subject": "Valve tags", "status": "open", "created_at": "2026-03-14"},
                {"number": 3, "subject": "Pump curve", "status": "answered", "created_at": "2026-02-01"},
                {"number": 4, "subject": "Duct routing", "status": "closed", "created_at": "2026-01-10"},
            ],
        }
    )
