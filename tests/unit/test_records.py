"""Unit tests for record construction from stored data."""

import pytest

from folio.contexts.templating.records import (
    CaseStudyImage,
    CaseStudyRecord,
    DocumentKind,
    LogReportRecord,
    ProposalRecord,
    record_from_dict,
)


@pytest.mark.unit
def test_from_dict_ignores_unknown_keys():
    record = ProposalRecord.from_dict({"proposal_number": "P-1", "title": "T", "tenant_secret": "x"})

    assert record.proposal_number == "P-1"
    assert not hasattr(record, "tenant_secret")


@pytest.mark.unit
def test_json_encoded_list_columns(case_study_record):
    assert case_study_record.services_provided == ["HVAC", "Controls"]


@pytest.mark.unit
def test_malformed_json_list_column_is_empty():
    record = CaseStudyRecord.from_dict({"title": "T", "services_provided": "[not json"})

    assert record.services_provided == []


@pytest.mark.unit
def test_nested_records_are_typed(case_study_record):
    assert all(isinstance(image, CaseStudyImage) for image in case_study_record.images)
    assert case_study_record.images[0].stored_reference == "https://cdn.example.com/hero.jpg"
    assert case_study_record.options.layout_style == "standard"


@pytest.mark.unit
def test_proposal_embeds_case_studies():
    record = ProposalRecord.from_dict(
        {"proposal_number": "P-1", "title": "T", "case_studies": [{"title": "A"}, {"title": "B"}]}
    )

    assert [cs.title for cs in record.case_studies] == ["A", "B"]
    assert isinstance(record.case_studies[0], CaseStudyRecord)


@pytest.mark.unit
def test_numeric_numbers_become_strings(technical_request_record):
    assert technical_request_record.number == "42"


@pytest.mark.unit
def test_record_from_dict_accepts_kind_value():
    record = record_from_dict("log_report", {"project_name": "X", "entries": [{"number": 7}]})

    assert isinstance(record, LogReportRecord)
    assert record.entries[0].number == "7"


@pytest.mark.unit
def test_record_from_dict_rejects_unknown_kind():
    with pytest.raises(ValueError):
        record_from_dict("invoice", {})


@pytest.mark.unit
def test_document_kind_values():
    assert DocumentKind.CASE_STUDY.value == "case_study"
    assert DocumentKind("resume") is DocumentKind.RESUME
