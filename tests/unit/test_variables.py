"""Unit tests for placeholder substitution in free-text bodies."""

from datetime import date

import pytest

from folio.contexts.templating.variables import (
    available_variables,
    build_proposal_variables,
    placeholders_in,
    substitute,
)


@pytest.mark.unit
def test_substitute_recognized_placeholder():
    assert substitute("Dear {{customer_name}},", {"customer_name": "Riverside"}) == "Dear Riverside,"


@pytest.mark.unit
def test_substitute_allows_inner_whitespace():
    assert substitute("{{ customer_name }}", {"customer_name": "Riverside"}) == "Riverside"


@pytest.mark.unit
def test_substitute_missing_value_becomes_empty():
    assert substitute("For {{customer_owner}}.", {}) == "For ."
    assert substitute("For {{customer_owner}}.", {"customer_owner": None}) == "For ."


@pytest.mark.unit
def test_substitute_leaves_unrecognized_placeholders():
    assert substitute("{{favorite_color}} and {{ custom }}", {"favorite_color": "red"}) == (
        "{{favorite_color}} and {{ custom }}"
    )


@pytest.mark.unit
def test_substitute_none_text():
    assert substitute(None, {"customer_name": "x"}) == ""


@pytest.mark.unit
def test_substitute_is_idempotent():
    text = "{{customer_name}} / {{unknown_thing}} / {{total_amount}}"
    variables = {"customer_name": "Riverside", "total_amount": "$125,000.00"}

    once = substitute(text, variables)

    assert substitute(once, variables) == once


@pytest.mark.unit
def test_substitute_does_not_rescan_values():
    """A value that looks like a placeholder is inserted verbatim."""
    variables = {"customer_name": "{{project_name}}", "project_name": "Plant"}

    assert substitute("{{customer_name}}", variables) == "{{project_name}}"


@pytest.mark.unit
def test_available_variables_lists_descriptions():
    names = [v.name for v in available_variables()]

    assert "customer_name" in names
    assert "current_year" in names
    assert all(v.description for v in available_variables())
    assert available_variables()[0].placeholder == "{{customer_name}}"


@pytest.mark.unit
def test_placeholders_in():
    assert placeholders_in("{{a}} text {{ b_2 }}") == ["a", "b_2"]
    assert placeholders_in(None) == []


@pytest.mark.unit
def test_build_proposal_variables(proposal_record):
    variables = build_proposal_variables(proposal_record, today=date(2026, 3, 15))

    assert variables["customer_name"] == "Riverside Medical Center"
    assert variables["total_amount"] == "$125,000.00"
    assert variables["valid_until"] == "April 30, 2026"
    assert variables["company_name"] == "Northwind Mechanical"
    assert variables["current_date"] == "March 15, 2026"
    assert variables["current_year"] == "2026"
    assert variables["current_month"] == "March"
    assert variables["created_by_name"] == "Sam Ortiz"
    assert variables["customer_city"] == ""
    assert set(variables) == {v.name for v in available_variables()}
