"""Unit tests for section layout configuration and composition."""

import pytest
from markupsafe import Markup

from folio.contexts.templating.exceptions import SectionCompositionAmbiguity
from folio.contexts.templating.layout import (
    LayoutConfiguration,
    SectionSpec,
    compose_sections,
    resolve_sections,
    validate_layout,
)

DEFAULT = LayoutConfiguration(
    sections=(
        SectionSpec("a", "Alpha", order=1),
        SectionSpec("b", "Beta", order=2),
        SectionSpec("c", "Gamma", order=3),
    )
)


@pytest.mark.unit
def test_parse_accepts_mapping_with_sections():
    layout = LayoutConfiguration.parse(
        {"sections": [{"key": "b", "label": "Beta", "order": 2}, {"key": "a", "order": 1}]}
    )

    assert layout.keys() == ["b", "a"]
    assert layout.get("a").label == "a"
    assert layout.get("missing") is None


@pytest.mark.unit
def test_parse_rejects_duplicate_order():
    with pytest.raises(SectionCompositionAmbiguity) as exc_info:
        LayoutConfiguration.parse([{"key": "a", "order": 1}, {"key": "b", "order": 1}])

    assert exc_info.value.duplicate_orders == [1]
    assert isinstance(exc_info.value, ValueError)


@pytest.mark.unit
def test_parse_rejects_duplicate_keys():
    with pytest.raises(SectionCompositionAmbiguity) as exc_info:
        LayoutConfiguration.parse([{"key": "a", "order": 1}, {"key": "a", "order": 2}])

    assert exc_info.value.duplicate_keys == ["a"]


@pytest.mark.unit
def test_parse_rejects_section_without_key():
    with pytest.raises(ValueError, match="missing 'key'"):
        LayoutConfiguration.parse([{"label": "No key", "order": 1}])


@pytest.mark.unit
def test_validate_layout_accepts_strict_order():
    validate_layout(DEFAULT.sections)


@pytest.mark.unit
def test_resolve_sorts_by_order():
    layout = LayoutConfiguration(
        sections=(SectionSpec("c", "C", order=9), SectionSpec("a", "A", order=1), SectionSpec("b", "B", order=5))
    )

    assert [s.key for s in resolve_sections(DEFAULT, layout)] == ["a", "b", "c"]


@pytest.mark.unit
def test_resolve_supplied_layout_replaces_default():
    layout = LayoutConfiguration(sections=(SectionSpec("c", "C", order=1),))

    assert [s.key for s in resolve_sections(DEFAULT, layout)] == ["c"]


@pytest.mark.unit
def test_resolve_uses_default_without_layout():
    assert [s.key for s in resolve_sections(DEFAULT)] == ["a", "b", "c"]


@pytest.mark.unit
def test_resolve_drops_invisible_sections():
    layout = LayoutConfiguration(
        sections=(SectionSpec("a", "A", order=1), SectionSpec("b", "B", visible=False, order=2))
    )

    assert [s.key for s in resolve_sections(DEFAULT, layout)] == ["a"]


@pytest.mark.unit
def test_resolve_duplicate_order_keeps_declaration_order():
    """A stored layout with tied orders renders deterministically instead of failing."""
    layout = LayoutConfiguration(
        sections=(
            SectionSpec("z", "Z", order=2),
            SectionSpec("y", "Y", order=2),
            SectionSpec("x", "X", order=1),
        )
    )

    first = [s.key for s in resolve_sections(DEFAULT, layout)]
    second = [s.key for s in resolve_sections(DEFAULT, layout)]

    assert first == ["x", "z", "y"]
    assert first == second


@pytest.mark.unit
def test_resolve_duplicate_key_keeps_first():
    layout = LayoutConfiguration(
        sections=(SectionSpec("a", "First", order=3), SectionSpec("a", "Second", order=1))
    )

    resolved = resolve_sections(DEFAULT, layout)

    assert len(resolved) == 1
    assert resolved[0].label == "First"


@pytest.mark.unit
def test_compose_skips_empty_and_unknown_sections():
    renderers = {
        "a": lambda record, label, context: Markup(f"<h2>{label}</h2>"),
        "b": lambda record, label, context: Markup("   "),
    }

    blocks = compose_sections(resolve_sections(DEFAULT), renderers, record=None, context=None)

    assert [b.key for b in blocks] == ["a"]
    assert blocks[0].label == "Alpha"
    assert "Alpha" in blocks[0].html


@pytest.mark.unit
def test_compose_carries_column_as_region():
    specs = [SectionSpec("a", "A", order=1, column="left")]
    renderers = {"a": lambda record, label, context: Markup("<p>x</p>")}

    blocks = compose_sections(specs, renderers, record=None, context=None)

    assert blocks[0].region == "left"


@pytest.mark.unit
def test_load_shipped_default(registry):
    layout = registry.get("proposal").default_layout

    assert layout.keys()[0] == "executive_summary"
    validate_layout(layout.sections)


@pytest.mark.unit
@pytest.mark.parametrize(
    "stored, expected",
    [
        (True, True),
        (False, False),
        ("false", False),
        ("False", False),
        ("true", True),
        (0, False),
        (1, True),
        (None, True),
    ],
)
def test_parse_reads_stored_visibility(stored, expected):
    layout = LayoutConfiguration.parse([{"key": "a", "order": 1, "visible": stored}])

    assert layout.get("a").visible is expected


@pytest.mark.unit
def test_string_false_hides_section():
    layout = LayoutConfiguration.parse([{"key": "a", "order": 1, "visible": "false"}, {"key": "b", "order": 2}])

    assert [spec.key for spec in resolve_sections(DEFAULT, layout)] == ["b"]


@pytest.mark.unit
@pytest.mark.parametrize("stored", ["hidden", "", 2, [False]])
def test_parse_rejects_unrecognised_visibility(stored):
    with pytest.raises(ValueError, match="non-boolean visible"):
        LayoutConfiguration.parse([{"key": "a", "order": 1, "visible": stored}])
