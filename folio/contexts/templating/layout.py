"""
Section Composition Model

Decides which optional sections a document shows and in what order.

A layout configuration is an ordered set of section specs. Saving a
configuration goes through LayoutConfiguration.parse(), which rejects
ambiguous input. Rendering goes through resolve_sections(), which never
rejects: it applies a deterministic tie-break so a stored configuration that
predates validation still renders the same way every time.
"""

from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from markupsafe import Markup
from omegaconf import OmegaConf

from folio.contexts.templating.exceptions import SectionCompositionAmbiguity
from folio.contexts.templating.logger import (
    _log_warning,
    log_section_plan,
    log_sections_rendered,
)
from folio.contexts.templating.markup import MarkupBlock, is_empty

# (record, label, context) -> markup; empty markup means "omit this section"
SectionRenderer = Callable[[Any, str, Any], Markup]


_TRUE_WORDS = {"true", "yes", "1"}
_FALSE_WORDS = {"false", "no", "0"}


def _parse_visible(value: Any, key: Any) -> bool:
    """
    Read a stored visibility flag.

    Booleans pass through; "true"/"false" style strings are parsed. Anything
    else is rejected so a hidden section is never shown by accident.

    Raises:
        ValueError: If the value is not a recognisable boolean
    """
    if value is None:
        return True
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    raise ValueError(f"Section '{key}' has a non-boolean visible value: {value!r}")


@dataclass(frozen=True)
class SectionSpec:
    """
    One configurable section.

    Attributes:
        key: Section identifier, unique within a configuration
        label: Heading shown for the section
        visible: Whether the section may appear at all
        order: Position; lower renders first
        column: Optional layout region (used by multi-column layouts)
    """

    key: str
    label: str
    visible: bool = True
    order: int = 0
    column: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SectionSpec":
        if "key" not in data:
            raise ValueError(f"Section spec is missing 'key': {dict(data)}")
        return cls(
            key=str(data["key"]),
            label=str(data.get("label") or data["key"]),
            visible=_parse_visible(data.get("visible", True), data["key"]),
            order=int(data.get("order", 0)),
            column=data.get("column"),
        )


def find_ambiguities(sections: Iterable[SectionSpec]) -> Tuple[List[str], List[int]]:
    """Return (duplicate keys, duplicate order values) in a section list."""
    sections = list(sections)
    key_counts = Counter(s.key for s in sections)
    order_counts = Counter(s.order for s in sections)
    return (
        [key for key, count in key_counts.items() if count > 1],
        [order for order, count in order_counts.items() if count > 1],
    )


def validate_layout(sections: Iterable[SectionSpec]) -> None:
    """
    Reject configurations that do not define a strict total order.

    Raises:
        SectionCompositionAmbiguity: On duplicate keys or duplicate order values
    """
    duplicate_keys, duplicate_orders = find_ambiguities(sections)
    if duplicate_keys or duplicate_orders:
        raise SectionCompositionAmbiguity(
            "Layout configuration does not define a strict section order",
            duplicate_keys=duplicate_keys,
            duplicate_orders=duplicate_orders,
        )


@dataclass(frozen=True)
class LayoutConfiguration:
    """Read-only snapshot of a document layout."""

    sections: Tuple[SectionSpec, ...]

    @classmethod
    def parse(cls, data: Any) -> "LayoutConfiguration":
        """
        Build a validated configuration (the configuration-save path).

        Accepts a list of section mappings or a mapping with a "sections" list
        (the shape stored in tenant template settings).

        Raises:
            SectionCompositionAmbiguity: On duplicate keys or order values
            ValueError: If a section lacks a key
        """
        if isinstance(data, Mapping):
            data = data.get("sections", [])
        sections = tuple(
            item if isinstance(item, SectionSpec) else SectionSpec.from_dict(item) for item in data
        )
        validate_layout(sections)
        return cls(sections=sections)

    @classmethod
    def load(cls, path: Path) -> "LayoutConfiguration":
        """Load and validate a configuration from a YAML file."""
        container = OmegaConf.to_container(OmegaConf.load(path), resolve=True)
        return cls.parse(container)

    def keys(self) -> List[str]:
        return [s.key for s in self.sections]

    def get(self, key: str) -> Optional[SectionSpec]:
        for section in self.sections:
            if section.key == key:
                return section
        return None


def resolve_sections(
    default: LayoutConfiguration,
    layout: Optional[LayoutConfiguration] = None,
    kind: str = "document",
) -> List[SectionSpec]:
    """
    Resolve the ordered list of sections to attempt.

    A supplied layout fully replaces the default (no merging). Sections are
    sorted by order; equal orders keep declaration order. Duplicate keys keep
    their first declaration. Invisible sections are dropped.

    Args:
        default: The kind's default configuration
        layout: Caller or tenant configuration, if any
        kind: Document kind, for diagnostics

    Returns:
        Visible section specs in render order
    """
    config = layout if layout is not None else default
    source = "supplied" if layout is not None else "default"

    duplicate_keys, duplicate_orders = find_ambiguities(config.sections)
    if duplicate_keys:
        _log_warning(f"{kind}: duplicate section keys {duplicate_keys}; keeping first declaration")
    if duplicate_orders:
        _log_warning(
            f"{kind}: duplicate order values {duplicate_orders}; keeping declaration order"
        )

    seen = set()
    unique = []
    for section in config.sections:
        if section.key in seen:
            continue
        seen.add(section.key)
        unique.append(section)

    # sorted() is stable, which is the tie-break
    planned = [s for s in sorted(unique, key=lambda s: s.order) if s.visible]
    log_section_plan(kind, [s.key for s in planned], source)
    return planned


def compose_sections(
    specs: Sequence[SectionSpec],
    renderers: Dict[str, SectionRenderer],
    record: Any,
    context: Any,
    kind: str = "document",
) -> List[MarkupBlock]:
    """
    Run section renderers in plan order and keep the sections that have content.

    A section is dropped when no renderer is registered for its key or when
    its renderer returns empty markup, so a visible heading never appears
    above an empty section.
    """
    blocks = []
    omitted = []
    for spec in specs:
        renderer = renderers.get(spec.key)
        if renderer is None:
            _log_warning(f"{kind}: no renderer for section '{spec.key}'; skipping")
            omitted.append(spec.key)
            continue

        html = renderer(record, spec.label, context)
        if is_empty(html):
            omitted.append(spec.key)
            continue

        blocks.append(
            MarkupBlock(key=spec.key, html=Markup(html), label=spec.label, region=spec.column or "")
        )

    log_sections_rendered(kind, [b.key for b in blocks], omitted)
    return blocks
