"""
Document Kind Base

A document kind bundles everything the pipeline needs to turn one record
type into a MarkupDocument: the default layout, the section renderers, the
kind's stylesheet, the assets it needs, and its download filename. The
compositor, asset chain and engine adapter only ever talk to this interface.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from markupsafe import Markup

from folio.contexts.assets.references import AssetReference
from folio.contexts.assets.rewriting import StoredReferenceRewriter
from folio.contexts.templating.exceptions import InvalidDocumentRequest
from folio.contexts.templating.layout import (
    LayoutConfiguration,
    SectionRenderer,
    SectionSpec,
    compose_sections,
    resolve_sections,
)
from folio.contexts.templating.markup import EMPTY, DocumentHead, MarkupBlock, MarkupDocument, is_empty
from folio.contexts.templating.records import DocumentKind
from folio.contexts.templating.registries import LayoutRegistry, TemplateRegistry
from folio.contexts.templating.variables import substitute


@dataclass(frozen=True)
class RenderContext:
    """
    Everything a section renderer may consult besides the record.

    Attributes:
        kind: Document kind being rendered
        assets: slot -> resolved asset (anything with is_available and src)
        layout: The full configured layout, hidden sections included
        variables: Placeholder values for free-text bodies
        today: Date used for "generated on" lines and day counts
        rewrite: Turns a stored image reference into a fetchable URL
    """

    kind: str
    assets: Mapping[str, Any] = field(default_factory=dict)
    layout: Tuple[SectionSpec, ...] = ()
    variables: Mapping[str, str] = field(default_factory=dict)
    today: date = field(default_factory=date.today)
    rewrite: Callable[[str], str] = str

    def asset_src(self, slot: str) -> str:
        """Image source for an asset slot, or "" when the asset is unavailable."""
        asset = self.assets.get(slot)
        if asset is None or not asset.is_available:
            return ""
        return asset.src

    def has_configured_section(self, key: str) -> bool:
        return any(spec.key == key for spec in self.layout)

    def substitute(self, text: Optional[str]) -> str:
        return substitute(text, self.variables)


class DocumentKindSpec(ABC):
    """
    Base class for document kinds.

    Subclasses set name, record_type and template_name, build their section
    renderers, and provide a filename and title. The template named by
    template_name defines the kind's macros: stylesheet(), header(),
    footer(), and whatever the section renderers call.
    """

    name: DocumentKind
    record_type: type
    template_name: str

    def __init__(
        self,
        templates: Optional[TemplateRegistry] = None,
        layouts: Optional[LayoutRegistry] = None,
    ):
        self.templates = templates or TemplateRegistry()
        self.layouts = layouts or LayoutRegistry()
        self.section_renderers: Dict[str, SectionRenderer] = self.build_section_renderers()

    # --- Interface ---

    @abstractmethod
    def build_section_renderers(self) -> Dict[str, SectionRenderer]:
        """Map section keys to renderers (record, label, context) -> markup."""

    @abstractmethod
    def filename(self, record) -> str:
        """Download filename for the rendered PDF."""

    @abstractmethod
    def title(self, record) -> str:
        """Document title (HTML <title>)."""

    def asset_references(self, record, tenant_id: Optional[str]) -> Dict[str, AssetReference]:
        """Assets this record needs, keyed by the slot templates read them from."""
        return {}

    def variables(self, record, today: date) -> Dict[str, str]:
        """Placeholder values available to free-text bodies."""
        return {}

    def embedded_records(self, record) -> List[Tuple[DocumentKind, Any]]:
        """Sub-documents a record carries by default, in attachment order."""
        return []

    # --- Shared behavior ---

    @property
    def default_layout(self) -> LayoutConfiguration:
        return self.layouts.get_default(self.name.value)

    def macro(self, name: str) -> Callable[..., Markup]:
        return self.templates.macro(self.template_name, name)

    def stylesheet(self) -> Markup:
        """Kind CSS, scoped under .doc-<kind> so it composes with other kinds."""
        return Markup(self.macro("stylesheet")()).strip()

    def header(self, record, context: RenderContext) -> Markup:
        return self.macro("header")(record=record, context=context)

    def footer(self, record, context: RenderContext) -> Markup:
        return self.macro("footer")(record=record, context=context)

    def check_record(self, record) -> None:
        """
        Raises:
            InvalidDocumentRequest: If record is not this kind's record type
        """
        if not isinstance(record, self.record_type):
            raise InvalidDocumentRequest(self.name.value, self.record_type, record)

    def plan(self, record, layout: Optional[LayoutConfiguration] = None) -> List[SectionSpec]:
        """Ordered visible sections to attempt. Pure; runs before any asset fetch."""
        self.check_record(record)
        return resolve_sections(self.default_layout, layout, kind=self.name.value)

    def build_context(
        self,
        record,
        layout: Optional[LayoutConfiguration] = None,
        assets: Optional[Mapping[str, Any]] = None,
        today: Optional[date] = None,
        rewrite: Optional[Callable[[str], str]] = None,
    ) -> RenderContext:
        today = today or date.today()
        configured = layout if layout is not None else self.default_layout
        return RenderContext(
            kind=self.name.value,
            assets=dict(assets or {}),
            layout=tuple(configured.sections),
            variables=self.variables(record, today),
            today=today,
            rewrite=rewrite or StoredReferenceRewriter(),
        )

    def render(
        self,
        record,
        layout: Optional[LayoutConfiguration] = None,
        assets: Optional[Mapping[str, Any]] = None,
        today: Optional[date] = None,
        rewrite: Optional[Callable[[str], str]] = None,
        plan: Optional[Sequence[SectionSpec]] = None,
    ) -> MarkupDocument:
        """
        Render a record into a structured document.

        Args:
            record: This kind's record type
            layout: Caller or tenant layout; replaces the default entirely
            assets: slot -> resolved asset; missing slots render without the image
            today: Date for generated-on lines (defaults to today)
            rewrite: Stored image reference rewriter
            plan: Section plan from plan(), to avoid planning twice

        Returns:
            MarkupDocument with a single root block classed doc-<kind>

        Raises:
            InvalidDocumentRequest: If record is not this kind's record type
        """
        self.check_record(record)
        specs = list(plan) if plan is not None else self.plan(record, layout)
        context = self.build_context(record, layout, assets, today, rewrite)

        blocks = compose_sections(specs, self.section_renderers, record, context, kind=self.name.value)
        root = self.arrange(record, blocks, context)

        head = DocumentHead(
            title=self.title(record),
            stylesheets=((self.name.value, self.stylesheet()),),
        )
        return MarkupDocument(kind=self.name.value, head=head, body=(root,))

    def arrange(self, record, blocks: List[MarkupBlock], context: RenderContext) -> MarkupBlock:
        """Place header, sections and footer under one root block."""
        children = []
        header = self.header(record, context)
        if not is_empty(header):
            children.append(MarkupBlock(key="header", html=header))
        children.extend(blocks)
        footer = self.footer(record, context)
        if not is_empty(footer):
            children.append(MarkupBlock(key="footer", html=footer))
        return MarkupBlock(key=self.name.value, children=tuple(children), css_class=self.root_class(record))

    def root_class(self, record) -> str:
        return f"doc-{self.name.value}"


def field_section(macro_name: str, attribute: str, kind_spec: DocumentKindSpec, substitute_variables: bool = False) -> SectionRenderer:
    """
    Renderer for a section that shows one free-text field.

    Empty fields produce empty markup, so the section is omitted.
    """

    def render(record, label: str, context: RenderContext) -> Markup:
        text = getattr(record, attribute, None)
        if substitute_variables:
            text = context.substitute(text)
        if is_empty(text):
            return EMPTY
        return kind_spec.macro(macro_name)(label=label, body=text)

    return render
