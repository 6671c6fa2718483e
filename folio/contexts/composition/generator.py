"""
Document Generator

End-to-end pipeline for one document request:

    1. look up the kind and fix the section plan (pure, no I/O)
    2. resolve the kind's asset references, each within its own timeout
    3. render the primary record into a MarkupDocument
    4. render embedded requests and attach them with the compositor
    5. render the composed document to PDF through the engine adapter

Callers get a complete RenderResult or exactly one exception.
"""

import threading
import time
from dataclasses import dataclass, field, replace
from datetime import date
from functools import partial
from typing import Any, Callable, List, Mapping, Optional, Tuple

from folio.contexts.assets.references import AssetReference, ResolvedAsset
from folio.contexts.assets.resolver import AssetResolver
from folio.contexts.assets.rewriting import StoredReferenceRewriter
from folio.contexts.composition.compositor import ComposedDocument, DocumentCompositor
from folio.contexts.composition.logger import _log_warning, log_generation_result, log_generation_start
from folio.contexts.rendering.adapter import RenderEngineAdapter, RenderResult
from folio.contexts.rendering.engine import PlaywrightEngine
from folio.contexts.rendering.exceptions import RenderEngineFailure
from folio.contexts.templating.kinds import default_registry
from folio.contexts.templating.layout import LayoutConfiguration
from folio.contexts.templating.markup import MarkupDocument
from folio.contexts.templating.records import DocumentKind
from folio.contexts.templating.registries import DocumentKindRegistry
from folio.utils.event_logging import log_generation_event


@dataclass(frozen=True)
class DocumentRequest:
    """
    One document to generate.

    Attributes:
        kind: Document kind
        record: Hydrated record of the kind's record type
        layout: Tenant/caller layout; None uses the kind's default
        embedded: Sub-documents to attach after the primary body. When
                  empty, the kind's own embedded records (a proposal's
                  case studies) are attached instead
        tenant_id: Tenant whose branding and stored assets are used
    """

    kind: DocumentKind
    record: Any
    layout: Optional[LayoutConfiguration] = None
    embedded: Tuple["DocumentRequest", ...] = ()
    tenant_id: Optional[str] = None


@dataclass(frozen=True)
class PreparedDocument:
    """Composed markup ready for the engine, with its non-fatal diagnostics."""

    document: MarkupDocument
    filename: str
    attached: int = 0
    diagnostics: Tuple[str, ...] = field(default_factory=tuple)


def unavailable_asset_diagnostics(
    references: Mapping[str, AssetReference], assets: Mapping[str, ResolvedAsset]
) -> List[str]:
    """One line per requested asset that resolved to nothing."""
    return [
        f"asset '{slot}' unavailable: {reference.describe()}"
        for slot, reference in references.items()
        if slot not in assets or not assets[slot].is_available
    ]


class DocumentGenerator:
    """
    Generate PDFs from document requests.

    Every collaborator is injectable; defaults are the built-in kinds, the
    standard asset chains, and a Playwright-backed engine adapter.

    Example:
        generator = DocumentGenerator(resolver=AssetResolver.default(branding_provider=provider))
        result = generator.generate(DocumentRequest(DocumentKind.PROPOSAL, proposal, tenant_id="t1"))
    """

    def __init__(
        self,
        registry: Optional[DocumentKindRegistry] = None,
        resolver: Optional[AssetResolver] = None,
        compositor: Optional[DocumentCompositor] = None,
        adapter: Optional[RenderEngineAdapter] = None,
        rewrite: Optional[Callable[[str], str]] = None,
    ):
        self.registry = registry or default_registry()
        self.resolver = resolver or AssetResolver.default()
        self.compositor = compositor or DocumentCompositor()
        self._adapter = adapter
        self.rewrite = rewrite or StoredReferenceRewriter()

    @property
    def adapter(self) -> RenderEngineAdapter:
        # Created on first use so markup-only callers never need a browser
        if self._adapter is None:
            self._adapter = RenderEngineAdapter(PlaywrightEngine())
        return self._adapter

    def render_markup(self, request: DocumentRequest, today: Optional[date] = None) -> Tuple[MarkupDocument, List[str]]:
        """
        Render one request's own record, without embedded documents.

        Returns:
            (document, diagnostics for unavailable assets)

        Raises:
            UnknownDocumentKind: If the kind is not registered
            InvalidDocumentRequest: If the record does not match the kind
        """
        kind_spec = self.registry.get(request.kind)
        # Section order is fixed before any asset is fetched
        plan = kind_spec.plan(request.record, request.layout)

        references = kind_spec.asset_references(request.record, request.tenant_id)
        assets = self.resolver.resolve_all(references)

        document = kind_spec.render(
            request.record,
            layout=request.layout,
            assets=assets,
            today=today,
            rewrite=self.rewrite,
            plan=plan,
        )
        return document, unavailable_asset_diagnostics(references, assets)

    def prepare(self, request: DocumentRequest, today: Optional[date] = None) -> PreparedDocument:
        """
        Render and compose a request into markup ready for the engine.

        Embedded requests that fail to render are skipped and reported in
        diagnostics; a failing primary record raises.
        """
        today = today or date.today()
        kind_spec = self.registry.get(request.kind)
        primary, diagnostics = self.render_markup(request, today)

        embedded_diagnostics: List[str] = []
        producers = [
            partial(self._render_embedded, sub, today, embedded_diagnostics)
            for sub in self.embedded_requests(request)
        ]
        composed: ComposedDocument = self.compositor.compose(primary, producers)

        diagnostics.extend(embedded_diagnostics)
        diagnostics.extend(str(failure) for failure in composed.failures)
        return PreparedDocument(
            document=composed.document,
            filename=kind_spec.filename(request.record),
            attached=composed.attached,
            diagnostics=tuple(diagnostics),
        )

    def embedded_requests(self, request: DocumentRequest) -> List[DocumentRequest]:
        """Explicit embedded requests, else the kind's own embedded records."""
        if request.embedded:
            return [
                sub if sub.tenant_id is not None else replace(sub, tenant_id=request.tenant_id)
                for sub in request.embedded
            ]
        kind_spec = self.registry.get(request.kind)
        return [
            DocumentRequest(kind=kind, record=record, tenant_id=request.tenant_id)
            for kind, record in kind_spec.embedded_records(request.record)
        ]

    def generate(
        self,
        request: DocumentRequest,
        cancel_event: Optional[threading.Event] = None,
        today: Optional[date] = None,
    ) -> RenderResult:
        """
        Generate the PDF for a request.

        Args:
            request: Document to generate
            cancel_event: Set by the caller to abandon rendering
            today: Date for generated-on lines and day counts

        Returns:
            RenderResult with the PDF and diagnostics for anything skipped

        Raises:
            UnknownDocumentKind, InvalidDocumentRequest: Caller errors, before any I/O
            RenderEngineFailure: Or one of its subclasses, from the engine adapter
        """
        started = time.monotonic()

        prepared = self.prepare(request, today)
        kind = prepared.document.kind
        log_generation_start(kind, prepared.filename, request.tenant_id)
        log_generation_event(
            "render_started",
            kind,
            source="composition",
            filename=prepared.filename,
            tenant_id=request.tenant_id,
            attached=prepared.attached,
        )

        try:
            result = self.adapter.render(prepared.document, prepared.filename, cancel_event=cancel_event)
        except RenderEngineFailure as e:
            log_generation_event(
                "render_failed",
                kind,
                source="composition",
                filename=prepared.filename,
                tenant_id=request.tenant_id,
                error_type=type(e).__name__,
                state=e.state,
            )
            raise

        result.diagnostics.extend(prepared.diagnostics)
        elapsed = time.monotonic() - started
        log_generation_result(kind, result.filename, result.page_count, elapsed, len(result.diagnostics))
        log_generation_event(
            "render_completed",
            kind,
            source="composition",
            filename=result.filename,
            tenant_id=request.tenant_id,
            page_count=result.page_count,
            elapsed_s=round(elapsed, 3),
            diagnostics=list(result.diagnostics),
        )
        return result

    def _render_embedded(self, request: DocumentRequest, today: date, diagnostics: List[str]) -> MarkupDocument:
        document, asset_diagnostics = self.render_markup(request, today)
        if asset_diagnostics:
            _log_warning(f"embedded {document.kind}: {len(asset_diagnostics)} asset(s) unavailable")
        diagnostics.extend(f"embedded {document.kind}: {line}" for line in asset_diagnostics)
        return document
