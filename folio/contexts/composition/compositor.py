"""
Document Compositor

Embeds fully rendered sub-documents (e.g., case studies attached to a
proposal) into a primary document. Composition works on the block tree,
never on serialized HTML: the primary head stays authoritative, each
embedded body becomes a page-bounded block after the primary body, and the
embedded kinds' scoped stylesheets are merged into the head.
"""

from dataclasses import dataclass, field
from typing import Callable, List, Sequence, Tuple, Union

from folio.contexts.composition.logger import _log_warning, log_composition
from folio.contexts.templating.markup import MarkupBlock, MarkupDocument

EmbeddedItem = Union[MarkupDocument, Callable[[], MarkupDocument]]


@dataclass(frozen=True)
class CompositionFailure:
    """
    Diagnostic for one embedded item that could not be attached.

    Not raised: the item is skipped and the rest of the document renders.

    Attributes:
        index: Position of the item in the embedded list
        reason: What went wrong
        error_type: Exception class name, when the item raised
    """

    index: int
    reason: str
    error_type: str = ""

    def __str__(self) -> str:
        suffix = f" ({self.error_type})" if self.error_type else ""
        return f"embedded document {self.index}: {self.reason}{suffix}"


@dataclass(frozen=True)
class ComposedDocument:
    """
    Primary document with embedded documents attached.

    Attributes:
        primary: The primary document, unchanged
        embedded: Sub-documents that were attached, in caller order
        document: Single merged MarkupDocument ready for serialization
        failures: Diagnostics for skipped items, in input order
    """

    primary: MarkupDocument
    document: MarkupDocument
    embedded: Tuple[MarkupDocument, ...] = ()
    failures: Tuple[CompositionFailure, ...] = field(default_factory=tuple)

    @property
    def attached(self) -> int:
        return len(self.embedded)


class DocumentCompositor:
    """
    Attach embedded documents after a primary document's body.

    Example:
        composed = DocumentCompositor().compose(proposal_doc, [case_study_doc, lambda: render_other()])
        composed.document.to_html()
    """

    def compose(self, primary: MarkupDocument, embedded: Sequence[EmbeddedItem] = ()) -> ComposedDocument:
        """
        Compose primary with embedded items, in caller order.

        Items may be MarkupDocuments or zero-argument callables producing one.
        A callable that raises, or an item that is not a document or has an
        empty body, is recorded as a CompositionFailure and skipped.

        Args:
            primary: Document whose head (title, page rules) is authoritative
            embedded: Sub-documents to attach

        Returns:
            ComposedDocument with the merged document and diagnostics
        """
        body: List[MarkupBlock] = list(primary.body)
        head = primary.head
        failures: List[CompositionFailure] = []
        attached: List[MarkupDocument] = []

        for index, item in enumerate(embedded):
            document, failure = self._materialize(index, item)
            if failure is not None:
                _log_warning(str(failure))
                failures.append(failure)
                continue

            body.append(
                MarkupBlock(
                    key=f"embedded-{index}-{document.kind}",
                    children=tuple(document.body),
                    css_class="embedded-document",
                    page_break_before=True,
                )
            )
            head = head.with_stylesheets(document.head.stylesheets)
            attached.append(document)

        log_composition(primary.kind, len(attached), len(failures))
        return ComposedDocument(
            primary=primary,
            document=MarkupDocument(kind=primary.kind, head=head, body=tuple(body)),
            embedded=tuple(attached),
            failures=tuple(failures),
        )

    def _materialize(self, index: int, item: EmbeddedItem):
        if callable(item) and not isinstance(item, MarkupDocument):
            try:
                item = item()
            except Exception as e:
                return None, CompositionFailure(index, f"producer raised: {e}", type(e).__name__)

        if not isinstance(item, MarkupDocument):
            return None, CompositionFailure(index, f"not a document ({type(item).__name__})")
        if not item.body:
            return None, CompositionFailure(index, f"{item.kind} document has no body")
        return item, None
