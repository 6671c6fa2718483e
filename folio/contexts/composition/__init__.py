"""Composition: embedding sub-documents and the end-to-end generation pipeline."""

from folio.contexts.composition.compositor import ComposedDocument, CompositionFailure, DocumentCompositor
from folio.contexts.composition.generator import DocumentGenerator, DocumentRequest, PreparedDocument

__all__ = [
    "ComposedDocument",
    "CompositionFailure",
    "DocumentCompositor",
    "DocumentGenerator",
    "DocumentRequest",
    "PreparedDocument",
]
