"""Custom exceptions for templating context."""

from typing import Iterable, Optional


class SectionCompositionAmbiguity(ValueError):
    """
    Raised when a layout configuration cannot define a strict section order.

    Duplicate section keys or duplicate order values are rejected when a
    configuration is saved. At render time the same conditions are resolved
    by a deterministic tie-break instead of raising.

    Attributes:
        message: Error description
        duplicate_keys: Section keys that appear more than once
        duplicate_orders: Order values shared by more than one section
    """

    def __init__(
        self,
        message: str,
        duplicate_keys: Optional[Iterable[str]] = None,
        duplicate_orders: Optional[Iterable[int]] = None,
    ):
        self.message = message
        self.duplicate_keys = sorted(set(duplicate_keys or []))
        self.duplicate_orders = sorted(set(duplicate_orders or []))

        parts = [message]
        if self.duplicate_keys:
            parts.append(f"Duplicate keys: {', '.join(self.duplicate_keys)}")
        if self.duplicate_orders:
            parts.append(f"Duplicate order values: {', '.join(map(str, self.duplicate_orders))}")

        super().__init__("\n".join(parts))


class InvalidDocumentRequest(TypeError):
    """
    Raised when a document request is structurally wrong for its kind.

    This is a caller programming error (e.g., a resume record passed for the
    proposal kind), not a runtime condition to recover from.
    """

    def __init__(self, kind: str, expected: type, actual: object):
        self.kind = kind
        self.expected = expected
        self.actual_type = type(actual)
        super().__init__(
            f"Document kind '{kind}' expects a {expected.__name__} record, "
            f"got {type(actual).__name__}"
        )


class UnknownDocumentKind(KeyError):
    """Raised when no renderer set is registered for a document kind."""

    def __init__(self, kind: str, available: Iterable[str]):
        self.kind = kind
        self.available = list(available)
        super().__init__(f"No document kind registered as '{kind}'. Available: {self.available}")
