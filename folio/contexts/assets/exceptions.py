"""Custom exceptions for assets context."""

from typing import Optional


class AssetResolutionFailure(Exception):
    """
    Raised by an asset source that cannot produce an asset.

    Never escapes the resolver: the chain logs it and moves on to the next
    source, ending in an unavailable result.

    Attributes:
        source: Name of the failing source
        reason: Short description of what went wrong
        original_error: Underlying exception, if any
    """

    def __init__(self, source: str, reason: str, original_error: Optional[BaseException] = None):
        self.source = source
        self.reason = reason
        self.original_error = original_error

        message = f"{source}: {reason}"
        if original_error is not None:
            message += f" ({type(original_error).__name__}: {original_error})"
        super().__init__(message)
