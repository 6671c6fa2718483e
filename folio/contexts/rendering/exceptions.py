"""Custom exceptions for rendering context with engine state references."""

from typing import Optional


class RenderEngineFailure(Exception):
    """
    Exception raised when the rendering engine cannot produce a PDF.

    The engine session has always been torn down by the time this reaches
    the caller; no partial binary is ever returned alongside it.

    Attributes:
        message: Error description
        state: Engine state in which the failure happened (e.g., 'content-loading')
        original_error: The underlying engine error, if any
    """

    def __init__(
        self,
        message: str,
        state: Optional[str] = None,
        original_error: Optional[BaseException] = None,
    ):
        self.message = message
        self.state = state
        self.original_error = original_error

        # Build enhanced error message
        parts = [message]

        if state:
            parts.append(f"State: {state}")

        if original_error is not None:
            parts.append(f"Original error: {type(original_error).__name__}: {original_error}")

        super().__init__("\n".join(parts))


class RenderTimeout(RenderEngineFailure):
    """Content load exceeded its timeout, or the request exceeded its overall deadline."""


class RenderCancelled(RenderEngineFailure):
    """The caller cancelled the render."""


class RenderEngineBusy(RenderEngineFailure):
    """No engine instance became free within the queue timeout."""
