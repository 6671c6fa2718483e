"""Rendering: bounded, always-torn-down headless browser rendering to PDF."""

from folio.contexts.rendering.adapter import RenderEngineAdapter, RenderResult, RenderState
from folio.contexts.rendering.engine import EngineSession, PlaywrightEngine, RenderEngine
from folio.contexts.rendering.exceptions import (
    RenderCancelled,
    RenderEngineBusy,
    RenderEngineFailure,
    RenderTimeout,
)

__all__ = [
    "EngineSession",
    "PlaywrightEngine",
    "RenderCancelled",
    "RenderEngine",
    "RenderEngineAdapter",
    "RenderEngineBusy",
    "RenderEngineFailure",
    "RenderResult",
    "RenderState",
    "RenderTimeout",
]
