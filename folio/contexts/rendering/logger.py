"""
Rendering context logger.

Provides logging interface for rendering context with automatic [render] prefix.
All rendering modules should import from this module, not from utils.logger directly.
"""

import os
from pathlib import Path
from typing import Optional, Sequence

from dotenv import load_dotenv
from loguru import logger

from folio.utils.logger import setup_logger as _setup_logger

load_dotenv()

CONTEXT_PREFIX = "[render]"


def setup_rendering_logger(log_dir: Path) -> Path:
    """
    Setup logger for rendering context.

    Configures loguru with provenance tracking and rendering-specific context.

    Args:
        log_dir: Directory for this rendering session

    Returns:
        Path to log file

    Example:
        from folio.contexts.rendering.logger import setup_rendering_logger

        log_file = setup_rendering_logger(log_dir)
    """
    return _setup_logger(
        context_name="render",
        log_dir=log_dir,
        extra_provenance={
            "Engine": "chromium (playwright)",
            "Max instances": os.getenv("FOLIO_ENGINE_MAX_INSTANCES", "4"),
        },
    )


# Wrapper functions with automatic [render] prefix


def _log_info(message: str) -> None:
    """Log info message with [render] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [render] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [render] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [render] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [render] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level rendering-specific logging helpers


def log_render_start(filename: str, html_size: int, live_instances: int) -> None:
    """Log start of a render with context."""
    _log_info(f"Rendering {filename} ({html_size:,} chars of markup, {live_instances} engine(s) live)")


def log_transition(filename: str, state: str) -> None:
    _log_debug(f"{filename}: -> {state}")


def log_render_abandoned(filename: str, state: str) -> None:
    _log_warning(f"{filename}: cancelled during {state}; engine closes when its current step returns")


def log_settle_skipped(filename: str, error: BaseException) -> None:
    _log_warning(f"{filename}: asset settling did not finish ({type(error).__name__}), paginating anyway")


def log_render_result(
    filename: str,
    success: bool,
    elapsed_s: float,
    page_count: Optional[int] = None,
    transitions: Sequence[str] = (),
    error: Optional[BaseException] = None,
) -> None:
    """
    Log the outcome of a render.

    Args:
        filename: Output filename
        success: Whether a PDF was produced
        elapsed_s: Wall time from queueing to teardown
        page_count: Pages in the PDF, when known
        transitions: Engine states visited
        error: The failure, when unsuccessful
    """
    path = " -> ".join(transitions)
    if success:
        pages = f"{page_count} pages" if page_count is not None else "unknown page count"
        _log_success(f"{filename}: rendered ({pages}, {elapsed_s:.2f}s)")
        _log_debug(f"{filename}: {path}")
    else:
        _log_error(f"{filename}: render failed after {elapsed_s:.2f}s [{path}]")
        if error is not None:
            _log_error(f"  {type(error).__name__}: {str(error).splitlines()[0]}")
