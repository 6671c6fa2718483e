"""
Composition context logger.

Provides logging interface for composition context with automatic [compose] prefix.
All composition modules should import from this module, not from utils.logger directly.
"""

from pathlib import Path

from loguru import logger

from folio.utils.logger import setup_logger as _setup_logger

CONTEXT_PREFIX = "[compose]"


def setup_composition_logger(log_dir: Path) -> Path:
    """
    Setup logger for composition context.

    Args:
        log_dir: Directory for this session

    Returns:
        Path to log file
    """
    return _setup_logger(context_name="compose", log_dir=log_dir)


# Wrapper functions with automatic [compose] prefix


def _log_info(message: str) -> None:
    """Log info message with [compose] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [compose] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [compose] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [compose] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [compose] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level composition logging helpers


def log_composition(primary_kind: str, attached: int, skipped: int) -> None:
    if skipped:
        _log_warning(f"{primary_kind}: attached {attached} sub-documents, skipped {skipped}")
    else:
        _log_debug(f"{primary_kind}: attached {attached} sub-documents")


def log_generation_start(kind: str, filename: str, tenant_id=None) -> None:
    tenant = f" (tenant {tenant_id})" if tenant_id else ""
    _log_info(f"Generating {kind}{tenant} -> {filename}")


def log_generation_result(kind: str, filename: str, page_count, elapsed_s: float, diagnostics: int) -> None:
    pages = f"{page_count} pages" if page_count is not None else "unknown page count"
    _log_success(f"{kind}: {filename} ({pages}, {elapsed_s:.2f}s, {diagnostics} diagnostics)")
