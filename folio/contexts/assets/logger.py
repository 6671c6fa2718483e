"""
Assets context logger.

Provides logging interface for assets context with automatic [assets] prefix.
All assets modules should import from this module, not from utils.logger directly.
"""

from pathlib import Path

from loguru import logger

from folio.utils.logger import setup_logger as _setup_logger

CONTEXT_PREFIX = "[assets]"


def setup_assets_logger(log_dir: Path) -> Path:
    """
    Setup logger for assets context.

    Args:
        log_dir: Directory for this session

    Returns:
        Path to log file
    """
    return _setup_logger(context_name="assets", log_dir=log_dir)


# Wrapper functions with automatic [assets] prefix


def _log_info(message: str) -> None:
    """Log info message with [assets] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [assets] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [assets] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level asset logging helpers


def log_source_failure(reference, source_name: str, reason: str) -> None:
    """Log a source in the chain that could not produce the asset (the chain continues)."""
    _log_warning(f"{reference.describe()}: {source_name} failed ({reason}); trying next source")


def log_asset_resolved(reference, status: str, source_name: str = "") -> None:
    """Log the final outcome for one asset."""
    if status == "unavailable":
        _log_warning(f"{reference.describe()}: unavailable, document will render without it")
    else:
        _log_debug(f"{reference.describe()}: resolved as {status} via {source_name}")
