"""
Templating context logger.

Provides logging interface for templating context with automatic [template] prefix.
All templating modules should import from this module, not from utils.logger directly.
"""

from pathlib import Path

from loguru import logger

from folio.utils.logger import setup_logger as _setup_logger

CONTEXT_PREFIX = "[template]"


def setup_templating_logger(log_dir: Path) -> Path:
    """
    Setup logger for templating context.

    Args:
        log_dir: Directory for this templating session

    Returns:
        Path to log file
    """
    return _setup_logger(context_name="template", log_dir=log_dir)


# Wrapper functions with automatic [template] prefix


def _log_info(message: str) -> None:
    """Log info message with [template] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [template] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [template] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level templating-specific logging helpers


def log_section_plan(kind: str, planned_keys: list, source: str) -> None:
    """Log which sections will be attempted, in order, and where the plan came from."""
    _log_debug(f"{kind}: section plan from {source} layout: {', '.join(planned_keys) or '(none)'}")


def log_sections_rendered(kind: str, rendered_keys: list, omitted_keys: list) -> None:
    """Log the outcome of section composition."""
    _log_debug(f"{kind}: rendered {len(rendered_keys)} sections: {', '.join(rendered_keys)}")
    if omitted_keys:
        _log_debug(f"{kind}: omitted (no data): {', '.join(omitted_keys)}")
