"""
Generic logger setup utilities for Tier 1 (detailed) logging.

One generation touches several contexts (template, assets, compose, render).
Each context gets its own file in a shared session directory, holding only
the messages carrying that context's prefix; a single console sink shows
everything at INFO and above. Context-specific wrappers live in
contexts/{context}/logger.py.
"""

import os
import sys
from pathlib import Path
from typing import Dict, Optional

from dotenv import load_dotenv
from loguru import logger

from folio.utils.timestamp import now

load_dotenv()
LOGS_PATH = Path(os.getenv("FOLIO_LOGS_PATH", "outs/logs"))

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <7} | {thread.name} | {message}"
CONSOLE_FORMAT = "{time:HH:mm:ss} | <level>{level: <7}</level> | <level>{message}</level>"

LEVEL_COLORS = {
    "WARNING": "<yellow>",
    "ERROR": "<red>",
    "CRITICAL": "<bold><red>",
}

# context name -> loguru handler id
_file_sinks: Dict[str, int] = {}
_console_sink: Optional[int] = None


def session_log_dir(run_name: str, base: Optional[Path] = None) -> Path:
    """Create and return a timestamped session directory (e.g., outs/logs/pdf_20261019_142501)."""
    log_dir = (base or LOGS_PATH) / f"{run_name}_{now()}"
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir


def _context_filter(context_name: str):
    prefix = f"[{context_name}]"

    def accept(record) -> bool:
        return record["extra"].get("context") == context_name or record["message"].startswith(prefix)

    return accept


def setup_logger(
    context_name: str,
    log_dir: Path,
    extra_provenance: Optional[dict] = None,
    console: bool = True,
) -> Path:
    """
    Add (or replace) the file sink for one context and log a provenance header.

    Calling it again for the same context moves that context's file to the
    new log_dir; other contexts' files are untouched.

    Args:
        context_name: Context identifier, matching its log prefix ("render", "compose", "assets", "template")
        log_dir: Directory for this logging session
        extra_provenance: Additional key-value pairs for the provenance header
        console: Ensure the shared console sink exists

    Returns:
        Path to the context's log file

    Example:
        log_dir = session_log_dir("pdf")
        setup_logger("render", log_dir, extra_provenance={"Engine": "chromium"})
    """
    global _console_sink

    log_dir.mkdir(exist_ok=True, parents=True)
    log_file = log_dir / f"{context_name}.log"

    if not _file_sinks and _console_sink is None:
        # Drop loguru's default stderr sink the first time we configure anything
        logger.remove()
        for level_name, color in LEVEL_COLORS.items():
            logger.level(level_name, color=color)

    if context_name in _file_sinks:
        logger.remove(_file_sinks.pop(context_name))

    # enqueue keeps lines from concurrent renders whole
    _file_sinks[context_name] = logger.add(
        log_file,
        format=FILE_FORMAT,
        level="DEBUG",
        filter=_context_filter(context_name),
        enqueue=True,
    )

    if console and _console_sink is None:
        _console_sink = logger.add(sys.stdout, format=CONSOLE_FORMAT, level="INFO", colorize=True)

    log_provenance(context_name, extra_provenance)
    return log_file


def reset_loggers() -> None:
    """Remove every sink added by setup_logger, flushing queued messages first."""
    global _console_sink

    logger.complete()
    for handler_id in _file_sinks.values():
        logger.remove(handler_id)
    _file_sinks.clear()
    if _console_sink is not None:
        logger.remove(_console_sink)
        _console_sink = None


def log_provenance(context_name: str, extra_context: Optional[dict] = None) -> None:
    """Write the provenance header (command, working directory, Python) to one context's file."""
    bound = logger.bind(context=context_name)
    bound.debug("=" * 80)
    bound.debug(f"Command: {' '.join(sys.argv)}")
    bound.debug(f"Working directory: {Path.cwd()}")
    bound.debug(f"Python: {sys.version.split()[0]}")
    for key, value in (extra_context or {}).items():
        bound.debug(f"{key}: {value}")
    bound.debug("=" * 80)
