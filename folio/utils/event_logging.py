"""
Generation event logging utilities for FOLIO (Tier 2 logging).

Appends one JSON object per line to the generation event log so batch jobs
can be audited after the fact (which documents were produced, how long they
took, which embedded parts were skipped).

For detailed within-context logging (Tier 1), use folio.utils.logger instead.

Usage:
    from folio.utils.event_logging import log_generation_event

    log_generation_event(
        event_type="render_completed",
        document_kind="proposal",
        source="composition",
        page_count=9,
    )
"""

import json
import os
import threading
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from folio.utils.timestamp import now_exact

load_dotenv()
_events_file_env = os.getenv("FOLIO_EVENTS_FILE")
GENERATION_EVENTS_FILE: Optional[Path] = Path(_events_file_env) if _events_file_env else None

_write_lock = threading.Lock()


def log_generation_event(
    event_type: str,
    document_kind: str,
    source: str,
    events_file: Optional[Path] = None,
    **extra_fields,
) -> None:
    """
    Log an event to the generation event log.

    Does nothing when no events file is configured (FOLIO_EVENTS_FILE unset
    and no explicit events_file).

    Args:
        event_type: Type of event (e.g., "render_started", "render_failed")
        document_kind: Document kind being generated
        source: Event source (e.g., "composition", "rendering")
        events_file: Override for the configured events file
        **extra_fields: Additional event-specific fields (must be JSON serialisable)
    """
    target = events_file or GENERATION_EVENTS_FILE
    if target is None:
        return

    event = {
        "timestamp": now_exact(),
        "event_type": event_type,
        "document_kind": document_kind,
        "source": source,
        **extra_fields,
    }

    target.parent.mkdir(parents=True, exist_ok=True)
    with _write_lock:
        with open(target, "a", encoding="utf-8") as f:
            f.write(json.dumps(event, default=str) + "\n")


def get_recent_events(
    n: int = 10,
    document_kind: Optional[str] = None,
    event_type: Optional[str] = None,
    events_file: Optional[Path] = None,
) -> List[dict]:
    """
    Get the last n events from the generation log, optionally filtered.

    Args:
        n: Number of recent events to return (default: 10)
        document_kind: Filter to only events for this kind (optional)
        event_type: Filter to only events of this type (optional)
        events_file: Override for the configured events file

    Returns:
        List of event dicts (most recent last)
    """
    target = events_file or GENERATION_EVENTS_FILE
    if target is None or not target.exists():
        return []

    events = []
    with open(target, "r", encoding="utf-8") as f:
        for line in f:
            try:
                events.append(json.loads(line.strip()))
            except json.JSONDecodeError:
                # Skip malformed lines
                continue

    if document_kind:
        events = [e for e in events if e.get("document_kind") == document_kind]
    if event_type:
        events = [e for e in events if e.get("event_type") == event_type]

    return events[-n:] if len(events) > n else events
