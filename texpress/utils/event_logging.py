"""
Pipeline event logging utilities.

Appends pipeline events (e.g. a published PDF) to a JSON Lines file so other
tools can pick them up. One JSON object per line.

Usage:
    from texpress.utils.event_logging import log_pipeline_event

    log_pipeline_event(
        events_file=settings.pipeline_events_file,
        event_type="pdf_published",
        target="paper.Rnw",
        source="rendering",
        pdf_path="paper.pdf",
    )
"""

import json
from pathlib import Path
from typing import List, Optional

from texpress.utils.timestamp import now_exact


def log_pipeline_event(
    events_file: Path, event_type: str, target: str, source: str, **extra_fields
) -> None:
    """
    Log an event to the pipeline event log.

    Args:
        events_file: JSON Lines file to append to (parent created if needed)
        event_type: Type of event (e.g., "pdf_published", "compile_failed")
        target: Target document path
        source: Event source (e.g., "rendering", "cli")
        **extra_fields: Additional event-specific fields
    """
    events_file = Path(events_file)
    events_file.parent.mkdir(parents=True, exist_ok=True)

    event = {
        "timestamp": now_exact(),
        "event_type": event_type,
        "target": target,
        "source": source,
        **extra_fields,
    }

    with open(events_file, "a", encoding="utf-8") as f:
        f.write(json.dumps(event) + "\n")


def get_recent_events(
    events_file: Path,
    n: int = 10,
    target: Optional[str] = None,
    event_type: Optional[str] = None,
) -> List[dict]:
    """
    Get the last n events from the pipeline log, optionally filtered.

    Args:
        events_file: JSON Lines file to read
        n: Number of recent events to return (default: 10)
        target: Filter to only events for this target (optional)
        event_type: Filter to only events of this type (optional)

    Returns:
        List of event dicts (most recent last)
    """
    events_file = Path(events_file)
    if not events_file.exists():
        return []

    events = []
    with open(events_file, "r", encoding="utf-8") as f:
        for line in f:
            try:
                events.append(json.loads(line.strip()))
            except json.JSONDecodeError:
                # Skip malformed lines
                continue

    if target:
        events = [e for e in events if e.get("target") == target]

    if event_type:
        events = [e for e in events if e.get("event_type") == event_type]

    return events[-n:] if len(events) > n else events
