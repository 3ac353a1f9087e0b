"""
Pipeline event logging utilities for ATLAS (Tier 2 logging).

Appends optimization run events to a JSON Lines file so runs can be audited
and replayed without parsing the detailed loguru output.

For detailed within-context logging (Tier 1), use atlas.utils.logger instead.

Usage:
    from atlas.utils.event_logging import log_pipeline_event

    log_pipeline_event(
        event_type="state_change",
        run_id="20251114_123456_ab12cd",
        source="optimization",
        state="compiling",
        attempt=1,
    )
"""

import json
import os
import threading
from collections import deque
from pathlib import Path
from typing import Iterator, Optional

from dotenv import load_dotenv

from atlas.utils.timestamp import now_exact

load_dotenv()
PIPELINE_EVENTS_FILE = Path(
    os.getenv("PIPELINE_EVENTS_FILE", "outs/logs/optimization_events.log")
)

# Runs on worker threads share one file handle per append
_write_lock = threading.Lock()


def log_pipeline_event(event_type: str, run_id: str, source: str, **extra_fields) -> None:
    """
    Append one event (a single JSON object on its own line) to the event log.

    Every event carries the run_id, so interleaved lines from concurrent runs
    can be separated again when reading.

    Args:
        event_type: Kind of event (e.g., "state_change", "run_completed")
        run_id: Optimization run identifier
        source: Component that emitted the event (e.g., "optimization", "cli")
        **extra_fields: Event-specific payload; non-JSON values are stringified
    """
    record = dict(
        timestamp=now_exact(),
        event_type=event_type,
        run_id=run_id,
        source=source,
    )
    record.update(extra_fields)
    line = json.dumps(record, default=str)

    events_file = PIPELINE_EVENTS_FILE
    with _write_lock:
        events_file.parent.mkdir(parents=True, exist_ok=True)
        with events_file.open("a", encoding="utf-8") as handle:
            handle.write(line + "\n")


def iter_events(
    run_id: Optional[str] = None, event_type: Optional[str] = None
) -> Iterator[dict]:
    """Yield logged events oldest first, skipping lines that are not valid JSON."""
    events_file = PIPELINE_EVENTS_FILE
    if not events_file.exists():
        return

    with events_file.open("r", encoding="utf-8") as handle:
        for raw in handle:
            raw = raw.strip()
            if not raw:
                continue
            try:
                event = json.loads(raw)
            except json.JSONDecodeError:
                continue
            if run_id and event.get("run_id") != run_id:
                continue
            if event_type and event.get("event_type") != event_type:
                continue
            yield event


def get_recent_events(
    n: int = 10, run_id: Optional[str] = None, event_type: Optional[str] = None
) -> list[dict]:
    """
    Return the last n events matching the filters, most recent last.

    Args:
        n: How many events to keep from the end of the log (default: 10)
        run_id: Only events of this run (optional)
        event_type: Only events of this type (optional)
    """
    return list(deque(iter_events(run_id=run_id, event_type=event_type), maxlen=max(n, 0)))
