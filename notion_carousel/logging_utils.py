"""Structured JSONL run log.

Each CLI run appends one record per pipeline step to ``run_log.jsonl`` in
its run directory, e.g. ``SLIDES_LOADED``, ``SLIDE_EXPORTED``,
``EXPORT_FAILED``.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List


def log_event(log_path: Path, event_type: str, payload: Dict[str, Any]) -> None:
    """Append a structured event to a JSONL log."""
    record = {
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "event_type": event_type,
        "payload": payload,
    }
    log_path.parent.mkdir(parents=True, exist_ok=True)
    with log_path.open("a", encoding="utf-8") as handle:
        handle.write(json.dumps(record, ensure_ascii=True) + "\n")


def read_events(log_path: Path) -> List[Dict[str, Any]]:
    """Return the records of a JSONL log in write order."""
    if not log_path.exists():
        return []
    with log_path.open("r", encoding="utf-8") as handle:
        return [json.loads(line) for line in handle if line.strip()]
