"""Append-only review event log, one JSON file per learner."""

import fcntl
import json
import os
import tempfile
from pathlib import Path

from ..models.review import ReviewEvent

LOG_DIRNAME = "review_logs"


def _log_path(data_dir: Path, user_id: str) -> Path:
    log_dir = data_dir / LOG_DIRNAME
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / f"{user_id}.json"


def append_review_events(data_dir: Path, user_id: str, events: list[ReviewEvent]) -> None:
    """Append review events to the learner's log."""
    if not events:
        return
    log_path = _log_path(data_dir, user_id)

    lock_path = log_path.with_suffix(".lock")
    with open(lock_path, "w") as lock_file:
        fcntl.flock(lock_file, fcntl.LOCK_EX)

        if log_path.exists():
            data = json.loads(log_path.read_text())
        else:
            data = {"events": []}

        data["events"].extend(event.model_dump(mode="json") for event in events)
        with tempfile.NamedTemporaryFile(
            "w", dir=log_path.parent, delete=False, suffix=".json"
        ) as tmp:
            json.dump(data, tmp, indent=2)
        os.replace(tmp.name, log_path)


def read_review_events(data_dir: Path, user_id: str, topic: str | None = None) -> list[ReviewEvent]:
    """Read a learner's review events, optionally for one topic. Empty if none."""
    log_path = _log_path(data_dir, user_id)
    if not log_path.exists():
        return []
    events = [ReviewEvent(**raw) for raw in json.loads(log_path.read_text())["events"]]
    if topic is not None:
        events = [event for event in events if event.topic == topic]
    return events


def clear_review_events(data_dir: Path, user_id: str) -> None:
    _log_path(data_dir, user_id).unlink(missing_ok=True)
