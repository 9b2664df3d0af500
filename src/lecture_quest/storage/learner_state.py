"""Learner state persistence (JSON + fcntl.flock + atomic write)."""

import fcntl
import json
import os
import re
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import structlog

from ..models.learner import LearnerState

logger = structlog.get_logger()

USER_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


class StateHandle:
    """Holds the state that ``locked_state`` writes back on exit."""

    def __init__(self, state: LearnerState) -> None:
        self.state = state


def validate_user_id(user_id: str) -> str:
    if not USER_ID_PATTERN.match(user_id):
        raise ValueError(f"Invalid user id: {user_id!r}")
    return user_id


def get_state_path(data_dir: Path, user_id: str) -> Path:
    learners_dir = data_dir / "learners"
    learners_dir.mkdir(parents=True, exist_ok=True)
    return learners_dir / f"{validate_user_id(user_id)}.json"


def _read(path: Path, user_id: str) -> LearnerState:
    if not path.exists():
        return LearnerState(user_id=user_id)
    return LearnerState(**json.loads(path.read_text(encoding="utf-8")))


def _write(path: Path, state: LearnerState) -> None:
    with tempfile.NamedTemporaryFile(
        "w", dir=path.parent, delete=False, suffix=".json", encoding="utf-8"
    ) as tmp:
        json.dump(state.model_dump(mode="json"), tmp, indent=2)
    os.replace(tmp.name, path)


def load_state(data_dir: Path, user_id: str) -> LearnerState:
    """Load a learner's stored state; unknown learners get an empty one."""
    path = get_state_path(data_dir, user_id)
    if not path.exists():
        return LearnerState(user_id=user_id)
    with open(path, encoding="utf-8") as f:
        fcntl.flock(f, fcntl.LOCK_SH)
        data = json.load(f)
        fcntl.flock(f, fcntl.LOCK_UN)
    return LearnerState(**data)


def save_state(data_dir: Path, state: LearnerState) -> None:
    _write(get_state_path(data_dir, state.user_id), state)


@contextmanager
def locked_state(data_dir: Path, user_id: str) -> Iterator[StateHandle]:
    """Hold the learner's lock across a read-modify-write.

    Assign the new state to ``handle.state``; it is written when the block
    exits without an exception.
    """
    path = get_state_path(data_dir, user_id)
    lock_path = path.with_suffix(".lock")
    with open(lock_path, "w") as lock_file:
        fcntl.flock(lock_file, fcntl.LOCK_EX)
        handle = StateHandle(_read(path, user_id))
        yield handle
        _write(path, handle.state)


def reset_state(data_dir: Path, user_id: str) -> None:
    """Delete a learner's stored state."""
    path = get_state_path(data_dir, user_id)
    lock_path = path.with_suffix(".lock")
    with open(lock_path, "w") as lock_file:
        fcntl.flock(lock_file, fcntl.LOCK_EX)
        path.unlink(missing_ok=True)
    logger.info("learner_state_deleted", user_id=user_id)
