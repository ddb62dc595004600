"""Indexer checkpoint persistence.

This module stores the last applied origin index per event stream.
It enables resume behavior across process restarts.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
import json
from pathlib import Path

from core.constants import CHECKPOINT_STATE_FILE_NAME, CHECKPOINTS_DIR_NAME
from core.errors import IndexerCheckpointError


@dataclass(frozen=True)
class IndexerCheckpointState:
    """Checkpoint state metadata."""

    stream_name: str
    last_index: int


class IndexerCheckpointStore:
    """Filesystem-backed resume checkpoint store."""

    def __init__(self, checkpoint_root: Path, stream_name: str) -> None:
        self._stream_name = stream_name
        self._checkpoint_dir = checkpoint_root / CHECKPOINTS_DIR_NAME / stream_name
        self._checkpoint_dir.mkdir(parents=True, exist_ok=True)

    def resume_offset(self) -> int:
        """Return the origin index to resume from.

        Returns:
            One past the last recorded index, or zero without state.

        Raises:
            IndexerCheckpointError: If state exists but is unreadable.
        """
        state = self._read_state()
        if state is None:
            return 0
        return state.last_index + 1

    def record(self, last_index: int) -> IndexerCheckpointState:
        """Persist the index of the last applied event."""
        state = IndexerCheckpointState(stream_name=self._stream_name, last_index=last_index)
        self._write_state(state)
        return state

    def clear(self) -> None:
        """Remove checkpoint state for the stream."""
        state_path = self._state_path()
        if state_path.exists():
            state_path.unlink()

    def _read_state(self) -> IndexerCheckpointState | None:
        """Read checkpoint state file if present."""
        state_path = self._state_path()
        if not state_path.exists():
            return None
        try:
            payload = json.loads(state_path.read_text(encoding="utf-8"))
            last_index = payload["last_index"]
            if isinstance(last_index, bool) or not isinstance(last_index, int) or last_index < 0:
                raise TypeError(f"invalid last_index {last_index!r}")
            return IndexerCheckpointState(
                stream_name=str(payload["stream_name"]),
                last_index=last_index,
            )
        except (json.JSONDecodeError, KeyError, TypeError) as error:
            raise IndexerCheckpointError(
                f"Failed to read indexer checkpoint state at {state_path}: {error}. "
                "Delete the checkpoint directory or pass --start explicitly."
            ) from error

    def _write_state(self, state: IndexerCheckpointState) -> None:
        """Write checkpoint state atomically."""
        state_path = self._state_path()
        temp_path = state_path.with_suffix(".tmp")
        temp_path.write_text(json.dumps(asdict(state), indent=2) + "\n", encoding="utf-8")
        temp_path.replace(state_path)

    def _state_path(self) -> Path:
        return self._checkpoint_dir / CHECKPOINT_STATE_FILE_NAME
