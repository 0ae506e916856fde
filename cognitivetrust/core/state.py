"""
Persisted workspace state: scan history and fix metrics.

WorkspaceState is a small JSON key-value file. It is created
explicitly and injected into every component that reads or writes
it; nothing here is a module-level singleton.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from cognitivetrust.core.findings import ScanHistoryEntry

logger = logging.getLogger(__name__)

FIX_COUNT_KEY = "fixesAppliedCount"
SCAN_HISTORY_KEY = "scanHistory"
STATE_FILE_NAME = "state.json"
DEFAULT_HISTORY_LIMIT = 50


class WorkspaceState:
    """
    Key-value store persisted as JSON.

    ``path=None`` keeps the state in memory only, which is what the
    tests use.
    """

    def __init__(self, path: Optional[str] = None, data: Optional[Dict[str, Any]] = None):
        self.path = path
        self._data: Dict[str, Any] = dict(data or {})

    @classmethod
    def load(cls, path: Optional[str]) -> "WorkspaceState":
        """Load state from disk, or start empty if the file is missing or corrupt."""
        if path is None or not os.path.exists(path):
            return cls(path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable workspace state %s: %s", path, e)
            return cls(path)
        if not isinstance(data, dict):
            logger.warning("Ignoring workspace state %s: not a JSON object", path)
            return cls(path)
        return cls(path, data)

    @classmethod
    def for_directory(cls, state_dir: str) -> "WorkspaceState":
        return cls.load(os.path.join(state_dir, STATE_FILE_NAME))

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def update(self, key: str, value: Any) -> None:
        self._data[key] = value
        self._flush()

    def _flush(self) -> None:
        if self.path is None:
            return
        Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path + ".tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(self._data, f, indent=2)
        os.replace(tmp_path, self.path)


class FixCounter:
    """Monotonic count of successfully applied fixes."""

    def __init__(self, state: WorkspaceState):
        self._state = state
        # Normalize a missing key to 0 so the persisted state always carries it.
        if not isinstance(state.get(FIX_COUNT_KEY), int):
            state.update(FIX_COUNT_KEY, 0)

    @property
    def value(self) -> int:
        return int(self._state.get(FIX_COUNT_KEY, 0))

    def increment(self) -> int:
        new_value = self.value + 1
        self._state.update(FIX_COUNT_KEY, new_value)
        return new_value


class ScanHistory:
    """
    Bounded log of completed scans, newest first.

    Once the log holds more than ``limit`` entries the oldest one is
    dropped.
    """

    def __init__(self, state: WorkspaceState, limit: int = DEFAULT_HISTORY_LIMIT):
        self._state = state
        self.limit = limit

    def entries(self) -> List[ScanHistoryEntry]:
        raw = self._state.get(SCAN_HISTORY_KEY, []) or []
        return [ScanHistoryEntry.from_dict(item) for item in raw if isinstance(item, dict)]

    def record(self, file: str, issues_found: int) -> ScanHistoryEntry:
        entry = ScanHistoryEntry.now(file, issues_found)
        history = [entry.to_dict()] + list(self._state.get(SCAN_HISTORY_KEY, []) or [])
        del history[self.limit:]
        self._state.update(SCAN_HISTORY_KEY, history)
        return entry

    def __len__(self) -> int:
        return len(self._state.get(SCAN_HISTORY_KEY, []) or [])
