"""
Progression Store - Persistence collaborator for gang records.

The facade loads and saves one GangProgressionState per gang. This
module defines the contract plus two adapters:
- InMemoryProgressionStore: process-local dict (tests, single process)
- JsonFileProgressionStore: one JSON document per gang on local disk

Storage engines beyond these are owned by the host server.
"""

from __future__ import annotations
from pathlib import Path
from typing import Protocol
import hashlib
import json
import logging
import os
import tempfile
import threading

from pydantic import ValidationError

from ..progression.curve import CurveEngine
from ..progression.state import GangProgressionState
from ..schemas import GangProgressionRecord

logger = logging.getLogger(__name__)


class ProgressionStore(Protocol):
    """Load/save contract for gang progression records."""

    def load(self, gang_id: str) -> GangProgressionState | None:
        ...

    def save(self, state: GangProgressionState) -> None:
        ...

    def delete(self, gang_id: str) -> None:
        ...


class InMemoryProgressionStore:
    """Records kept in a dict. States are immutable, so no copies needed."""

    def __init__(self):
        self._records: dict[str, GangProgressionState] = {}
        self._lock = threading.Lock()

    def load(self, gang_id: str) -> GangProgressionState | None:
        return self._records.get(gang_id)

    def save(self, state: GangProgressionState) -> None:
        with self._lock:
            self._records[state.gang_id] = state

    def delete(self, gang_id: str) -> None:
        with self._lock:
            self._records.pop(gang_id, None)

    def gang_ids(self) -> list[str]:
        return sorted(self._records)


class JsonFileProgressionStore:
    """
    File-based store, one JSON document per gang.

    Usage:
        store = JsonFileProgressionStore("~/.gangcore/gangs", curve)
        store.save(state)
        state = store.load("gang_42")

    Writes go to a temp file in the same directory and are renamed into
    place, so a crash never leaves a half-written record.
    """

    def __init__(self, directory: str | Path, curve: CurveEngine):
        self.directory = Path(directory).expanduser()
        self.curve = curve
        self.directory.mkdir(parents=True, exist_ok=True)

    def load(self, gang_id: str) -> GangProgressionState | None:
        path = self._get_path(gang_id)
        if not path.exists():
            return None
        try:
            record = GangProgressionRecord.model_validate_json(path.read_text(encoding="utf-8"))
        except ValidationError:
            logger.error("Corrupt progression record for %s at %s", gang_id, path)
            raise
        return record.to_state(self.curve)

    def save(self, state: GangProgressionState) -> None:
        path = self._get_path(state.gang_id)
        payload = GangProgressionRecord.from_state(state).model_dump(mode="json")

        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=".tmp-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2, sort_keys=True)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def delete(self, gang_id: str) -> None:
        self._get_path(gang_id).unlink(missing_ok=True)

    def gang_ids(self) -> list[str]:
        ids = []
        for path in self.directory.glob("*.json"):
            try:
                data = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError):
                continue
            if isinstance(data, dict) and "gang_id" in data:
                ids.append(data["gang_id"])
        return sorted(ids)

    def _get_path(self, gang_id: str) -> Path:
        # Gang IDs come from the game server and may not be filename-safe
        digest = hashlib.sha256(gang_id.encode("utf-8")).hexdigest()[:24]
        return self.directory / f"{digest}.json"
