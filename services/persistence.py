from __future__ import annotations

import contextlib
import json
import logging
import os
from pathlib import Path
from typing import Union

from pydantic import ValidationError

from core.errors import StorageUnreadable, StorageWriteFailure
from core.models import Snapshot
from utils.serialization import dumps_json


logger = logging.getLogger(__name__)


class SnapshotFile:
    """Reads and writes the whole store as one JSON document.

    Writes go to a sibling ``<name>.tmp`` file which is then renamed over the
    target, so the target is always either the previous or the new snapshot.
    """

    def __init__(self, path: Union[str, Path] = "data.json") -> None:
        self.path = Path(path)
        self.tmp_path = self.path.with_name(self.path.name + ".tmp")

    def load(self) -> Snapshot:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info("No snapshot at %s, starting empty", self.path)
            return Snapshot(next_id=1, tasks=[])
        except OSError as exc:
            raise StorageUnreadable(f"Cannot read {self.path}: {exc}") from exc

        try:
            data = json.loads(raw)
            if isinstance(data, dict) and data.get("tasks") is None:
                data["tasks"] = []
            snapshot = Snapshot.model_validate(data)
        except (ValueError, ValidationError) as exc:
            raise StorageUnreadable(f"Cannot decode {self.path}: {exc}") from exc

        ids = [task.id for task in snapshot.tasks]
        # No safe repair for duplicates: either copy could be the live one.
        if len(ids) != len(set(ids)):
            raise StorageUnreadable(f"Duplicate task ids in {self.path}")

        max_id = max(ids, default=0)
        # Covers a non-positive next_id and also a stale one that would reuse ids.
        if snapshot.next_id <= max_id:
            logger.warning(
                "Snapshot %s has next_id=%s, repairing to %s",
                self.path,
                snapshot.next_id,
                max_id + 1,
            )
            snapshot.next_id = max_id + 1
        logger.info(
            "Loaded %s tasks from %s (next_id=%s)",
            len(snapshot.tasks),
            self.path,
            snapshot.next_id,
        )
        return snapshot

    def save(self, snapshot: Snapshot) -> None:
        try:
            payload = (dumps_json(snapshot, indent=2) + "\n").encode("utf-8")
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.tmp_path.open("wb") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(self.tmp_path, self.path)
        except (OSError, ValueError) as exc:
            with contextlib.suppress(OSError):
                self.tmp_path.unlink()
            raise StorageWriteFailure(f"Cannot write {self.path}: {exc}") from exc
