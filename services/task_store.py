from __future__ import annotations

import logging
import threading
from typing import List

from core.errors import (
    InvalidInput,
    PersistenceFailure,
    StorageWriteFailure,
    TaskNotFound,
)
from core.models import Snapshot, Tag, Task, TaskCreate, TaskPatch
from core.types import TaskStatus
from services.persistence import SnapshotFile


logger = logging.getLogger(__name__)

VALID_STATUSES = ", ".join(s.value for s in TaskStatus)


def _parse_status(value: object) -> TaskStatus:
    try:
        return TaskStatus(value)
    except ValueError as exc:
        raise InvalidInput(f"Invalid status {value!r} (use: {VALID_STATUSES})") from exc


def _require_utf8(*values: object) -> None:
    for value in values:
        texts = [value] if isinstance(value, str) else []
        if isinstance(value, Tag):
            texts = [value.label, value.color, value.text]
        for text in texts:
            try:
                text.encode("utf-8")
            except UnicodeEncodeError as exc:
                raise InvalidInput("text fields must be valid UTF-8") from exc


class TaskStore:
    """In-memory task collection mirrored to a snapshot file.

    Every operation runs under one lock, reads included. A mutation that
    cannot be saved is undone in memory before ``PersistenceFailure`` is
    raised, so callers never see state that is not on disk.
    """

    def __init__(self, persistence: SnapshotFile) -> None:
        self._persistence = persistence
        self._tasks: List[Task] = []
        self._next_id = 1
        self._lock = threading.Lock()

    @property
    def next_id(self) -> int:
        with self._lock:
            return self._next_id

    def load(self) -> None:
        snapshot = self._persistence.load()
        with self._lock:
            self._tasks = list(snapshot.tasks)
            self._next_id = snapshot.next_id

    def list(self) -> List[Task]:
        with self._lock:
            return [task.model_copy(deep=True) for task in self._tasks]

    def get(self, task_id: int) -> Task:
        with self._lock:
            return self._tasks[self._index_of(task_id)].model_copy(deep=True)

    def create(self, data: TaskCreate) -> Task:
        if not data.title:
            raise InvalidInput("title is required")
        # An empty status counts as not supplied.
        status = _parse_status(data.status) if data.status else TaskStatus.todo
        _require_utf8(data.title, data.body, data.tag)

        with self._lock:
            task = Task(
                id=self._next_id,
                title=data.title,
                body=data.body,
                status=status,
                tag=data.tag.model_copy() if data.tag else None,
            )
            self._next_id += 1
            self._tasks.append(task)
            try:
                self._save()
            except PersistenceFailure:
                self._tasks.pop()
                self._next_id -= 1
                raise
            logger.info("Created task id=%s status=%s", task.id, task.status.value)
            return task.model_copy(deep=True)

    def update(self, task_id: int, patch: TaskPatch) -> Task:
        changes = patch.changes()
        _require_utf8(changes.get("title"), changes.get("body"), changes.get("tag"))
        if "status" in changes:
            changes["status"] = _parse_status(changes["status"])

        with self._lock:
            idx = self._index_of(task_id)
            original = self._tasks[idx]
            updated = original.model_copy(update=changes, deep=True)
            self._tasks[idx] = updated
            try:
                self._save()
            except PersistenceFailure:
                self._tasks[idx] = original
                raise
            logger.info("Updated task id=%s fields=%s", task_id, sorted(changes))
            return updated.model_copy(deep=True)

    def delete(self, task_id: int) -> None:
        with self._lock:
            idx = self._index_of(task_id)
            removed = self._tasks.pop(idx)
            try:
                self._save()
            except PersistenceFailure:
                self._tasks.insert(idx, removed)
                raise
            logger.info("Deleted task id=%s", task_id)

    def _index_of(self, task_id: int) -> int:
        for idx, task in enumerate(self._tasks):
            if task.id == task_id:
                return idx
        raise TaskNotFound(task_id)

    def _save(self) -> None:
        snapshot = Snapshot(next_id=self._next_id, tasks=self._tasks)
        try:
            self._persistence.save(snapshot)
        except StorageWriteFailure as exc:
            logger.exception("Failed to persist snapshot")
            raise PersistenceFailure("Failed to persist tasks") from exc
