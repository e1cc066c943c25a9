import json
import os

import pytest

from core.errors import StorageUnreadable, StorageWriteFailure
from core.models import Snapshot, Tag, Task
from core.types import TaskStatus
from services.persistence import SnapshotFile


def test_missing_file_is_first_run(tmp_path) -> None:
    snapshot = SnapshotFile(tmp_path / "data.json").load()
    assert snapshot.next_id == 1
    assert snapshot.tasks == []


def test_non_positive_next_id_is_repaired(tmp_path) -> None:
    path = tmp_path / "data.json"
    path.write_text(
        json.dumps(
            {
                "next_id": 0,
                "tasks": [
                    {"id": 3, "title": "a", "body": "", "status": "todo"},
                    {"id": 7, "title": "b", "body": "", "status": "done"},
                ],
            }
        ),
        encoding="utf-8",
    )
    snapshot = SnapshotFile(path).load()
    assert snapshot.next_id == 8
    assert [t.id for t in snapshot.tasks] == [3, 7]


def test_null_tasks_load_as_empty(tmp_path) -> None:
    path = tmp_path / "data.json"
    path.write_text('{"next_id": 5, "tasks": null}', encoding="utf-8")
    snapshot = SnapshotFile(path).load()
    assert snapshot.next_id == 5
    assert snapshot.tasks == []


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        '{"next_id": 2, "tasks": [{"id": 1, "title": "a", "status": "later"}]}',
        '{"next_id": 3, "tasks": [{"id": 1, "title": "a"}, {"id": 1, "title": "b"}]}',
        "[]",
    ],
)
def test_unreadable_snapshot(tmp_path, content: str) -> None:
    path = tmp_path / "data.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(StorageUnreadable):
        SnapshotFile(path).load()


def test_save_writes_snapshot_shape(tmp_path) -> None:
    path = tmp_path / "nested" / "data.json"
    snapshot = Snapshot(
        next_id=3,
        tasks=[
            Task(id=1, title="a", status=TaskStatus.doing),
            Task(id=2, title="b", body="x", tag=Tag(label="l", color="red", text="t")),
        ],
    )
    SnapshotFile(path).save(snapshot)

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["next_id"] == 3
    assert data["tasks"][0] == {"id": 1, "title": "a", "body": "", "status": "doing"}
    assert data["tasks"][1]["tag"] == {"label": "l", "color": "red", "text": "t"}
    assert not (tmp_path / "nested" / "data.json.tmp").exists()


def test_failed_rename_keeps_previous_snapshot(tmp_path, monkeypatch) -> None:
    path = tmp_path / "data.json"
    store_file = SnapshotFile(path)
    store_file.save(Snapshot(next_id=2, tasks=[Task(id=1, title="old")]))

    def broken_replace(src, dst):
        raise OSError("rename failed")

    monkeypatch.setattr(os, "replace", broken_replace)
    with pytest.raises(StorageWriteFailure):
        store_file.save(Snapshot(next_id=3, tasks=[Task(id=1, title="old"), Task(id=2, title="new")]))

    monkeypatch.undo()
    snapshot = store_file.load()
    assert snapshot.next_id == 2
    assert [t.title for t in snapshot.tasks] == ["old"]
    assert not store_file.tmp_path.exists()


def test_unencodable_text_is_write_failure(tmp_path) -> None:
    path = tmp_path / "data.json"
    store_file = SnapshotFile(path)
    store_file.save(Snapshot(next_id=2, tasks=[Task(id=1, title="old")]))

    with pytest.raises(StorageWriteFailure):
        store_file.save(Snapshot(next_id=3, tasks=[Task(id=1, title="old"), Task(id=2, title="\ud800")]))

    assert not store_file.tmp_path.exists()
    assert [t.title for t in store_file.load().tasks] == ["old"]


def test_stale_next_id_is_repaired(tmp_path) -> None:
    path = tmp_path / "data.json"
    path.write_text(
        '{"next_id": 2, "tasks": [{"id": 1, "title": "a"}, {"id": 4, "title": "b"}]}',
        encoding="utf-8",
    )
    assert SnapshotFile(path).load().next_id == 5
