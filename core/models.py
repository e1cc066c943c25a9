from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from core.types import TaskStatus


class Tag(BaseModel):
    label: str = ""
    color: str = ""
    text: str = ""


class StrictTag(Tag):
    model_config = ConfigDict(extra="forbid")


class Task(BaseModel):
    id: int = Field(gt=0)
    title: str
    body: str = ""
    status: TaskStatus = TaskStatus.todo
    tag: Optional[Tag] = None


class TaskCreate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str = ""
    body: str = ""
    status: Optional[str] = None
    tag: Optional[Tag] = None


class TaskPatch(BaseModel):
    """Partial update body.

    A field left out of the request, or sent as ``null``, leaves the task
    unchanged. The exception is ``tag``: ``"tag": null`` clears it. Unknown
    keys are rejected, inside ``tag`` as well. ``changes()`` returns only the
    fields to apply.
    """

    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = None
    body: Optional[str] = None
    status: Optional[str] = None
    tag: Optional[StrictTag] = None

    def changes(self) -> Dict[str, Any]:
        changes: Dict[str, Any] = {}
        for name in self.model_fields_set:
            value = getattr(self, name)
            if name == "tag":
                changes[name] = Tag(**value.model_dump()) if value is not None else None
            elif value is not None:
                changes[name] = value
        return changes


class Snapshot(BaseModel):
    next_id: int = 0
    tasks: List[Task] = Field(default_factory=list)
