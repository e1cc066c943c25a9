from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Request, Response

from core.models import Task, TaskCreate, TaskPatch
from services.task_store import TaskStore


router = APIRouter(prefix="/tasks")


def get_store(request: Request) -> TaskStore:
    return request.app.state.store


def _dump(task: Task) -> dict:
    return task.model_dump(mode="json", exclude_none=True)


@router.get("")
def list_tasks(store: TaskStore = Depends(get_store)) -> List[dict]:
    return [_dump(task) for task in store.list()]


@router.get("/{task_id}")
def get_task(task_id: int, store: TaskStore = Depends(get_store)) -> dict:
    return _dump(store.get(task_id))


@router.post("", status_code=201)
def create_task(request: TaskCreate, store: TaskStore = Depends(get_store)) -> dict:
    return _dump(store.create(request))


@router.api_route("/{task_id}", methods=["PUT", "PATCH"])
def update_task(task_id: int, request: TaskPatch, store: TaskStore = Depends(get_store)) -> dict:
    return _dump(store.update(task_id, request))


@router.delete("/{task_id}", status_code=204)
def delete_task(task_id: int, store: TaskStore = Depends(get_store)) -> Response:
    store.delete(task_id)
    return Response(status_code=204)
