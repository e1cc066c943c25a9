import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import List, Optional, Union

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import config
from api.routes.tasks import router as tasks_router
from core.errors import InvalidInput, PersistenceFailure, TaskNotFound
from services.persistence import SnapshotFile
from services.task_store import TaskStore


logger = logging.getLogger(__name__)


def create_app(
    data_file: Optional[Union[str, Path]] = None,
    cors_origins: Optional[List[str]] = None,
) -> FastAPI:
    path = data_file or config.TASKS_DATA_FILE

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # StorageUnreadable propagates and aborts startup.
        store = TaskStore(SnapshotFile(path))
        store.load()
        app.state.store = store
        logger.info("Task store ready file=%s", path)
        yield

    app = FastAPI(title="Task Board API", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins if cors_origins is not None else config.get_cors_origins(),
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Accept", "Authorization", "Content-Type"],
        max_age=60,
    )
    app.include_router(tasks_router)

    @app.exception_handler(RequestValidationError)
    async def invalid_request(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})

    @app.exception_handler(InvalidInput)
    async def invalid_input(request: Request, exc: InvalidInput) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(TaskNotFound)
    async def task_not_found(request: Request, exc: TaskNotFound) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": "Task not found"})

    @app.exception_handler(PersistenceFailure)
    async def persistence_failure(request: Request, exc: PersistenceFailure) -> JSONResponse:
        return JSONResponse(status_code=500, content={"detail": "Failed to persist tasks"})

    return app


app = create_app()
