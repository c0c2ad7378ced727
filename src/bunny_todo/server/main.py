"""FastAPI application for the Bunny Todo REST store.

Routes:
- GET    /api/todos
- POST   /api/todos
- PUT    /api/todos/{id}
- DELETE /api/todos/{id}
- GET    /api/progress
"""

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from bunny_todo import __version__
from bunny_todo.server.database import TodoDatabase
from bunny_todo.server.routes import todos_router
from bunny_todo.utils.logger import get_logger


def create_app(db_path: str | Path = ":memory:") -> FastAPI:
    """Create FastAPI application.

    Args:
        db_path: SQLite file holding the todos table.

    Returns:
        Configured FastAPI application.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        app.state.db.close()

    app = FastAPI(
        title="Bunny Todo",
        description="Task store for Bunny Todo clients",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.db = TodoDatabase(db_path)

    app.include_router(todos_router)

    # Browser clients are served from any origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(HTTPException)
    async def http_error(request: Request, exc: HTTPException) -> JSONResponse:
        get_logger().warning(
            "%s %s -> %d %s", request.method, request.url.path, exc.status_code, exc.detail
        )
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        message = "; ".join(err.get("msg", "invalid") for err in exc.errors())
        return JSONResponse(status_code=400, content={"error": message or "Invalid request"})

    return app
