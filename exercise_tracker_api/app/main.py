"""
Main entrypoint for the Exercise Tracker API.

This module assembles the FastAPI application: logging, CORS, the
exercise routes under ``/api/exercise``, the static index page and the
error handlers that turn every failure into a plain-text response.
``create_app`` builds the app; an instance is created at import time as
``app`` so it can be served directly, e.g.::

    uvicorn exercise_tracker_api.app.main:app --reload

The data store is opened in the lifespan handler, shared by both
services for the lifetime of the process and closed on shutdown.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api.router import router as exercise_router
from .core.config import settings
from .core.db import Database
from .core.errors import ExerciseTrackerError, SchemaValidationError
from .core.logging_config import setup_logging
from .services.exercise_service import ExerciseService
from .services.user_service import UserService

logger = logging.getLogger(__name__)

VIEWS_DIR = Path(__file__).parent / "views"
PUBLIC_DIR = Path(__file__).parent / "public"


def _first_request_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Bad Request"
    first = errors[0]
    location = [str(part) for part in first.get("loc", ()) if part not in ("body", "query")]
    if location:
        return f"{'.'.join(location)}: {first.get('msg', 'invalid value')}"
    return first.get("msg", "Bad Request")


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the plain-text error responders."""

    @app.exception_handler(ExerciseTrackerError)
    async def domain_error_handler(request: Request, exc: ExerciseTrackerError) -> PlainTextResponse:
        if isinstance(exc, SchemaValidationError):
            logger.warning("Schema validation failed for %s: %s", exc.collection, exc.errors)
        elif exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return PlainTextResponse(exc.message, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> PlainTextResponse:
        return PlainTextResponse(_first_request_error(exc), status_code=400)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> PlainTextResponse:
        message = "not found" if exc.status_code == 404 else str(exc.detail)
        return PlainTextResponse(message, status_code=exc.status_code, headers=exc.headers)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> PlainTextResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        status_code = getattr(exc, "status", None) or 500
        return PlainTextResponse(str(exc) or "Internal Server Error", status_code=status_code)


def create_app(database_url: Optional[str] = None) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    database_url : Optional[str]
        Data store connection string.  Defaults to
        ``settings.database_url``; tests pass a temporary file.

    Returns
    -------
    FastAPI
        A configured application.  The data store is connected when the
        application starts, not here.
    """
    setup_logging(settings.log_level, settings.log_file or None)

    db = Database(database_url or settings.database_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        db.connect()
        app.state.db = db
        app.state.user_service = UserService(db)
        app.state.exercise_service = ExerciseService(db)
        try:
            yield
        finally:
            db.close()

    app = FastAPI(
        title=settings.project_name,
        version=settings.api_version,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(exercise_router, prefix="/api/exercise")
    register_exception_handlers(app)

    if PUBLIC_DIR.exists():
        app.mount("/public", StaticFiles(directory=PUBLIC_DIR), name="public")

    @app.get("/", include_in_schema=False)
    async def index() -> FileResponse:
        return FileResponse(VIEWS_DIR / "index.html")

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    return app


app = create_app()
