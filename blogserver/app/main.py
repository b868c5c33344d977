"""FastAPI application entry point."""

import logging
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from blogserver.app.api.routes.health import router as health_router
from blogserver.app.api.routes.posts import router as posts_router
from blogserver.app.core.errors import (
    ApiError,
    StoreError,
    normalize_db_error,
    normalize_unknown_error,
)
from blogserver.app.core.logging import log_event, setup_logging
from blogserver.app.core.settings import settings
from blogserver.app.db.engine import init_db
from blogserver.app.db.migrations import run_migrations

setup_logging(level=getattr(logging, settings.log_level.upper(), logging.INFO))
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    log_event(logger, "info", "app_start")
    logger.info("config_loaded: %s", settings.safe_dump())
    init_db()
    run_migrations()
    logger.info("Blog API ready")
    yield
    logger.info("Blog API shutting down")


app = FastAPI(
    title="Blog API",
    version="0.1.0",
    description="Posts backend: public reads, author-only mutations.",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _operation(request: Request) -> str:
    return f"{request.method} {request.url.path}"


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    error = normalize_db_error(
        exc.__cause__ or exc,
        operation=_operation(request),
        correlation_id=str(uuid.uuid4()),
    )
    return JSONResponse(status_code=error.http_status, content=error.to_body())


@app.exception_handler(ApiError)
async def api_error_handler(_request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(status_code=exc.http_status, content={"message": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    _request: Request, exc: RequestValidationError,
) -> JSONResponse:
    """Malformed bodies are client errors (400), like a missing field."""
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()))
    return JSONResponse(
        status_code=400,
        content={
            "message": "Invalid request body",
            "error": f"{location}: {first.get('msg', 'invalid')}".strip(": "),
        },
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler: log details, return safe generic message."""
    error = normalize_unknown_error(
        exc, operation=_operation(request), correlation_id=str(uuid.uuid4()),
    )
    return JSONResponse(status_code=error.http_status, content=error.to_body())


app.include_router(health_router, tags=["health"])
app.include_router(posts_router, tags=["posts"])
