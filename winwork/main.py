"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from . import config
from .database import init_db, session_scope
from .errors import (
    LinkMoveError,
    LinkNotFoundError,
    LinkValidationError,
    TagConflictError,
    TagNotFoundError,
    WinWorkError,
)
from .routers import links, settings, tags
from .seed import seed_defaults

logger = logging.getLogger(__name__)
logging.basicConfig(level=config.LOG_LEVEL)

_ERROR_STATUS = (
    (LinkNotFoundError, status.HTTP_404_NOT_FOUND),
    (TagNotFoundError, status.HTTP_404_NOT_FOUND),
    (LinkMoveError, status.HTTP_409_CONFLICT),
    (TagConflictError, status.HTTP_409_CONFLICT),
    (LinkValidationError, status.HTTP_400_BAD_REQUEST),
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    if config.SEED_DEFAULTS:
        with session_scope() as session:
            seed_defaults(session)
    logger.info("WinWork API ready (%s)", config.DATABASE_URL)
    yield


async def handle_domain_error(request: Request, exc: WinWorkError) -> JSONResponse:
    for error_type, status_code in _ERROR_STATUS:
        if isinstance(exc, error_type):
            break
    else:
        status_code = status.HTTP_400_BAD_REQUEST
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


def create_app() -> FastAPI:
    app = FastAPI(title="WinWork API", lifespan=lifespan)
    app.add_exception_handler(WinWorkError, handle_domain_error)

    @app.get("/healthz", tags=["health"])
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(links.router)
    app.include_router(links.router, prefix="/api")
    app.include_router(tags.router)
    app.include_router(tags.router, prefix="/api")
    app.include_router(settings.router)
    app.include_router(settings.router, prefix="/api")

    return app


app = create_app()
