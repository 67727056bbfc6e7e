"""FastAPI entrypoint and HTTP routes."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from facelogin.api.routes import router
from facelogin.api.schemas import ErrorResponse
from facelogin.config.settings import get_settings
from facelogin.db.session import init_db
from facelogin.errors import FaceLoginError
from facelogin.monitoring.logging import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    configure_logging()
    await init_db()
    yield


def _error_body(message: str, code: str) -> dict[str, object]:
    return ErrorResponse(error=message, code=code).model_dump()


def create_app() -> FastAPI:
    """Initialise the FastAPI application."""

    settings = get_settings()
    app = FastAPI(
        title="Face Login Gateway",
        version="0.1.0",
        docs_url="/docs" if settings.environment != "prod" else None,
        redoc_url="/redoc" if settings.environment != "prod" else None,
        lifespan=lifespan,
    )
    app.include_router(router)

    @app.exception_handler(FaceLoginError)
    async def handle_face_login_error(_: Request, exc: FaceLoginError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("Face login failed with %s: %s", exc.code, exc.message)
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc.message, exc.code))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(_: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error during face login", exc_info=exc)
        return JSONResponse(
            status_code=500,
            content=_error_body(FaceLoginError.default_message, "InternalError"),
        )

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Simple health endpoint used for readiness probes."""

        return {"status": "ok"}

    @app.get("/metrics", tags=["system"])
    async def metrics() -> Response:
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    return app


app = create_app()
