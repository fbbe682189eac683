"""
FastAPI application for plan review.

`create_app` builds a fresh app on every call, reading settings at that
moment. Tests rely on this to pick up a per-test plan directory.

Errors always come back as JSON:
-   a `ValueError` raised by a handler (a bad share hash, say) becomes 400,
-   request bodies that fail the record contracts get FastAPI's usual 422,
-   anything else is logged with its traceback and returned as 500.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from redline import __version__
from redline.api.routers import documents, plans
from redline.core.settings import get_logger, load_settings
from redline.storage import get_plan_dir

logger = get_logger("redline.api")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Make sure the plan directory exists before the first request."""
    logger.info("redline API starting; plans stored in %s", get_plan_dir())
    yield
    logger.info("redline API stopped")


def _error(status_code: int, label: str, exc: Exception, **extra: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": label, "detail": str(exc), **extra},
    )


def create_app() -> FastAPI:
    """Build the redline API with its routers, CORS policy and error handlers."""
    app = FastAPI(
        title="redline API",
        description="Plan review: parse, annotate, export feedback, diff versions",
        version=__version__,
        lifespan=lifespan,
    )

    # The review UI runs on its own local origin.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ValueError)
    async def on_value_error(request: Request, exc: ValueError) -> JSONResponse:
        logger.warning("400 on %s: %s", request.url.path, exc)
        return _error(400, "Bad Request", exc)

    @app.exception_handler(Exception)
    async def on_unhandled(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("500 on %s", request.url.path)
        return _error(500, "Internal Server Error", exc, path=request.url.path)

    app.include_router(documents.router)
    app.include_router(plans.router)

    @app.get("/health", tags=["System"])
    async def health() -> dict[str, str]:
        return {
            "status": "ok",
            "environment": load_settings().environment,
            "version": __version__,
        }

    return app


__all__ = ["create_app"]
