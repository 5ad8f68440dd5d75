"""
main.py
-------
FastAPI application factory and entry point.

Application lifecycle:
  1. App is created by create_application().
  2. lifespan context manager runs on startup / shutdown.
  3. Routers are registered with their URL prefixes.
  4. Global exception handlers map store outages to 503 and normalise
     unexpected errors to 500.

Run with:
    uvicorn main:app --reload              # development
    uvicorn main:app --workers 1           # production; scan cache is per process
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from chathub_admin.api.routes import (
    approvals,
    auth,
    companies,
    diagnostics,
    reconciliation,
    website_requests,
)
from chathub_admin.core.config import settings
from chathub_admin.core.exceptions import StoreUnavailable
from chathub_admin.core.logging import configure_logging, get_logger
from chathub_admin.db.session import engine

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Startup / shutdown lifecycle hook.

    Startup:
      - Configure structured logging

    Shutdown:
      - Dispose the async engine (graceful connection pool drain)
    """
    configure_logging()
    logger.info(
        "Starting up",
        app=settings.APP_NAME,
        env=settings.APP_ENV,
        debug=settings.DEBUG,
    )
    yield
    logger.info("Shutting down, disposing DB engine")
    await engine.dispose()


def create_application() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        description=(
            "Admin backend for company approvals, user/company "
            "reconciliation and approval diagnostics."
        ),
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── CORS ─────────────────────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Routers ───────────────────────────────────────────────────────────────
    app.include_router(auth.router)
    app.include_router(approvals.router)
    app.include_router(companies.router)
    app.include_router(reconciliation.router)
    app.include_router(diagnostics.router)
    app.include_router(website_requests.router)

    # ── Global Exception Handlers ─────────────────────────────────────────────

    @app.exception_handler(StoreUnavailable)
    async def store_unavailable_handler(
        request: Request, exc: StoreUnavailable
    ) -> JSONResponse:
        logger.error(
            "Record store unavailable",
            path=request.url.path,
            method=request.method,
            collection=exc.collection,
            operation=exc.operation,
        )
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": "Record store unavailable, try again later"},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.error(
            "Unhandled exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )

    # ── Health Check ──────────────────────────────────────────────────────────

    @app.get("/health", tags=["Health"], summary="Service health check")
    async def health() -> dict:
        return {"status": "ok", "app": settings.APP_NAME, "env": settings.APP_ENV}

    return app


app = create_application()
