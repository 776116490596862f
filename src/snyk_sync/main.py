from __future__ import annotations

import time

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from snyk_sync.configs.logging_config import get_logger, setup_logging
from snyk_sync.configs.settings import Settings, get_settings
from snyk_sync.connector import SnykConnector
from snyk_sync.errors import AppError
from snyk_sync.routers.health_router import router as health_router
from snyk_sync.routers.sync_router import router as sync_router
from snyk_sync.utils.response import failure

log = get_logger(__name__)


def create_app(connector: SnykConnector | None = None) -> FastAPI:
    """
    Build the service.

    A prebuilt `connector` is used as-is (and not closed on shutdown);
    otherwise one is created from settings on startup.
    """
    app = FastAPI(title="snyk_sync", version="0.1.0")
    app.state.connector = connector
    app.state.owns_connector = connector is None

    @app.middleware("http")
    async def request_logging_middleware(request: Request, call_next):
        start = time.perf_counter()
        method = request.method
        path = request.url.path
        request_id = request.headers.get("x-request-id") or request.headers.get("x-correlation-id")

        log.info("request.start method=%s path=%s request_id=%s", method, path, request_id)
        response = None
        try:
            response = await call_next(request)
        finally:
            elapsed_ms = int((time.perf_counter() - start) * 1000)
            log.info(
                "request.end method=%s path=%s status=%s request_id=%s elapsed_ms=%s",
                method,
                path,
                getattr(response, "status_code", "unknown"),
                request_id,
                elapsed_ms,
            )
        return response

    app.include_router(health_router)
    app.include_router(sync_router)

    @app.exception_handler(AppError)
    async def app_error_handler(_: Request, exc: AppError) -> JSONResponse:
        log.info(
            "request.error type=%s status=%s message=%s",
            type(exc).__name__,
            exc.http_status,
            exc.message,
        )
        return JSONResponse(status_code=exc.http_status, content=failure(exc.message))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(_: Request, exc: Exception) -> JSONResponse:
        log.exception("Unhandled error: %s", str(exc))
        return JSONResponse(status_code=500, content=failure("internal server error"))

    @app.on_event("startup")
    async def startup() -> None:
        settings: Settings = get_settings()
        setup_logging(settings.LOG_LEVEL)

        if app.state.connector is None:
            app.state.connector = SnykConnector.from_settings(settings)
        log.info(
            "startup.done service=%s group_id=%s org_filter=%s",
            settings.SERVICE_NAME,
            app.state.connector.group_id,
            len(app.state.connector.org_ids),
        )

    @app.on_event("shutdown")
    async def shutdown() -> None:
        log.info("shutdown.begin")
        connector = app.state.connector
        if connector is not None and app.state.owns_connector:
            await connector.aclose()
        log.info("shutdown.done")

    return app


app = create_app()
