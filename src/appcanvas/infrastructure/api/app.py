"""FastAPI application factory and configuration.

This module provides the application factory function for creating
and configuring the FastAPI application with all middleware, routes,
and lifecycle handlers.
"""

import uuid
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from appcanvas.core.config import get_settings
from appcanvas.core.exceptions import (
    AppCanvasError,
    ConflictError,
    NotFoundError,
    StorageUnavailableError,
    ValidationFailedError,
)
from appcanvas.core.logging import (
    bind_request_context,
    clear_request_context,
    configure_logging,
    get_logger,
)
from appcanvas.infrastructure.api.schemas import ErrorResponse
from appcanvas.infrastructure.persistence.database import close_database, init_database
from appcanvas.infrastructure.storage import create_storage_driver

logger = get_logger(__name__)

ERROR_STATUS_CODES: dict[type[AppCanvasError], int] = {
    NotFoundError: 404,
    ConflictError: 409,
    ValidationFailedError: 400,
    StorageUnavailableError: 503,
}

HTTP_ERROR_CODES = {401: "unauthorized", 404: "not_found", 405: "method_not_allowed"}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Args:
        app: FastAPI application instance.

    Yields:
        None: Control is yielded to the application during its lifetime.
    """
    settings = get_settings()
    configure_logging(settings)

    logger.info(
        "Starting AppCanvas",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
        storage_driver=settings.storage_driver,
    )

    try:
        await init_database()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error("Failed to initialize database", error=str(e))
        raise

    if not hasattr(app.state, "storage_driver"):
        app.state.storage_driver = create_storage_driver(settings)

    yield

    logger.info("Shutting down AppCanvas")
    await close_database()
    logger.info("Database connection closed")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Per-tenant data layer and calculation evaluator for AppCanvas",
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    register_health_check(app)
    register_routes(app)
    register_exception_handlers(app)
    register_middleware(app)

    return app


def register_health_check(app: FastAPI) -> None:
    """Register health check endpoints."""

    @app.get("/health", tags=["health"])
    async def health_check():
        """Returns 200 if the service is running."""
        return {
            "status": "healthy",
            "service": "AppCanvas",
            "version": get_settings().app_version,
        }

    @app.get("/ready", tags=["health"])
    async def readiness_check(request: Request):
        """Returns 200 if the metadata database is reachable."""
        from appcanvas.infrastructure.persistence.database import get_db_manager

        settings = get_settings()
        database_ok = await get_db_manager().check_connection()
        body = {
            "status": "ready" if database_ok else "not_ready",
            "service": settings.app_name,
            "metadata": "connected" if database_ok else "disconnected",
            "storage": settings.storage_driver,
            "storage_initialized": hasattr(request.app.state, "storage_driver"),
        }
        return JSONResponse(status_code=200 if database_ok else 503, content=body)


def register_routes(app: FastAPI) -> None:
    """Register API routes."""
    from appcanvas.infrastructure.api.routes import (
        databases_router,
        records_router,
        render_router,
    )

    settings = get_settings()

    app.include_router(
        databases_router, prefix=f"{settings.api_prefix}/databases", tags=["databases"]
    )
    app.include_router(
        records_router, prefix=f"{settings.api_prefix}/databases", tags=["records"]
    )
    app.include_router(render_router, prefix=f"{settings.api_prefix}/render", tags=["render"])

    @app.get(settings.api_prefix, tags=["root"])
    async def api_root():
        """API root endpoint."""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "api_version": "v1",
        }


def _error_response(status_code: int, message: str, code: str, details: list | None = None) -> JSONResponse:
    body = ErrorResponse(message=message, code=code, details=details or [])
    return JSONResponse(status_code=status_code, content=body.model_dump(by_alias=True))


def register_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(AppCanvasError)
    async def appcanvas_exception_handler(request: Request, exc: AppCanvasError):
        """Map the error taxonomy to status codes."""
        status_code = next(
            (code for kind, code in ERROR_STATUS_CODES.items() if isinstance(exc, kind)),
            500,
        )
        log = logger.error if status_code >= 500 else logger.info
        log(
            "Request failed",
            path=str(request.url.path),
            method=request.method,
            status_code=status_code,
            error_code=exc.code,
            error=exc.message,
        )
        return _error_response(status_code, exc.message, exc.code, exc.details)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        details = [
            {
                "field": ".".join(str(part) for part in error.get("loc", ())[1:]),
                "message": error.get("msg", ""),
                "code": error.get("type", ""),
            }
            for error in exc.errors()
        ]
        return _error_response(400, "Validation failed", ValidationFailedError.code, details)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        code = HTTP_ERROR_CODES.get(exc.status_code, "http_error")
        response = _error_response(exc.status_code, str(exc.detail), code)
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle uncaught exceptions."""
        logger.error(
            "Unhandled exception",
            path=str(request.url),
            method=request.method,
            error=str(exc),
            exc_type=type(exc).__name__,
        )
        return _error_response(
            500,
            str(exc) if get_settings().debug else "An unexpected error occurred",
            "internal",
        )


def register_middleware(app: FastAPI) -> None:
    """Register custom middleware."""

    @app.middleware("http")
    async def logging_middleware(request: Request, call_next):
        """Log every request and propagate a correlation ID."""
        correlation_id = request.headers.get("X-Correlation-ID", f"cid_{uuid.uuid4().hex[:12]}")
        bind_request_context(correlation_id)

        logger.info(
            "Request started",
            method=request.method,
            path=str(request.url.path),
        )

        try:
            response = await call_next(request)
            logger.info(
                "Request completed",
                method=request.method,
                path=str(request.url.path),
                status_code=response.status_code,
            )
            response.headers["X-Correlation-ID"] = correlation_id
            return response
        finally:
            clear_request_context()


# Create the application instance
app = create_app()
