"""FastAPI application factory for FinLit.

This module creates and configures the FastAPI application with:
- Lifespan management (logging, database pool, cache service)
- Middleware configuration (CORS, request ID, logging)
- Exception handlers
- API routers
"""

import time
import uuid
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from finlit.cache import CacheService, get_cache_service, set_cache_service
from finlit.config import Settings, get_settings
from finlit.core.exceptions import FinLitError
from finlit.core.logging import (
    clear_correlation_id,
    configure_logging,
    get_logger,
    set_correlation_id,
)
from finlit.schemas.common import HealthCheckResponse

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifespan events.

    Startup configures logging, opens the database pool and starts the cache
    service (initial Redis ping plus the background sweep and probe tasks).
    Shutdown, which the ASGI server triggers on SIGINT/SIGTERM, stops the
    cache tasks, closes Redis and disposes of the pool.

    Args:
        app: The FastAPI application instance

    Yields:
        None: Control back to the application
    """
    from finlit.core.database import close_db, init_db

    settings = get_settings()

    # ========================================
    # Startup
    # ========================================
    configure_logging(settings)
    startup_logger = get_logger(__name__)

    await init_db(settings)

    cache = CacheService.from_settings(settings)
    await cache.start()
    set_cache_service(cache)

    app.state.settings = settings
    app.state.cache = cache

    startup_logger.info(
        "Application starting",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.app_env.value,
        cache_available=cache.is_available(),
    )

    yield

    # ========================================
    # Shutdown
    # ========================================
    await cache.close()
    set_cache_service(None)
    await close_db()

    startup_logger.info("Application shutting down", app_name=settings.app_name)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings override for testing

    Returns:
        FastAPI: Configured application instance
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description=(
            "Financial literacy learning platform. Serves learning content, "
            "videos and finance lessons through a Redis read-through cache "
            "that degrades to an in-process store when Redis is unreachable."
        ),
        version=settings.app_version,
        lifespan=lifespan,
    )

    configure_middleware(app, settings)
    configure_exception_handlers(app)
    configure_routes(app)

    return app


def configure_middleware(app: FastAPI, settings: Settings) -> None:
    """Configure application middleware.

    Args:
        app: The FastAPI application instance
        settings: Application settings
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.is_development else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def logging_middleware(request: Request, call_next: Any) -> Any:
        """Log requests and responses with correlation ID."""
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        request.state.request_id = request_id
        set_correlation_id(request_id)

        request_logger = get_logger("finlit.request")
        start_time = time.perf_counter()

        request_logger.info(
            "Request started",
            method=request.method,
            path=request.url.path,
            query=str(request.query_params) if request.query_params else None,
        )

        try:
            response = await call_next(request)
            duration_ms = (time.perf_counter() - start_time) * 1000
            request_logger.info(
                "Request completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round(duration_ms, 2),
            )
            response.headers["X-Request-ID"] = request_id
            return response

        except Exception as exc:
            duration_ms = (time.perf_counter() - start_time) * 1000
            request_logger.error(
                "Request failed",
                method=request.method,
                path=request.url.path,
                duration_ms=round(duration_ms, 2),
                error=str(exc),
            )
            raise

        finally:
            clear_correlation_id()


def configure_exception_handlers(app: FastAPI) -> None:
    """Configure global exception handlers.

    Args:
        app: The FastAPI application instance
    """
    exception_logger = get_logger("finlit.exceptions")

    @app.exception_handler(FinLitError)
    async def finlit_exception_handler(request: Request, exc: FinLitError) -> JSONResponse:
        """Render domain errors as the structured error body."""
        request_id = getattr(request.state, "request_id", None)

        log = exception_logger.error if exc.status_code >= 500 else exception_logger.warning
        log(
            "Application error" if exc.status_code >= 500 else "Client error",
            error_code=exc.code,
            error_message=exc.message,
            status_code=exc.status_code,
            path=request.url.path,
        )

        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_dict(request_id=request_id),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Backing-store and other unexpected failures become a 500 body."""
        request_id = getattr(request.state, "request_id", None)

        exception_logger.exception(
            "Unhandled exception",
            error_type=type(exc).__name__,
            error_message=str(exc),
            path=request.url.path,
        )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "INTERNAL_SERVER_ERROR",
                    "message": "An unexpected error occurred",
                    "request_id": request_id,
                }
            },
        )


def configure_routes(app: FastAPI) -> None:
    """Configure application routes.

    Args:
        app: The FastAPI application instance
    """

    @app.get(
        "/health/live",
        tags=["Health"],
        summary="Liveness probe",
        description="Returns OK if the service is running",
    )
    async def liveness() -> dict[str, str]:
        return {"status": "ok"}

    @app.get(
        "/health/ready",
        tags=["Health"],
        response_model=HealthCheckResponse,
        summary="Readiness probe",
        description="Database and cache checks; a cache outage only degrades",
    )
    async def readiness() -> HealthCheckResponse:
        """Readiness probe checking dependent services.

        Redis being down is reported as "fallback" with an overall status of
        "degraded": requests are still served from the local store.
        """
        from finlit.core.database import check_db_connection

        db_ok = await check_db_connection()
        cache_ok = get_cache_service().is_available()

        if not db_ok:
            overall_status = "error"
        elif not cache_ok:
            overall_status = "degraded"
        else:
            overall_status = "ok"

        return HealthCheckResponse(
            status=overall_status,
            checks={
                "database": "ok" if db_ok else "error",
                "cache": "ok" if cache_ok else "fallback",
            },
        )

    @app.get(
        "/",
        tags=["Root"],
        summary="API root",
        description="Returns API information",
    )
    async def root() -> dict[str, str]:
        settings = get_settings()
        return {
            "service": settings.app_name,
            "version": settings.app_version,
            "docs": "/docs",
            "health": "/health/live",
        }

    from finlit.api.v1.router import router as v1_router

    app.include_router(v1_router, prefix="/api/v1")


# Create the application instance
app = create_app()


def cli() -> None:
    """CLI entry point for running the application."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "finlit.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
        log_level=settings.log_level.value.lower(),
    )


if __name__ == "__main__":
    cli()
