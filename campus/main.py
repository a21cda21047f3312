"""FastAPI application entry point."""

import logging
import traceback
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from campus.api.v1.router import api_router
from campus.config import settings
from campus.core.exceptions import AppException
from campus.core.immutability import register_immutability_enforcement
from campus.core.logging import configure_logging
from campus.core.middleware import (
    RateLimitMiddleware,
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)
from campus.database import Database

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan events."""
    # Startup
    configure_logging(settings.log_level)
    database = Database.from_settings(settings)
    app.state.database = database
    if settings.debug:
        await database.create_all()
    logger.info(f"{settings.app_name} started ({settings.environment})")

    yield

    # Shutdown
    await database.dispose()


def _format_validation_error(exc: RequestValidationError) -> str:
    """First validation error as ``field: message``."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid value")
    return f"{location}: {message}" if location else message


def create_application() -> FastAPI:
    """Create and configure the FastAPI application."""
    register_immutability_enforcement()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Festo - Campus venue and event booking API",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )

    # Exception handlers, every error body is {"error": message}
    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        """Handle custom application exceptions."""
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=exc.headers,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        """Handle framework HTTP errors such as unknown routes."""
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Malformed bodies and query parameters are 400s."""
        return JSONResponse(status_code=400, content={"error": _format_validation_error(exc)})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Last resort, never leak internals in production."""
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        content: dict = {"error": "Internal server error"}
        if settings.environment != "production":
            content["traceback"] = "".join(traceback.format_exception(exc))
        return JSONResponse(status_code=500, content=content)

    # Middleware (order matters - first added = last executed)
    # 1. Security headers (outermost)
    app.add_middleware(SecurityHeadersMiddleware)

    # 2. Rate limiting (production only)
    if settings.environment != "development" and settings.rate_limit_enabled:
        app.add_middleware(
            RateLimitMiddleware,
            requests_per_minute=settings.rate_limit_per_minute,
        )

    # 3. Request logging
    app.add_middleware(RequestLoggingMiddleware)

    # 4. CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # 5. Gzip compression (innermost)
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    # Include API routes
    app.include_router(api_router, prefix=settings.api_prefix)

    @app.get("/health")
    async def health_check(request: Request) -> JSONResponse:
        """Liveness plus a round trip to the database."""
        try:
            async with request.app.state.database.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            database = "ok"
        except SQLAlchemyError as e:
            logger.error(f"Health check could not reach the database: {e}")
            database = "unavailable"

        healthy = database == "ok"
        return JSONResponse(
            status_code=200 if healthy else 503,
            content={
                "status": "healthy" if healthy else "degraded",
                "database": database,
                "version": settings.app_version,
                "environment": settings.environment,
                "timestamp": datetime.now(UTC).isoformat(),
            },
        )

    @app.get("/")
    async def root() -> dict:
        """Root endpoint."""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "docs": "/docs" if settings.debug else None,
        }

    return app


app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "campus.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        workers=1 if settings.debug else settings.workers,
    )
