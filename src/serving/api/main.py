"""
FastAPI Application Factory

Creates and configures the analytics API application.
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
import structlog

from src.analytics.errors import StorageQueryError
from src.config import get_settings
from src.serving.api.middleware import RequestLoggingMiddleware
from src.serving.api.routes import health_router, reports_router, reference_router

logger = structlog.get_logger(__name__)

INTERNAL_ERROR_BODY = {"error": "Internal server error"}


async def storage_error_handler(request: Request, exc: StorageQueryError) -> JSONResponse:
    logger.error(
        "Report failed",
        path=request.url.path,
        report=exc.report,
        error_type=type(exc.cause).__name__,
    )
    return JSONResponse(status_code=500, content=INTERNAL_ERROR_BODY)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", path=request.url.path, error_type=type(exc).__name__)
    return JSONResponse(status_code=500, content=INTERNAL_ERROR_BODY)


def create_api_app(lifespan=None) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        lifespan: Optional lifespan context manager (database setup/teardown)

    Returns:
        Configured FastAPI app instance
    """
    settings = get_settings()

    app = FastAPI(
        title="Restaurant Analytics API",
        description="Sales, product, channel and customer reports for restaurant chains",
        version=settings.version,
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.security.cors_origins,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(RequestLoggingMiddleware)

    app.add_exception_handler(StorageQueryError, storage_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(health_router, tags=["Health"])
    app.include_router(reports_router, prefix="/api", tags=["Reports"])
    app.include_router(reference_router, prefix="/api", tags=["Reference"])

    return app
