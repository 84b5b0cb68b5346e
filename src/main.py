"""
Restaurant Analytics API

ASGI entry point: ``uvicorn src.main:app`` or ``gunicorn src.main:app -c gunicorn.conf.py``.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.routing import APIRoute
import structlog

from src.config import get_settings
from src.config.logging import configure_logging
from src.database.connection import close_database, init_database
from src.serving.api.main import create_api_app
from src.serving.api.routes import reports_router

settings = get_settings()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging, open the database, dispose it on shutdown."""
    configure_logging()
    logger.info("Starting Restaurant Analytics API", environment=settings.app_env, version=settings.version)

    # The API still starts without a database: reports answer 500 and
    # /health/ready answers 503 until it is reachable
    try:
        await init_database()
    except Exception as e:
        logger.warning("Database unavailable at startup", error=str(e))

    yield

    logger.info("Shutting down...")
    await close_database()


app = create_api_app(lifespan=lifespan)


@app.get("/api/info", tags=["Health"])
async def api_info():
    """Service metadata and the list of report endpoints."""
    return {
        "name": "Restaurant Analytics API",
        "version": settings.version,
        "environment": settings.app_env,
        "reports": sorted(
            f"/api{route.path}" for route in reports_router.routes if isinstance(route, APIRoute)
        ),
        "documentation": None if settings.is_production else "/docs",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.api_host, port=settings.api_port, log_config=None)
