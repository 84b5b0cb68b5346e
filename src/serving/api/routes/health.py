"""
Health Check Endpoints

Liveness and readiness checks for orchestration systems.
"""

from datetime import datetime, timezone
from typing import Dict, Any

from fastapi import APIRouter, Response
from pydantic import BaseModel

from src.config import get_settings
from src.database.connection import check_database_health

settings = get_settings()
router = APIRouter()


class HealthResponse(BaseModel):
    """Liveness response"""
    status: str
    timestamp: datetime


class ReadinessResponse(BaseModel):
    """Readiness response"""
    status: str
    version: str
    environment: str
    checks: Dict[str, Any]


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Returns 200 while the process is serving requests."""
    return HealthResponse(status="ok", timestamp=datetime.now(timezone.utc))


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check(response: Response) -> ReadinessResponse:
    """
    Readiness probe.

    Returns 503 when the database cannot be reached.
    """
    db_health = await check_database_health()
    ready = db_health.get("status") == "healthy"
    if not ready:
        response.status_code = 503

    return ReadinessResponse(
        status="ready" if ready else "not_ready",
        version=settings.version,
        environment=settings.app_env,
        checks={"database": db_health},
    )
