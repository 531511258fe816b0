"""
Health Check Endpoints

Provides health and readiness checks for orchestration systems.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

from fastapi import APIRouter, Response
from pydantic import BaseModel

from streamdash.config import get_settings
from streamdash.serving.cache import get_redis

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    version: str
    environment: str
    timestamp: datetime
    checks: Dict[str, Any]


def _snapshot_check() -> Dict[str, Any]:
    path = Path(get_settings().snapshot.path)
    if not path.is_dir():
        return {"status": "unhealthy", "error": f"snapshot directory {path} not found"}
    return {"status": "healthy", "path": str(path)}


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Comprehensive health check endpoint.

    Checks:
    - Snapshot directory availability
    - Redis connectivity

    Redis is optional: without it dashboards are computed on every request
    and no stale fallback exists, so the service reports ``degraded``.
    """
    settings = get_settings()
    checks = {"snapshots": _snapshot_check()}
    overall_status = "healthy" if checks["snapshots"]["status"] == "healthy" else "unhealthy"

    try:
        await get_redis().ping()
        checks["redis"] = {"status": "healthy"}
    except Exception as e:
        checks["redis"] = {"status": "unhealthy", "error": str(e)}
        if overall_status == "healthy":
            overall_status = "degraded"

    return HealthResponse(
        status=overall_status,
        version=settings.version,
        environment=settings.app_env,
        timestamp=datetime.now(timezone.utc),
        checks=checks,
    )


@router.get("/health/live")
async def liveness_check() -> Dict[str, str]:
    """Returns 200 while the process is running."""
    return {"status": "alive"}


@router.get("/health/ready")
async def readiness_check(response: Response) -> Dict[str, str]:
    """Returns 503 until the snapshot directory is readable."""
    if _snapshot_check()["status"] != "healthy":
        response.status_code = 503
        return {"status": "not_ready", "reason": "snapshots_unavailable"}
    return {"status": "ready"}
