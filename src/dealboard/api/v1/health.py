"""Health check endpoints.

Liveness (/health) reports the environment; readiness (/health/ready)
additionally checks that the deal repository is installed.
"""

from __future__ import annotations

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from dealboard.config import get_settings

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """Basic liveness check. No dependencies are checked."""
    settings = get_settings()
    return {"status": "ok", "environment": settings.ENVIRONMENT.value}


@router.get("/health/ready")
async def readiness_check(request: Request):
    """Readiness: the deal repository must be available."""
    repo = getattr(request.app.state, "deal_repository", None)
    checks = {"deal_repository": "ok" if repo is not None else "missing"}
    if repo is None:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "checks": checks},
        )
    return {"status": "ready", "checks": checks}
