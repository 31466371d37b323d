"""FastAPI dependency injection for the pipeline service and role checks.

These dependencies are used in endpoint function signatures to inject the
PipelineService bound to the app's deal repository and to enforce the
role -> section permission table.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from fastapi import Depends, HTTPException, Request, status

from dealboard.core.permissions import Section, UserRole, has_permission, parse_role
from dealboard.pipeline.service import PipelineService

ROLE_HEADER = "X-User-Role"


def get_pipeline_service(request: Request) -> PipelineService:
    """Build a PipelineService over app.state.deal_repository, 503 if absent."""
    repo = getattr(request.app.state, "deal_repository", None)
    if repo is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Deal pipeline not initialized",
        )
    return PipelineService(repo)


async def get_current_role(request: Request) -> UserRole:
    """Resolve the caller's role from the X-User-Role header.

    Identity is established upstream; this only reads the role it forwards.

    Raises:
        HTTPException(401): If the header is missing.
        HTTPException(403): If the role is not one of the known roles.
    """
    raw = request.headers.get(ROLE_HEADER)
    if not raw:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Missing {ROLE_HEADER} header",
        )
    role = parse_role(raw)
    if role is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Unknown role: {raw}",
        )
    return role


def require_section(section: Section) -> Callable[..., Awaitable[UserRole]]:
    """Dependency factory: 403 unless the caller's role may open ``section``."""

    async def _check(role: UserRole = Depends(get_current_role)) -> UserRole:
        if not has_permission(role, section):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Role {role.value} has no access to {section.value}",
            )
        return role

    return _check


require_sales = require_section(Section.SALES)
