"""REST API endpoints for deal records.

CRUD for deals, the board's stage move, and lead-to-deal conversion. All
endpoints require a role with the sales section. DealNotFoundError maps to
404.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status

from dealboard.api.deps import get_pipeline_service, require_sales
from dealboard.api.v1.pipeline import deal_filters
from dealboard.core.permissions import UserRole
from dealboard.pipeline.repository import DealNotFoundError
from dealboard.pipeline.schemas import (
    Deal,
    DealCreate,
    DealFilters,
    DealUpdate,
    LeadConversion,
    StageMoveRequest,
)
from dealboard.pipeline.service import PipelineService

router = APIRouter(prefix="/deals", tags=["deals"])


def _not_found(exc: DealNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


@router.get("", response_model=list[Deal])
async def list_deals(
    filters: DealFilters = Depends(deal_filters),
    service: PipelineService = Depends(get_pipeline_service),
    role: UserRole = Depends(require_sales),
) -> list[Deal]:
    """List deals (newest first), narrowed by the board filters."""
    return await service.list_deals(filters)


@router.post("", response_model=Deal, status_code=201)
async def create_deal(
    body: DealCreate,
    service: PipelineService = Depends(get_pipeline_service),
    role: UserRole = Depends(require_sales),
) -> Deal:
    return await service.create_deal(body)


@router.post("/convert-lead", response_model=Deal, status_code=201)
async def convert_lead(
    body: LeadConversion,
    service: PipelineService = Depends(get_pipeline_service),
    role: UserRole = Depends(require_sales),
) -> Deal:
    """Create a deal from an existing lead."""
    return await service.convert_lead(body)


@router.get("/{deal_id}", response_model=Deal)
async def get_deal(
    deal_id: str,
    service: PipelineService = Depends(get_pipeline_service),
    role: UserRole = Depends(require_sales),
) -> Deal:
    try:
        return await service.get_deal(deal_id)
    except DealNotFoundError as exc:
        raise _not_found(exc) from exc


@router.patch("/{deal_id}", response_model=Deal)
async def update_deal(
    deal_id: str,
    body: DealUpdate,
    service: PipelineService = Depends(get_pipeline_service),
    role: UserRole = Depends(require_sales),
) -> Deal:
    """Partial edit; only fields present in the body are written."""
    try:
        return await service.update_deal(deal_id, body)
    except DealNotFoundError as exc:
        raise _not_found(exc) from exc


@router.post("/{deal_id}/stage", response_model=Deal)
async def move_deal(
    deal_id: str,
    body: StageMoveRequest,
    service: PipelineService = Depends(get_pipeline_service),
    role: UserRole = Depends(require_sales),
) -> Deal:
    """Move a deal to another stage, stamping won/lost dates as needed."""
    try:
        return await service.move_deal(deal_id, body)
    except DealNotFoundError as exc:
        raise _not_found(exc) from exc


@router.delete("/{deal_id}", status_code=204)
async def delete_deal(
    deal_id: str,
    service: PipelineService = Depends(get_pipeline_service),
    role: UserRole = Depends(require_sales),
) -> Response:
    try:
        await service.delete_deal(deal_id)
    except DealNotFoundError as exc:
        raise _not_found(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)
