"""REST API endpoints for the pipeline board.

Provides the stage registry, the filtered board (columns + metrics), and
metrics alone. All endpoints require a role with the sales section.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from dealboard.api.deps import get_pipeline_service, require_sales
from dealboard.core.permissions import UserRole
from dealboard.pipeline.schemas import (
    DealFilters,
    PipelineColumn,
    PipelineMetrics,
    ProbabilityRange,
    ValueRange,
)
from dealboard.pipeline.service import PipelineService
from dealboard.pipeline.stages import STAGE_DEFINITIONS, StageDefinition

router = APIRouter(prefix="/pipeline", tags=["pipeline"])


# ── Response Schemas ─────────────────────────────────────────────────────────


class StagesResponse(BaseModel):
    """Ordered stage registry."""

    stages: list[StageDefinition] = Field(default_factory=list)


class BoardResponse(BaseModel):
    """Board view: one column per stage plus metrics for the visible deals."""

    columns: list[PipelineColumn] = Field(default_factory=list)
    metrics: PipelineMetrics = Field(default_factory=PipelineMetrics)
    filtered_count: int = 0
    total_count: int = 0


# ── Query Helpers ────────────────────────────────────────────────────────────


def deal_filters(
    search: str = Query(default=""),
    stage: str = Query(default=""),
    service_type: str = Query(default=""),
    deal_owner: str = Query(default=""),
    deal_source: str = Query(default=""),
    value_range: ValueRange = Query(default=ValueRange.ALL),
    probability_range: ProbabilityRange = Query(default=ProbabilityRange.ALL),
) -> DealFilters:
    """Collect board filter query parameters into DealFilters."""
    return DealFilters(
        search=search,
        stage=stage,
        service_type=service_type,
        deal_owner=deal_owner,
        deal_source=deal_source,
        value_range=value_range,
        probability_range=probability_range,
    )


# ── Endpoints ────────────────────────────────────────────────────────────────


@router.get("/stages", response_model=StagesResponse)
async def list_stages(role: UserRole = Depends(require_sales)) -> StagesResponse:
    """Stage registry in board order."""
    return StagesResponse(stages=list(STAGE_DEFINITIONS))


@router.get("/board", response_model=BoardResponse)
async def get_board(
    filters: DealFilters = Depends(deal_filters),
    service: PipelineService = Depends(get_pipeline_service),
    role: UserRole = Depends(require_sales),
) -> BoardResponse:
    """Filtered deals grouped into stage columns, with metrics."""
    snapshot = await service.snapshot(filters)
    return BoardResponse(
        columns=snapshot.columns,
        metrics=snapshot.metrics,
        filtered_count=snapshot.filtered_count,
        total_count=snapshot.total_count,
    )


@router.get("/metrics", response_model=PipelineMetrics)
async def get_metrics(
    filters: DealFilters = Depends(deal_filters),
    service: PipelineService = Depends(get_pipeline_service),
    role: UserRole = Depends(require_sales),
) -> PipelineMetrics:
    """Pipeline metrics over the filtered deals."""
    return await service.metrics(filters)
