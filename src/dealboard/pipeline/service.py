"""Pipeline service -- async orchestration around the pure pipeline core.

Fetches deals from the repository, applies board filters, and derives the
board columns and metrics. Stage moves go through the transition handler
and are persisted via DealRepository.update with the merged update object.

Repository failures are logged and re-raised; the pure functions underneath
never raise.

Exports:
    PipelineService: Orchestrator used by the API layer.
    PipelineSnapshot: Filtered deals plus their board and metrics.
"""

from __future__ import annotations

from datetime import datetime, timezone

import structlog
from pydantic import BaseModel, Field

from dealboard.core.monitoring import deal_stage_transitions_total
from dealboard.pipeline.board import group_deals_by_stage
from dealboard.pipeline.filters import apply_filters
from dealboard.pipeline.metrics import compute_pipeline_metrics
from dealboard.pipeline.repository import DealNotFoundError, DealRepository
from dealboard.pipeline.schemas import (
    Deal,
    DealCreate,
    DealFilters,
    DealUpdate,
    LeadConversion,
    PipelineColumn,
    PipelineMetrics,
    StageMoveRequest,
)
from dealboard.pipeline.stages import LOST_STAGE
from dealboard.pipeline.transitions import build_stage_update, describe_move

logger = structlog.get_logger(__name__)


class PipelineSnapshot(BaseModel):
    """Board columns and metrics computed from one fetch of the deal list."""

    columns: list[PipelineColumn] = Field(default_factory=list)
    metrics: PipelineMetrics = Field(default_factory=PipelineMetrics)
    filtered_count: int = 0
    total_count: int = 0


class PipelineService:
    """Drives the deal pipeline against a DealRepository.

    Args:
        repository: Deal storage boundary.
    """

    def __init__(self, repository: DealRepository) -> None:
        self._repo = repository

    async def list_deals(self, filters: DealFilters | None = None) -> list[Deal]:
        """All deals in repository order, narrowed by ``filters``."""
        deals = await self._repo.fetch_all()
        return apply_filters(deals, filters)

    async def get_deal(self, deal_id: str) -> Deal:
        deal = await self._repo.get(deal_id)
        if deal is None:
            raise DealNotFoundError(deal_id)
        return deal

    async def snapshot(self, filters: DealFilters | None = None) -> PipelineSnapshot:
        """Fetch, filter, then build board columns and metrics.

        Metrics are computed over the filtered deals, matching what the
        board shows.
        """
        deals = await self._repo.fetch_all()
        visible = apply_filters(deals, filters)
        return PipelineSnapshot(
            columns=group_deals_by_stage(visible),
            metrics=compute_pipeline_metrics(visible),
            filtered_count=len(visible),
            total_count=len(deals),
        )

    async def metrics(self, filters: DealFilters | None = None) -> PipelineMetrics:
        return compute_pipeline_metrics(await self.list_deals(filters))

    async def create_deal(self, data: DealCreate) -> Deal:
        deal = await self._repo.create(data)
        logger.info(
            "deal_created",
            deal_id=deal.id,
            stage=deal.stage,
            deal_value=deal.deal_value,
        )
        return deal

    async def update_deal(self, deal_id: str, data: DealUpdate) -> Deal:
        """Apply a partial edit. Only fields the caller set are written."""
        fields = data.model_dump(mode="json", exclude_unset=True)
        if not fields:
            return await self.get_deal(deal_id)
        try:
            deal = await self._repo.update(deal_id, fields)
        except DealNotFoundError:
            logger.warning("deal_update_missing", deal_id=deal_id)
            raise
        logger.info("deal_updated", deal_id=deal_id, fields=sorted(fields))
        return deal

    async def delete_deal(self, deal_id: str) -> None:
        await self._repo.delete(deal_id)
        logger.info("deal_deleted", deal_id=deal_id)

    async def move_deal(
        self,
        deal_id: str,
        move: StageMoveRequest,
        now: datetime | None = None,
    ) -> Deal:
        """Move a deal to another stage.

        Any-to-any moves are accepted. The update sent to the repository is
        ``{stage}`` plus the won/lost stamps from the transition handler;
        a lost_reason is only written when moving to lost.

        Args:
            deal_id: Deal to move.
            move: Target stage (and optional lost reason).
            now: Timestamp for won/lost stamps; defaults to current UTC time.

        Returns:
            The updated Deal as stored by the repository.

        Raises:
            DealNotFoundError: If the deal does not exist.
        """
        current = await self.get_deal(deal_id)
        stamp = now or datetime.now(timezone.utc)

        fields = build_stage_update(move.stage, stamp)
        if move.stage == LOST_STAGE and move.lost_reason:
            fields["lost_reason"] = move.lost_reason

        try:
            deal = await self._repo.update(deal_id, fields)
        except Exception:
            logger.error(
                "deal_stage_move_failed",
                deal_id=deal_id,
                to_stage=move.stage.value,
                exc_info=True,
            )
            raise

        direction = describe_move(current.stage, move.stage)
        deal_stage_transitions_total.labels(
            from_stage=current.stage,
            to_stage=move.stage.value,
        ).inc()
        logger.info(
            "deal_stage_moved",
            deal_id=deal_id,
            from_stage=current.stage,
            to_stage=move.stage.value,
            direction=direction.value,
            extra_fields=sorted(k for k in fields if k != "stage"),
        )
        return deal

    async def convert_lead(self, conversion: LeadConversion) -> Deal:
        """Create a deal linked to an existing lead.

        The lead itself (and its status) belongs to the lead store; only
        its summary is joined onto the new deal.
        """
        data = DealCreate(
            deal_name=conversion.deal_name,
            deal_value=conversion.deal_value,
            probability=conversion.probability,
            service_type=conversion.service_type,
            deal_owner=conversion.deal_owner,
            expected_close_date=conversion.expected_close_date,
            notes=conversion.notes,
            lead_id=conversion.lead.id,
        )
        deal = await self._repo.create(data, lead=conversion.lead)
        logger.info("lead_converted", lead_id=conversion.lead.id, deal_id=deal.id)
        return deal
