"""Board projection -- groups a flat deal list into one column per stage."""

from __future__ import annotations

from collections.abc import Iterable

from dealboard.pipeline.metrics import accumulate_stage, finalize_stage
from dealboard.pipeline.schemas import (
    ColumnSummary,
    Deal,
    PipelineColumn,
    StageMetrics,
)
from dealboard.pipeline.stages import STAGE_DEFINITIONS


def group_deals_by_stage(deals: Iterable[Deal]) -> list[PipelineColumn]:
    """Project deals onto the board.

    Returns one column per registered stage, in registry order, even when
    the column is empty. Deals keep their input order inside a column. A
    deal whose stage is not registered lands in no column.
    """
    buckets: dict[str, list[Deal]] = {d.id.value: [] for d in STAGE_DEFINITIONS}
    for deal in deals:
        bucket = buckets.get(deal.stage)
        if bucket is not None:
            bucket.append(deal)

    columns: list[PipelineColumn] = []
    for definition in STAGE_DEFINITIONS:
        stage_deals = buckets[definition.id.value]
        metrics = StageMetrics()
        for deal in stage_deals:
            accumulate_stage(metrics, deal)
        finalize_stage(metrics)

        columns.append(
            PipelineColumn(
                stage=definition,
                deals=stage_deals,
                summary=ColumnSummary(
                    count=metrics.count,
                    total_value=metrics.value,
                    average_probability=metrics.average_probability,
                ),
            )
        )
    return columns
