"""Pipeline metrics calculator.

Derives aggregate figures (totals, weighted value, averages, conversion rate,
per-stage breakdown) from a deal collection in a single pass. The function
is pure and never raises: inputs are trusted as-is, so negative values or
out-of-range probabilities flow straight into the aggregates. Every division
is guarded and yields 0 when its denominator is 0.
"""

from __future__ import annotations

from collections.abc import Iterable

from dealboard.pipeline.schemas import Deal, PipelineMetrics, StageMetrics, as_utc
from dealboard.pipeline.stages import STAGE_ORDER, WON_STAGE

_SECONDS_PER_DAY = 86400.0


def _safe_div(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator else 0.0


def empty_stage_metrics() -> dict[str, StageMetrics]:
    """One zeroed StageMetrics per registered stage, in registry order."""
    return {stage.value: StageMetrics() for stage in STAGE_ORDER}


def accumulate_stage(metrics: StageMetrics, deal: Deal) -> None:
    """Fold one deal into a stage bucket (count, value, probability sum)."""
    metrics.count += 1
    metrics.value += deal.deal_value
    metrics.probability_sum += deal.probability


def finalize_stage(metrics: StageMetrics) -> StageMetrics:
    """Fill in the average probability once all deals are accumulated."""
    metrics.average_probability = _safe_div(metrics.probability_sum, metrics.count)
    return metrics


def compute_pipeline_metrics(deals: Iterable[Deal]) -> PipelineMetrics:
    """Compute pipeline metrics for a deal collection.

    Args:
        deals: Deals to aggregate. Order does not matter.

    Returns:
        PipelineMetrics with a stage_metrics entry for every registered
        stage, plus one per unregistered stage id found in the input.
    """
    total_deals = 0
    total_value = 0.0
    weighted_value = 0.0
    won_count = 0
    cycle_days_total = 0.0
    closed_count = 0
    stage_metrics = empty_stage_metrics()

    for deal in deals:
        total_deals += 1
        total_value += deal.deal_value
        weighted_value += deal.deal_value * deal.probability / 100
        if deal.stage == WON_STAGE.value:
            won_count += 1
        if deal.actual_close_date is not None:
            elapsed = as_utc(deal.actual_close_date) - as_utc(deal.created_at)
            cycle_days_total += elapsed.total_seconds() / _SECONDS_PER_DAY
            closed_count += 1

        bucket = stage_metrics.get(deal.stage)
        if bucket is None:
            bucket = stage_metrics[deal.stage] = StageMetrics()
        accumulate_stage(bucket, deal)

    for bucket in stage_metrics.values():
        finalize_stage(bucket)

    return PipelineMetrics(
        total_deals=total_deals,
        total_value=total_value,
        weighted_value=weighted_value,
        average_deal_size=_safe_div(total_value, total_deals),
        conversion_rate=_safe_div(won_count, total_deals) * 100,
        average_sales_cycle_days=_safe_div(cycle_days_total, closed_count),
        stage_metrics=stage_metrics,
    )
