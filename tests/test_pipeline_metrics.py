"""Unit tests for compute_pipeline_metrics.

Tests cover:
- Totals: count, value, weighted value, average deal size, conversion rate
- Empty collection: all zeros, every registered stage present
- Per-stage breakdown: count, value, probability sum, average probability
- Untrusted input: negative values and out-of-range probabilities pass through
- Average sales cycle from created_at -> actual_close_date
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from dealboard.pipeline.metrics import compute_pipeline_metrics
from dealboard.pipeline.stages import STAGE_ORDER


class TestTotals:
    """Collection-level figures."""

    def test_two_deal_scenario(self, make_deal) -> None:
        deals = [
            make_deal(deal_value=10000, probability=50, stage="new_opportunity"),
            make_deal(deal_value=20000, probability=100, stage="contract_signed"),
        ]
        metrics = compute_pipeline_metrics(deals)

        assert metrics.total_deals == 2
        assert metrics.total_value == 30000
        assert metrics.weighted_value == 25000
        assert metrics.average_deal_size == 15000
        assert metrics.conversion_rate == 50

    def test_sums_match_inputs(self, make_deal) -> None:
        values = [(1250.5, 10), (99.5, 33), (40000, 75), (0, 100)]
        deals = [make_deal(deal_value=v, probability=p) for v, p in values]
        metrics = compute_pipeline_metrics(deals)

        assert metrics.total_value == pytest.approx(sum(v for v, _ in values))
        assert metrics.weighted_value == pytest.approx(sum(v * p / 100 for v, p in values))
        assert metrics.average_deal_size == pytest.approx(metrics.total_value / 4)

    def test_order_independent(self, make_deal) -> None:
        deals = [make_deal(deal_value=v, probability=p) for v, p in [(0.1, 7), (0.2, 13), (0.3, 91)]]
        forward = compute_pipeline_metrics(deals)
        backward = compute_pipeline_metrics(list(reversed(deals)))
        assert forward.total_value == pytest.approx(backward.total_value)
        assert forward.weighted_value == pytest.approx(backward.weighted_value)

    def test_conversion_rate_counts_only_contract_signed(self, make_deal) -> None:
        deals = [
            make_deal(stage="contract_signed"),
            make_deal(stage="project_kickoff"),
            make_deal(stage="lost"),
            make_deal(stage="negotiation"),
        ]
        assert compute_pipeline_metrics(deals).conversion_rate == 25

    def test_accepts_generator(self, make_deal) -> None:
        metrics = compute_pipeline_metrics(make_deal() for _ in range(3))
        assert metrics.total_deals == 3


class TestEmptyCollection:
    """Division-by-zero guards."""

    def test_all_zero(self) -> None:
        metrics = compute_pipeline_metrics([])
        assert metrics.total_deals == 0
        assert metrics.total_value == 0
        assert metrics.weighted_value == 0
        assert metrics.average_deal_size == 0
        assert metrics.conversion_rate == 0
        assert metrics.average_sales_cycle_days == 0

    def test_every_stage_present_and_zeroed(self) -> None:
        metrics = compute_pipeline_metrics([])
        assert list(metrics.stage_metrics) == [s.value for s in STAGE_ORDER]
        for stage_metrics in metrics.stage_metrics.values():
            assert stage_metrics.count == 0
            assert stage_metrics.average_probability == 0


class TestStageBreakdown:
    """Per-stage aggregates."""

    def test_stage_count_value_probability(self, make_deal) -> None:
        deals = [
            make_deal(stage="proposal_sent", deal_value=1000, probability=40),
            make_deal(stage="proposal_sent", deal_value=3000, probability=60),
            make_deal(stage="negotiation", deal_value=5000, probability=80),
        ]
        metrics = compute_pipeline_metrics(deals)

        sent = metrics.stage_metrics["proposal_sent"]
        assert sent.count == 2
        assert sent.value == 4000
        assert sent.probability_sum == 100
        assert sent.average_probability == 50

        negotiation = metrics.stage_metrics["negotiation"]
        assert negotiation.count == 1
        assert negotiation.average_probability == 80

        assert metrics.stage_metrics["lost"].count == 0

    def test_stage_counts_sum_to_total(self, make_deal) -> None:
        stages = ["new_opportunity", "lost", "lost", "on_hold", "contract_signed"]
        metrics = compute_pipeline_metrics([make_deal(stage=s) for s in stages])
        assert sum(m.count for m in metrics.stage_metrics.values()) == metrics.total_deals

    def test_unregistered_stage_gets_own_entry(self, make_deal) -> None:
        metrics = compute_pipeline_metrics([make_deal(stage="archived", deal_value=700)])
        assert metrics.total_value == 700
        assert metrics.stage_metrics["archived"].count == 1
        assert len(metrics.stage_metrics) == len(STAGE_ORDER) + 1


class TestUntrustedInput:
    """Invalid values are not clamped or rejected."""

    def test_negative_value_propagates(self, make_deal) -> None:
        deals = [make_deal(deal_value=-500, probability=50), make_deal(deal_value=1500, probability=50)]
        metrics = compute_pipeline_metrics(deals)
        assert metrics.total_value == 1000
        assert metrics.weighted_value == 500

    def test_probability_over_100_propagates(self, make_deal) -> None:
        metrics = compute_pipeline_metrics([make_deal(deal_value=100, probability=150)])
        assert metrics.weighted_value == 150


class TestSalesCycle:
    """average_sales_cycle_days over closed deals."""

    def test_mean_over_closed_deals_only(self, make_deal) -> None:
        created = datetime(2025, 1, 1, tzinfo=timezone.utc)
        deals = [
            make_deal(created_at=created, actual_close_date=created + timedelta(days=10)),
            make_deal(created_at=created, actual_close_date=created + timedelta(days=30)),
            make_deal(created_at=created),
        ]
        assert compute_pipeline_metrics(deals).average_sales_cycle_days == pytest.approx(20)

    def test_naive_close_date_treated_as_utc(self, make_deal) -> None:
        created = datetime(2025, 1, 1, tzinfo=timezone.utc)
        deal = make_deal(created_at=created, actual_close_date=datetime(2025, 1, 3))
        assert compute_pipeline_metrics([deal]).average_sales_cycle_days == pytest.approx(2)
