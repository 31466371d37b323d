"""Unit tests for apply_filters.

Tests cover:
- Empty filters keep everything in order
- Search over deal name and lead name/company (case-insensitive)
- Exact-match filters: stage, service type, owner, source
- Value and probability range boundaries
- Combined filters
"""

from __future__ import annotations

import pytest

from dealboard.pipeline.filters import apply_filters, matches_search
from dealboard.pipeline.schemas import (
    DealFilters,
    LeadSummary,
    ProbabilityRange,
    ValueRange,
)


class TestNoFilters:
    def test_none_and_default_keep_all(self, make_deal) -> None:
        deals = [make_deal(deal_name=f"D{i}") for i in range(3)]
        assert apply_filters(deals, None) == deals
        assert apply_filters(deals, DealFilters()) == deals
        assert DealFilters().is_empty()

    @pytest.mark.parametrize(
        "overrides",
        [
            {"search": "a"},
            {"stage": "lost"},
            {"service_type": "AIGC Systems"},
            {"deal_owner": "u1"},
            {"deal_source": "referral"},
            {"value_range": ValueRange.UNDER_10K},
            {"probability_range": ProbabilityRange.HIGH},
        ],
    )
    def test_any_constraint_is_not_empty(self, overrides) -> None:
        assert not DealFilters(**overrides).is_empty()


class TestSearch:
    """Search matches deal name, lead first/last name and company."""

    def test_deal_name_case_insensitive(self, make_deal) -> None:
        deal = make_deal(deal_name="Acme Website Rebuild")
        assert matches_search(deal, "website")
        assert not matches_search(deal, "mobile")

    def test_lead_fields(self, make_deal) -> None:
        deal = make_deal(
            deal_name="Retainer",
            lead=LeadSummary(id="l1", first_name="Dana", last_name="Okafor", company="Globex"),
        )
        assert matches_search(deal, "dana")
        assert matches_search(deal, "OKAF")
        assert matches_search(deal, "globex")
        assert not matches_search(deal, "initech")

    def test_missing_lead_fields_ignored(self, make_deal) -> None:
        deal = make_deal(deal_name="Retainer", lead=LeadSummary(id="l1"))
        assert not matches_search(deal, "dana")

    def test_apply_search(self, make_deal) -> None:
        deals = [make_deal(deal_name="Alpha"), make_deal(deal_name="Beta")]
        result = apply_filters(deals, DealFilters(search="alp"))
        assert [d.deal_name for d in result] == ["Alpha"]


class TestExactFilters:
    def test_stage(self, make_deal) -> None:
        deals = [make_deal(stage="lost"), make_deal(stage="negotiation")]
        result = apply_filters(deals, DealFilters(stage="lost"))
        assert [d.stage for d in result] == ["lost"]

    def test_service_owner_source(self, make_deal) -> None:
        match = make_deal(service_type="AIGC Systems", deal_owner="u1", deal_source="referral")
        deals = [
            match,
            make_deal(service_type="AIGC Systems", deal_owner="u2", deal_source="referral"),
            make_deal(service_type="Growth Creator", deal_owner="u1", deal_source="referral"),
            make_deal(service_type="AIGC Systems", deal_owner="u1", deal_source="event"),
        ]
        filters = DealFilters(service_type="AIGC Systems", deal_owner="u1", deal_source="referral")
        assert apply_filters(deals, filters) == [match]


class TestRanges:
    """Half-open range boundaries."""

    @pytest.mark.parametrize(
        ("value_range", "inside", "outside"),
        [
            (ValueRange.UNDER_10K, [0, 9999.99], [10000]),
            (ValueRange.FROM_10K_TO_50K, [10000, 49999], [9999, 50000]),
            (ValueRange.FROM_50K_TO_100K, [50000, 99999], [49999, 100000]),
            (ValueRange.OVER_100K, [100000, 2_000_000], [99999]),
        ],
    )
    def test_value_ranges(self, make_deal, value_range, inside, outside) -> None:
        deals = [make_deal(deal_value=v) for v in inside + outside]
        result = apply_filters(deals, DealFilters(value_range=value_range))
        assert sorted(d.deal_value for d in result) == sorted(inside)

    @pytest.mark.parametrize(
        ("probability_range", "inside", "outside"),
        [
            (ProbabilityRange.LOW, [0, 39], [40]),
            (ProbabilityRange.MEDIUM, [40, 79], [39, 80]),
            (ProbabilityRange.HIGH, [80, 100], [79]),
        ],
    )
    def test_probability_ranges(self, make_deal, probability_range, inside, outside) -> None:
        deals = [make_deal(probability=p) for p in inside + outside]
        result = apply_filters(deals, DealFilters(probability_range=probability_range))
        assert sorted(d.probability for d in result) == sorted(inside)


class TestCombined:
    def test_filters_intersect_and_preserve_order(self, make_deal) -> None:
        deals = [
            make_deal(deal_name="Big A", deal_value=120000, probability=85, stage="negotiation"),
            make_deal(deal_name="Small", deal_value=5000, probability=85, stage="negotiation"),
            make_deal(deal_name="Big B", deal_value=150000, probability=90, stage="negotiation"),
            make_deal(deal_name="Big C", deal_value=150000, probability=20, stage="negotiation"),
        ]
        filters = DealFilters(
            stage="negotiation",
            value_range=ValueRange.OVER_100K,
            probability_range=ProbabilityRange.HIGH,
        )
        assert [d.deal_name for d in apply_filters(deals, filters)] == ["Big A", "Big B"]
