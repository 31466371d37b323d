"""In-memory deal filtering for the board and list views.

Each active filter narrows the list; inactive ones (empty string or ALL)
are skipped. Input order is preserved.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

from dealboard.pipeline.schemas import Deal, DealFilters, ProbabilityRange, ValueRange

# Half-open [low, high) bounds; None means unbounded.
VALUE_RANGE_BOUNDS: dict[ValueRange, tuple[float | None, float | None]] = {
    ValueRange.UNDER_10K: (None, 10_000),
    ValueRange.FROM_10K_TO_50K: (10_000, 50_000),
    ValueRange.FROM_50K_TO_100K: (50_000, 100_000),
    ValueRange.OVER_100K: (100_000, None),
}

PROBABILITY_RANGE_BOUNDS: dict[ProbabilityRange, tuple[float | None, float | None]] = {
    ProbabilityRange.LOW: (None, 40),
    ProbabilityRange.MEDIUM: (40, 80),
    ProbabilityRange.HIGH: (80, None),
}


def _in_bounds(value: float, bounds: tuple[float | None, float | None]) -> bool:
    low, high = bounds
    if low is not None and value < low:
        return False
    if high is not None and value >= high:
        return False
    return True


def matches_search(deal: Deal, search: str) -> bool:
    """Case-insensitive substring match on deal name and lead name/company."""
    needle = search.lower()
    haystacks = [deal.deal_name]
    if deal.lead is not None:
        haystacks.extend([deal.lead.first_name, deal.lead.last_name, deal.lead.company])
    return any(h and needle in h.lower() for h in haystacks)


def _predicates(filters: DealFilters) -> list[Callable[[Deal], bool]]:
    preds: list[Callable[[Deal], bool]] = []
    if filters.search:
        preds.append(lambda d: matches_search(d, filters.search))
    if filters.stage:
        preds.append(lambda d: d.stage == filters.stage)
    if filters.service_type:
        preds.append(lambda d: d.service_type == filters.service_type)
    if filters.deal_owner:
        preds.append(lambda d: d.deal_owner == filters.deal_owner)
    if filters.deal_source:
        preds.append(lambda d: d.deal_source == filters.deal_source)
    if filters.value_range != ValueRange.ALL:
        bounds = VALUE_RANGE_BOUNDS[filters.value_range]
        preds.append(lambda d: _in_bounds(d.deal_value, bounds))
    if filters.probability_range != ProbabilityRange.ALL:
        prob_bounds = PROBABILITY_RANGE_BOUNDS[filters.probability_range]
        preds.append(lambda d: _in_bounds(d.probability, prob_bounds))
    return preds


def apply_filters(deals: Iterable[Deal], filters: DealFilters | None = None) -> list[Deal]:
    """Return the deals that pass every active filter."""
    if filters is None or filters.is_empty():
        return list(deals)
    preds = _predicates(filters)
    return [deal for deal in deals if all(p(deal) for p in preds)]
