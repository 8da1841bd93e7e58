"""Re-ranking that trades a little score order for variety."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Literal

from src.catalog.models import PriceRange
from src.matching.models import RecommendationResult

PriceTier = Literal["budget", "mid_range", "premium"]


def price_tier(
    price_range: PriceRange, budget_max: float = 75.0, mid_range_max: float = 150.0
) -> PriceTier:
    """Bucket a price band by its midpoint."""
    average = price_range.midpoint
    if average < budget_max:
        return "budget"
    if average < mid_range_max:
        return "mid_range"
    return "premium"


def apply_diversity(
    results: Sequence[RecommendationResult],
    limit: int,
    head_size: int = 3,
    window_end: int = 7,
    budget_max: float = 75.0,
    mid_range_max: float = 150.0,
) -> list[RecommendationResult]:
    """Select up to `limit` results from a score-ordered list.

    The first `head_size` results are kept as-is. Up to position
    `window_end`, later results are promoted only when they bring a category
    or price tier not yet shown. Every result not taken is then appended in
    its original order until `limit` is reached, so the filter reorders but
    never drops a result the limit leaves room for.
    """
    if limit <= 0:
        return []

    selected: list[RecommendationResult] = []
    taken: set[int] = set()
    seen_categories: set[str] = set()
    seen_tiers: set[str] = set()

    for index, result in enumerate(results):
        if len(selected) >= limit:
            break
        category = result.provider.category
        tier = price_tier(result.provider.price_range, budget_max, mid_range_max)
        adds_variety = category not in seen_categories or tier not in seen_tiers
        if len(selected) < head_size or (len(selected) < window_end and adds_variety):
            selected.append(result)
            taken.add(index)
            seen_categories.add(category)
            seen_tiers.add(tier)

    for index, result in enumerate(results):
        if len(selected) >= limit:
            break
        if index not in taken:
            selected.append(result)

    return selected
