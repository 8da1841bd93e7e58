"""Seasonal demand and time-of-day signals."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime

# Demand multipliers by season; categories not listed have factor 1.0.
SEASONAL_PATTERNS: dict[str, dict[str, float]] = {
    "spring": {"gardening": 1.8, "cleaning": 1.4, "maintenance": 1.2},
    "summer": {"landscaping": 2.1, "pools": 1.9, "ac_repair": 1.7},
    "fall": {"heating": 1.6, "weatherproofing": 1.3, "gutters": 1.5},
    "winter": {"snow_removal": 2.0, "heating": 1.8, "indoor_projects": 1.4},
}

BUSINESS_HOURS_START = 8
BUSINESS_HOURS_END = 18
OFF_HOURS_FACTOR = 0.7


def season_for(moment: datetime) -> str:
    """Northern-hemisphere season of a moment."""
    month = moment.month
    if 3 <= month <= 5:
        return "spring"
    if 6 <= month <= 8:
        return "summer"
    if 9 <= month <= 11:
        return "fall"
    return "winter"


def normalize_category(category: str) -> str:
    """Lower-case a category and turn spaces/hyphens into underscores."""
    return category.strip().lower().replace(" ", "_").replace("-", "_")


class MarketTrends:
    """Read-only market signals used by scoring and insights."""

    def __init__(
        self, seasonal_patterns: Mapping[str, Mapping[str, float]] | None = None
    ) -> None:
        patterns = seasonal_patterns if seasonal_patterns is not None else SEASONAL_PATTERNS
        self._patterns = {
            season: {normalize_category(k): v for k, v in table.items()}
            for season, table in patterns.items()
        }

    def seasonal_factor(self, category: str, moment: datetime) -> float:
        table = self._patterns.get(season_for(moment), {})
        return table.get(normalize_category(category), 1.0)

    def business_hours_factor(self, moment: datetime) -> float:
        if BUSINESS_HOURS_START <= moment.hour <= BUSINESS_HOURS_END:
            return 1.0
        return OFF_HOURS_FACTOR
