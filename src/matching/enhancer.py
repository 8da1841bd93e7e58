"""Attach insights and alternatives to the results that survived filtering."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace
from datetime import datetime

from src.matching.config import MatchingConfig, get_matching_config
from src.matching.market import MarketTrends
from src.matching.models import (
    AIInsight,
    InsightSource,
    InsightType,
    RecommendationResult,
)
from src.profiles.models import UserProfile

MAX_ALTERNATIVES = 3

PREDICTION_MESSAGE = (
    "High probability of satisfaction based on your preferences and similar users"
)
SEASONAL_WARNING_MESSAGE = (
    "High demand period - consider booking soon or expect premium pricing"
)
OPPORTUNITY_MESSAGE = "This provider has higher ratings than your typical choices"


class InsightEnhancer:
    def __init__(
        self,
        market: MarketTrends | None = None,
        config: MatchingConfig | None = None,
    ) -> None:
        self.market = market or MarketTrends()
        self.config = config or get_matching_config()

    def insights_for(
        self, result: RecommendationResult, profile: UserProfile, now: datetime
    ) -> list[AIInsight]:
        cfg = self.config
        provider = result.provider
        insights: list[AIInsight] = []

        if result.confidence > cfg.prediction_min_confidence:
            insights.append(
                AIInsight(
                    type=InsightType.PREDICTION,
                    message=PREDICTION_MESSAGE,
                    confidence=result.confidence,
                    source=InsightSource.MODEL,
                )
            )

        if self.market.seasonal_factor(provider.category, now) > cfg.seasonal_warning_factor:
            insights.append(
                AIInsight(
                    type=InsightType.WARNING,
                    message=SEASONAL_WARNING_MESSAGE,
                    confidence=0.85,
                    source=InsightSource.MARKET_TREND,
                )
            )

        average_rating = profile.average_booking_rating()
        if (
            profile.booking_count > cfg.opportunity_min_bookings
            and average_rating is not None
            and provider.rating > average_rating + cfg.opportunity_rating_margin
        ):
            insights.append(
                AIInsight(
                    type=InsightType.OPPORTUNITY,
                    message=OPPORTUNITY_MESSAGE,
                    confidence=0.9,
                    source=InsightSource.BEHAVIORAL_ANALYSIS,
                )
            )

        return insights

    def enhance(
        self,
        results: Sequence[RecommendationResult],
        profile: UserProfile,
        now: datetime,
    ) -> list[RecommendationResult]:
        """Return new results carrying insights and same-category alternatives."""
        enhanced: list[RecommendationResult] = []
        for result in results:
            category = result.provider.category
            alternatives = [
                other.provider.id
                for other in results
                if other.provider.id != result.provider.id
                and other.provider.category == category
            ][:MAX_ALTERNATIVES]

            enhanced.append(
                replace(
                    result,
                    insights=(
                        *result.insights,
                        *self.insights_for(result, profile, now),
                    ),
                    alternatives=tuple(alternatives),
                )
            )
        return enhanced
