"""Scoring strategies.

Each strategy maps (provider, profile, query, context) to a relevance score
in [0, 1]. Strategies never raise: the shared `score` wrapper turns any
failure or non-finite value into the neutral score and logs a warning.
"""

from __future__ import annotations

import logging
import math
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol

from src.catalog.models import RecommendationContext, ServiceProvider
from src.matching.market import MarketTrends
from src.profiles.models import Preferences, SearchArea, UserProfile
from src.utils.geo import distance_km

logger = logging.getLogger(__name__)

NEUTRAL_SCORE = 0.5

URGENCY_FEATURE: dict[str, float] = {"high": 1.0, "medium": 0.5, "low": 0.0}


class RandomSource(Protocol):
    def uniform(self, a: float, b: float) -> float: ...


@dataclass(frozen=True)
class ScoringContext:
    """Per-query inputs shared by every strategy call.

    `preferences` already has the request's hints applied on top of the
    profile, so strategies never merge the two themselves.
    """

    request: RecommendationContext
    preferences: Preferences
    peers: tuple[UserProfile, ...] = ()
    now: datetime = field(default_factory=lambda: datetime.now(UTC))


def effective_preferences(
    profile: UserProfile, context: RecommendationContext | None
) -> Preferences:
    """Profile preferences with the request's location, budget and urgency applied."""
    prefs = profile.preferences
    if context is None:
        return prefs.model_copy(deep=True)

    update: dict = {}
    if context.budget is not None:
        # Taken as given; a reversed budget simply scores a poor price fit.
        update["price_range"] = context.budget.model_copy()
    if context.location is not None:
        update["location"] = SearchArea(
            lat=context.location.lat,
            lng=context.location.lng,
            radius=prefs.location.radius,
        )
    if context.urgency is not None:
        update["schedule"] = prefs.schedule.model_copy(
            update={"urgency": context.urgency}
        )
    return prefs.model_copy(deep=True, update=update)


class ScoringStrategy(ABC):
    """Base class for the four ensemble strategies."""

    name: str = "strategy"

    def __init__(self, neutral_score: float = NEUTRAL_SCORE) -> None:
        self.neutral_score = neutral_score

    @abstractmethod
    def compute(
        self,
        provider: ServiceProvider,
        profile: UserProfile,
        query: str,
        context: ScoringContext,
    ) -> float:
        """Raw score; may be out of range, the caller clamps it."""

    async def score(
        self,
        provider: ServiceProvider,
        profile: UserProfile,
        query: str,
        context: ScoringContext,
    ) -> float:
        try:
            value = float(self.compute(provider, profile, query, context))
        except Exception as e:
            logger.warning(
                "%s strategy failed for provider %s: %s", self.name, provider.id, e
            )
            return self.neutral_score

        if not math.isfinite(value):
            logger.warning(
                "%s strategy produced %s for provider %s",
                self.name,
                value,
                provider.id,
            )
            return self.neutral_score
        return min(1.0, max(0.0, value))


class CollaborativeStrategy(ScoringStrategy):
    """How similar users rated this provider."""

    name = "collaborative"

    def compute(
        self,
        provider: ServiceProvider,
        profile: UserProfile,
        query: str,
        context: ScoringContext,
    ) -> float:
        ratings = [
            peer.preferences.ratings[provider.id]
            for peer in context.peers
            if provider.id in peer.preferences.ratings
        ]
        if not ratings:
            return self.neutral_score
        return min(1.0, (sum(ratings) / len(ratings)) / 5.0)


class ContentStrategy(ScoringStrategy):
    """Attribute match between the provider and the user's wants."""

    name = "content"

    CATEGORY_WEIGHT = 0.3
    PRICE_WEIGHT = 0.25
    RATING_WEIGHT = 0.2
    LOCATION_WEIGHT = 0.25

    def compute(
        self,
        provider: ServiceProvider,
        profile: UserProfile,
        query: str,
        context: ScoringContext,
    ) -> float:
        prefs = context.preferences
        score = 0.0

        if self._category_match(provider, prefs, query):
            score += self.CATEGORY_WEIGHT

        score += self.PRICE_WEIGHT * self._price_fit(provider, prefs)
        score += self.RATING_WEIGHT * (provider.rating / 5.0)
        score += self.LOCATION_WEIGHT * self._proximity(provider, prefs)
        return score

    @staticmethod
    def _category_match(provider: ServiceProvider, prefs: Preferences, query: str) -> bool:
        wanted = {s.lower() for s in prefs.service_types}
        query_lower = query.lower()
        for sub in provider.subcategories:
            sub_lower = sub.lower()
            if sub_lower in wanted or (sub_lower and sub_lower in query_lower):
                return True
        return False

    @staticmethod
    def _price_fit(provider: ServiceProvider, prefs: Preferences) -> float:
        user_range = prefs.price_range
        if user_range.span <= 0:
            return 0.0
        overlap = user_range.overlap(provider.price_range)
        if overlap <= 0:
            return 0.0
        return overlap / user_range.span

    @staticmethod
    def _proximity(provider: ServiceProvider, prefs: Preferences) -> float:
        area = prefs.location
        if area.radius <= 0:
            return 0.0
        distance = distance_km(
            area.lat, area.lng, provider.location.lat, provider.location.lng
        )
        return max(0.0, 1.0 - distance / area.radius)


class LearnedRelevanceStrategy(ScoringStrategy):
    """Fixed-weight two-layer network over provider and user features.

    There is no training: the weights are constants, so this acts as a
    smooth squashing of eight normalized features.
    """

    name = "learned"

    HIDDEN_WEIGHT = 0.8
    HIDDEN_BIAS = 0.1

    def __init__(
        self,
        market: MarketTrends | None = None,
        neutral_score: float = NEUTRAL_SCORE,
    ) -> None:
        super().__init__(neutral_score=neutral_score)
        self.market = market or MarketTrends()

    def features(
        self, provider: ServiceProvider, profile: UserProfile, context: ScoringContext
    ) -> list[float]:
        urgency = context.preferences.schedule.urgency
        return [
            provider.rating / 5.0,
            provider.completion_rate,
            1.0 / (provider.response_time_minutes + 1.0),
            min(1.0, provider.review_count / 1000.0),
            min(1.0, profile.booking_count / 100.0),
            URGENCY_FEATURE.get(urgency, 0.5),
            self.market.seasonal_factor(provider.category, context.now),
            self.market.business_hours_factor(context.now),
        ]

    def compute(
        self,
        provider: ServiceProvider,
        profile: UserProfile,
        query: str,
        context: ScoringContext,
    ) -> float:
        features = self.features(provider, profile, context)
        hidden = [math.tanh(self.HIDDEN_WEIGHT * f + self.HIDDEN_BIAS) for f in features]
        output = math.tanh(sum(hidden) / len(hidden))
        return (output + 1.0) / 2.0


class ExplorationStrategy(ScoringStrategy):
    """Exploit past satisfaction, explore providers the user never booked."""

    name = "exploration"

    def __init__(
        self,
        rng: RandomSource | None = None,
        low: float = 0.6,
        high: float = 0.8,
        neutral_score: float = NEUTRAL_SCORE,
    ) -> None:
        super().__init__(neutral_score=neutral_score)
        if low > high:
            raise ValueError(f"low must not exceed high (got {low} > {high})")
        self.rng = rng if rng is not None else random.Random()
        self.low = low
        self.high = high

    def compute(
        self,
        provider: ServiceProvider,
        profile: UserProfile,
        query: str,
        context: ScoringContext,
    ) -> float:
        bookings = profile.bookings_for(provider.id)
        if not bookings:
            return self.rng.uniform(self.low, self.high)

        ratings = [b.rating for b in bookings if b.rating is not None]
        if not ratings:
            return self.neutral_score
        return (sum(ratings) / len(ratings)) / 5.0


def default_strategies(
    market: MarketTrends | None = None,
    rng: RandomSource | None = None,
    neutral_score: float = NEUTRAL_SCORE,
    exploration_low: float = 0.6,
    exploration_high: float = 0.8,
) -> list[ScoringStrategy]:
    """The standard four strategies, in ensemble order."""
    return [
        CollaborativeStrategy(neutral_score=neutral_score),
        ContentStrategy(neutral_score=neutral_score),
        LearnedRelevanceStrategy(market=market, neutral_score=neutral_score),
        ExplorationStrategy(
            rng=rng,
            low=exploration_low,
            high=exploration_high,
            neutral_score=neutral_score,
        ),
    ]
