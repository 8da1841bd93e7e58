"""Derived analytics computed from a stored user profile."""

from __future__ import annotations

from collections import Counter
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from src.profiles.models import UserProfile

SEASONAL_SHARE_THRESHOLD = 0.6
MIN_BOOKINGS_FOR_SEASONALITY = 4
URGENCY_SHARE_THRESHOLD = 0.6
PLANNED_SHARE_THRESHOLD = 0.2


class CategoryCount(BaseModel):
    model_config = ConfigDict(frozen=True)

    category: str
    count: int


class SpendingPattern(BaseModel):
    model_config = ConfigDict(frozen=True)

    avg_spend: float = 0.0
    recent_avg: float = 0.0
    trend: Literal["increasing", "decreasing", "stable"] = "stable"


class BookingTrends(BaseModel):
    model_config = ConfigDict(frozen=True)

    frequency: Literal["high", "medium", "low"] = "low"
    seasonality: str = "year_round"
    urgency_pattern: Literal["urgent", "planned", "mixed", "unknown"] = "unknown"


class SatisfactionTrend(BaseModel):
    model_config = ConfigDict(frozen=True)

    avg_satisfaction: float = 0.0
    recent_satisfaction: float = 0.0
    trend: Literal["improving", "declining", "stable", "unknown"] = "unknown"


class UserInsights(BaseModel):
    """Summary analytics for one user."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    preferred_categories: list[CategoryCount] = Field(default_factory=list)
    spending: SpendingPattern = Field(default_factory=SpendingPattern)
    booking_trends: BookingTrends = Field(default_factory=BookingTrends)
    satisfaction: SatisfactionTrend = Field(default_factory=SatisfactionTrend)

    def to_dict(self) -> dict:
        """Serialize to a dictionary."""
        return self.model_dump(mode="json")


def _season_for_month(month: int) -> str:
    if 3 <= month <= 5:
        return "spring"
    if 6 <= month <= 8:
        return "summer"
    if 9 <= month <= 11:
        return "fall"
    return "winter"


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def preferred_categories(profile: UserProfile, top_n: int = 5) -> list[CategoryCount]:
    """Most booked service types, most frequent first."""
    counts = Counter(b.service_type for b in profile.behavior.bookings)
    # Counter.most_common keeps first-seen order for ties.
    return [
        CategoryCount(category=category, count=count)
        for category, count in counts.most_common(top_n)
    ]


def spending_pattern(profile: UserProfile, recent_window: int = 5) -> SpendingPattern:
    costs = [b.cost for b in profile.behavior.bookings]
    if not costs:
        return SpendingPattern()

    avg_spend = _mean(costs)
    recent_avg = _mean(costs[-recent_window:])

    if recent_avg > avg_spend * 1.1:
        trend = "increasing"
    elif recent_avg < avg_spend * 0.9:
        trend = "decreasing"
    else:
        trend = "stable"

    return SpendingPattern(avg_spend=avg_spend, recent_avg=recent_avg, trend=trend)


def _seasonality(profile: UserProfile) -> str:
    bookings = profile.behavior.bookings
    if len(bookings) < MIN_BOOKINGS_FOR_SEASONALITY:
        return "year_round"

    seasons = Counter(_season_for_month(b.booked_at.month) for b in bookings)
    season, count = seasons.most_common(1)[0]
    if count / len(bookings) > SEASONAL_SHARE_THRESHOLD:
        return season
    return "year_round"


def _urgency_pattern(profile: UserProfile) -> str:
    urgencies = [s.urgency for s in profile.behavior.sessions if s.urgency is not None]
    if not urgencies:
        return "unknown"

    urgent_share = sum(1 for u in urgencies if u == "high") / len(urgencies)
    if urgent_share > URGENCY_SHARE_THRESHOLD:
        return "urgent"
    if urgent_share < PLANNED_SHARE_THRESHOLD:
        return "planned"
    return "mixed"


def booking_trends(profile: UserProfile) -> BookingTrends:
    count = profile.booking_count
    if count > 10:
        frequency = "high"
    elif count > 3:
        frequency = "medium"
    else:
        frequency = "low"

    return BookingTrends(
        frequency=frequency,
        seasonality=_seasonality(profile),
        urgency_pattern=_urgency_pattern(profile),
    )


def satisfaction_trend(profile: UserProfile, recent_window: int = 3) -> SatisfactionTrend:
    ratings = [b.rating for b in profile.behavior.bookings if b.rating is not None]
    if not ratings:
        return SatisfactionTrend()

    avg_satisfaction = _mean(ratings)
    recent_satisfaction = _mean(ratings[-recent_window:])

    if recent_satisfaction > avg_satisfaction + 0.3:
        trend = "improving"
    elif recent_satisfaction < avg_satisfaction - 0.3:
        trend = "declining"
    else:
        trend = "stable"

    return SatisfactionTrend(
        avg_satisfaction=avg_satisfaction,
        recent_satisfaction=recent_satisfaction,
        trend=trend,
    )


def build_user_insights(profile: UserProfile) -> UserInsights:
    """Compute the insight summary for a profile. Pure and deterministic."""
    return UserInsights(
        user_id=profile.user_id,
        preferred_categories=preferred_categories(profile),
        spending=spending_pattern(profile),
        booking_trends=booking_trends(profile),
        satisfaction=satisfaction_trend(profile),
    )
