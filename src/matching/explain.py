"""Human-readable reasons, matching factors and concerns for a result."""

from __future__ import annotations

from src.catalog.models import ServiceProvider
from src.catalog.source import tokenize
from src.matching.config import MatchingConfig, get_matching_config
from src.matching.models import MatchingFactor, ReasonType, RecommendationReason
from src.profiles.models import Preferences
from src.utils.geo import distance_km

SLOW_RESPONSE_MINUTES = 120
MIN_REVIEWS = 10
MIN_COMPLETION_RATE = 0.9

# Communication style compatibility, 0-100.
_STYLE_COMPATIBILITY: dict[frozenset[str], float] = {
    frozenset({"formal", "professional"}): 60.0,
    frozenset({"casual", "professional"}): 60.0,
    frozenset({"formal", "casual"}): 20.0,
}


def build_reasons(
    provider: ServiceProvider,
    preferences: Preferences,
    config: MatchingConfig | None = None,
) -> list[RecommendationReason]:
    cfg = config or get_matching_config()
    reasons: list[RecommendationReason] = []

    if provider.rating >= cfg.reason_min_rating:
        reasons.append(
            RecommendationReason(
                type=ReasonType.RATING_QUALITY,
                description=(
                    f"Excellent {provider.rating:g} star rating from "
                    f"{provider.review_count} reviews"
                ),
                weight=0.8,
                confidence=0.9,
            )
        )

    if provider.response_time_minutes <= cfg.reason_max_response_minutes:
        reasons.append(
            RecommendationReason(
                type=ReasonType.AVAILABILITY_MATCH,
                description=(
                    f"Quick response time of {provider.response_time_minutes:g} minutes"
                ),
                weight=0.6,
                confidence=0.85,
            )
        )

    if provider.price_range.intersects(preferences.price_range):
        reasons.append(
            RecommendationReason(
                type=ReasonType.PRICE_FIT,
                description="Pricing fits within your budget range",
                weight=0.7,
                confidence=0.95,
            )
        )

    return reasons


def category_match_percentage(
    provider: ServiceProvider, preferences: Preferences, query: str
) -> float:
    """Share of the provider's categories the user is looking for.

    Users without declared service types are matched on the query text.
    """
    provider_terms = {s.lower() for s in provider.subcategories}
    provider_terms.add(provider.category.lower())

    wanted = {s.lower() for s in preferences.service_types}
    if wanted:
        matched = provider_terms & wanted
    else:
        query_tokens = tokenize(query)
        matched = {term for term in provider_terms if tokenize(term) & query_tokens}

    return 100.0 * len(matched) / len(provider_terms)


def price_match_percentage(provider: ServiceProvider, preferences: Preferences) -> float:
    """Share of the provider's price band inside the user's range."""
    provider_range = provider.price_range
    if provider_range.span <= 0:
        return 100.0 if provider_range.intersects(preferences.price_range) else 0.0
    overlap = max(0.0, provider_range.overlap(preferences.price_range))
    return min(100.0, 100.0 * overlap / provider_range.span)


def style_match_percentage(user_style: str, provider_style: str) -> float:
    if user_style == provider_style:
        return 100.0
    return _STYLE_COMPATIBILITY.get(frozenset({user_style, provider_style}), 0.0)


def build_matching_factors(
    provider: ServiceProvider, preferences: Preferences, query: str = ""
) -> list[MatchingFactor]:
    return [
        MatchingFactor(
            factor="Service Category",
            user_value=list(preferences.service_types) or query,
            provider_value=[provider.category, *provider.subcategories],
            match_percentage=category_match_percentage(provider, preferences, query),
            importance="high",
        ),
        MatchingFactor(
            factor="Price Range",
            user_value=preferences.price_range.model_dump(),
            provider_value=provider.price_range.model_dump(),
            match_percentage=price_match_percentage(provider, preferences),
            importance="high",
        ),
        MatchingFactor(
            factor="Communication Style",
            user_value=preferences.communication_style,
            provider_value=provider.working_style,
            match_percentage=style_match_percentage(
                preferences.communication_style, provider.working_style
            ),
            importance="medium",
        ),
    ]


def find_concerns(provider: ServiceProvider, preferences: Preferences) -> list[str]:
    """Things the user may want to double-check before booking."""
    concerns: list[str] = []

    budget = preferences.price_range
    if provider.price_range.min > budget.max:
        concerns.append(
            f"Starting price ${provider.price_range.min:,.0f} is above your "
            f"budget of ${budget.max:,.0f}"
        )

    area = preferences.location
    distance = distance_km(area.lat, area.lng, provider.location.lat, provider.location.lng)
    if distance > area.radius:
        concerns.append(
            f"Located {distance:.1f} km away, outside your {area.radius:g} km search area"
        )

    if provider.response_time_minutes > SLOW_RESPONSE_MINUTES:
        concerns.append("Usually takes more than 2 hours to respond")

    if provider.review_count < MIN_REVIEWS:
        concerns.append(f"Only {provider.review_count} reviews so far")

    if provider.completion_rate < MIN_COMPLETION_RATE:
        concerns.append(f"Completes {provider.completion_rate:.0%} of booked jobs")

    return concerns
