"""Profile Updater: appends interaction telemetry to a user's profile.

All functions mutate the profile they are given and return it. Callers
(the profile stores) always pass a private copy, so nothing here touches
shared state.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from src.catalog.models import PriceRange, RecommendationContext
from src.profiles.config import ProfileConfig
from src.profiles.models import (
    BookingRecord,
    MessageInteraction,
    Preferences,
    SearchArea,
    SchedulePreferences,
    SessionSummary,
    UserProfile,
    ViewRecord,
)

if TYPE_CHECKING:
    from src.matching.models import RecommendationResult


def _cap(items: list, limit: int) -> list:
    """Keep only the newest `limit` entries."""
    if len(items) > limit:
        return items[-limit:]
    return items


def _touch(profile: UserProfile) -> None:
    profile.updated_at = datetime.now(UTC)


def build_default_profile(
    user_id: str,
    context: RecommendationContext | None,
    config: ProfileConfig,
) -> UserProfile:
    """Build a new profile seeded from whatever hints the context carries."""
    context = context or RecommendationContext()
    preferences = Preferences()

    preferences.price_range = PriceRange(
        min=config.default_price_min, max=config.default_price_max
    )
    budget = context.budget
    # A reversed budget is scored as given but never stored as a preference.
    if budget is not None and budget.min <= budget.max:
        preferences.price_range = budget.model_copy()

    if context.location is not None:
        preferences.location = SearchArea(
            lat=context.location.lat,
            lng=context.location.lng,
            radius=config.default_radius,
        )
    else:
        preferences.location = SearchArea(radius=config.default_radius)

    if context.urgency is not None:
        preferences.schedule = SchedulePreferences(urgency=context.urgency)

    return UserProfile(user_id=user_id, preferences=preferences)


def record_search(
    profile: UserProfile,
    query: str,
    context: RecommendationContext | None,
    results: Iterable[RecommendationResult],
    config: ProfileConfig,
) -> UserProfile:
    """Append the query and a session summary for one recommendation call."""
    context = context or RecommendationContext()
    behavior = profile.behavior

    behavior.search_history.append(query)
    behavior.search_history = _cap(
        behavior.search_history, config.search_history_limit
    )

    behavior.sessions.append(
        SessionSummary(
            search_queries=[query],
            filters_used=context.filters_used(),
            urgency=context.urgency,
            result_provider_ids=[result.provider.id for result in results],
        )
    )
    behavior.sessions = _cap(behavior.sessions, config.session_history_limit)

    _touch(profile)
    return profile


def append_booking(
    profile: UserProfile, booking: BookingRecord, config: ProfileConfig
) -> UserProfile:
    """Append a booking; a rated booking also updates the provider rating map."""
    behavior = profile.behavior
    behavior.bookings.append(booking)
    behavior.bookings = _cap(behavior.bookings, config.booking_history_limit)

    preferences = profile.preferences
    if booking.provider_id not in preferences.previous_providers:
        preferences.previous_providers.append(booking.provider_id)
    if booking.rating is not None:
        preferences.ratings[booking.provider_id] = booking.rating

    _touch(profile)
    return profile


def append_view(
    profile: UserProfile, view: ViewRecord, config: ProfileConfig
) -> UserProfile:
    behavior = profile.behavior
    behavior.views.append(view)
    behavior.views = _cap(behavior.views, config.view_history_limit)
    _touch(profile)
    return profile


def append_message(
    profile: UserProfile, message: MessageInteraction, config: ProfileConfig
) -> UserProfile:
    behavior = profile.behavior
    behavior.messages.append(message)
    behavior.messages = _cap(behavior.messages, config.message_history_limit)
    _touch(profile)
    return profile
