"""Pytest configuration and shared fixtures."""

from datetime import UTC, datetime

import pytest

from src.catalog.models import GeoPoint, PriceRange, ServiceProvider
from src.profiles.config import ProfileConfig
from src.profiles.models import (
    BookingRecord,
    Preferences,
    SearchArea,
    UserProfile,
)


class FixedRandom:
    """Stand-in for random.Random whose uniform() is a fixed fraction of the band."""

    def __init__(self, fraction: float = 0.5) -> None:
        self.fraction = fraction
        self.calls: list[tuple[float, float]] = []

    def uniform(self, a: float, b: float) -> float:
        self.calls.append((a, b))
        return a + (b - a) * self.fraction


@pytest.fixture(autouse=True)
def _reset_singletons():
    """Keep config singletons and logging state from leaking between tests."""
    from src.config.settings import reset_settings
    from src.matching.config import reset_matching_config
    from src.profiles.config import reset_profile_config
    from src.utils.logging import reset_logging

    yield
    reset_settings()
    reset_matching_config()
    reset_profile_config()
    reset_logging()


@pytest.fixture
def fixed_now() -> datetime:
    """A summer weekday morning, inside business hours."""
    return datetime(2026, 7, 15, 10, 0, tzinfo=UTC)


@pytest.fixture
def fixed_rng() -> FixedRandom:
    return FixedRandom(0.5)


@pytest.fixture
def matching_config():
    from src.matching.config import MatchingConfig

    return MatchingConfig(_env_file=None)  # type: ignore[call-arg]


@pytest.fixture
def profile_config() -> ProfileConfig:
    return ProfileConfig(_env_file=None)  # type: ignore[call-arg]


@pytest.fixture
def make_provider():
    """Factory for providers with sensible defaults."""

    def _make(provider_id: str = "p1", **overrides) -> ServiceProvider:
        data = {
            "id": provider_id,
            "name": f"Provider {provider_id}",
            "category": "cleaning",
            "subcategories": ["house cleaning"],
            "rating": 4.5,
            "review_count": 120,
            "price_range": PriceRange(min=50, max=100),
            "location": GeoPoint(lat=40.7128, lng=-74.0060),
            "response_time_minutes": 30,
            "completion_rate": 0.95,
            "working_style": "professional",
        }
        data.update(overrides)
        return ServiceProvider(**data)

    return _make


@pytest.fixture
def make_profile():
    """Factory for user profiles centered on lower Manhattan."""

    def _make(user_id: str = "u1", bookings=(), **preference_overrides) -> UserProfile:
        prefs = {
            "service_types": ["house cleaning"],
            "price_range": PriceRange(min=40, max=120),
            "location": SearchArea(lat=40.7128, lng=-74.0060, radius=25),
        }
        prefs.update(preference_overrides)
        return UserProfile(
            user_id=user_id,
            preferences=Preferences(**prefs),
            behavior={"bookings": list(bookings)},
        )

    return _make


@pytest.fixture
def make_booking():
    def _make(
        provider_id: str = "p1",
        service_type: str = "cleaning",
        rating: float | None = 5.0,
        cost: float = 100.0,
        booked_at: datetime | None = None,
    ) -> BookingRecord:
        return BookingRecord(
            provider_id=provider_id,
            service_type=service_type,
            rating=rating,
            cost=cost,
            booked_at=booked_at or datetime(2026, 1, 10, tzinfo=UTC),
        )

    return _make
