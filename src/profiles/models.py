"""Data models for user profiles."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from src.catalog.models import PriceRange

Urgency = Literal["low", "medium", "high"]
CommunicationStyle = Literal["formal", "casual", "professional"]


def _utcnow() -> datetime:
    return datetime.now(UTC)


class SearchArea(BaseModel):
    """Geographic search center plus radius (kilometres)."""

    lat: Annotated[float, Field(ge=-90.0, le=90.0)] = Field(default=0.0)
    lng: Annotated[float, Field(ge=-180.0, le=180.0)] = Field(default=0.0)
    radius: Annotated[float, Field(gt=0.0)] = Field(default=25.0)


class SchedulePreferences(BaseModel):
    """Preferred booking slots and urgency."""

    preferred_times: list[str] = Field(
        default_factory=lambda: ["morning", "afternoon"],
        description="Preferred times of day",
    )
    preferred_days: list[str] = Field(
        default_factory=lambda: ["weekday"], description="Preferred days of week"
    )
    urgency: Urgency = Field(default="medium", description="Typical urgency")


class Preferences(BaseModel):
    """Explicit user preferences."""

    service_types: list[str] = Field(
        default_factory=list, description="Service types the user is interested in"
    )
    price_range: PriceRange = Field(
        default_factory=lambda: PriceRange(min=0.0, max=1000.0),
        description="Acceptable price range",
    )
    location: SearchArea = Field(default_factory=SearchArea)
    schedule: SchedulePreferences = Field(default_factory=SchedulePreferences)
    communication_style: CommunicationStyle = Field(default="professional")
    previous_providers: list[str] = Field(
        default_factory=list, description="Provider ids the user has used before"
    )
    ratings: dict[str, float] = Field(
        default_factory=dict, description="Provider id -> rating given (1-5)"
    )

    @field_validator("ratings")
    @classmethod
    def validate_ratings(cls, v: dict[str, float]) -> dict[str, float]:
        for provider_id, rating in v.items():
            if not (1.0 <= rating <= 5.0):
                raise ValueError(
                    f"Rating for {provider_id} must be between 1 and 5 (got {rating})"
                )
        return v

    @model_validator(mode="after")
    def validate_price_range(self) -> Preferences:
        if self.price_range.min > self.price_range.max:
            raise ValueError(
                "price_range.min must not exceed price_range.max "
                f"(got {self.price_range.min} > {self.price_range.max})"
            )
        return self


class BookingRecord(BaseModel):
    """A completed or attempted booking."""

    provider_id: str
    service_type: str
    booked_at: datetime = Field(default_factory=_utcnow)
    rating: Annotated[float, Field(ge=1.0, le=5.0)] | None = None
    completed: bool = True
    cost: Annotated[float, Field(ge=0.0)] = 0.0


class ViewRecord(BaseModel):
    """A provider page view."""

    provider_id: str
    duration_seconds: Annotated[float, Field(ge=0.0)] = 0.0
    viewed_at: datetime = Field(default_factory=_utcnow)
    actions: list[str] = Field(default_factory=list)


class MessageInteraction(BaseModel):
    """Summary of a message exchange with a provider."""

    provider_id: str
    response_time_minutes: Annotated[float, Field(ge=0.0)] = 0.0
    satisfaction: Annotated[float, Field(ge=0.0, le=1.0)] = 0.5
    communication_style: str = ""


class SessionSummary(BaseModel):
    """Telemetry recorded for one recommendation query."""

    timestamp: datetime = Field(default_factory=_utcnow)
    search_queries: list[str] = Field(default_factory=list)
    filters_used: list[str] = Field(default_factory=list)
    urgency: Urgency | None = None
    result_provider_ids: list[str] = Field(default_factory=list)
    time_spent_seconds: float = 0.0
    pages_visited: list[str] = Field(default_factory=list)


class Behavior(BaseModel):
    """Append-only (capped) behavioral history."""

    search_history: list[str] = Field(default_factory=list)
    bookings: list[BookingRecord] = Field(default_factory=list)
    views: list[ViewRecord] = Field(default_factory=list)
    messages: list[MessageInteraction] = Field(default_factory=list)
    sessions: list[SessionSummary] = Field(default_factory=list)


class Demographics(BaseModel):
    """Optional demographic hints; never used for scoring."""

    age: int | None = None
    location: str = "Unknown"
    occupation: str | None = None
    income: Literal["low", "medium", "high"] | None = "medium"
    family_size: int | None = None


class UserProfile(BaseModel):
    """Behavioral and preference profile for one user."""

    user_id: str = Field(..., description="User identifier")
    preferences: Preferences = Field(default_factory=Preferences)
    behavior: Behavior = Field(default_factory=Behavior)
    demographics: Demographics = Field(default_factory=Demographics)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @property
    def booking_count(self) -> int:
        return len(self.behavior.bookings)

    def bookings_for(self, provider_id: str) -> list[BookingRecord]:
        """Return this user's bookings with the given provider."""
        return [b for b in self.behavior.bookings if b.provider_id == provider_id]

    def average_booking_rating(self) -> float | None:
        """Mean rating over rated bookings, or None when nothing was rated."""
        ratings = [b.rating for b in self.behavior.bookings if b.rating is not None]
        if not ratings:
            return None
        return sum(ratings) / len(ratings)

    def to_dict(self) -> dict:
        """Serialize to a dictionary."""
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: dict) -> UserProfile:
        """Deserialize from a dictionary."""
        return cls.model_validate(data)
