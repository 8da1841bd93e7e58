"""Data models for the provider catalog."""

from __future__ import annotations

from datetime import date, datetime
from typing import Annotated, Literal

from pydantic import BaseModel, Field, model_validator

WorkingStyle = Literal["formal", "casual", "professional"]


class GeoPoint(BaseModel):
    """A latitude/longitude pair."""

    lat: Annotated[float, Field(ge=-90.0, le=90.0)] = Field(..., description="Latitude")
    lng: Annotated[float, Field(ge=-180.0, le=180.0)] = Field(
        ..., description="Longitude"
    )


class PriceRange(BaseModel):
    """A price band.

    Ordering is not enforced here: request budgets are taken as given and
    scored as-is. Models that require an ordered range validate it themselves.
    """

    min: float = Field(..., description="Lower bound")
    max: float = Field(..., description="Upper bound")

    @property
    def midpoint(self) -> float:
        return (self.min + self.max) / 2

    @property
    def span(self) -> float:
        return self.max - self.min

    def overlap(self, other: PriceRange) -> float:
        """Length of the shared interval (negative when the ranges are disjoint)."""
        return min(self.max, other.max) - max(self.min, other.min)

    def intersects(self, other: PriceRange) -> bool:
        return self.min <= other.max and self.max >= other.min


class AvailabilitySlot(BaseModel):
    """A bookable time window."""

    day: date = Field(..., description="Calendar day of the slot")
    start_time: str = Field(..., description="Start time (HH:MM)")
    end_time: str = Field(..., description="End time (HH:MM)")
    booked: bool = Field(default=False, description="Whether the slot is taken")


class PortfolioItem(BaseModel):
    """A showcased past job."""

    title: str = Field(..., description="Project title")
    description: str = Field(default="", description="Project description")
    category: str = Field(default="", description="Project category")
    rating: Annotated[float, Field(ge=0.0, le=5.0)] | None = Field(
        default=None, description="Client rating for the project"
    )
    completed_date: datetime | None = Field(
        default=None, description="When the project was completed"
    )


class ServiceProvider(BaseModel):
    """A service provider as published by the catalog.

    Providers are read-only from the engine's point of view.
    """

    id: str = Field(..., description="Provider identifier")
    name: str = Field(..., description="Display name")
    category: str = Field(..., description="Primary category")
    subcategories: list[str] = Field(default_factory=list, description="Subcategories")
    rating: Annotated[float, Field(ge=0.0, le=5.0)] = Field(
        default=0.0, description="Aggregate rating"
    )
    review_count: Annotated[int, Field(ge=0)] = Field(
        default=0, description="Number of reviews"
    )
    price_range: PriceRange = Field(..., description="Typical price band")
    location: GeoPoint = Field(..., description="Base location")
    availability: list[AvailabilitySlot] = Field(
        default_factory=list, description="Availability slots"
    )
    skills: list[str] = Field(default_factory=list, description="Skill tags")
    certifications: list[str] = Field(
        default_factory=list, description="Certification tags"
    )
    response_time_minutes: Annotated[float, Field(ge=0.0)] = Field(
        default=60.0, description="Average response time in minutes"
    )
    completion_rate: Annotated[float, Field(ge=0.0, le=1.0)] = Field(
        default=1.0, description="Share of jobs completed"
    )
    languages: list[str] = Field(default_factory=list, description="Spoken languages")
    working_style: WorkingStyle = Field(
        default="professional", description="Working/communication style"
    )
    specializations: list[str] = Field(
        default_factory=list, description="Specializations"
    )
    portfolio: list[PortfolioItem] = Field(
        default_factory=list, description="Portfolio entries"
    )

    @model_validator(mode="after")
    def validate_price_range(self) -> ServiceProvider:
        if self.price_range.min > self.price_range.max:
            raise ValueError(
                f"Provider {self.id} price range min exceeds max "
                f"({self.price_range.min} > {self.price_range.max})"
            )
        return self

    def to_dict(self) -> dict:
        """Serialize to a dictionary."""
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: dict) -> ServiceProvider:
        """Deserialize from a dictionary."""
        return cls.model_validate(data)


class RecommendationContext(BaseModel):
    """Optional hints sent with a search.

    Fields left unset fall back to the user's profile. The budget is not
    checked for ordering; a reversed budget simply scores a poor price fit.
    """

    location: GeoPoint | None = Field(default=None, description="Search center")
    urgency: Literal["low", "medium", "high"] | None = Field(
        default=None, description="How soon the service is needed"
    )
    budget: PriceRange | None = Field(default=None, description="Budget range")
    timeframe: str | None = Field(default=None, description="Free-text timeframe")

    def filters_used(self) -> list[str]:
        """Names of the fields the caller supplied."""
        return sorted(self.model_dump(exclude_none=True).keys())
