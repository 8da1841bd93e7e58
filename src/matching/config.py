"""Configuration settings for the matching engine."""

from __future__ import annotations

from typing import Annotated

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class MatchingConfig(BaseSettings):
    """Matching engine configuration settings.

    All settings have sensible defaults and can be overridden via
    environment variables with `MATCHING_` prefix or a .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="MATCHING_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Ensemble weights (must sum to 1.0)
    weight_collaborative: Annotated[float, Field(ge=0.0, le=1.0)] = Field(
        default=0.30,
        description="Weight for the collaborative-filtering score",
    )
    weight_content: Annotated[float, Field(ge=0.0, le=1.0)] = Field(
        default=0.25,
        description="Weight for the content/attribute-match score",
    )
    weight_learned: Annotated[float, Field(ge=0.0, le=1.0)] = Field(
        default=0.35,
        description="Weight for the learned-relevance score",
    )
    weight_exploration: Annotated[float, Field(ge=0.0, le=1.0)] = Field(
        default=0.10,
        description="Weight for the exploration/exploitation score",
    )

    # Strategy settings
    neutral_score: Annotated[float, Field(ge=0.0, le=1.0)] = Field(
        default=0.5,
        description="Score a strategy returns when it cannot evaluate a provider",
    )
    exploration_low: Annotated[float, Field(ge=0.0, le=1.0)] = Field(
        default=0.6,
        description="Lower bound of the exploration band for untried providers",
    )
    exploration_high: Annotated[float, Field(ge=0.0, le=1.0)] = Field(
        default=0.8,
        description="Upper bound of the exploration band for untried providers",
    )

    # Peer selection for collaborative filtering
    max_peers: Annotated[int, Field(gt=0)] = Field(
        default=10,
        description="Maximum number of similar users consulted",
    )
    min_peer_similarity: Annotated[float, Field(ge=0.0, le=1.0)] = Field(
        default=0.1,
        description="Minimum cosine similarity for a user to count as a peer",
    )
    peer_pool_size: Annotated[int, Field(gt=0)] = Field(
        default=500,
        description="Maximum number of stored profiles scanned for peers",
    )

    # Confidence
    confidence_full_history: Annotated[int, Field(gt=0)] = Field(
        default=10,
        description="Bookings needed for full data-richness confidence",
    )

    # Reason rules
    reason_min_rating: Annotated[float, Field(ge=0.0, le=5.0)] = Field(
        default=4.5,
        description="Rating at or above which a rating_quality reason is added",
    )
    reason_max_response_minutes: Annotated[float, Field(ge=0.0)] = Field(
        default=30.0,
        description="Response time at or below which availability_match is added",
    )

    # Diversity filter
    diversity_head_size: Annotated[int, Field(ge=0)] = Field(
        default=3,
        description="Top results always kept in score order",
    )
    diversity_window_end: Annotated[int, Field(ge=0)] = Field(
        default=7,
        description="Positions up to which variety is preferred",
    )
    budget_tier_max: Annotated[float, Field(ge=0.0)] = Field(
        default=75.0,
        description="Average price below which a provider is 'budget'",
    )
    mid_range_tier_max: Annotated[float, Field(ge=0.0)] = Field(
        default=150.0,
        description="Average price below which a provider is 'mid_range'",
    )

    # Insight rules
    prediction_min_confidence: Annotated[float, Field(ge=0.0, le=1.0)] = Field(
        default=0.8,
        description="Confidence above which a prediction insight is added",
    )
    seasonal_warning_factor: Annotated[float, Field(ge=0.0)] = Field(
        default=1.3,
        description="Seasonal demand factor above which a warning is added",
    )
    opportunity_min_bookings: Annotated[int, Field(ge=0)] = Field(
        default=5,
        description="Bookings the user needs before opportunity insights apply",
    )
    opportunity_rating_margin: Annotated[float, Field(ge=0.0)] = Field(
        default=0.5,
        description="How far above the user's average rating a provider must be",
    )

    @model_validator(mode="after")
    def validate_weights_sum_to_one(self) -> MatchingConfig:
        """Ensure ensemble weights sum to 1.0 (within tolerance)."""
        weight_sum = (
            self.weight_collaborative
            + self.weight_content
            + self.weight_learned
            + self.weight_exploration
        )
        if abs(weight_sum - 1.0) > 1e-6:
            raise ValueError(
                "Ensemble weights must sum to 1.0. "
                f"Got {weight_sum:.6f} "
                f"(collaborative={self.weight_collaborative}, "
                f"content={self.weight_content}, learned={self.weight_learned}, "
                f"exploration={self.weight_exploration})."
            )
        return self

    @model_validator(mode="after")
    def validate_bands(self) -> MatchingConfig:
        """Ensure ranges are ordered."""
        if self.exploration_low > self.exploration_high:
            raise ValueError(
                "exploration_low must not exceed exploration_high "
                f"(got {self.exploration_low} > {self.exploration_high})."
            )
        if self.diversity_head_size > self.diversity_window_end:
            raise ValueError(
                "diversity_head_size must not exceed diversity_window_end "
                f"(got {self.diversity_head_size} > {self.diversity_window_end})."
            )
        if self.budget_tier_max > self.mid_range_tier_max:
            raise ValueError(
                "budget_tier_max must not exceed mid_range_tier_max "
                f"(got {self.budget_tier_max} > {self.mid_range_tier_max})."
            )
        return self


# Singleton instance for easy import
_matching_config: MatchingConfig | None = None


def get_matching_config() -> MatchingConfig:
    """Get the matching configuration singleton."""
    global _matching_config
    if _matching_config is None:
        _matching_config = MatchingConfig()
    return _matching_config


def reset_matching_config() -> None:
    """Reset the matching configuration singleton (useful for testing)."""
    global _matching_config
    _matching_config = None
