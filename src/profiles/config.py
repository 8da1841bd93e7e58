"""Configuration settings for user profile storage."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ProfileConfig(BaseSettings):
    """Profile store configuration settings.

    All settings have sensible defaults and can be overridden via
    environment variables with `PROFILE_` prefix or a .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="PROFILE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    db_path: Path = Field(
        default=Path("./data/profiles.db"),
        description="Path to the SQLite profile database",
    )

    # History windows (oldest entries are evicted first)
    search_history_limit: Annotated[int, Field(gt=0)] = Field(
        default=100,
        description="Maximum number of search strings kept per user",
    )
    session_history_limit: Annotated[int, Field(gt=0)] = Field(
        default=50,
        description="Maximum number of session summaries kept per user",
    )
    booking_history_limit: Annotated[int, Field(gt=0)] = Field(
        default=500,
        description="Maximum number of booking records kept per user",
    )
    view_history_limit: Annotated[int, Field(gt=0)] = Field(
        default=500,
        description="Maximum number of view records kept per user",
    )
    message_history_limit: Annotated[int, Field(gt=0)] = Field(
        default=500,
        description="Maximum number of message interactions kept per user",
    )

    # Defaults for freshly created profiles
    default_price_min: Annotated[float, Field(ge=0.0)] = Field(
        default=0.0,
        description="Lower bound of the default price range",
    )
    default_price_max: Annotated[float, Field(ge=0.0)] = Field(
        default=1000.0,
        description="Upper bound of the default price range",
    )
    default_radius: Annotated[float, Field(gt=0.0)] = Field(
        default=25.0,
        description="Default search radius around the user's location",
    )

    @model_validator(mode="after")
    def validate_default_price_range(self) -> ProfileConfig:
        """Ensure the default price range is ordered."""
        if self.default_price_min > self.default_price_max:
            raise ValueError(
                "default_price_min must not exceed default_price_max "
                f"(got {self.default_price_min} > {self.default_price_max})."
            )
        return self


# Singleton instance for easy import
_profile_config: ProfileConfig | None = None


def get_profile_config() -> ProfileConfig:
    """Get the profile configuration singleton."""
    global _profile_config
    if _profile_config is None:
        _profile_config = ProfileConfig()
    return _profile_config


def reset_profile_config() -> None:
    """Reset the profile configuration singleton (useful for testing)."""
    global _profile_config
    _profile_config = None
