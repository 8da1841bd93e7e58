"""User profiles: model, persistence and derived insights.

Public API:
    - UserProfile: Behavioral and preference profile
    - ProfileStore: Store interface (get/create/update)
    - InMemoryProfileStore: Dict-backed store
    - SqliteProfileStore: aiosqlite-backed store
    - build_user_insights: Analytics summary for a profile
    - ProfileConfig: Configuration settings
"""

from src.profiles.config import ProfileConfig, get_profile_config, reset_profile_config
from src.profiles.insights import UserInsights, build_user_insights
from src.profiles.models import (
    Behavior,
    BookingRecord,
    MessageInteraction,
    Preferences,
    SessionSummary,
    UserProfile,
    ViewRecord,
)
from src.profiles.repository import SqliteProfileStore
from src.profiles.store import InMemoryProfileStore, ProfileStore

__all__ = [
    "UserProfile",
    "Preferences",
    "Behavior",
    "BookingRecord",
    "ViewRecord",
    "MessageInteraction",
    "SessionSummary",
    "ProfileStore",
    "InMemoryProfileStore",
    "SqliteProfileStore",
    "UserInsights",
    "build_user_insights",
    "ProfileConfig",
    "get_profile_config",
    "reset_profile_config",
]
