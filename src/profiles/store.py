"""Profile Store interface and the in-memory implementation.

A store only has to know how to load, save and list profiles; creation
and the append-only history updates are shared here so every backend
behaves the same way.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import TYPE_CHECKING

from src.catalog.models import RecommendationContext
from src.profiles import updater
from src.profiles.config import ProfileConfig, get_profile_config
from src.profiles.models import (
    BookingRecord,
    MessageInteraction,
    UserProfile,
    ViewRecord,
)

if TYPE_CHECKING:
    from src.matching.models import RecommendationResult

logger = logging.getLogger(__name__)


class ProfileStore(ABC):
    """Persistence boundary for user profiles.

    Absence of a profile is never an error: `get` returns None and every
    write operation creates the profile first when needed. Concurrent writes
    for the same user are not coordinated; the last save wins.
    """

    def __init__(self, config: ProfileConfig | None = None) -> None:
        self.config = config or get_profile_config()

    @abstractmethod
    async def get(self, user_id: str) -> UserProfile | None:
        """Return the stored profile, or None when the user is unknown."""

    @abstractmethod
    async def save(self, profile: UserProfile) -> None:
        """Insert or replace a profile."""

    @abstractmethod
    async def list_profiles(
        self, *, exclude_user_id: str | None = None, limit: int | None = None
    ) -> list[UserProfile]:
        """Return stored profiles, optionally excluding one user."""

    async def create(
        self, user_id: str, context: RecommendationContext | None = None
    ) -> UserProfile:
        """Create and persist a default profile seeded from the context."""
        profile = updater.build_default_profile(user_id, context, self.config)
        await self.save(profile)
        logger.info("Created profile for user %s", user_id)
        return profile

    async def get_or_create(
        self, user_id: str, context: RecommendationContext | None = None
    ) -> UserProfile:
        profile = await self.get(user_id)
        if profile is None:
            profile = await self.create(user_id, context)
        return profile

    async def update(
        self,
        user_id: str,
        query: str,
        context: RecommendationContext | None,
        results: Iterable[RecommendationResult],
    ) -> UserProfile:
        """Record a recommendation query in the user's history."""
        profile = await self.get_or_create(user_id, context)
        updater.record_search(profile, query, context, results, self.config)
        await self.save(profile)
        return profile

    async def record_booking(
        self, user_id: str, booking: BookingRecord
    ) -> UserProfile:
        profile = await self.get_or_create(user_id)
        updater.append_booking(profile, booking, self.config)
        await self.save(profile)
        return profile

    async def record_view(self, user_id: str, view: ViewRecord) -> UserProfile:
        profile = await self.get_or_create(user_id)
        updater.append_view(profile, view, self.config)
        await self.save(profile)
        return profile

    async def record_message(
        self, user_id: str, message: MessageInteraction
    ) -> UserProfile:
        profile = await self.get_or_create(user_id)
        updater.append_message(profile, message, self.config)
        await self.save(profile)
        return profile


class InMemoryProfileStore(ProfileStore):
    """Dict-backed store.

    Profiles are copied on the way in and out, so a caller mutating a
    returned profile never changes what is stored.
    """

    def __init__(
        self,
        profiles: Iterable[UserProfile] = (),
        config: ProfileConfig | None = None,
    ) -> None:
        super().__init__(config=config)
        self._profiles: dict[str, UserProfile] = {
            p.user_id: p.model_copy(deep=True) for p in profiles
        }

    async def get(self, user_id: str) -> UserProfile | None:
        profile = self._profiles.get(user_id)
        if profile is None:
            return None
        return profile.model_copy(deep=True)

    async def save(self, profile: UserProfile) -> None:
        self._profiles[profile.user_id] = profile.model_copy(deep=True)

    async def list_profiles(
        self, *, exclude_user_id: str | None = None, limit: int | None = None
    ) -> list[UserProfile]:
        profiles = [
            p.model_copy(deep=True)
            for user_id, p in self._profiles.items()
            if user_id != exclude_user_id
        ]
        if limit is not None:
            profiles = profiles[:limit]
        return profiles

    def __len__(self) -> int:
        return len(self._profiles)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._profiles
