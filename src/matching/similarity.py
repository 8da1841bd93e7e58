"""Peer selection for collaborative filtering.

A peer is another stored user whose preference vector points the same way
as the requesting user's. Vectors are sparse dicts so users with disjoint
histories simply share no dimensions. Two vectors are compared densely over
the union of their keys.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable

import numpy as np

from src.profiles.models import UserProfile

URGENCY_LEVELS: dict[str, float] = {"high": 1.0, "medium": 0.5, "low": 0.0}
PRICE_SCALE = 1000.0


def preference_vector(profile: UserProfile) -> dict[str, float]:
    """Sparse feature vector describing what a user wants."""
    prefs = profile.preferences
    vector: dict[str, float] = {}

    service_types = set(prefs.service_types)
    service_types.update(b.service_type for b in profile.behavior.bookings)
    for service_type in service_types:
        vector[f"type:{service_type.lower()}"] = 1.0

    for provider_id, rating in prefs.ratings.items():
        vector[f"rating:{provider_id}"] = rating / 5.0

    vector["price"] = min(1.0, max(0.0, prefs.price_range.midpoint / PRICE_SCALE))
    vector["urgency"] = URGENCY_LEVELS.get(prefs.schedule.urgency, 0.5)
    return vector


def cosine_similarity(a: dict[str, float], b: dict[str, float]) -> float:
    """Cosine of two sparse vectors; 0.0 when either is all zeros."""
    keys = sorted(a.keys() | b.keys())
    if not keys:
        return 0.0
    vec_a = np.array([a.get(key, 0.0) for key in keys], dtype=float)
    vec_b = np.array([b.get(key, 0.0) for key in keys], dtype=float)

    norm_a = np.linalg.norm(vec_a)
    norm_b = np.linalg.norm(vec_b)
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return float(np.dot(vec_a, vec_b) / (norm_a * norm_b))


class PeerSelector(ABC):
    """Chooses which other users inform collaborative scoring."""

    @abstractmethod
    def select(
        self, profile: UserProfile, candidates: Iterable[UserProfile]
    ) -> list[UserProfile]:
        """Return peers of `profile`, most relevant first."""


class CosineSimilarityPeerSelector(PeerSelector):
    def __init__(self, min_similarity: float = 0.1, max_peers: int = 10) -> None:
        if max_peers <= 0:
            raise ValueError(f"max_peers must be positive (got {max_peers})")
        self.min_similarity = min_similarity
        self.max_peers = max_peers

    def select(
        self, profile: UserProfile, candidates: Iterable[UserProfile]
    ) -> list[UserProfile]:
        target = preference_vector(profile)
        scored: list[tuple[float, UserProfile]] = []
        for candidate in candidates:
            if candidate.user_id == profile.user_id:
                continue
            similarity = cosine_similarity(target, preference_vector(candidate))
            if similarity >= self.min_similarity:
                scored.append((similarity, candidate))

        # Stable sort keeps store order among equally similar peers.
        scored.sort(key=lambda pair: pair[0], reverse=True)
        return [peer for _, peer in scored[: self.max_peers]]
