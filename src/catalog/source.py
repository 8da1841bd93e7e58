"""Candidate provider sources."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Iterable

from src.catalog.models import RecommendationContext, ServiceProvider

DEFAULT_MAX_CANDIDATES = 50

_TOKEN_RE = re.compile(r"[a-z0-9]+")


def tokenize(text: str) -> set[str]:
    """Lower-cased alphanumeric tokens of a string."""
    return set(_TOKEN_RE.findall(text.lower()))


class CandidateSource(ABC):
    """Boundary to the provider catalog.

    Implementations return a bounded list; an empty list is a valid answer.
    """

    @abstractmethod
    async def fetch_candidates(
        self, query: str, context: RecommendationContext | None = None
    ) -> list[ServiceProvider]:
        """Return providers that may be relevant to the query."""


class InMemoryCatalog(CandidateSource):
    """Catalog held in memory, matched by simple keyword overlap.

    A provider matches when any query token appears in its name, category,
    subcategories, skills or specializations. When nothing matches, the
    head of the catalog is returned so there is still something to rank.
    """

    def __init__(
        self,
        providers: Iterable[ServiceProvider],
        max_candidates: int = DEFAULT_MAX_CANDIDATES,
    ) -> None:
        if max_candidates <= 0:
            raise ValueError(f"max_candidates must be positive (got {max_candidates})")
        self._providers = list(providers)
        self.max_candidates = max_candidates

    @property
    def providers(self) -> list[ServiceProvider]:
        return list(self._providers)

    def get(self, provider_id: str) -> ServiceProvider | None:
        for provider in self._providers:
            if provider.id == provider_id:
                return provider
        return None

    async def fetch_candidates(
        self, query: str, context: RecommendationContext | None = None
    ) -> list[ServiceProvider]:
        query_tokens = tokenize(query)
        if not query_tokens:
            return self._providers[: self.max_candidates]

        matched = [
            p for p in self._providers if query_tokens & _provider_tokens(p)
        ]
        if not matched:
            return self._providers[: self.max_candidates]
        return matched[: self.max_candidates]


def _provider_tokens(provider: ServiceProvider) -> set[str]:
    tokens = tokenize(provider.name) | tokenize(provider.category)
    for value in (
        *provider.subcategories,
        *provider.skills,
        *provider.specializations,
    ):
        tokens |= tokenize(value)
    return tokens
