"""Data models for the matching engine's outputs."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal

from src.catalog.models import RecommendationContext, ServiceProvider

Importance = Literal["high", "medium", "low"]


class ReasonType(str, Enum):
    """Category of a human-readable recommendation reason."""

    PREFERENCE_MATCH = "preference_match"
    LOCATION_PROXIMITY = "location_proximity"
    RATING_QUALITY = "rating_quality"
    PRICE_FIT = "price_fit"
    AVAILABILITY_MATCH = "availability_match"
    PAST_SUCCESS = "past_success"
    AI_INSIGHT = "ai_insight"


class InsightType(str, Enum):
    PREDICTION = "prediction"
    RECOMMENDATION = "recommendation"
    WARNING = "warning"
    OPPORTUNITY = "opportunity"


class InsightSource(str, Enum):
    MODEL = "model"
    BEHAVIORAL_ANALYSIS = "behavioral-analysis"
    MARKET_TREND = "market-trend"
    PEER_COMPARISON = "peer-comparison"


class EngineState(str, Enum):
    """Stages of one recommendation run."""

    IDLE = "idle"
    FETCHING_PROFILE = "fetching_profile"
    FETCHING_CANDIDATES = "fetching_candidates"
    SCORING = "scoring"
    AGGREGATING = "aggregating"
    FILTERING = "filtering"
    ENHANCING = "enhancing"
    UPDATING_PROFILE = "updating_profile"
    DONE = "done"
    FALLBACK = "fallback"


def _check_unit(name: str, value: float) -> None:
    if math.isnan(value) or not (0.0 <= value <= 1.0):
        raise ValueError(f"{name} must be between 0.0 and 1.0 (got {value})")


@dataclass(frozen=True)
class RecommendationReason:
    type: ReasonType
    description: str
    weight: float
    confidence: float

    def __post_init__(self) -> None:
        _check_unit("weight", self.weight)
        _check_unit("confidence", self.confidence)

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "description": self.description,
            "weight": self.weight,
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class MatchingFactor:
    """One user-versus-provider attribute comparison."""

    factor: str
    user_value: Any
    provider_value: Any
    match_percentage: float
    importance: Importance

    def __post_init__(self) -> None:
        if not (0.0 <= self.match_percentage <= 100.0):
            raise ValueError(
                "match_percentage must be between 0 and 100 "
                f"(got {self.match_percentage})"
            )
        if self.importance not in {"high", "medium", "low"}:
            raise ValueError(
                f"importance must be one of: high, medium, low (got {self.importance})"
            )

    def to_dict(self) -> dict:
        return {
            "factor": self.factor,
            "user_value": self.user_value,
            "provider_value": self.provider_value,
            "match_percentage": self.match_percentage,
            "importance": self.importance,
        }


@dataclass(frozen=True)
class AIInsight:
    type: InsightType
    message: str
    confidence: float
    source: InsightSource

    def __post_init__(self) -> None:
        _check_unit("confidence", self.confidence)

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "message": self.message,
            "confidence": self.confidence,
            "source": self.source.value,
        }


@dataclass(frozen=True)
class StrategyScores:
    """Per-strategy scores for one provider."""

    collaborative: float
    content: float
    learned: float
    exploration: float

    def __post_init__(self) -> None:
        for name in ("collaborative", "content", "learned", "exploration"):
            _check_unit(name, getattr(self, name))

    def values(self) -> tuple[float, float, float, float]:
        return (self.collaborative, self.content, self.learned, self.exploration)

    def to_dict(self) -> dict:
        return {
            "collaborative": self.collaborative,
            "content": self.content,
            "learned": self.learned,
            "exploration": self.exploration,
        }


@dataclass(frozen=True)
class RecommendationResult:
    """A ranked, explained recommendation for one provider.

    `estimated_fit` is always `score * 100`. List-like fields are tuples so
    results can be shared freely once built.
    """

    provider: ServiceProvider
    score: float
    confidence: float
    reasons: tuple[RecommendationReason, ...] = ()
    matching_factors: tuple[MatchingFactor, ...] = ()
    insights: tuple[AIInsight, ...] = ()
    potential_concerns: tuple[str, ...] = ()
    alternatives: tuple[str, ...] = ()
    strategy_scores: StrategyScores | None = None

    def __post_init__(self) -> None:
        _check_unit("score", self.score)
        _check_unit("confidence", self.confidence)

    @property
    def estimated_fit(self) -> float:
        return self.score * 100

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dictionary."""
        return {
            "provider": self.provider.to_dict(),
            "score": self.score,
            "confidence": self.confidence,
            "estimated_fit": self.estimated_fit,
            "reasons": [r.to_dict() for r in self.reasons],
            "matching_factors": [f.to_dict() for f in self.matching_factors],
            "insights": [i.to_dict() for i in self.insights],
            "potential_concerns": list(self.potential_concerns),
            "alternatives": list(self.alternatives),
            "strategy_scores": (
                self.strategy_scores.to_dict()
                if self.strategy_scores is not None
                else None
            ),
        }


@dataclass
class RecommendationOutcome:
    """What happened during one engine run."""

    results: list[RecommendationResult] = field(default_factory=list)
    states: list[EngineState] = field(default_factory=list)
    fallback_used: bool = False
    error: str | None = None

    @property
    def final_state(self) -> EngineState | None:
        return self.states[-1] if self.states else None


__all__ = [
    "AIInsight",
    "EngineState",
    "Importance",
    "InsightSource",
    "InsightType",
    "MatchingFactor",
    "ReasonType",
    "RecommendationContext",
    "RecommendationOutcome",
    "RecommendationReason",
    "RecommendationResult",
    "StrategyScores",
]
