"""Weighted combination of strategy scores."""

from __future__ import annotations

from src.matching.config import MatchingConfig, get_matching_config
from src.matching.models import StrategyScores


def aggregate(
    scores: StrategyScores,
    booking_count: int,
    config: MatchingConfig | None = None,
) -> tuple[float, float]:
    """Combine per-strategy scores into a final score and a confidence.

    Confidence rewards a longer booking history (data richness) and
    agreement between strategies (1 minus the spread of their scores).

    Returns:
        (final_score, confidence), both in [0, 1].
    """
    cfg = config or get_matching_config()

    final_score = (
        cfg.weight_collaborative * scores.collaborative
        + cfg.weight_content * scores.content
        + cfg.weight_learned * scores.learned
        + cfg.weight_exploration * scores.exploration
    )

    values = scores.values()
    agreement = 1.0 - (max(values) - min(values))
    richness = min(1.0, booking_count / cfg.confidence_full_history)
    confidence = 0.6 * richness + 0.4 * agreement

    return _clamp(final_score), _clamp(confidence)


def _clamp(value: float) -> float:
    return min(1.0, max(0.0, value))
