"""Tests for ensemble aggregation."""

import pytest


class TestAggregate:
    def test_weighted_sum(self, matching_config):
        from src.matching.ensemble import aggregate
        from src.matching.models import StrategyScores

        score, _ = aggregate(StrategyScores(1.0, 0.0, 1.0, 0.0), 0, matching_config)
        assert score == pytest.approx(0.65)

    def test_confidence_from_agreement_only(self, matching_config):
        """No history: confidence is 0.4 x agreement."""
        from src.matching.ensemble import aggregate
        from src.matching.models import StrategyScores

        _, agreed = aggregate(StrategyScores(0.5, 0.5, 0.5, 0.5), 0, matching_config)
        _, split = aggregate(StrategyScores(1.0, 0.0, 1.0, 0.0), 0, matching_config)

        assert agreed == pytest.approx(0.4)
        assert split == pytest.approx(0.0)

    def test_confidence_grows_with_history(self, matching_config):
        from src.matching.ensemble import aggregate
        from src.matching.models import StrategyScores

        scores = StrategyScores(0.8, 0.8, 0.8, 0.8)
        _, five = aggregate(scores, 5, matching_config)
        _, many = aggregate(scores, 40, matching_config)

        assert five == pytest.approx(0.7)
        assert many == pytest.approx(1.0)

    def test_uses_configured_weights(self):
        from src.matching.config import MatchingConfig
        from src.matching.ensemble import aggregate
        from src.matching.models import StrategyScores

        config = MatchingConfig(
            _env_file=None,  # type: ignore[call-arg]
            weight_collaborative=0.0,
            weight_content=1.0,
            weight_learned=0.0,
            weight_exploration=0.0,
        )
        score, _ = aggregate(StrategyScores(0.1, 0.6, 0.9, 0.2), 0, config)
        assert score == pytest.approx(0.6)

    def test_results_within_unit_interval(self, matching_config):
        from src.matching.ensemble import aggregate
        from src.matching.models import StrategyScores

        score, confidence = aggregate(StrategyScores(1, 1, 1, 1), 1000, matching_config)
        assert 0.0 <= score <= 1.0
        assert 0.0 <= confidence <= 1.0
