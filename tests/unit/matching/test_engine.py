"""Tests for the recommendation engine facade."""

import logging

import pytest

from src.catalog.source import CandidateSource, InMemoryCatalog
from src.profiles.store import InMemoryProfileStore

FULL_RUN = [
    "idle",
    "fetching_profile",
    "fetching_candidates",
    "scoring",
    "aggregating",
    "filtering",
    "enhancing",
    "updating_profile",
    "done",
]


class FlakySource(CandidateSource):
    """Raises for the first `failures` calls, then serves `providers`."""

    def __init__(self, providers, failures=1):
        self.providers = list(providers)
        self.failures = failures
        self.calls = 0

    async def fetch_candidates(self, query, context=None):
        self.calls += 1
        if self.calls <= self.failures:
            raise RuntimeError("catalog unavailable")
        return list(self.providers)


class BrokenGetStore(InMemoryProfileStore):
    async def get(self, user_id):
        raise RuntimeError("profile db down")


class BrokenSaveStore(InMemoryProfileStore):
    async def save(self, profile):
        raise RuntimeError("profile db read-only")


@pytest.fixture
def providers(make_provider):
    from src.catalog.models import PriceRange

    return [
        make_provider("top", rating=4.9),
        make_provider("mid", rating=4.0, price_range=PriceRange(min=60, max=110)),
        make_provider("low", rating=3.1, response_time_minutes=200),
    ]


@pytest.fixture
def store(profile_config):
    return InMemoryProfileStore(config=profile_config)


@pytest.fixture
def build_engine(store, providers, matching_config, fixed_rng, fixed_now):
    from src.matching.engine import RecommendationEngine

    def _build(source=None, profile_store=None, **kwargs):
        kwargs.setdefault("config", matching_config)
        kwargs.setdefault("rng", fixed_rng)
        kwargs.setdefault("clock", lambda: fixed_now)
        return RecommendationEngine(
            profile_store if profile_store is not None else store,
            source if source is not None else InMemoryCatalog(providers),
            **kwargs,
        )

    return _build


def _states(outcome):
    return [s.value for s in outcome.states]


class TestRecommend:
    async def test_full_run_visits_every_state(self, build_engine):
        outcome = await build_engine().recommend("u1", "cleaning")

        assert _states(outcome) == FULL_RUN
        assert outcome.fallback_used is False
        assert outcome.error is None

    async def test_results_ranked_and_explained(self, build_engine):
        results = await build_engine().get_recommendations("u1", "cleaning")

        assert [r.provider.id for r in results] == ["top", "mid", "low"]
        scores = [r.score for r in results]
        assert scores == sorted(scores, reverse=True)
        for result in results:
            assert result.strategy_scores is not None
            assert result.estimated_fit == pytest.approx(result.score * 100)
            assert 0.0 <= result.confidence <= 1.0
            assert len(result.matching_factors) == 3
        assert "Usually takes more than 2 hours to respond" in results[2].potential_concerns

    async def test_exploration_uses_injected_rng(self, build_engine, fixed_rng):
        results = await build_engine().get_recommendations("u1", "cleaning")

        assert all(r.strategy_scores.exploration == pytest.approx(0.7) for r in results)
        assert len(fixed_rng.calls) == 3

    async def test_limit_truncates(self, build_engine):
        results = await build_engine().get_recommendations("u1", "cleaning", limit=2)
        assert [r.provider.id for r in results] == ["top", "mid"]

    async def test_non_positive_limit_returns_empty_without_work(self, build_engine, store):
        outcome = await build_engine().recommend("u1", "cleaning", limit=0)

        assert outcome.results == []
        assert _states(outcome) == ["idle", "done"]
        assert len(store) == 0

    async def test_no_candidates_returns_empty(self, build_engine):
        results = await build_engine(source=InMemoryCatalog([])).get_recommendations(
            "u1", "cleaning"
        )
        assert results == []

    async def test_profile_created_and_updated(self, build_engine, store):
        from src.catalog.models import RecommendationContext

        context = RecommendationContext(urgency="high")
        results = await build_engine().get_recommendations("u1", "deep clean", context)

        profile = await store.get("u1")
        assert profile is not None
        assert profile.behavior.search_history == ["deep clean"]
        session = profile.behavior.sessions[-1]
        assert session.urgency == "high"
        assert session.result_provider_ids == [r.provider.id for r in results]

    async def test_context_budget_overrides_profile(self, build_engine, store, make_profile):
        from src.catalog.models import PriceRange, RecommendationContext

        await store.save(make_profile("u1", price_range=PriceRange(min=0, max=10)))
        context = RecommendationContext(budget=PriceRange(min=40, max=120))

        results = await build_engine().get_recommendations("u1", "cleaning", context)

        assert all(
            any(reason.type.value == "price_fit" for reason in r.reasons) for r in results
        )
        stored = await store.get("u1")
        assert stored.preferences.price_range.max == 10

    async def test_peers_feed_collaborative_score(self, build_engine, store, make_profile):
        await store.save(make_profile("me"))
        await store.save(make_profile("twin", ratings={"low": 5.0}))

        results = await build_engine().get_recommendations("me", "cleaning")

        by_id = {r.provider.id: r for r in results}
        assert by_id["low"].strategy_scores.collaborative == pytest.approx(1.0)
        assert by_id["top"].strategy_scores.collaborative == pytest.approx(0.5)

    async def test_failing_strategy_does_not_trigger_fallback(self, build_engine):
        from src.matching.strategies import (
            CollaborativeStrategy,
            ContentStrategy,
            LearnedRelevanceStrategy,
            ScoringStrategy,
        )

        class BrokenExploration(ScoringStrategy):
            name = "exploration"

            def compute(self, provider, profile, query, context):
                raise KeyError("missing feature")

        engine = build_engine(
            strategies=[
                CollaborativeStrategy(),
                ContentStrategy(),
                LearnedRelevanceStrategy(),
                BrokenExploration(),
            ]
        )
        outcome = await engine.recommend("u1", "cleaning")

        assert outcome.fallback_used is False
        assert all(r.strategy_scores.exploration == 0.5 for r in outcome.results)

    def test_rejects_incomplete_strategy_set(self, build_engine):
        from src.matching.strategies import ContentStrategy

        with pytest.raises(ValueError, match="strategies must provide"):
            build_engine(strategies=[ContentStrategy()])


class TestFallback:
    async def test_source_failure_falls_back_to_rating_order(
        self, build_engine, providers, store, caplog
    ):
        from src.matching.models import InsightSource, InsightType, ReasonType

        source = FlakySource(list(reversed(providers)), failures=1)
        with caplog.at_level(logging.ERROR, logger="src.matching.engine"):
            outcome = await build_engine(source=source).recommend("u1", "cleaning")

        assert _states(outcome)[-1] == "fallback"
        assert "fetching_candidates" in _states(outcome)
        assert outcome.fallback_used is True
        assert "catalog unavailable" in outcome.error
        assert "serving fallback" in caplog.text

        results = outcome.results
        assert [r.provider.id for r in results] == ["top", "mid", "low"]
        for result in results:
            assert result.score == pytest.approx(result.provider.rating / 5)
            assert result.confidence == 0.5
            assert [(r.type, r.description) for r in result.reasons] == [
                (ReasonType.RATING_QUALITY, "Recommended based on rating")
            ]
            assert len(result.insights) == 1
            assert result.insights[0].type is InsightType.WARNING
            assert result.insights[0].source is InsightSource.MODEL
        assert len(store) == 0

    async def test_fallback_fetch_failure_returns_empty(self, build_engine, store):
        source = FlakySource([], failures=2)
        results = await build_engine(source=source).get_recommendations("u1", "q")

        assert results == []
        assert source.calls == 2
        assert len(store) == 0

    async def test_profile_store_failure_falls_back(self, build_engine, profile_config):
        outcome = await build_engine(
            profile_store=BrokenGetStore(config=profile_config)
        ).recommend("u1", "cleaning")

        assert _states(outcome) == ["idle", "fetching_profile", "fallback"]
        assert [r.provider.id for r in outcome.results] == ["top", "mid", "low"]

    async def test_update_failure_falls_back(self, build_engine, profile_config):
        outcome = await build_engine(
            profile_store=BrokenSaveStore(config=profile_config)
        ).recommend("u1", "cleaning")

        assert _states(outcome)[-2:] == ["updating_profile", "fallback"]
        assert outcome.fallback_used is True

    async def test_fallback_respects_limit(self, build_engine):
        results = await build_engine().fallback("cleaning", limit=1)
        assert [r.provider.id for r in results] == ["top"]
        assert await build_engine().fallback("cleaning", limit=0) == []


class TestUserInsights:
    async def test_unknown_user(self, build_engine):
        assert await build_engine().get_user_insights("ghost") is None

    async def test_known_user(self, build_engine, store, make_booking):
        await store.record_booking("u1", make_booking(service_type="plumbing", cost=90))

        insights = await build_engine().get_user_insights("u1")

        assert insights.user_id == "u1"
        assert insights.preferred_categories[0].category == "plumbing"
        assert insights.spending.avg_spend == 90
