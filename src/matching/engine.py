"""Recommendation engine facade.

One run walks the states Idle -> FetchingProfile -> FetchingCandidates ->
Scoring -> Aggregating -> Filtering -> Enhancing -> UpdatingProfile -> Done.
Any error moves the run to Fallback, which serves a rating-sorted list
instead. Nothing is written to the profile store before UpdatingProfile,
so a failed run leaves the profile untouched.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from datetime import datetime

from src.catalog.models import RecommendationContext, ServiceProvider
from src.catalog.source import CandidateSource
from src.matching.config import MatchingConfig, get_matching_config
from src.matching.diversity import apply_diversity
from src.matching.enhancer import InsightEnhancer
from src.matching.ensemble import aggregate
from src.matching.explain import build_matching_factors, build_reasons, find_concerns
from src.matching.market import MarketTrends
from src.matching.models import (
    AIInsight,
    EngineState,
    InsightSource,
    InsightType,
    ReasonType,
    RecommendationOutcome,
    RecommendationReason,
    RecommendationResult,
    StrategyScores,
)
from src.matching.similarity import CosineSimilarityPeerSelector, PeerSelector
from src.matching.strategies import (
    RandomSource,
    ScoringContext,
    ScoringStrategy,
    default_strategies,
    effective_preferences,
)
from src.profiles.insights import UserInsights, build_user_insights
from src.profiles.models import UserProfile
from src.profiles.store import ProfileStore
from src.profiles.updater import build_default_profile

logger = logging.getLogger(__name__)

STRATEGY_NAMES = ("collaborative", "content", "learned", "exploration")

FALLBACK_REASON = "Recommended based on rating"
FALLBACK_MESSAGE = "AI recommendations temporarily unavailable - showing basic results"


def _local_now() -> datetime:
    return datetime.now().astimezone()


class RecommendationEngine:
    """Produces ranked, explained provider recommendations for a user.

    All collaborators are injected. `rng` and `clock` exist so runs can be
    made deterministic; by default exploration uses a fresh `random.Random`
    and the clock is the local wall time.
    """

    def __init__(
        self,
        profile_store: ProfileStore,
        candidate_source: CandidateSource,
        *,
        strategies: Sequence[ScoringStrategy] | None = None,
        peer_selector: PeerSelector | None = None,
        market: MarketTrends | None = None,
        config: MatchingConfig | None = None,
        rng: RandomSource | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.profile_store = profile_store
        self.candidate_source = candidate_source
        self.config = config or get_matching_config()
        self.market = market or MarketTrends()
        self.clock = clock or _local_now

        if strategies is None:
            strategies = default_strategies(
                market=self.market,
                rng=rng,
                neutral_score=self.config.neutral_score,
                exploration_low=self.config.exploration_low,
                exploration_high=self.config.exploration_high,
            )
        names = sorted(s.name for s in strategies)
        if names != sorted(STRATEGY_NAMES):
            raise ValueError(
                "strategies must provide exactly one of each of "
                f"{', '.join(STRATEGY_NAMES)} (got {', '.join(names) or 'none'})"
            )
        self.strategies = list(strategies)

        self.peer_selector = peer_selector or CosineSimilarityPeerSelector(
            min_similarity=self.config.min_peer_similarity,
            max_peers=self.config.max_peers,
        )
        self.enhancer = InsightEnhancer(market=self.market, config=self.config)

    async def get_recommendations(
        self,
        user_id: str,
        query: str,
        context: RecommendationContext | None = None,
        limit: int = 10,
    ) -> list[RecommendationResult]:
        """Ranked recommendations; never raises."""
        outcome = await self.recommend(user_id, query, context=context, limit=limit)
        return outcome.results

    async def recommend(
        self,
        user_id: str,
        query: str,
        context: RecommendationContext | None = None,
        limit: int = 10,
    ) -> RecommendationOutcome:
        """Run the pipeline and report which states were visited."""
        outcome = RecommendationOutcome()
        self._enter(outcome, EngineState.IDLE, user_id)

        if limit <= 0:
            self._enter(outcome, EngineState.DONE, user_id)
            return outcome

        try:
            outcome.results = await self._run(outcome, user_id, query, context, limit)
            self._enter(outcome, EngineState.DONE, user_id)
        except Exception as e:
            logger.exception(
                "Recommendation run failed for user %s in state %s; serving fallback",
                user_id,
                outcome.final_state.value if outcome.final_state else "unknown",
            )
            self._enter(outcome, EngineState.FALLBACK, user_id)
            outcome.fallback_used = True
            outcome.error = f"{type(e).__name__}: {e}"
            outcome.results = await self.fallback(query, context, limit)

        return outcome

    async def _run(
        self,
        outcome: RecommendationOutcome,
        user_id: str,
        query: str,
        context: RecommendationContext | None,
        limit: int,
    ) -> list[RecommendationResult]:
        cfg = self.config

        self._enter(outcome, EngineState.FETCHING_PROFILE, user_id)
        profile = await self.profile_store.get(user_id)
        if profile is None:
            # Not saved here; UpdatingProfile creates it.
            profile = build_default_profile(user_id, context, self.profile_store.config)
        others = await self.profile_store.list_profiles(
            exclude_user_id=user_id, limit=cfg.peer_pool_size
        )
        peers = self.peer_selector.select(profile, others)

        self._enter(outcome, EngineState.FETCHING_CANDIDATES, user_id)
        candidates = await self.candidate_source.fetch_candidates(query, context)
        logger.debug("Fetched %d candidates for query %r", len(candidates), query)

        self._enter(outcome, EngineState.SCORING, user_id)
        scoring_context = ScoringContext(
            request=context or RecommendationContext(),
            preferences=effective_preferences(profile, context),
            peers=tuple(peers),
            now=self.clock(),
        )
        strategy_scores = await self._score_all(candidates, profile, query, scoring_context)

        self._enter(outcome, EngineState.AGGREGATING, user_id)
        ranked = [
            self._build_result(provider, scores, profile, query, scoring_context)
            for provider, scores in zip(candidates, strategy_scores, strict=True)
        ]
        ranked.sort(key=lambda r: r.score, reverse=True)

        self._enter(outcome, EngineState.FILTERING, user_id)
        filtered = apply_diversity(
            ranked,
            limit,
            head_size=cfg.diversity_head_size,
            window_end=cfg.diversity_window_end,
            budget_max=cfg.budget_tier_max,
            mid_range_max=cfg.mid_range_tier_max,
        )

        self._enter(outcome, EngineState.ENHANCING, user_id)
        results = self.enhancer.enhance(filtered, profile, scoring_context.now)

        self._enter(outcome, EngineState.UPDATING_PROFILE, user_id)
        await self.profile_store.update(user_id, query, context, results)

        return results

    async def _score_all(
        self,
        candidates: Sequence[ServiceProvider],
        profile: UserProfile,
        query: str,
        context: ScoringContext,
    ) -> list[StrategyScores]:
        """Run every strategy on every candidate concurrently."""
        width = len(self.strategies)
        flat = await asyncio.gather(
            *(
                strategy.score(provider, profile, query, context)
                for provider in candidates
                for strategy in self.strategies
            )
        )

        scores: list[StrategyScores] = []
        for offset in range(0, len(flat), width):
            by_name = {
                strategy.name: value
                for strategy, value in zip(
                    self.strategies, flat[offset : offset + width], strict=True
                )
            }
            scores.append(StrategyScores(**by_name))
        return scores

    def _build_result(
        self,
        provider: ServiceProvider,
        scores: StrategyScores,
        profile: UserProfile,
        query: str,
        context: ScoringContext,
    ) -> RecommendationResult:
        score, confidence = aggregate(scores, profile.booking_count, self.config)
        prefs = context.preferences
        return RecommendationResult(
            provider=provider,
            score=score,
            confidence=confidence,
            reasons=tuple(build_reasons(provider, prefs, self.config)),
            matching_factors=tuple(build_matching_factors(provider, prefs, query)),
            potential_concerns=tuple(find_concerns(provider, prefs)),
            strategy_scores=scores,
        )

    async def fallback(
        self,
        query: str,
        context: RecommendationContext | None = None,
        limit: int = 10,
    ) -> list[RecommendationResult]:
        """Rating-sorted results used when the full pipeline fails.

        Makes one best-effort candidate fetch and returns an empty list if
        that fails too. Never touches the profile store.
        """
        if limit <= 0:
            return []
        try:
            candidates = await self.candidate_source.fetch_candidates(query, context)
        except Exception as e:
            logger.warning("Fallback candidate fetch failed: %s", e)
            return []

        ordered = sorted(candidates, key=lambda p: p.rating, reverse=True)
        return [self._fallback_result(provider) for provider in ordered[:limit]]

    @staticmethod
    def _fallback_result(provider: ServiceProvider) -> RecommendationResult:
        return RecommendationResult(
            provider=provider,
            score=provider.rating / 5.0,
            confidence=0.5,
            reasons=(
                RecommendationReason(
                    type=ReasonType.RATING_QUALITY,
                    description=FALLBACK_REASON,
                    weight=1.0,
                    confidence=0.5,
                ),
            ),
            insights=(
                AIInsight(
                    type=InsightType.WARNING,
                    message=FALLBACK_MESSAGE,
                    confidence=1.0,
                    source=InsightSource.MODEL,
                ),
            ),
        )

    async def get_user_insights(self, user_id: str) -> UserInsights | None:
        """Analytics for a stored user; None when the user is unknown."""
        profile = await self.profile_store.get(user_id)
        if profile is None:
            return None
        return build_user_insights(profile)

    @staticmethod
    def _enter(outcome: RecommendationOutcome, state: EngineState, user_id: str) -> None:
        outcome.states.append(state)
        logger.debug("Recommendation run for %s -> %s", user_id, state.value)
