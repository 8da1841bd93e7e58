"""Provider matching: scoring strategies, ensemble ranking and explanations.

Public API:
    - RecommendationEngine: Facade producing ranked, explained results
    - RecommendationResult: One ranked provider with reasons and insights
    - RecommendationOutcome: Results plus the states a run visited
    - ScoringStrategy: Base class for the four ensemble strategies
    - PeerSelector / CosineSimilarityPeerSelector: Peer choice for collaborative scoring
    - MarketTrends: Seasonal demand and business-hours signals
    - MatchingConfig: Configuration settings
"""

from src.matching.config import (
    MatchingConfig,
    get_matching_config,
    reset_matching_config,
)
from src.matching.diversity import apply_diversity, price_tier
from src.matching.engine import RecommendationEngine
from src.matching.enhancer import InsightEnhancer
from src.matching.ensemble import aggregate
from src.matching.market import MarketTrends
from src.matching.models import (
    AIInsight,
    EngineState,
    InsightSource,
    InsightType,
    MatchingFactor,
    ReasonType,
    RecommendationOutcome,
    RecommendationReason,
    RecommendationResult,
    StrategyScores,
)
from src.matching.similarity import CosineSimilarityPeerSelector, PeerSelector
from src.matching.strategies import (
    CollaborativeStrategy,
    ContentStrategy,
    ExplorationStrategy,
    LearnedRelevanceStrategy,
    ScoringContext,
    ScoringStrategy,
    default_strategies,
)

__all__ = [
    "RecommendationEngine",
    "RecommendationResult",
    "RecommendationOutcome",
    "RecommendationReason",
    "MatchingFactor",
    "AIInsight",
    "StrategyScores",
    "ReasonType",
    "InsightType",
    "InsightSource",
    "EngineState",
    "ScoringStrategy",
    "ScoringContext",
    "CollaborativeStrategy",
    "ContentStrategy",
    "LearnedRelevanceStrategy",
    "ExplorationStrategy",
    "default_strategies",
    "PeerSelector",
    "CosineSimilarityPeerSelector",
    "MarketTrends",
    "InsightEnhancer",
    "aggregate",
    "apply_diversity",
    "price_tier",
    "MatchingConfig",
    "get_matching_config",
    "reset_matching_config",
]
