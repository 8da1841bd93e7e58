"""Provider catalog boundary.

Public API:
    - ServiceProvider: Provider model
    - RecommendationContext: Optional hints sent with a search
    - CandidateSource: Interface for fetching candidate providers
    - InMemoryCatalog: Keyword-matched in-memory catalog
    - CatalogLoader / load_catalog: YAML/JSON catalog files
"""

from src.catalog.loader import CatalogLoader, load_catalog
from src.catalog.models import (
    AvailabilitySlot,
    GeoPoint,
    PortfolioItem,
    PriceRange,
    RecommendationContext,
    ServiceProvider,
)
from src.catalog.source import CandidateSource, InMemoryCatalog

__all__ = [
    "ServiceProvider",
    "PriceRange",
    "GeoPoint",
    "AvailabilitySlot",
    "PortfolioItem",
    "RecommendationContext",
    "CandidateSource",
    "InMemoryCatalog",
    "CatalogLoader",
    "load_catalog",
]
