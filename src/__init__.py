"""Service-match: recommendation and matching engine for a local-services marketplace."""

__version__ = "0.1.0"
