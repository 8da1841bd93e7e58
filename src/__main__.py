"""Main entry point for the servicematch CLI."""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from src import __version__
from src.catalog.loader import load_catalog
from src.catalog.models import GeoPoint, PriceRange, RecommendationContext
from src.config.settings import Settings
from src.matching.engine import RecommendationEngine
from src.matching.models import RecommendationResult
from src.profiles.config import get_profile_config
from src.profiles.insights import UserInsights, build_user_insights
from src.profiles.models import BookingRecord
from src.profiles.repository import SqliteProfileStore
from src.utils.logging import configure_logging


def _positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError("--limit must be a positive integer")
    return number


def _rating(value: str) -> float:
    rating = float(value)
    if not (1.0 <= rating <= 5.0):
        raise argparse.ArgumentTypeError("--rating must be between 1 and 5")
    return rating


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="servicematch",
        description="servicematch: local-services provider recommendations",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m src recommend "house cleaning" --user u1 --lat 40.7 --lng -74.0
  python -m src insights --user u1
  python -m src book --user u1 --provider p7 --service-type cleaning --cost 120
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Set the log level (overrides settings)",
    )

    parser.add_argument(
        "--matching-log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Log level for the matching engine (overrides MATCHING_LOG_LEVEL)",
    )

    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help="Profile database path (overrides PROFILE_DB_PATH)",
    )

    subparsers = parser.add_subparsers(
        dest="mode",
        title="commands",
        description="Available commands",
    )

    # Recommend
    recommend_parser = subparsers.add_parser(
        "recommend",
        help="Recommend providers for a search query",
    )
    recommend_parser.add_argument("query", help="What the user is looking for")
    recommend_parser.add_argument("--user", required=True, help="User id")
    recommend_parser.add_argument("--lat", type=float, default=None, help="Latitude")
    recommend_parser.add_argument("--lng", type=float, default=None, help="Longitude")
    recommend_parser.add_argument(
        "--urgency",
        choices=["low", "medium", "high"],
        default=None,
        help="How soon the service is needed",
    )
    recommend_parser.add_argument(
        "--budget-min", type=float, default=None, help="Budget lower bound"
    )
    recommend_parser.add_argument(
        "--budget-max", type=float, default=None, help="Budget upper bound"
    )
    recommend_parser.add_argument(
        "--timeframe", default=None, help="Free-text timeframe (e.g. 'this week')"
    )
    recommend_parser.add_argument(
        "--limit",
        type=_positive_int,
        default=None,
        help="Number of results (default from settings)",
    )
    recommend_parser.add_argument(
        "--catalog",
        type=Path,
        default=None,
        help="Provider catalog file (overrides CATALOG_PATH)",
    )
    recommend_parser.add_argument(
        "--json", action="store_true", help="Print results as JSON"
    )

    # Insights
    insights_parser = subparsers.add_parser(
        "insights",
        help="Show booking and spending insights for a user",
    )
    insights_parser.add_argument("--user", required=True, help="User id")
    insights_parser.add_argument(
        "--json", action="store_true", help="Print insights as JSON"
    )

    # Book
    book_parser = subparsers.add_parser(
        "book",
        help="Record a booking in a user's history",
    )
    book_parser.add_argument("--user", required=True, help="User id")
    book_parser.add_argument("--provider", required=True, help="Provider id")
    book_parser.add_argument(
        "--service-type", required=True, help="Service type booked"
    )
    book_parser.add_argument("--cost", type=float, required=True, help="Amount paid")
    book_parser.add_argument(
        "--rating", type=_rating, default=None, help="Rating given (1-5)"
    )

    return parser


def _build_context(parsed: argparse.Namespace) -> RecommendationContext | None:
    """Build the request context from CLI flags; None when no hint was given."""
    location = None
    if parsed.lat is not None and parsed.lng is not None:
        location = GeoPoint(lat=parsed.lat, lng=parsed.lng)

    budget = None
    if parsed.budget_min is not None or parsed.budget_max is not None:
        budget = PriceRange(
            min=parsed.budget_min if parsed.budget_min is not None else 0.0,
            max=(
                parsed.budget_max
                if parsed.budget_max is not None
                else get_profile_config().default_price_max
            ),
        )

    context = RecommendationContext(
        location=location,
        urgency=parsed.urgency,
        budget=budget,
        timeframe=parsed.timeframe,
    )
    if not context.filters_used():
        return None
    return context


def _print_results(results: list[RecommendationResult]) -> None:
    if not results:
        print("No providers found.")
        return

    for rank, result in enumerate(results, start=1):
        provider = result.provider
        print(
            f"{rank}. {provider.name} ({provider.category}) "
            f"fit={result.estimated_fit:.0f} confidence={result.confidence:.2f} "
            f"rating={provider.rating:g}"
        )
        for reason in result.reasons:
            print(f"   + {reason.description}")
        for concern in result.potential_concerns:
            print(f"   - {concern}")
        for insight in result.insights:
            print(f"   ! {insight.message}")


def _print_insights(insights: UserInsights) -> None:
    print(f"User: {insights.user_id}")
    if insights.preferred_categories:
        print("Preferred categories:")
        for item in insights.preferred_categories:
            print(f"- {item.category}: {item.count}")
    spending = insights.spending
    print(
        f"Spending: avg={spending.avg_spend:.2f} recent={spending.recent_avg:.2f} "
        f"trend={spending.trend}"
    )
    trends = insights.booking_trends
    print(
        f"Bookings: frequency={trends.frequency} seasonality={trends.seasonality} "
        f"urgency={trends.urgency_pattern}"
    )
    satisfaction = insights.satisfaction
    print(
        f"Satisfaction: avg={satisfaction.avg_satisfaction:.2f} "
        f"recent={satisfaction.recent_satisfaction:.2f} trend={satisfaction.trend}"
    )


async def _run_recommend(
    parsed: argparse.Namespace, settings: Settings, store: SqliteProfileStore
) -> int:
    catalog_path = parsed.catalog or settings.catalog_path
    try:
        catalog = load_catalog(catalog_path)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error loading catalog: {e}", file=sys.stderr)
        return 1

    engine = RecommendationEngine(store, catalog)
    outcome = await engine.recommend(
        parsed.user,
        parsed.query,
        context=_build_context(parsed),
        limit=parsed.limit or settings.default_limit,
    )

    if parsed.json:
        print(json.dumps([r.to_dict() for r in outcome.results], indent=2))
    else:
        _print_results(outcome.results)
    return 0


async def _run_insights(parsed: argparse.Namespace, store: SqliteProfileStore) -> int:
    profile = await store.get(parsed.user)
    if profile is None:
        print(f"Unknown user: {parsed.user}", file=sys.stderr)
        return 1

    insights = build_user_insights(profile)
    if parsed.json:
        print(json.dumps(insights.to_dict(), indent=2))
    else:
        _print_insights(insights)
    return 0


async def _run_book(parsed: argparse.Namespace, store: SqliteProfileStore) -> int:
    booking = BookingRecord(
        provider_id=parsed.provider,
        service_type=parsed.service_type,
        rating=parsed.rating,
        cost=parsed.cost,
    )
    profile = await store.record_booking(parsed.user, booking)
    print(f"ok ({profile.booking_count} bookings)")
    return 0


async def _dispatch(parsed: argparse.Namespace, settings: Settings) -> int:
    store = SqliteProfileStore(parsed.db)
    await store.initialize()
    try:
        if parsed.mode == "recommend":
            return await _run_recommend(parsed, settings, store)
        if parsed.mode == "insights":
            return await _run_insights(parsed, store)
        if parsed.mode == "book":
            return await _run_book(parsed, store)
        print(f"Unknown command: {parsed.mode}", file=sys.stderr)
        return 1
    finally:
        await store.close()


def main(args: list[str] | None = None) -> int:
    """Main entry point for the application.

    Args:
        args: Command line arguments (defaults to sys.argv[1:]).

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = create_parser()
    parsed = parser.parse_args(args)
    if parsed.mode == "recommend" and (parsed.lat is None) != (parsed.lng is None):
        parser.error("--lat and --lng must be given together")

    # Load settings
    try:
        settings = Settings()
    except Exception as e:
        print(f"Error loading settings: {e}", file=sys.stderr)
        return 1

    # Configure logging
    log_level = parsed.log_level or settings.log_level
    logger = configure_logging(
        level=log_level,
        matching_level=parsed.matching_log_level or settings.matching_log_level,
    )

    # If no command specified, show help
    if parsed.mode is None:
        parser.print_help()
        return 0

    logger.info("servicematch v%s running %s", __version__, parsed.mode)

    try:
        return asyncio.run(_dispatch(parsed, settings))
    except Exception as e:
        logger.exception("Command %s failed", parsed.mode)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
