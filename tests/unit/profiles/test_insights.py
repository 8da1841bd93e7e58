"""Tests for user insight analytics."""

from datetime import UTC, datetime

import pytest


def _at(month: int) -> datetime:
    return datetime(2026, month, 5, tzinfo=UTC)


class TestPreferredCategories:
    def test_top_categories_by_count(self, make_profile, make_booking):
        from src.profiles.insights import preferred_categories

        profile = make_profile(
            bookings=[
                make_booking(service_type="plumbing"),
                make_booking(service_type="cleaning"),
                make_booking(service_type="cleaning"),
                make_booking(service_type="gardening"),
            ]
        )

        result = preferred_categories(profile)
        assert [(c.category, c.count) for c in result] == [
            ("cleaning", 2),
            ("plumbing", 1),
            ("gardening", 1),
        ]

    def test_at_most_five(self, make_profile, make_booking):
        from src.profiles.insights import preferred_categories

        profile = make_profile(
            bookings=[make_booking(service_type=f"type{i}") for i in range(8)]
        )
        assert len(preferred_categories(profile)) == 5


class TestSpendingPattern:
    def test_no_bookings(self, make_profile):
        from src.profiles.insights import spending_pattern

        pattern = spending_pattern(make_profile())
        assert pattern.avg_spend == 0
        assert pattern.trend == "stable"

    def test_increasing(self, make_profile, make_booking):
        from src.profiles.insights import spending_pattern

        costs = [50, 50, 50, 50, 50, 200, 200, 200, 200, 200]
        profile = make_profile(bookings=[make_booking(cost=c) for c in costs])

        pattern = spending_pattern(profile)
        assert pattern.avg_spend == pytest.approx(125)
        assert pattern.recent_avg == pytest.approx(200)
        assert pattern.trend == "increasing"

    def test_decreasing(self, make_profile, make_booking):
        from src.profiles.insights import spending_pattern

        costs = [300, 300, 300, 300, 300, 100, 100, 100, 100, 100]
        profile = make_profile(bookings=[make_booking(cost=c) for c in costs])

        assert spending_pattern(profile).trend == "decreasing"


class TestBookingTrends:
    def test_frequency_buckets(self, make_profile, make_booking):
        from src.profiles.insights import booking_trends

        assert booking_trends(make_profile()).frequency == "low"
        medium = make_profile(bookings=[make_booking() for _ in range(4)])
        assert booking_trends(medium).frequency == "medium"
        high = make_profile(bookings=[make_booking() for _ in range(11)])
        assert booking_trends(high).frequency == "high"

    def test_seasonality_detected(self, make_profile, make_booking):
        from src.profiles.insights import booking_trends

        months = [6, 7, 7, 8, 1]
        profile = make_profile(bookings=[make_booking(booked_at=_at(m)) for m in months])
        assert booking_trends(profile).seasonality == "summer"

    def test_year_round_when_spread(self, make_profile, make_booking):
        from src.profiles.insights import booking_trends

        months = [1, 4, 7, 10]
        profile = make_profile(bookings=[make_booking(booked_at=_at(m)) for m in months])
        assert booking_trends(profile).seasonality == "year_round"

    def test_urgency_pattern_from_sessions(self, make_profile):
        from src.profiles.insights import booking_trends
        from src.profiles.models import SessionSummary

        profile = make_profile()
        assert booking_trends(profile).urgency_pattern == "unknown"

        profile.behavior.sessions = [SessionSummary(urgency="high") for _ in range(4)]
        assert booking_trends(profile).urgency_pattern == "urgent"

        profile.behavior.sessions = [SessionSummary(urgency="low") for _ in range(4)]
        assert booking_trends(profile).urgency_pattern == "planned"

        profile.behavior.sessions = [
            SessionSummary(urgency="high"),
            SessionSummary(urgency="low"),
        ]
        assert booking_trends(profile).urgency_pattern == "mixed"


class TestSatisfactionTrend:
    def test_unknown_without_ratings(self, make_profile, make_booking):
        from src.profiles.insights import satisfaction_trend

        profile = make_profile(bookings=[make_booking(rating=None)])
        assert satisfaction_trend(profile).trend == "unknown"

    def test_declining(self, make_profile, make_booking):
        from src.profiles.insights import satisfaction_trend

        ratings = [5, 5, 5, 5, 2, 2, 2]
        profile = make_profile(bookings=[make_booking(rating=r) for r in ratings])

        trend = satisfaction_trend(profile)
        assert trend.recent_satisfaction == pytest.approx(2)
        assert trend.trend == "declining"

    def test_stable(self, make_profile, make_booking):
        from src.profiles.insights import satisfaction_trend

        profile = make_profile(bookings=[make_booking(rating=4) for _ in range(5)])
        assert satisfaction_trend(profile).trend == "stable"


class TestBuildUserInsights:
    def test_is_deterministic(self, make_profile, make_booking):
        from src.profiles.insights import build_user_insights

        profile = make_profile(bookings=[make_booking(cost=80, rating=4)])

        first = build_user_insights(profile)
        assert first == build_user_insights(profile)
        assert first.user_id == "u1"
        assert first.to_dict()["spending"]["avg_spend"] == 80
