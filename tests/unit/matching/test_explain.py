"""Tests for reasons, matching factors and concerns."""

import pytest


class TestBuildReasons:
    def test_all_three_reasons(self, make_provider, make_profile, matching_config):
        from src.matching.explain import build_reasons
        from src.matching.models import ReasonType

        reasons = build_reasons(
            make_provider(), make_profile().preferences, matching_config
        )

        assert [r.type for r in reasons] == [
            ReasonType.RATING_QUALITY,
            ReasonType.AVAILABILITY_MATCH,
            ReasonType.PRICE_FIT,
        ]
        rating, response, price = reasons
        assert rating.description == "Excellent 4.5 star rating from 120 reviews"
        assert (rating.weight, rating.confidence) == (0.8, 0.9)
        assert response.description == "Quick response time of 30 minutes"
        assert (response.weight, response.confidence) == (0.6, 0.85)
        assert (price.weight, price.confidence) == (0.7, 0.95)

    def test_no_reasons(self, make_provider, make_profile, matching_config):
        from src.catalog.models import PriceRange
        from src.matching.explain import build_reasons

        provider = make_provider(
            rating=4.4,
            response_time_minutes=31,
            price_range=PriceRange(min=500, max=900),
        )
        assert build_reasons(provider, make_profile().preferences, matching_config) == []


class TestMatchingFactors:
    def test_default_factors(self, make_provider, make_profile):
        from src.matching.explain import build_matching_factors

        factors = build_matching_factors(make_provider(), make_profile().preferences)

        by_name = {f.factor: f for f in factors}
        assert list(by_name) == ["Service Category", "Price Range", "Communication Style"]
        assert by_name["Service Category"].match_percentage == pytest.approx(50)
        assert by_name["Service Category"].importance == "high"
        assert by_name["Price Range"].match_percentage == pytest.approx(100)
        assert by_name["Price Range"].user_value == {"min": 40, "max": 120}
        assert by_name["Communication Style"].match_percentage == 100
        assert by_name["Communication Style"].importance == "medium"

    def test_category_matched_on_query_without_service_types(
        self, make_provider, make_profile
    ):
        from src.matching.explain import category_match_percentage

        profile = make_profile(service_types=[])
        assert category_match_percentage(
            make_provider(), profile.preferences, "house cleaning"
        ) == pytest.approx(100)
        assert category_match_percentage(
            make_provider(), profile.preferences, "roofing"
        ) == pytest.approx(0)

    def test_partial_price_overlap(self, make_provider, make_profile):
        from src.catalog.models import PriceRange
        from src.matching.explain import price_match_percentage

        provider = make_provider(price_range=PriceRange(min=100, max=200))
        assert price_match_percentage(provider, make_profile().preferences) == pytest.approx(20)

    def test_point_price(self, make_provider, make_profile):
        from src.catalog.models import PriceRange
        from src.matching.explain import price_match_percentage

        prefs = make_profile().preferences
        inside = make_provider(price_range=PriceRange(min=80, max=80))
        outside = make_provider(price_range=PriceRange(min=300, max=300))
        assert price_match_percentage(inside, prefs) == 100
        assert price_match_percentage(outside, prefs) == 0

    @pytest.mark.parametrize(
        ("user", "provider", "expected"),
        [
            ("formal", "formal", 100),
            ("formal", "professional", 60),
            ("professional", "casual", 60),
            ("formal", "casual", 20),
            ("casual", "formal", 20),
        ],
    )
    def test_style_compatibility(self, user, provider, expected):
        from src.matching.explain import style_match_percentage

        assert style_match_percentage(user, provider) == expected


class TestFindConcerns:
    def test_no_concerns_for_good_fit(self, make_provider, make_profile):
        from src.matching.explain import find_concerns

        assert find_concerns(make_provider(), make_profile().preferences) == []

    def test_all_concerns(self, make_provider, make_profile):
        from src.catalog.models import GeoPoint, PriceRange
        from src.matching.explain import find_concerns

        provider = make_provider(
            price_range=PriceRange(min=200, max=400),
            location=GeoPoint(lat=34.05, lng=-118.24),
            response_time_minutes=150,
            review_count=5,
            completion_rate=0.8,
        )
        concerns = find_concerns(provider, make_profile().preferences)

        assert len(concerns) == 5
        assert concerns[0] == "Starting price $200 is above your budget of $120"
        assert "outside your 25 km search area" in concerns[1]
        assert concerns[2] == "Usually takes more than 2 hours to respond"
        assert concerns[3] == "Only 5 reviews so far"
        assert concerns[4] == "Completes 80% of booked jobs"
