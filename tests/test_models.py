"""Tests for data models."""

from prospector.models import (
    DEFAULT_LOCATION,
    AIInsight,
    BusinessData,
    InsightSource,
    Location,
    Prospect,
    SearchResult,
    UserStatus,
)


class TestBusinessData:
    """Test BusinessData normalization and serialization."""

    def test_blank_strings_become_none(self):
        """Empty or whitespace fields should read as unknown."""
        business = BusinessData(name="Chez Paul", website="", phone="   ", email=" ")
        assert business.website is None
        assert business.phone is None
        assert business.email is None

    def test_to_dict_omits_unknown_fields(self):
        """Unknown values should not be serialized."""
        data = BusinessData(name="Chez Paul", rating=4.2).to_dict()
        assert data == {"name": "Chez Paul", "rating": 4.2}

    def test_to_dict_uses_camel_case_keys(self):
        """Stored keys should keep the persisted naming."""
        data = BusinessData(name="A", user_rating_count=3, place_id="p1").to_dict()
        assert data["userRatingCount"] == 3
        assert data["placeId"] == "p1"

    def test_from_dict_accepts_snake_case(self):
        """Either key style should load."""
        business = BusinessData.from_dict({"name": "A", "user_rating_count": "7", "place_id": "x"})
        assert business.user_rating_count == 7
        assert business.place_id == "x"


class TestAIInsight:
    """Test insight scales."""

    def test_heuristic_score_rescaled_to_100(self):
        """A 0-10 score should be multiplied by 10."""
        insight = AIInsight(8, "Pas de site web", "Création Site Web", True,
                            scale=10, source=InsightSource.HEURISTIC)
        assert insight.normalized().score == 80
        assert insight.normalized().scale == 100

    def test_canonical_insight_unchanged(self):
        """An insight already on 0-100 should be returned as is."""
        insight = AIInsight(55, "ok", "SEO", False)
        assert insight.normalized() is insight

    def test_failed_flag(self):
        """Only error-sourced insights are failed."""
        assert AIInsight(0, "x", "y", False, source=InsightSource.ERROR).failed
        assert not AIInsight(0, "x", "y", False).failed

    def test_dict_round_trip_keeps_source(self):
        """Source and scale should survive serialization."""
        insight = AIInsight(7, "a", "b", True, scale=10, source=InsightSource.HEURISTIC)
        restored = AIInsight.from_dict(insight.to_dict())
        assert restored == insight


class TestProspect:
    """Test prospect creation."""

    def test_from_result_copies_business_and_location(self, sample_result):
        """Prospect should start as New with the result's data."""
        prospect = Prospect.from_result(sample_result)
        assert prospect.business_data == sample_result.business_data
        assert prospect.location == sample_result.location
        assert prospect.user_status == UserStatus.NEW
        assert prospect.ai_insight is None
        assert prospect.created_at > 0

    def test_from_result_generates_unique_ids(self, sample_result):
        """Saving twice should create two prospects."""
        assert Prospect.from_result(sample_result).id != Prospect.from_result(sample_result).id

    def test_missing_location_uses_fallback(self, sample_business):
        """A result without coordinates should get the fallback centre."""
        result = SearchResult(source_id="gen-1-0", business_data=sample_business)
        assert Prospect.from_result(result).location == DEFAULT_LOCATION
        custom = Location(lat=45.0, lng=4.0)
        assert Prospect.from_result(result, fallback_location=custom).location == custom

    def test_insight_is_normalized(self, sample_result):
        """Stored insight should be on the canonical scale."""
        insight = AIInsight(9, "a", "b", True, scale=10, source=InsightSource.HEURISTIC)
        prospect = Prospect.from_result(sample_result, insight)
        assert prospect.ai_insight.score == 90
        assert prospect.score == 90

    def test_failed_insight_not_kept(self, sample_result):
        """A failed analysis should never be persisted."""
        failed = AIInsight(0, "analysis error", "verify manually", False, source=InsightSource.ERROR)
        prospect = Prospect.from_result(sample_result, failed)
        assert prospect.ai_insight is None
        assert prospect.score == 0

    def test_dict_round_trip(self, sample_result):
        """A prospect should load back identical."""
        prospect = Prospect.from_result(sample_result, AIInsight(72, "a", "b", True))
        prospect.user_status = UserStatus.CONTACTED
        data = prospect.to_dict()
        assert data["createdAt"] == prospect.created_at
        assert Prospect.from_dict(data) == prospect
