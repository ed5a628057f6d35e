"""Tests for the programmatic API."""

import json

import pytest

from prospector import analyze_business, find_business_email, search_businesses
from prospector.gemini import Analyzer, EmailFinder, SearchAdapter

from conftest import FakeGemini, by_strategy


@pytest.fixture
def patch_factory(monkeypatch):
    def install(cls, fake):
        monkeypatch.setattr(
            cls, "from_settings", staticmethod(lambda settings, client=None: cls(fake)),
        )
    return install


class TestSearchBusinesses:
    """Test search_businesses()."""

    def test_returns_filtered_results(self, patch_factory, settings, search_answers):
        patch_factory(SearchAdapter, FakeGemini(by_strategy(search_answers)))
        results = search_businesses("boulangerie", "Lyon", no_website_only=True, settings=settings)
        assert [r.business_data.name for r in results] == ["Boulangerie Dupont", "Pain & Co"]

    def test_min_score(self, patch_factory, settings, search_answers):
        patch_factory(SearchAdapter, FakeGemini(by_strategy(search_answers)))
        results = search_businesses("boulangerie", "Lyon", min_score=10, settings=settings)
        assert [r.business_data.name for r in results] == ["Boulangerie Dupont"]

    def test_without_key_returns_nothing(self, monkeypatch, settings):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        monkeypatch.delenv("API_KEY", raising=False)
        assert search_businesses("boulangerie", "Lyon", settings=settings) == []


class TestSingleBusiness:
    """Test analyze_business() and find_business_email()."""

    def test_analyze(self, patch_factory, settings, sample_business):
        patch_factory(Analyzer, FakeGemini(lambda prompt, tools: json.dumps({
            "score": 55, "analysis_summary": "ok", "suggested_offer": "SEO", "is_target": False,
        })))
        insight = analyze_business(sample_business, settings=settings)
        assert insight.score == 55
        assert not insight.failed

    def test_find_email(self, patch_factory, settings, sample_business):
        patch_factory(EmailFinder, FakeGemini(lambda prompt, tools: "null"))
        assert find_business_email(sample_business, settings=settings) is None
