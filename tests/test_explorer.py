"""Tests for the exploration session."""

import asyncio
import json

import pytest

from prospector.dedup import AggregatedResults
from prospector.gemini import GeminiError, SearchOutcome
from prospector.models import AIInsight, InsightSource

from conftest import FakeGemini, by_strategy


class TestSearchGenerations:
    """Test that stale answers never overwrite newer results."""

    @pytest.mark.asyncio
    async def test_search_stores_results(self, make_session, search_answers):
        session = make_session(FakeGemini(by_strategy(search_answers)))
        results = await session.search("boulangerie", "Lyon")

        assert len(results) == 4
        assert session.generation == 1
        assert session.query == "boulangerie"
        assert session.locality == "Lyon"
        assert session.searching is False

    def test_stale_outcome_discarded(self, make_session):
        session = make_session(FakeGemini())
        first = session.begin_search("boulangerie", "Lyon")
        second = session.begin_search("fleuriste", "Lyon")

        assert session.accept(SearchOutcome(generation=first)) is False
        assert session.searching is True
        assert session.accept(SearchOutcome(generation=second)) is True

    @pytest.mark.asyncio
    async def test_late_answer_does_not_overwrite(self, make_session):
        """The slow first search finishes last and is dropped."""
        def responder(prompt, tools):
            if "fleuriste" in prompt:
                return json.dumps([{"name": "Fleurs de Lyon"}])
            return json.dumps([{"name": "Boulangerie Dupont"}])

        fake = FakeGemini(responder, delay=lambda prompt: 0.05 if "boulangerie" in prompt else 0)
        session = make_session(fake)

        await asyncio.gather(
            session.search("boulangerie", "Lyon"),
            session.search("fleuriste", "Lyon"),
        )

        assert session.generation == 2
        assert [r.business_data.name for r in session.results] == ["Fleurs de Lyon"]

    @pytest.mark.asyncio
    async def test_blank_search_keeps_results(self, make_session, search_answers):
        session = make_session(FakeGemini(by_strategy(search_answers)))
        await session.search("boulangerie", "Lyon")
        await session.search("", "Lyon")
        assert session.generation == 1
        assert len(session.results) == 4

    @pytest.mark.asyncio
    async def test_errors_surface(self, make_session):
        session = make_session(FakeGemini(lambda prompt, tools: GeminiError("boom")))
        await session.search("boulangerie", "Lyon")
        assert len(session.results) == 0
        assert len(session.errors) == 3


class TestSelectionAndFilters:
    """Test selection and filtering."""

    @pytest.mark.asyncio
    async def test_filtered(self, make_session, search_answers):
        session = make_session(FakeGemini(by_strategy(search_answers)))
        await session.search("boulangerie", "Lyon")
        session.filters.no_website_only = True
        assert [r.business_data.name for r in session.filtered()] == ["Boulangerie Dupont", "Pain & Co"]

    @pytest.mark.asyncio
    async def test_select(self, make_session, search_answers):
        session = make_session(FakeGemini(by_strategy(search_answers)))
        await session.search("boulangerie", "Lyon")
        session.select("gen-1-1")
        assert session.selected.business_data.name == "Chez Paul"

    def test_unknown_result(self, make_session):
        session = make_session(FakeGemini())
        with pytest.raises(KeyError):
            session.get_result("gen-9-9")
        assert session.selected is None


class TestAnalyzeEnrichSave:
    """Test actions on one result."""

    @pytest.fixture
    def session(self, make_session):
        session = make_session(FakeGemini())
        outcome = SearchOutcome(generation=session.begin_search("boulangerie", "Lyon"))
        session.accept(outcome)
        return session

    def _load(self, session, sample_result):
        session.results = AggregatedResults(
            results=[sample_result],
            scores={sample_result.source_id: AIInsight(
                8, "Pas de site web", "Création Site Web", True,
                scale=10, source=InsightSource.HEURISTIC,
            )},
        )

    @pytest.mark.asyncio
    async def test_enrich_merges_email(self, session, sample_result):
        self._load(session, sample_result)
        session.email_finder.client = FakeGemini(lambda prompt, tools: "contact@dupont.fr")

        email = await session.enrich(sample_result.source_id)

        assert email == "contact@dupont.fr"
        assert session.get_result(sample_result.source_id).business_data.email == "contact@dupont.fr"

    @pytest.mark.asyncio
    async def test_enrich_after_new_search_not_merged(self, session, sample_result):
        self._load(session, sample_result)
        session.email_finder.client = FakeGemini(lambda prompt, tools: "contact@dupont.fr", delay=0.05)

        task = asyncio.create_task(session.enrich(sample_result.source_id))
        await asyncio.sleep(0)
        session.begin_search("fleuriste", "Lyon")
        self._load(session, sample_result)

        assert await task == "contact@dupont.fr"
        assert session.get_result(sample_result.source_id).business_data.email is None

    def test_save_uses_local_score(self, session, sample_result, store):
        self._load(session, sample_result)
        prospect = session.save(sample_result.source_id)

        assert prospect.ai_insight.score == 80
        assert prospect.ai_insight.scale == 100
        assert store.list() == [prospect]

    @pytest.mark.asyncio
    async def test_save_uses_ai_analysis(self, session, sample_result, store):
        self._load(session, sample_result)
        session.analyzer.client = FakeGemini(lambda prompt, tools: json.dumps({
            "score": 64, "analysis_summary": "ok", "suggested_offer": "SEO", "is_target": True,
        }))
        await session.analyze(sample_result.source_id)

        prospect = session.save(sample_result.source_id)
        assert prospect.ai_insight.score == 64
        assert prospect.ai_insight.source == InsightSource.AI

    @pytest.mark.asyncio
    async def test_failed_analysis_not_saved(self, session, sample_result):
        """A failed analysis falls back to the local score."""
        self._load(session, sample_result)
        session.analyzer.client = FakeGemini(lambda prompt, tools: GeminiError("boom"))
        insight = await session.analyze(sample_result.source_id)
        assert insight.failed

        prospect = session.save(sample_result.source_id)
        assert prospect.ai_insight.source == InsightSource.HEURISTIC
        assert prospect.ai_insight.score == 80

    def test_save_twice_creates_two_prospects(self, session, sample_result, store):
        self._load(session, sample_result)
        session.save(sample_result.source_id)
        session.save(sample_result.source_id)
        assert len(store.list()) == 2

    def test_export_csv(self, session, sample_result):
        self._load(session, sample_result)
        filename, content = session.export_csv()
        assert filename == "prospects_boulangerie_Lyon.csv"
        assert '"Boulangerie Dupont"' in content
        assert content.splitlines()[1].endswith('"8"')

    def test_map_points(self, session, sample_result):
        self._load(session, sample_result)
        points = session.map_points()
        assert points[0].label == "Boulangerie Dupont"
        assert points[0].approximate is False
