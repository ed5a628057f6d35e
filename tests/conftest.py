"""Shared fixtures: a scripted Gemini client and in-memory stores."""

import asyncio
import json

import pytest

from prospector.config import Settings
from prospector.explorer import ExplorerSession
from prospector.gemini import Analyzer, EmailFinder, GeminiResponse, SearchAdapter
from prospector.models import BusinessData, Location, SearchResult
from prospector.storage import MemoryStore, ProspectStore

# Configure pytest-asyncio
pytest_plugins = ('pytest_asyncio',)


# Words that identify each search strategy prompt
STRATEGY_MARKERS = {
    "low_presence": "mal notés",
    "popular": "populaires",
    "nearby": "au plus près",
}


def strategy_of(prompt: str) -> str:
    for strategy, marker in STRATEGY_MARKERS.items():
        if marker in prompt:
            return strategy
    return ""


class FakeGemini:
    """
    Stands in for GeminiClient.

    The responder gets (prompt, tools) and returns the answer text, or an
    exception instance to raise. The delay is in seconds, or a function of
    the prompt.
    """

    def __init__(self, responder=None, delay=0.0):
        self.responder = responder or (lambda prompt, tools: "[]")
        self.delay = delay
        self.calls = []

    async def generate(self, prompt, *, tools=(), schema=None, model=None, location=None):
        self.calls.append({"prompt": prompt, "tools": tuple(tools), "schema": schema})
        delay = self.delay(prompt) if callable(self.delay) else self.delay
        if delay:
            await asyncio.sleep(delay)
        answer = self.responder(prompt, tuple(tools))
        if isinstance(answer, Exception):
            raise answer
        return GeminiResponse(text=answer)


def business_json(name, **fields) -> dict:
    return {"name": name, **fields}


def by_strategy(answers: dict):
    """Responder answering each strategy with its own JSON list."""
    def responder(prompt, tools):
        answer = answers.get(strategy_of(prompt), [])
        if isinstance(answer, Exception):
            return answer
        return answer if isinstance(answer, str) else json.dumps(answer)
    return responder


@pytest.fixture
def settings(tmp_path):
    """Settings isolated from the environment."""
    return Settings(
        gemini_api_key="",
        maps_api_key="",
        database_url=f"sqlite:///{tmp_path}/test.db",
    )


@pytest.fixture
def store():
    return ProspectStore(MemoryStore())


@pytest.fixture
def sample_business():
    return BusinessData(
        name="Boulangerie Dupont",
        rating=3.8,
        user_rating_count=42,
        phone="04 78 00 00 00",
        website=None,
        address="12 rue de la Paix, 69002 Lyon",
        place_id="ChIJ123",
    )


@pytest.fixture
def sample_result(sample_business):
    return SearchResult(
        source_id="gen-1-0",
        business_data=sample_business,
        location=Location(lat=45.76, lng=4.83),
    )


@pytest.fixture
def search_answers():
    return {
        "low_presence": [
            business_json("Boulangerie Dupont", rating=3.8, address="12 rue de la Paix",
                          latitude=45.76, longitude=4.83, placeId="p1"),
            business_json("Chez Paul", rating=4.6, website="https://chezpaul.fr"),
        ],
        "popular": [
            business_json("boulangerie dupont", rating=3.8),
            business_json("Le Fournil", rating=4.9, website="https://fournil.fr", placeId="p3"),
        ],
        "nearby": [
            business_json("Pain & Co", phone="04 72 00 00 00"),
        ],
    }


@pytest.fixture
def make_session(settings, store):
    """Build an ExplorerSession around one FakeGemini."""
    def factory(fake):
        return ExplorerSession(
            searcher=SearchAdapter(fake),
            analyzer=Analyzer(fake),
            email_finder=EmailFinder(fake),
            store=store,
            settings=settings,
        )
    return factory
