"""
Exploration session: search, filter, analyse, enrich and save.

Holds the state a user works with between searches. Each search is tagged
with a generation number; an answer that arrives after a newer search was
started is discarded instead of overwriting the newer results.
"""

import logging
from dataclasses import replace
from typing import Optional

from .config import Settings
from .dedup import AggregatedResults
from .export import export_csv_string, export_filename
from .filters import FilterPredicates, filter_results
from .gemini import Analyzer, EmailFinder, SearchAdapter, SearchOutcome
from .mapview import MapPoint, map_points
from .models import AIInsight, Prospect, SearchResult
from .storage import ProspectStore, SQLStore

logger = logging.getLogger(__name__)


class ExplorerSession:
    """
    State of one exploration session.

    Usage:
        session = ExplorerSession.from_settings(load_config())
        await session.search("boulangerie", "Lyon")
        insight = await session.analyze(session.results.results[0].source_id)
        session.save(session.results.results[0].source_id)
    """

    def __init__(
        self,
        searcher: SearchAdapter,
        analyzer: Analyzer,
        email_finder: EmailFinder,
        store: ProspectStore,
        settings: Optional[Settings] = None,
    ):
        self.searcher = searcher
        self.analyzer = analyzer
        self.email_finder = email_finder
        self.store = store
        self.settings = settings or Settings()

        self.query = ""
        self.locality = self.settings.default_locality
        self.results = AggregatedResults()
        self.errors: list[str] = []
        self.filters = FilterPredicates()
        self.selected_id: Optional[str] = None
        self.insights: dict[str, AIInsight] = {}
        self.searching = False
        self._generation = 0

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        store: Optional[ProspectStore] = None,
    ) -> "ExplorerSession":
        """Build a session with Gemini adapters and SQL-backed storage."""
        if store is None:
            store = ProspectStore(SQLStore(settings.database_url), settings.storage_key)
        return cls(
            searcher=SearchAdapter.from_settings(settings),
            analyzer=Analyzer.from_settings(settings),
            email_finder=EmailFinder.from_settings(settings),
            store=store,
            settings=settings,
        )

    @property
    def generation(self) -> int:
        return self._generation

    def begin_search(self, query: str, locality: str) -> int:
        """Start a new search generation and clear the previous results."""
        self._generation += 1
        self.query = query
        self.locality = locality
        self.results = AggregatedResults()
        self.errors = []
        self.selected_id = None
        self.insights.clear()
        self.searching = True
        return self._generation

    def accept(self, outcome: SearchOutcome) -> bool:
        """
        Store a search outcome if it belongs to the latest generation.

        Returns:
            False when the outcome is stale and was discarded
        """
        if outcome.generation != self._generation:
            logger.info(
                "Discarding stale results (generation %d, current %d)",
                outcome.generation,
                self._generation,
            )
            return False

        self.results = outcome.results
        self.errors = list(outcome.errors)
        self.searching = False
        return True

    async def search(self, query: str, locality: str) -> list[SearchResult]:
        """
        Run a search and keep its results if no newer search started meanwhile.

        Empty query or locality is ignored and the current results are kept.
        """
        query = query.strip()
        locality = locality.strip()
        if not query or not locality:
            return self.results.results

        generation = self.begin_search(query, locality)
        outcome = await self.searcher.search_detailed(query, locality, generation=generation)
        self.accept(outcome)
        return self.results.results

    def filtered(self) -> list[SearchResult]:
        """Current results passing the current filters."""
        return filter_results(self.results.results, self.filters, self.results.scores)

    def get_result(self, source_id: str) -> SearchResult:
        """
        Raises:
            KeyError: if no current result has this id
        """
        for result in self.results.results:
            if result.source_id == source_id:
                return result
        raise KeyError(source_id)

    def select(self, source_id: str) -> SearchResult:
        result = self.get_result(source_id)
        self.selected_id = source_id
        return result

    @property
    def selected(self) -> Optional[SearchResult]:
        if self.selected_id is None:
            return None
        try:
            return self.get_result(self.selected_id)
        except KeyError:
            return None

    async def analyze(self, source_id: str) -> AIInsight:
        """Deep-analyse a result with the AI; the insight is kept for save()."""
        result = self.select(source_id)
        insight = await self.analyzer.analyze(result.business_data)
        self.insights[source_id] = insight
        return insight

    async def enrich(self, source_id: str) -> Optional[str]:
        """Look up the email of a result and merge it into the result."""
        result = self.get_result(source_id)
        generation = self._generation
        email = await self.email_finder.enrich(source_id, result.business_data)

        if email and generation == self._generation:
            updated = replace(result, business_data=replace(result.business_data, email=email))
            self.results.results = [
                updated if r.source_id == source_id else r
                for r in self.results.results
            ]
        return email

    def is_enriching(self, source_id: str) -> bool:
        return self.email_finder.is_enriching(source_id)

    def save(self, source_id: str, insight: Optional[AIInsight] = None) -> Prospect:
        """
        Save a result to the CRM.

        Uses, in order: the given insight, the AI analysis of this session,
        the local score. A failed analysis is never stored.
        """
        result = self.get_result(source_id)
        if insight is None:
            insight = self.insights.get(source_id)
            if insight is None or insight.failed:
                insight = self.results.score_for(source_id)

        if insight is not None and insight.failed:
            logger.warning("Saving %s without its failed analysis", result.business_data.name)

        prospect = Prospect.from_result(
            result,
            insight,
            fallback_location=self.settings.default_location,
        )
        self.store.upsert(prospect)
        logger.info("Saved %s to the CRM as %s", result.business_data.name, prospect.id)
        return prospect

    def export_csv(self) -> tuple[str, str]:
        """Export the filtered results. Returns (file name, CSV content)."""
        content = export_csv_string(self.filtered(), self.results.scores)
        return export_filename(self.query, self.locality), content

    def map_points(self) -> list[MapPoint]:
        return map_points(self.filtered(), fallback=self.settings.default_location)
