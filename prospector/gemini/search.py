"""Grounded business search through Gemini."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional

from ..config import ScoringConfig, Settings
from ..dedup import AggregatedResults, aggregate_results
from ..models import Location, SearchResult
from .client import MAPS_TOOL, AuthenticationError, GeminiClient, GeminiError
from .parsing import parse_json_payload, parse_search_results
from .prompts import SEARCH_STRATEGIES, build_search_prompt

logger = logging.getLogger(__name__)

DEFAULT_STRATEGIES = ["low_presence", "popular", "nearby"]


@dataclass
class SearchOutcome:
    """Results of one search plus what went wrong along the way."""

    results: AggregatedResults = field(default_factory=AggregatedResults)
    errors: list[str] = field(default_factory=list)
    generation: int = 0

    @property
    def degraded(self) -> bool:
        """True when at least one strategy failed (provider or parse error)."""
        return bool(self.errors)


class SearchAdapter:
    """
    Runs several prompt strategies concurrently and merges their answers.

    Never raises: provider, network and parse failures give empty batches.

    Usage:
        adapter = SearchAdapter(GeminiClient())
        results = await adapter.search("boulangerie", "Lyon")
    """

    def __init__(
        self,
        client: Optional[GeminiClient],
        strategies: Optional[list[str]] = None,
        model: Optional[str] = None,
        min_results: int = 5,
        exact_names: bool = False,
        scoring_config: Optional[ScoringConfig] = None,
        near: Optional[Location] = None,
    ):
        strategies = list(strategies or DEFAULT_STRATEGIES)
        unknown = [s for s in strategies if s not in SEARCH_STRATEGIES]
        if unknown:
            raise ValueError(f"Unknown search strategies: {', '.join(unknown)}")

        self.client = client
        self.strategies = strategies
        self.model = model
        self.min_results = min_results
        self.exact_names = exact_names
        self.scoring_config = scoring_config
        self.near = near

    @classmethod
    def from_settings(cls, settings: Settings, client: Optional[GeminiClient] = None) -> "SearchAdapter":
        if client is None:
            try:
                client = GeminiClient.from_settings(settings, model=settings.search_model)
            except AuthenticationError as e:
                logger.warning("Search disabled: %s", e)
        return cls(
            client,
            strategies=settings.strategies,
            model=settings.search_model,
            min_results=settings.min_results,
            exact_names=settings.exact_name_dedup,
        )

    async def search(self, query: str, locality: str, generation: int = 0) -> list[SearchResult]:
        """Search businesses matching query in locality."""
        outcome = await self.search_detailed(query, locality, generation)
        return outcome.results.results

    async def search_detailed(self, query: str, locality: str, generation: int = 0) -> SearchOutcome:
        """
        Search businesses and report per-strategy failures.

        Args:
            query: Trade or keyword (e.g., "boulangerie")
            locality: City or area (e.g., "Lyon")
            generation: Search generation to tag the results with

        Returns:
            SearchOutcome with deduplicated results and error messages
        """
        query = query.strip()
        locality = locality.strip()
        if not query or not locality:
            return SearchOutcome(generation=generation)

        if self.client is None:
            return SearchOutcome(
                errors=["Gemini API key not configured"],
                generation=generation,
            )

        logger.info("Gemini search: %s in %s (%d strategies)", query, locality, len(self.strategies))

        batches = await asyncio.gather(*(
            self._run_strategy(query, locality, strategy)
            for strategy in self.strategies
        ))

        errors = [error for _, error in batches if error]
        results = aggregate_results(
            [batch for batch, _ in batches],
            generation=generation,
            exact_names=self.exact_names,
            scoring_config=self.scoring_config,
        )

        logger.info(
            "Gemini search returned %d unique businesses (%d strategies failed)",
            len(results),
            len(errors),
        )

        return SearchOutcome(results=results, errors=errors, generation=generation)

    async def _run_strategy(
        self,
        query: str,
        locality: str,
        strategy: str,
    ) -> tuple[list[SearchResult], Optional[str]]:
        """Run one prompt strategy. Returns (results, error message)."""
        prompt = build_search_prompt(query, locality, strategy, self.min_results)

        try:
            response = await self.client.generate(
                prompt,
                tools=(MAPS_TOOL,),
                model=self.model,
                location=self.near,
            )
        except GeminiError as e:
            logger.error("Search strategy %s failed: %s", strategy, e)
            return [], f"{strategy}: {e}"

        try:
            payload = parse_json_payload(response.text)
        except ValueError as e:
            logger.warning("Search strategy %s returned unparsable JSON: %s", strategy, e)
            return [], f"{strategy}: unparsable response"

        try:
            results = parse_search_results(payload, prefix=strategy)
        except (ValueError, TypeError, OverflowError) as e:
            logger.warning("Search strategy %s returned malformed results: %s", strategy, e)
            return [], f"{strategy}: unparsable response"

        logger.debug("Strategy %s: %d results", strategy, len(results))
        return results, None
