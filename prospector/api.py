"""
Programmatic API for the Maps Prospector.

Usage:
    from prospector import search_businesses, analyze_business

    results = search_businesses("plombier", "Marseille")
    insight = analyze_business(results[0].business_data)
"""

import asyncio
import logging
from typing import List, Optional

from prospector.config import Settings, load_config
from prospector.filters import FilterPredicates, filter_results
from prospector.gemini import Analyzer, EmailFinder, SearchAdapter
from prospector.models import AIInsight, BusinessData, SearchResult

logger = logging.getLogger(__name__)


def _settings(settings: Optional[Settings], config_path: Optional[str]) -> Settings:
    if settings is not None:
        return settings
    return load_config(config_path) if config_path else Settings()


def search_businesses(
    query: str,
    locality: str,
    max_rating: Optional[float] = None,
    no_website_only: bool = False,
    min_score: Optional[float] = None,
    settings: Optional[Settings] = None,
    config_path: Optional[str] = None,
) -> List[SearchResult]:
    """
    Search businesses and apply filters.

    Args:
        query: Trade or keyword (e.g., "boulangerie")
        locality: City or area (e.g., "Lyon")
        max_rating: Keep businesses rated at most this
        no_website_only: Keep businesses without a website
        min_score: Minimum local score (0-10)
        settings: Settings to use (default: environment)
        config_path: Optional path to YAML config

    Returns:
        List of SearchResult, empty when nothing was found or the AI failed

    Example:
        results = search_businesses("coiffeur", "Nantes", no_website_only=True)
        for r in results:
            print(r.business_data.name, r.business_data.phone)
    """
    settings = _settings(settings, config_path)
    adapter = SearchAdapter.from_settings(settings)

    outcome = asyncio.run(adapter.search_detailed(query, locality))
    for error in outcome.errors:
        logger.warning("Search problem: %s", error)

    predicates = FilterPredicates(
        max_rating=max_rating,
        no_website_only=no_website_only,
        min_score=min_score,
    )
    return filter_results(outcome.results.results, predicates, outcome.results.scores)


def analyze_business(
    business: BusinessData,
    settings: Optional[Settings] = None,
) -> AIInsight:
    """Deep-analyse one business (0-100). Check insight.failed before use."""
    analyzer = Analyzer.from_settings(_settings(settings, None))
    return asyncio.run(analyzer.analyze(business))


def find_business_email(
    business: BusinessData,
    settings: Optional[Settings] = None,
) -> Optional[str]:
    """Look up the public contact email of one business."""
    finder = EmailFinder.from_settings(_settings(settings, None))
    return asyncio.run(finder.find_email(business))
