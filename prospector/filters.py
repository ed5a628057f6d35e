"""Client-side filtering of search results."""

from dataclasses import dataclass
from typing import Iterable, Mapping, Optional

from .models import AIInsight, SearchResult
from .scoring import score_business


@dataclass
class FilterPredicates:
    """User-selected filters, combined with AND."""

    max_rating: Optional[float] = None  # keep ratings at most this (underperformers)
    no_website_only: bool = False
    min_score: Optional[float] = None  # on the 0-10 local score scale

    @property
    def active(self) -> bool:
        return (
            self.max_rating is not None
            or self.no_website_only
            or self.min_score is not None
        )


def filter_results(
    results: Iterable[SearchResult],
    predicates: Optional[FilterPredicates] = None,
    scores: Optional[Mapping[str, AIInsight]] = None,
) -> list[SearchResult]:
    """
    Apply filters to search results.

    Results without a rating pass the max_rating filter. The input is
    never modified.

    Args:
        results: Results to filter
        predicates: Filters to apply (none = keep everything)
        scores: Local scores keyed by source_id (computed when missing)

    Returns:
        New list of the results passing every filter
    """
    if predicates is None or not predicates.active:
        return list(results)

    scores = scores or {}
    kept = []

    for result in results:
        business = result.business_data

        if (
            predicates.max_rating is not None
            and business.rating is not None
            and business.rating > predicates.max_rating
        ):
            continue

        if predicates.no_website_only and business.website:
            continue

        if predicates.min_score is not None:
            insight = scores.get(result.source_id) or score_business(business)
            if insight.score < predicates.min_score:
                continue

        kept.append(result)

    return kept
