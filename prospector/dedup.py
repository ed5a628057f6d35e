"""Merging of multi-strategy search results."""

import logging
import re
from dataclasses import dataclass, field, replace
from typing import Iterable, Optional

from .config import ScoringConfig
from .models import AIInsight, BusinessData, SearchResult
from .scoring import score_business

logger = logging.getLogger(__name__)

# Legal-form suffixes ignored when comparing names
NAME_SUFFIXES = [
    "sarl",
    "sas",
    "sasu",
    "eurl",
    "sa",
    "sci",
    "ltd",
    "inc",
    "llc",
]


def normalize_name(name: str) -> str:
    """
    Normalize business name for comparison.

    Args:
        name: Business name

    Returns:
        Normalized name (lowercase, no punctuation, single spaces)
    """
    if not name:
        return ""

    normalized = name.lower()

    for suffix in NAME_SUFFIXES:
        normalized = re.sub(rf"\s+{re.escape(suffix)}\.?$", "", normalized)

    # Remove special characters except spaces
    normalized = re.sub(r"[^\w\s]", " ", normalized)

    # Normalize whitespace
    normalized = " ".join(normalized.split())

    return normalized


def dedup_keys(business: BusinessData, exact_names: bool = False) -> list[str]:
    """
    Keys identifying a business within a search session.

    Args:
        business: The business
        exact_names: Compare raw names only (case-sensitive)

    Returns:
        Every key under which this business counts as already seen
    """
    if exact_names:
        return [f"name:{business.name}"]

    keys = [f"name:{normalize_name(business.name) or business.name}"]
    if business.place_id:
        keys.append(f"place:{business.place_id}")
    return keys


@dataclass
class AggregatedResults:
    """Deduplicated results plus their transient local scores."""

    results: list[SearchResult] = field(default_factory=list)
    # Keyed by source_id; kept apart so SearchResult stays the canonical shape
    scores: dict[str, AIInsight] = field(default_factory=dict)

    def score_for(self, source_id: str) -> Optional[AIInsight]:
        return self.scores.get(source_id)

    def __len__(self) -> int:
        return len(self.results)

    def __iter__(self):
        return iter(self.results)


def aggregate_results(
    batches: Iterable[Iterable[SearchResult]],
    generation: int = 0,
    exact_names: bool = False,
    scoring_config: Optional[ScoringConfig] = None,
) -> AggregatedResults:
    """
    Merge the batches returned by each search strategy.

    First seen wins. Every kept result gets a fresh session id
    (gen-<generation>-<index>) and a local heuristic score.

    Args:
        batches: One sequence of results per strategy, in dispatch order
        generation: Search generation the results belong to
        exact_names: Deduplicate on the exact, case-sensitive name only
        scoring_config: Weights for the local score

    Returns:
        AggregatedResults
    """
    aggregated = AggregatedResults()
    seen: set[str] = set()
    total = 0

    for batch in batches:
        for result in batch:
            total += 1
            keys = dedup_keys(result.business_data, exact_names)
            if any(key in seen for key in keys):
                logger.debug("Dropping duplicate: %s", result.business_data.name)
                continue
            seen.update(keys)

            source_id = f"gen-{generation}-{len(aggregated.results)}"
            aggregated.results.append(replace(result, source_id=source_id))
            aggregated.scores[source_id] = score_business(result.business_data, scoring_config)

    logger.info(
        "Merged %d results down to %d unique businesses",
        total,
        len(aggregated.results),
    )

    return aggregated
