"""Local potential scoring, used as a fallback to the AI analysis."""

from .heuristic import score_business, get_score_breakdown

__all__ = [
    "score_business",
    "get_score_breakdown",
]
