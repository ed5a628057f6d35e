"""Gemini adapters: grounded search, deep analysis and email discovery."""

from .client import (
    GeminiClient,
    GeminiResponse,
    GeminiError,
    AuthenticationError,
    RateLimitError,
    ResponseError,
    MAPS_TOOL,
    SEARCH_TOOL,
)
from .search import SearchAdapter, SearchOutcome
from .analysis import Analyzer, analysis_error_insight
from .enrichment import EmailFinder, extract_email

__all__ = [
    "GeminiClient",
    "GeminiResponse",
    "GeminiError",
    "AuthenticationError",
    "RateLimitError",
    "ResponseError",
    "MAPS_TOOL",
    "SEARCH_TOOL",
    "SearchAdapter",
    "SearchOutcome",
    "Analyzer",
    "analysis_error_insight",
    "EmailFinder",
    "extract_email",
]
