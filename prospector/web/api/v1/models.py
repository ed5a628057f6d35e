"""Pydantic models for API v1."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from prospector.filters import FilterPredicates
from prospector.models import UserStatus


class Filters(BaseModel):
    """Search filters."""
    max_rating: Optional[float] = Field(default=None, ge=0, le=5)
    no_website_only: bool = False
    min_score: Optional[float] = Field(default=None, ge=0, le=10)

    def to_predicates(self) -> FilterPredicates:
        return FilterPredicates(
            max_rating=self.max_rating,
            no_website_only=self.no_website_only,
            min_score=self.min_score,
        )


class SearchRequest(BaseModel):
    """Search request payload."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "query": "boulangerie",
                "locality": "Lyon",
                "filters": {
                    "max_rating": 4.0,
                    "no_website_only": True
                }
            }
        }
    )

    query: str = Field(min_length=1)
    locality: Optional[str] = None
    filters: Filters = Field(default_factory=Filters)


class ResultItem(BaseModel):
    """One search result with its local score."""
    source_id: str
    business_data: dict
    location: Optional[dict] = None
    score: Optional[dict] = None


class SearchResponse(BaseModel):
    """Search results for the latest generation."""
    generation: int
    query: str
    locality: str
    total: int
    results: List[ResultItem]
    errors: List[str] = Field(default_factory=list)


class AnalyzeRequest(BaseModel):
    """Deep analysis of one current result."""
    source_id: str


class EnrichResponse(BaseModel):
    source_id: str
    email: Optional[str] = None


class SaveRequest(BaseModel):
    """Save one current result to the CRM."""
    source_id: str


class StatusUpdate(BaseModel):
    """Update prospect status."""
    status: UserStatus
