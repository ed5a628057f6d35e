"""Data models for the prospector."""

import time
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional

# Scores persisted in the CRM are always on this scale
CANONICAL_SCALE = 100


def _blank_to_none(value):
    """Unknown values are None, never empty strings."""
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


@dataclass
class Location:
    """A point on the map."""

    lat: float
    lng: float

    def to_dict(self) -> dict:
        return {"lat": self.lat, "lng": self.lng}

    @classmethod
    def from_dict(cls, data: dict) -> "Location":
        return cls(lat=float(data["lat"]), lng=float(data["lng"]))


# Fallback city centre (Paris) when a location is unknown
DEFAULT_LOCATION = Location(lat=48.8566, lng=2.3522)


@dataclass
class BusinessData:
    """A business as described by the AI provider."""

    name: str
    rating: Optional[float] = None
    user_rating_count: Optional[int] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    address: Optional[str] = None
    email: Optional[str] = None
    place_id: Optional[str] = None

    def __post_init__(self):
        self.phone = _blank_to_none(self.phone)
        self.website = _blank_to_none(self.website)
        self.address = _blank_to_none(self.address)
        self.email = _blank_to_none(self.email)
        self.place_id = _blank_to_none(self.place_id)

    def to_dict(self) -> dict:
        """Convert to the stored JSON shape (unknown fields are omitted)."""
        data = {
            "name": self.name,
            "rating": self.rating,
            "userRatingCount": self.user_rating_count,
            "phone": self.phone,
            "website": self.website,
            "address": self.address,
            "email": self.email,
            "placeId": self.place_id,
        }
        return {key: value for key, value in data.items() if value is not None}

    @classmethod
    def from_dict(cls, data: dict) -> "BusinessData":
        rating = data.get("rating")
        count = data.get("userRatingCount", data.get("user_rating_count"))
        return cls(
            name=data["name"],
            rating=float(rating) if rating is not None else None,
            user_rating_count=int(count) if count is not None else None,
            phone=data.get("phone"),
            website=data.get("website"),
            address=data.get("address"),
            email=data.get("email"),
            place_id=data.get("placeId", data.get("place_id")),
        )


class InsightSource(str, Enum):
    """Which producer emitted an insight."""

    HEURISTIC = "heuristic"
    AI = "ai"
    ERROR = "error"


@dataclass
class AIInsight:
    """Potential assessment of a business."""

    score: float
    analysis_summary: str
    suggested_offer: str
    is_target: bool
    scale: int = CANONICAL_SCALE  # 10 for the local heuristic, 100 for the AI
    source: InsightSource = InsightSource.AI
    prospection_reason: Optional[str] = None

    @property
    def failed(self) -> bool:
        """True for the placeholder returned when the AI analysis failed."""
        return self.source == InsightSource.ERROR

    def normalized(self) -> "AIInsight":
        """Return this insight rescaled to the canonical 0-100 scale."""
        if self.scale == CANONICAL_SCALE:
            return self
        factor = CANONICAL_SCALE / self.scale
        return replace(self, score=round(self.score * factor, 1), scale=CANONICAL_SCALE)

    def to_dict(self) -> dict:
        data = {
            "score": self.score,
            "analysis_summary": self.analysis_summary,
            "suggested_offer": self.suggested_offer,
            "is_target": self.is_target,
            "scale": self.scale,
            "source": self.source.value,
        }
        if self.prospection_reason:
            data["prospection_reason"] = self.prospection_reason
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "AIInsight":
        return cls(
            score=data["score"],
            analysis_summary=data.get("analysis_summary", ""),
            suggested_offer=data.get("suggested_offer", ""),
            is_target=bool(data.get("is_target", False)),
            scale=int(data.get("scale", CANONICAL_SCALE)),
            source=InsightSource(data.get("source", InsightSource.AI.value)),
            prospection_reason=data.get("prospection_reason"),
        )


class UserStatus(str, Enum):
    """CRM status of a prospect. Any status may change to any other."""

    NEW = "New"
    CONTACTED = "Contacted"
    SIGNED = "Signed"
    IGNORED = "Ignored"


@dataclass
class SearchResult:
    """A candidate business from a search session. Never persisted directly."""

    source_id: str
    business_data: BusinessData
    location: Optional[Location] = None  # None when the provider gave no coordinates

    def to_dict(self) -> dict:
        return {
            "source_id": self.source_id,
            "business_data": self.business_data.to_dict(),
            "location": self.location.to_dict() if self.location else None,
        }


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class Prospect:
    """A business saved to the CRM."""

    id: str
    business_data: BusinessData
    location: Location
    ai_insight: Optional[AIInsight] = None
    user_status: UserStatus = UserStatus.NEW
    created_at: int = field(default_factory=_now_ms)  # epoch milliseconds

    @classmethod
    def from_result(
        cls,
        result: SearchResult,
        insight: Optional[AIInsight] = None,
        fallback_location: Location = DEFAULT_LOCATION,
    ) -> "Prospect":
        """
        Create a new prospect from a search result.

        The insight is rescaled to the canonical scale. A failed analysis is
        not kept: the prospect is saved without an insight instead.
        """
        if insight is not None and insight.failed:
            insight = None

        return cls(
            id=str(uuid.uuid4()),
            business_data=result.business_data,
            location=result.location or fallback_location,
            ai_insight=insight.normalized() if insight else None,
        )

    @property
    def score(self) -> float:
        """Canonical score, 0 when the prospect was never analysed."""
        if not self.ai_insight:
            return 0
        return self.ai_insight.normalized().score

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        data = {
            "id": self.id,
            "business_data": self.business_data.to_dict(),
            "location": self.location.to_dict(),
            "user_status": self.user_status.value,
            "createdAt": self.created_at,
        }
        if self.ai_insight:
            data["ai_insight"] = self.ai_insight.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Prospect":
        insight = data.get("ai_insight")
        return cls(
            id=str(data["id"]),
            business_data=BusinessData.from_dict(data["business_data"]),
            location=Location.from_dict(data["location"]),
            ai_insight=AIInsight.from_dict(insight) if insight else None,
            user_status=UserStatus(data.get("user_status", UserStatus.NEW.value)),
            created_at=int(data.get("createdAt", data.get("created_at", 0))),
        )
