"""Map view data: labeled points and selection."""

import math
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from .models import DEFAULT_LOCATION, Location, SearchResult


@dataclass
class MapPoint:
    """A labeled marker."""

    source_id: str
    label: str
    lat: float
    lng: float
    approximate: bool = False  # True when drawn at the fallback centre

    def to_dict(self) -> dict:
        return {
            "source_id": self.source_id,
            "label": self.label,
            "lat": self.lat,
            "lng": self.lng,
            "approximate": self.approximate,
        }


def map_points(
    results: Iterable[SearchResult],
    fallback: Location = DEFAULT_LOCATION,
) -> list[MapPoint]:
    """One marker per result; unknown coordinates use the fallback centre."""
    points = []
    for result in results:
        location = result.location or fallback
        points.append(MapPoint(
            source_id=result.source_id,
            label=result.business_data.name,
            lat=location.lat,
            lng=location.lng,
            approximate=result.location is None,
        ))
    return points


def placeholder_position(point: MapPoint) -> tuple[float, float]:
    """
    Deterministic (top, left) percentages for the keyless placeholder grid.

    Derived from the coordinate decimals, so it spreads markers without a
    real projection.
    """
    top = abs(math.fmod(point.lat * 1000, 100))
    left = abs(math.fmod(point.lng * 1000, 100))
    return round(top, 2), round(left, 2)


class MapView:
    """
    Owns the markers shown for one search and the selection callback.

    Live rendering needs a Maps API key; without one, markers carry
    placeholder grid positions instead.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        on_select: Optional[Callable[[MapPoint], None]] = None,
    ):
        self.api_key = api_key
        self.on_select = on_select
        self.points: list[MapPoint] = []

    @property
    def mode(self) -> str:
        return "live" if self.api_key else "placeholder"

    def render(self, points: list[MapPoint]) -> dict:
        """Replace the markers and return the payload for the widget."""
        self.points = list(points)
        markers = []
        for point in self.points:
            marker = point.to_dict()
            if self.mode == "placeholder":
                marker["top"], marker["left"] = placeholder_position(point)
            markers.append(marker)
        return {"mode": self.mode, "markers": markers}

    def click(self, source_id: str) -> Optional[MapPoint]:
        """Select a marker; notifies on_select. Unknown ids select nothing."""
        for point in self.points:
            if point.source_id == source_id:
                if self.on_select:
                    self.on_select(point)
                return point
        return None
