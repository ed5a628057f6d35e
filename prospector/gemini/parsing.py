"""Turn the model's free-text answers into typed records."""

import json
import logging
import math
import re
from typing import Any, Optional

from ..models import BusinessData, Location, SearchResult

logger = logging.getLogger(__name__)

FENCE_PATTERN = re.compile(r"```[a-zA-Z]*")

NULL_TOKENS = {"", "null", "none", "n/a", "undefined"}


def strip_code_fences(text: str) -> str:
    """Remove Markdown code fences (```json ... ```) around a payload."""
    if not text:
        return ""
    return FENCE_PATTERN.sub("", text).strip()


def parse_json_payload(text: str) -> Any:
    """
    Parse JSON out of a model answer.

    Tolerates code fences and chatter around the payload by falling back to
    the outermost [...] or {...} slice.

    Raises:
        ValueError: if no JSON can be recovered
    """
    cleaned = strip_code_fences(text)
    if not cleaned:
        raise ValueError("Empty payload")

    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        pass

    for opener, closer in (("[", "]"), ("{", "}")):
        start = cleaned.find(opener)
        end = cleaned.rfind(closer)
        if start != -1 and end > start:
            try:
                return json.loads(cleaned[start:end + 1])
            except json.JSONDecodeError:
                continue

    raise ValueError(f"Unparsable JSON payload: {cleaned[:80]!r}")


def _clean_str(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (dict, list, bool)):
        return None
    value = str(value).strip()
    if value.lower() in NULL_TOKENS:
        return None
    return value


def to_float(value: Any) -> Optional[float]:
    """Lenient number conversion ("4,5" -> 4.5). Invalid or non-finite values give None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = value
    else:
        text = _clean_str(value)
        if text is None:
            return None
        number = text.replace(",", ".")
    try:
        number = float(number)
    except (ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def to_int(value: Any) -> Optional[int]:
    number = to_float(value)
    return int(number) if number is not None else None


def parse_location(latitude: Any, longitude: Any) -> Optional[Location]:
    """Build a Location only from plausible coordinates."""
    lat = to_float(latitude)
    lng = to_float(longitude)
    if lat is None or lng is None:
        return None
    if not (-90 <= lat <= 90 and -180 <= lng <= 180):
        return None
    # 0,0 is the usual placeholder for "unknown"
    if lat == 0 and lng == 0:
        return None
    return Location(lat=lat, lng=lng)


def parse_business(item: dict) -> Optional[BusinessData]:
    """Map one JSON object from the model to BusinessData."""
    name = _clean_str(item.get("name"))
    if not name:
        return None

    return BusinessData(
        name=name,
        rating=to_float(item.get("rating")),
        user_rating_count=to_int(item.get("userRatingCount", item.get("user_rating_count"))),
        phone=_clean_str(item.get("phone")),
        website=_clean_str(item.get("website")),
        address=_clean_str(item.get("address")),
        email=_clean_str(item.get("email")),
        place_id=_clean_str(item.get("placeId", item.get("place_id"))),
    )


def parse_search_results(payload: Any, prefix: str = "result") -> list[SearchResult]:
    """
    Map a parsed JSON payload to search results.

    Items that are not objects or have no name are dropped. Source ids are
    provisional; the aggregator assigns the session ids.
    """
    if isinstance(payload, dict):
        payload = [payload]
    if not isinstance(payload, list):
        logger.debug("Expected a JSON array, got %s", type(payload).__name__)
        return []

    results = []
    for item in payload:
        if not isinstance(item, dict):
            continue
        business = parse_business(item)
        if business is None:
            logger.debug("Skipping result without a name: %s", item)
            continue
        results.append(SearchResult(
            source_id=f"{prefix}-{len(results)}",
            business_data=business,
            location=parse_location(item.get("latitude"), item.get("longitude")),
        ))

    return results
