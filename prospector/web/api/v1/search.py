"""Search endpoints: run a search, browse, export and map the results."""

import unicodedata
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, Response

from prospector.config import Settings
from prospector.explorer import ExplorerSession
from prospector.filters import FilterPredicates
from prospector.mapview import MapView
from prospector.web.api.v1.models import ResultItem, SearchRequest, SearchResponse
from prospector.web.state import get_session, get_settings

router = APIRouter()


def _response(session: ExplorerSession) -> SearchResponse:
    items = []
    for result in session.filtered():
        score = session.results.score_for(result.source_id)
        items.append(ResultItem(
            **result.to_dict(),
            score=score.to_dict() if score else None,
        ))
    return SearchResponse(
        generation=session.generation,
        query=session.query,
        locality=session.locality,
        total=len(session.results),
        results=items,
        errors=session.errors,
    )


@router.post("/search", response_model=SearchResponse)
async def run_search(
    request: SearchRequest,
    session: ExplorerSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
):
    """
    Search businesses and return the filtered results.

    Strategy failures are reported in `errors`; results from the strategies
    that succeeded are still returned.
    """
    session.filters = request.filters.to_predicates()
    await session.search(request.query, request.locality or settings.default_locality)
    return _response(session)


@router.get("/search/results", response_model=SearchResponse)
async def get_results(
    max_rating: Optional[float] = None,
    no_website_only: bool = False,
    min_score: Optional[float] = None,
    session: ExplorerSession = Depends(get_session),
):
    """Current results with new filters applied. Does not search again."""
    session.filters = FilterPredicates(
        max_rating=max_rating,
        no_website_only=no_website_only,
        min_score=min_score,
    )
    return _response(session)


def content_disposition(filename: str) -> str:
    """Attachment header with an ASCII fallback and the UTF-8 name (RFC 5987)."""
    fallback = unicodedata.normalize("NFKD", filename).encode("ascii", "ignore").decode("ascii")
    fallback = fallback.replace('"', "").replace("\\", "") or "prospects.csv"
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"


@router.get("/search/export")
async def export_results(session: ExplorerSession = Depends(get_session)):
    """Filtered results as a CSV attachment."""
    filename, content = session.export_csv()
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": content_disposition(filename)},
    )


@router.get("/search/map")
async def get_map(
    session: ExplorerSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
):
    """Markers for the filtered results (placeholder positions without a Maps key)."""
    view = MapView(api_key=settings.maps_api_key or None)
    return view.render(session.map_points())


@router.post("/search/map/select/{source_id}")
async def select_marker(
    source_id: str,
    session: ExplorerSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
):
    """Click a marker: the matching result becomes the session's selection."""
    view = MapView(
        api_key=settings.maps_api_key or None,
        on_select=lambda point: session.select(point.source_id),
    )
    view.render(session.map_points())
    point = view.click(source_id)
    if point is None:
        raise HTTPException(status_code=404, detail="Marker not found")
    return {**point.to_dict(), "selected": session.selected.to_dict()}
