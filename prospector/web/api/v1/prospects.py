"""Prospect management endpoints (the CRM)."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from prospector.crm import sort_prospects, status_breakdown
from prospector.explorer import ExplorerSession
from prospector.models import UserStatus
from prospector.storage import ProspectStore
from prospector.web.api.v1.models import SaveRequest, StatusUpdate
from prospector.web.state import get_session, get_store

router = APIRouter(prefix="/prospects")


@router.get("")
def list_prospects(
    store: ProspectStore = Depends(get_store),
    sort: str = Query(default="score", pattern="^(score|date)$"),
    status: Optional[UserStatus] = None,
):
    """List saved prospects, best score (or newest) first."""
    prospects = sort_prospects(store.list(), sort)
    if status:
        prospects = [p for p in prospects if p.user_status == status]
    return [p.to_dict() for p in prospects]


@router.get("/stats")
def prospect_stats(store: ProspectStore = Depends(get_store)):
    """Prospect count per status."""
    prospects = store.list()
    return {"total": len(prospects), "status_breakdown": status_breakdown(prospects)}


@router.post("", status_code=201)
def save_prospect(
    request: SaveRequest,
    session: ExplorerSession = Depends(get_session),
):
    """Save a current search result, with its analysis if one succeeded."""
    try:
        prospect = session.save(request.source_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Result not found")
    return prospect.to_dict()


@router.patch("/{prospect_id}")
def update_prospect(
    prospect_id: str,
    update: StatusUpdate,
    store: ProspectStore = Depends(get_store),
):
    """Change the status of a prospect."""
    if store.get(prospect_id) is None:
        raise HTTPException(status_code=404, detail="Prospect not found")

    store.update_status(prospect_id, update.status)
    return store.get(prospect_id).to_dict()


@router.delete("/{prospect_id}", status_code=204)
def delete_prospect(
    prospect_id: str,
    store: ProspectStore = Depends(get_store),
):
    """Delete a prospect. Deleting an unknown id is not an error."""
    store.remove(prospect_id)
    return Response(status_code=204)
