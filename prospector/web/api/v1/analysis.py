"""Deep analysis and email enrichment of current results."""

from fastapi import APIRouter, Depends, HTTPException

from prospector.explorer import ExplorerSession
from prospector.web.api.v1.models import AnalyzeRequest, EnrichResponse
from prospector.web.state import get_session

router = APIRouter()


@router.post("/analyze")
async def analyze_result(
    request: AnalyzeRequest,
    session: ExplorerSession = Depends(get_session),
):
    """
    Deep-analyse one result (score 0-100).

    A provider failure still answers 200 with the error insight
    (`source` = "error"); check it before trusting the score.
    """
    try:
        insight = await session.analyze(request.source_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Result not found")
    return insight.to_dict()


@router.post("/enrich/{source_id}", response_model=EnrichResponse)
async def enrich_result(
    source_id: str,
    session: ExplorerSession = Depends(get_session),
):
    """Look up the contact email of one result and merge it into the result."""
    if session.is_enriching(source_id):
        raise HTTPException(status_code=409, detail="Enrichment already in progress")

    try:
        email = await session.enrich(source_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Result not found")
    return EnrichResponse(source_id=source_id, email=email)
