"""Configuration endpoints."""

import time

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from prospector.config import Settings
from prospector.web.state import get_settings

router = APIRouter()


class ConfigResponse(BaseModel):
    """Configuration response."""
    gemini_configured: bool
    map_mode: str
    search_model: str
    analysis_model: str
    strategies: list
    default_locality: str
    version: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    gemini: bool
    version: str
    uptime_seconds: int


@router.get("/health", response_model=HealthResponse)
async def health(request: Request, settings: Settings = Depends(get_settings)):
    """Liveness and configuration summary."""
    from prospector import __version__

    return HealthResponse(
        status="ok",
        gemini=bool(settings.gemini_api_key),
        version=__version__,
        uptime_seconds=int(time.time() - request.app.state.started_at),
    )


@router.get("/config", response_model=ConfigResponse)
async def get_config(settings: Settings = Depends(get_settings)):
    """Get current configuration (keys are never returned)."""
    from prospector import __version__

    return ConfigResponse(
        gemini_configured=bool(settings.gemini_api_key),
        map_mode=settings.map_mode,
        search_model=settings.search_model,
        analysis_model=settings.analysis_model,
        strategies=list(settings.strategies),
        default_locality=settings.default_locality,
        version=__version__,
    )
