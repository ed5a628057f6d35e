"""API v1 router."""

from fastapi import APIRouter

from prospector.web.api.v1 import search, analysis, prospects, config

router = APIRouter(prefix="/api/v1")

router.include_router(search.router, tags=["search"])
router.include_router(analysis.router, tags=["analysis"])
router.include_router(prospects.router, tags=["prospects"])
router.include_router(config.router, tags=["config"])
