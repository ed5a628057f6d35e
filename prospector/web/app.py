"""FastAPI application factory."""

import os
import logging
import time
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from prospector import __version__
from prospector.config import Settings, load_config
from prospector.explorer import ExplorerSession

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    session: Optional[ExplorerSession] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Settings to use (default: environment and config file)
        session: Exploration session to serve (default: one built from settings)
    """
    settings = settings or load_config()
    if session is None:
        session = ExplorerSession.from_settings(settings)

    app = FastAPI(
        title="Maps Prospector",
        description="Local business prospecting with Gemini and a small CRM",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # CORS middleware for production
    origins = os.environ.get("ALLOWED_ORIGINS", "*")
    if origins != "*":
        origins = [o.strip() for o in origins.split(",")]
    else:
        origins = ["*"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.session = session
    app.state.started_at = time.time()

    # API v1 routes
    from prospector.web.api.v1 import router as api_router
    app.include_router(api_router)

    logger.info("API ready (map mode: %s)", settings.map_mode)
    return app
