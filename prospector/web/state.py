"""Request dependencies: the shared exploration session and its stores."""

from fastapi import Request

from prospector.config import Settings
from prospector.explorer import ExplorerSession
from prospector.storage import ProspectStore


def get_session(request: Request) -> ExplorerSession:
    return request.app.state.session


def get_store(request: Request) -> ProspectStore:
    return request.app.state.session.store


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
