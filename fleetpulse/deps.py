from fastapi import Request

from .config import Settings
from .services.store import StatusStore


def get_store(request: Request) -> StatusStore:
    return request.app.state.store


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
