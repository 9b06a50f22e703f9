"""
FastAPI dependencies that hand the app-scoped collaborators to routes.

`main.create_app` puts the settings, the record store and the Pinata client
on `app.state`; routes receive them through `Depends(...)`, so tests can swap
in fakes with `app.dependency_overrides` or by passing them to `create_app`.
"""

from __future__ import annotations

from fastapi import Request

from .config import Settings
from .pinata import PinataClient
from .store import RecordStore


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> RecordStore:
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise RuntimeError("Record store is not initialized. It is opened in the app lifespan.")
    return store


def get_content_store(request: Request) -> PinataClient:
    return request.app.state.content_store
