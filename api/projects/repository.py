"""
Project persistence.
"""

from __future__ import annotations

from typing import Any

from core.store import RecordStore

TABLE = "projects"


async def insert_project(store: RecordStore, row: dict[str, Any]) -> dict[str, Any]:
    return await store.insert(TABLE, row)


async def list_projects(store: RecordStore) -> list[dict[str, Any]]:
    return await store.list_ordered(TABLE, order_by="created_at", descending=True)


async def set_status(store: RecordStore, project_id: str, status: str) -> dict[str, Any] | None:
    return await store.update_by_id(TABLE, project_id, {"status": status})
