"""
Monitoring persistence: one collection per record kind, all keyed by
`project_id` for listing.
"""

from __future__ import annotations

from typing import Any

from core.store import RecordStore

BASELINE_TABLE = "baseline_data"
ACTIVITIES_TABLE = "activities"
MRV_TABLE = "mrv_data"


async def insert_record(store: RecordStore, table: str, row: dict[str, Any]) -> dict[str, Any]:
    return await store.insert(table, row)


async def list_for_project(store: RecordStore, table: str, project_id: str) -> list[dict[str, Any]]:
    """
    Records of one project, newest first.
    """
    return await store.list_ordered(
        table,
        order_by="created_at",
        descending=True,
        where={"project_id": project_id},
    )
