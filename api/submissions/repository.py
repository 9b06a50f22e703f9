"""
Submission persistence.
"""

from __future__ import annotations

from typing import Any

from core.store import RecordStore

TABLE = "submissions"


async def insert_submission(store: RecordStore, row: dict[str, Any]) -> dict[str, Any]:
    return await store.insert(TABLE, row)


async def list_submissions(store: RecordStore) -> list[dict[str, Any]]:
    """
    Newest first.
    """
    return await store.list_ordered(TABLE, order_by="created_at", descending=True)


async def get_submission(store: RecordStore, submission_id: str) -> dict[str, Any] | None:
    return await store.find_by_id(TABLE, submission_id)


async def mark_minted(
    store: RecordStore,
    submission_id: str,
    *,
    tx_hash: str | None,
    token_id: str | None,
    metadata_uri: str | None,
) -> dict[str, Any] | None:
    """
    Returns the updated row, or None when the id is unknown.
    """
    return await store.update_by_id(
        TABLE,
        submission_id,
        {
            "status": "approved",
            "tx_hash": tx_hash,
            "token_id": token_id,
            "metadata_uri": metadata_uri,
        },
    )
