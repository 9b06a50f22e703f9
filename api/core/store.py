"""
Record store interface.

Features talk to storage only through `RecordStore`. Two implementations
exist and are picked once at startup by `STORAGE_BACKEND`:
- `file`     -> `core.filestore.JsonFileStore` (one JSON array per collection)
- `postgres` -> `core.db.PostgresStore` (asyncpg, one table per collection)

Rows cross this boundary as plain dicts. Feature services validate them into
pydantic records, which keeps the response shapes identical for both backends.
"""

from __future__ import annotations

from typing import Any, Protocol

from .config import Settings

Row = dict[str, Any]


class RecordStore(Protocol):
    backend: str

    async def insert(self, table: str, record: Row) -> Row:
        """Store a new row and return it as stored."""
        ...

    async def find_by_id(self, table: str, record_id: str) -> Row | None:
        ...

    async def update_by_id(self, table: str, record_id: str, patch: Row) -> Row | None:
        """Apply `patch` to one row. Returns None when no row has that id."""
        ...

    async def list_ordered(
        self,
        table: str,
        *,
        order_by: str = "created_at",
        descending: bool = True,
        where: Row | None = None,
    ) -> list[Row]:
        ...

    async def close(self) -> None:
        ...


async def build_store(settings: Settings) -> RecordStore:
    """
    Construct the configured store. Postgres opens its pool here.
    """
    if settings.storage_backend == "postgres":
        from .db import PostgresStore

        return await PostgresStore.connect(
            settings.database_url,
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
        )

    from .filestore import JsonFileStore

    return JsonFileStore(settings.data_dir)
