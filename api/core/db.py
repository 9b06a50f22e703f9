"""
Postgres record store (raw SQL) using asyncpg.

The store owns its connection pool. FastAPI opens it on startup and closes
it on shutdown (see `api/main.py`). Works against any Postgres, including a
managed one such as Supabase (use its direct connection string).

SQL parameter style:
- asyncpg uses positional placeholders: $1, $2, $3, ...

Table and column names cannot be parameters, so they are checked against a
strict pattern and double-quoted before they reach SQL text.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import asyncpg

from .errors import StorageError
from .store import Row

logger = logging.getLogger(__name__)

_IDENT_RE = re.compile(r"^[a-z_][a-z0-9_]*$")

# asyncpg raises these for server-side and connection-level failures.
_DB_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)


def _sanitize_database_url(url: str) -> str:
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    query = urlencode(params)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def quote_ident(name: str) -> str:
    if not _IDENT_RE.match(name or ""):
        raise StorageError(f"Invalid SQL identifier '{name}'.")
    return f'"{name}"'


def _jsonb_encode(value: Any) -> str:
    return json.dumps(value, allow_nan=False)


async def _init_connection(conn: asyncpg.Connection) -> None:
    # jsonb columns hold values that are either numbers or text, and photo lists.
    await conn.set_type_codec("jsonb", encoder=_jsonb_encode, decoder=json.loads, schema="pg_catalog")


def _record_to_dict(record: asyncpg.Record) -> dict[str, Any]:
    return dict(record)


class PostgresStore:
    backend = "postgres"

    def __init__(self, pool: asyncpg.Pool) -> None:
        self._pool: asyncpg.Pool | None = pool

    @classmethod
    async def connect(cls, dsn: str, *, min_size: int = 1, max_size: int = 5) -> "PostgresStore":
        try:
            pool = await asyncpg.create_pool(
                dsn=_sanitize_database_url(dsn),
                min_size=min_size,
                max_size=max_size,
                command_timeout=30,
                init=_init_connection,
            )
        except _DB_ERRORS as exc:
            raise StorageError("Could not connect to the database.", details=str(exc)) from exc
        logger.info("db_pool_ready min_size=%s max_size=%s", min_size, max_size)
        return cls(pool)

    def pool(self) -> asyncpg.Pool:
        if self._pool is None:
            raise RuntimeError("DB pool is closed.")
        return self._pool

    async def fetch_one(self, sql: str, *args: Any) -> dict[str, Any] | None:
        """
        Run a query and return a single row as a dict (or None).
        """
        try:
            row = await self.pool().fetchrow(sql, *args)
        except _DB_ERRORS as exc:
            raise StorageError("Database query failed.", details=str(exc)) from exc
        return _record_to_dict(row) if row is not None else None

    async def fetch_all(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        """
        Run a query and return all rows as a list of dicts.
        """
        try:
            rows = await self.pool().fetch(sql, *args)
        except _DB_ERRORS as exc:
            raise StorageError("Database query failed.", details=str(exc)) from exc
        return [_record_to_dict(r) for r in rows]

    async def insert(self, table: str, record: Row) -> Row:
        if not record:
            raise StorageError(f"Cannot insert an empty record into {table}.")
        columns = list(record.keys())
        column_sql = ", ".join(quote_ident(c) for c in columns)
        placeholders = ", ".join(f"${i}" for i in range(1, len(columns) + 1))
        row = await self.fetch_one(
            f"INSERT INTO {quote_ident(table)} ({column_sql}) VALUES ({placeholders}) RETURNING *",
            *(record[c] for c in columns),
        )
        if row is None:
            raise StorageError(f"Failed to insert into {table}.")
        return row

    async def find_by_id(self, table: str, record_id: str) -> Row | None:
        return await self.fetch_one(
            f"SELECT * FROM {quote_ident(table)} WHERE id = $1 LIMIT 1",
            record_id,
        )

    async def update_by_id(self, table: str, record_id: str, patch: Row) -> Row | None:
        changes = {k: v for (k, v) in patch.items() if k != "id"}
        if not changes:
            return await self.find_by_id(table, record_id)

        columns = list(changes.keys())
        assignments = ", ".join(f"{quote_ident(c)} = ${i}" for i, c in enumerate(columns, start=1))
        return await self.fetch_one(
            f"UPDATE {quote_ident(table)} SET {assignments} WHERE id = ${len(columns) + 1} RETURNING *",
            *(changes[c] for c in columns),
            record_id,
        )

    async def list_ordered(
        self,
        table: str,
        *,
        order_by: str = "created_at",
        descending: bool = True,
        where: Row | None = None,
    ) -> list[Row]:
        args: list[Any] = []
        clauses: list[str] = []
        for field, value in (where or {}).items():
            args.append(value)
            clauses.append(f"{quote_ident(field)} = ${len(args)}")

        where_sql = f" WHERE {' AND '.join(clauses)}" if clauses else ""
        direction = "DESC" if descending else "ASC"
        return await self.fetch_all(
            f"SELECT * FROM {quote_ident(table)}{where_sql} "
            f"ORDER BY {quote_ident(order_by)} {direction} NULLS LAST, id {direction}",
            *args,
        )

    async def close(self) -> None:
        if self._pool is None:
            return None
        await self._pool.close()
        self._pool = None
