"""
Flat-file record store.

Each collection lives in `<data_dir>/<table>.json` as a pretty-printed JSON
array. Every mutation loads the whole array, changes it in memory and writes
it back (temp file + os.replace).

All read-modify-write cycles of one store instance run under a single
asyncio.Lock, so concurrent requests in this process cannot lose each
other's appends. Several processes sharing one data dir are NOT coordinated;
run a single worker with this backend.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import re
import tempfile
from datetime import date, datetime
from pathlib import Path
from typing import Any

from .errors import StorageError
from .store import Row

logger = logging.getLogger(__name__)

_TABLE_RE = re.compile(r"^[a-z_][a-z0-9_]*$")


def _json_default(value: Any) -> Any:
    # Records carry datetime/date objects; they go to disk as ISO strings.
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _sort_key(value: Any) -> tuple[int, Any]:
    # Missing values sort as the smallest key.
    if value is None:
        return (0, "")
    if isinstance(value, (datetime, date)):
        return (1, value.isoformat())
    if isinstance(value, (int, float)):
        return (1, f"{value:020.6f}")
    return (1, str(value))


def _as_stored(table: str, record: Row) -> Row:
    # What a later load will see; NaN/Infinity are not JSON and never reach disk.
    try:
        return json.loads(json.dumps(record, allow_nan=False, default=_json_default))
    except (TypeError, ValueError) as exc:
        raise StorageError(f"Cannot store record in {table}.", details=str(exc)) from exc


class JsonFileStore:
    backend = "file"

    def __init__(self, data_dir: str | os.PathLike[str]) -> None:
        self.data_dir = Path(data_dir)
        self._lock = asyncio.Lock()

    def path_for(self, table: str) -> Path:
        if not _TABLE_RE.match(table):
            raise StorageError(f"Invalid collection name '{table}'.")
        return self.data_dir / f"{table}.json"

    def _load_sync(self, table: str) -> list[Row]:
        path = self.path_for(table)
        if not path.exists():
            return []
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StorageError(f"Failed to read {path.name}.", details=str(exc)) from exc

        if not raw.strip():
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise StorageError(f"Corrupt data file {path.name}.", details=str(exc)) from exc
        if not isinstance(data, list):
            raise StorageError(f"Corrupt data file {path.name}.", details="expected a JSON array")
        return data

    def _save_sync(self, table: str, rows: list[Row]) -> None:
        path = self.path_for(table)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            payload = json.dumps(rows, indent=2, ensure_ascii=False, allow_nan=False, default=_json_default)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{table}.", suffix=".tmp", dir=path.parent)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(payload)
                    fh.write("\n")
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except (OSError, TypeError, ValueError) as exc:
            raise StorageError(f"Failed to write {path.name}.", details=str(exc)) from exc

    async def load(self, table: str) -> list[Row]:
        """
        Return the whole collection (empty list if the file does not exist yet).
        """
        return await asyncio.to_thread(self._load_sync, table)

    async def save(self, table: str, rows: list[Row]) -> None:
        """
        Overwrite the whole collection.
        """
        await asyncio.to_thread(self._save_sync, table, rows)

    async def insert(self, table: str, record: Row) -> Row:
        record_id = record.get("id")
        if record_id is None or str(record_id) == "":
            raise StorageError(f"Cannot insert into {table}: record has no id.")

        stored = _as_stored(table, record)
        async with self._lock:
            rows = await self.load(table)
            if any(str(row.get("id")) == str(record_id) for row in rows):
                raise StorageError(f"Duplicate id '{record_id}' in {table}.")
            rows.append(stored)
            await self.save(table, rows)

        logger.debug("file_insert table=%s id=%s total=%s", table, record_id, len(rows))
        return stored

    async def find_by_id(self, table: str, record_id: str) -> Row | None:
        rows = await self.load(table)
        for row in rows:
            if str(row.get("id")) == str(record_id):
                return row
        return None

    async def update_by_id(self, table: str, record_id: str, patch: Row) -> Row | None:
        changes = _as_stored(table, patch)
        changes.pop("id", None)

        async with self._lock:
            rows = await self.load(table)
            for index, row in enumerate(rows):
                if str(row.get("id")) == str(record_id):
                    updated = {**row, **changes}
                    rows[index] = updated
                    await self.save(table, rows)
                    return updated
        return None

    async def list_ordered(
        self,
        table: str,
        *,
        order_by: str = "created_at",
        descending: bool = True,
        where: Row | None = None,
    ) -> list[Row]:
        rows = await self.load(table)
        if where:
            rows = [
                row
                for row in rows
                if all(str(row.get(field)) == str(value) for field, value in where.items())
            ]
        return sorted(rows, key=lambda row: _sort_key(row.get(order_by)), reverse=descending)

    async def close(self) -> None:
        return None
