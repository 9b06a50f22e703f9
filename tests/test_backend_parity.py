"""
The same requests against the file store and the Postgres store must produce
the same responses. The Postgres side runs on an in-memory pool that answers
the SQL PostgresStore emits with asyncpg-typed values (datetime, date, decoded
jsonb).
"""

from __future__ import annotations

import itertools
import json
import re
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path
from types import SimpleNamespace
from typing import Any

import pytest
from fastapi.testclient import TestClient

from core.config import Settings
from core.db import PostgresStore, _jsonb_encode
from core.filestore import JsonFileStore
from main import create_app
from monitoring import service as monitoring_service
from projects import service as projects_service
from submissions import service as submissions_service

JSONB_COLUMNS = {
    "baseline_data": {
        "species_composition",
        "tree_density",
        "canopy_cover",
        "avg_tree_height",
        "soil_organic_carbon",
        "soil_bulk_density",
    },
    "activities": {"photos"},
    "mrv_data": {"change_detection"},
}

_INSERT_RE = re.compile(r'^INSERT INTO "(\w+)" \((.+)\) VALUES \((.+)\) RETURNING \*$')
_SELECT_ONE_RE = re.compile(r'^SELECT \* FROM "(\w+)" WHERE id = \$1 LIMIT 1$')
_UPDATE_RE = re.compile(r'^UPDATE "(\w+)" SET (.+) WHERE id = \$(\d+) RETURNING \*$')
_SELECT_ALL_RE = re.compile(
    r'^SELECT \* FROM "(\w+)"(?: WHERE (.+))? ORDER BY "(\w+)" (ASC|DESC) NULLS LAST, id (?:ASC|DESC)$'
)
_IDENT_RE = re.compile(r'"(\w+)"')


class InMemoryPool:
    """Answers PostgresStore's SQL from per-table dicts."""

    def __init__(self) -> None:
        self.tables: dict[str, dict[str, dict[str, Any]]] = {}

    def _column_value(self, table: str, column: str, value: Any) -> Any:
        # jsonb goes through the connection codec both ways.
        if column in JSONB_COLUMNS.get(table, ()):
            return None if value is None else json.loads(_jsonb_encode(value))
        return value

    async def fetchrow(self, sql: str, *args: Any) -> dict[str, Any] | None:
        if match := _INSERT_RE.match(sql):
            table, column_sql, _ = match.groups()
            columns = _IDENT_RE.findall(column_sql)
            row = {c: self._column_value(table, c, v) for c, v in zip(columns, args)}
            rows = self.tables.setdefault(table, {})
            assert row["id"] not in rows
            rows[row["id"]] = row
            return dict(row)

        if match := _SELECT_ONE_RE.match(sql):
            row = self.tables.get(match.group(1), {}).get(args[0])
            return dict(row) if row is not None else None

        if match := _UPDATE_RE.match(sql):
            table, assignment_sql, _ = match.groups()
            columns = _IDENT_RE.findall(assignment_sql)
            row = self.tables.get(table, {}).get(args[-1])
            if row is None:
                return None
            row.update({c: self._column_value(table, c, v) for c, v in zip(columns, args)})
            return dict(row)

        raise AssertionError(f"unexpected fetchrow: {sql}")

    async def fetch(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        match = _SELECT_ALL_RE.match(sql)
        if match is None:
            raise AssertionError(f"unexpected fetch: {sql}")
        table, where_sql, order_by, direction = match.groups()
        filters = dict(zip(_IDENT_RE.findall(where_sql or ""), args))

        rows = [
            dict(row)
            for row in self.tables.get(table, {}).values()
            if all(row.get(field) == value for field, value in filters.items())
        ]
        return sorted(rows, key=lambda r: (r[order_by], r["id"]), reverse=direction == "DESC")

    async def close(self) -> None:
        return None


def _pin_ids_and_clock(monkeypatch: pytest.MonkeyPatch) -> None:
    counter = itertools.count(1)
    ids = SimpleNamespace(uuid4=lambda: uuid.UUID(int=next(counter)))
    start = datetime(2026, 5, 1, 8, 0, tzinfo=timezone.utc)
    ticks = itertools.count()

    def clock() -> datetime:
        return start + timedelta(minutes=next(ticks))

    for module in (submissions_service, projects_service, monitoring_service):
        monkeypatch.setattr(module, "uuid", ids, raising=False)
        monkeypatch.setattr(module, "_utc_now", clock)


def _exercise(client: TestClient) -> list[tuple[int, Any]]:
    png = ("plot.png", b"\x89PNG\r\n fake image bytes", "image/png")
    responses = []

    def record(resp) -> Any:
        responses.append((resp.status_code, resp.json()))
        return resp.json()

    first = record(
        client.post(
            "/api/submissions",
            data={
                "description": "Mangrove seedlings planted",
                "name": "Plot 7",
                "applicantAddress": "0xA11CE",
                "latitude": "-8.65",
                "longitude": "115.2",
            },
            files={"file": png},
        )
    )["submission"]
    record(client.post("/api/submissions", data={"description": "no title"}, files={"file": png}))
    record(client.get("/api/submissions"))
    record(client.get(f"/api/submissions/{first['id']}/metadata"))
    record(
        client.post(
            f"/api/submissions/{first['id']}/minted",
            json={"txHash": "0xdeadbeef", "tokenId": 42, "metadataURI": "ipfs://bafymeta"},
        )
    )
    record(client.get("/api/submissions"))
    record(client.post("/api/submissions/missing/minted", json={"txHash": "0x1"}))

    record(
        client.post(
            "/api/projects",
            json={
                "projectId": "MGV-001",
                "projectName": "Sundarbans fringe restoration",
                "latitude": 21.95,
                "longitude": 89.18,
                "ecosystemType": "mangrove",
                "implementingAgency": "Coastal Trust",
                "areaHectares": 12.5,
                "establishmentDate": "2025-11-02",
            },
        )
    )
    record(client.put("/api/projects/MGV-001/submit"))
    record(client.get("/api/projects"))

    record(
        client.post(
            "/api/baseline",
            json={
                "projectId": "MGV-001",
                "speciesComposition": "Rhizophora 60%, Avicennia 40%",
                "treeDensity": 1200,
                "canopyCover": "n/a",
                "avgTreeHeight": 3.4,
                "samplingDate": "2026-01-15",
                "carbonStock": 85.5,
            },
        )
    )
    record(client.get("/api/baseline/MGV-001"))

    record(
        client.post(
            "/api/activities",
            json={
                "projectId": "MGV-001",
                "activityType": "planting",
                "date": "2026-02-01",
                "saplingsPlanted": 500,
                "photos": ["ipfs://bafyphoto1", "ipfs://bafyphoto2"],
            },
        )
    )
    record(client.get("/api/activities/MGV-001"))

    for n, change in enumerate(({"gain_ha": 1.2, "loss_ha": 0.1}, "stable")):
        record(
            client.post(
                "/api/mrv",
                json={
                    "projectId": "MGV-001",
                    "date": f"2026-06-{n + 1:02d}",
                    "type": "satellite",
                    "ndvi": 0.71,
                    "changeDetection": change,
                },
            )
        )
    record(client.get("/api/mrv/MGV-001"))
    return responses


def _run(settings: Settings, store, content_store, monkeypatch: pytest.MonkeyPatch) -> list[tuple[int, Any]]:
    _pin_ids_and_clock(monkeypatch)
    content_store.calls.clear()
    app = create_app(settings, store=store, content_store=content_store)
    with TestClient(app) as client:
        return _exercise(client)


def test_file_and_postgres_backends_return_identical_responses(
    settings: Settings, tmp_path: Path, content_store, monkeypatch: pytest.MonkeyPatch
) -> None:
    pool = InMemoryPool()

    from_file = _run(settings, JsonFileStore(tmp_path / "file-backend"), content_store, monkeypatch)
    from_postgres = _run(settings, PostgresStore(pool), content_store, monkeypatch)

    assert [status for status, _ in from_file] == [
        201, 201, 200, 200, 200, 200, 404, 201, 200, 200, 201, 200, 201, 200, 201, 201, 200,
    ]
    assert from_postgres == from_file

    # The Postgres side really held typed values, not JSON text.
    project = pool.tables["projects"]["MGV-001"]
    assert isinstance(project["created_at"], datetime)
    assert project["establishment_date"].isoformat() == "2025-11-02"
    assert len(pool.tables["mrv_data"]) == 2
