"""
Monitoring orchestration.

Baseline, activity and MRV records share one lifecycle: created once from a
JSON body, listed per project, never updated or deleted here.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import TypeVar

from pydantic import BaseModel

from core.store import RecordStore

from . import repository, schemas

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


async def _create(
    store: RecordStore,
    table: str,
    payload: BaseModel,
    record_cls: type[RecordT],
) -> RecordT:
    record = record_cls(
        **payload.model_dump(),
        id=str(uuid.uuid4()),
        created_at=_utc_now(),
    )
    row = await repository.insert_record(store, table, record.model_dump())
    logger.info("monitoring_record_created table=%s id=%s project_id=%s", table, row.get("id"), row.get("project_id"))
    return record_cls.model_validate(row)


async def _list(store: RecordStore, table: str, project_id: str, record_cls: type[RecordT]) -> list[RecordT]:
    rows = await repository.list_for_project(store, table, project_id)
    return [record_cls.model_validate(row) for row in rows]


async def create_baseline(store: RecordStore, payload: schemas.BaselineCreate) -> schemas.BaselineRecord:
    return await _create(store, repository.BASELINE_TABLE, payload, schemas.BaselineRecord)


async def list_baseline(store: RecordStore, project_id: str) -> list[schemas.BaselineRecord]:
    return await _list(store, repository.BASELINE_TABLE, project_id, schemas.BaselineRecord)


async def create_activity(store: RecordStore, payload: schemas.ActivityCreate) -> schemas.ActivityRecord:
    return await _create(store, repository.ACTIVITIES_TABLE, payload, schemas.ActivityRecord)


async def list_activities(store: RecordStore, project_id: str) -> list[schemas.ActivityRecord]:
    return await _list(store, repository.ACTIVITIES_TABLE, project_id, schemas.ActivityRecord)


async def create_mrv(store: RecordStore, payload: schemas.MrvCreate) -> schemas.MrvRecord:
    return await _create(store, repository.MRV_TABLE, payload, schemas.MrvRecord)


async def list_mrv(store: RecordStore, project_id: str) -> list[schemas.MrvRecord]:
    return await _list(store, repository.MRV_TABLE, project_id, schemas.MrvRecord)
