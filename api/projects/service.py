"""
Project business logic.

A project starts as "draft" and moves to "submitted" once; there is no way
back.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from core.errors import NotFoundError
from core.store import RecordStore

from . import repository, schemas

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


async def create_project(store: RecordStore, payload: schemas.ProjectCreate) -> schemas.Project:
    project = schemas.Project(
        **payload.model_dump(),
        status="draft",
        created_at=_utc_now(),
    )
    row = await repository.insert_project(store, project.model_dump())
    logger.info("project_created id=%s ecosystem_type=%s", project.id, project.ecosystem_type)
    return schemas.Project.model_validate(row)


async def list_projects(store: RecordStore) -> list[schemas.Project]:
    rows = await repository.list_projects(store)
    return [schemas.Project.model_validate(row) for row in rows]


async def submit_project(store: RecordStore, project_id: str) -> schemas.Project:
    row = await repository.set_status(store, project_id, "submitted")
    if row is None:
        raise NotFoundError("Project not found")
    logger.info("project_submitted id=%s", project_id)
    return schemas.Project.model_validate(row)
