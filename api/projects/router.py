"""
Project API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from core import deps
from core.store import RecordStore

from . import schemas, service

router = APIRouter()


@router.post("/api/projects", status_code=201)
async def create_project(
    request: schemas.ProjectCreate,
    store: RecordStore = Depends(deps.get_store),
) -> dict:
    project = await service.create_project(store, request)
    return {"success": True, "project": project}


@router.get("/api/projects")
async def list_projects(store: RecordStore = Depends(deps.get_store)) -> dict:
    projects = await service.list_projects(store)
    return {"projects": projects, "count": len(projects)}


@router.put("/api/projects/{project_id}/submit")
async def submit_project(
    project_id: str,
    store: RecordStore = Depends(deps.get_store),
) -> dict:
    project = await service.submit_project(store, project_id)
    return {"success": True, "project": project}
