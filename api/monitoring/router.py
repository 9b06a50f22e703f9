"""
Monitoring API endpoints (baseline, activities, MRV).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from core import deps
from core.store import RecordStore

from . import schemas, service

router = APIRouter()


@router.post("/api/baseline", status_code=201)
async def create_baseline(
    request: schemas.BaselineCreate,
    store: RecordStore = Depends(deps.get_store),
) -> dict:
    record = await service.create_baseline(store, request)
    return {"success": True, "baseline": record}


@router.get("/api/baseline/{project_id}")
async def list_baseline(project_id: str, store: RecordStore = Depends(deps.get_store)) -> dict:
    records = await service.list_baseline(store, project_id)
    return {"baseline": records, "count": len(records)}


@router.post("/api/activities", status_code=201)
async def create_activity(
    request: schemas.ActivityCreate,
    store: RecordStore = Depends(deps.get_store),
) -> dict:
    record = await service.create_activity(store, request)
    return {"success": True, "activity": record}


@router.get("/api/activities/{project_id}")
async def list_activities(project_id: str, store: RecordStore = Depends(deps.get_store)) -> dict:
    records = await service.list_activities(store, project_id)
    return {"activities": records, "count": len(records)}


@router.post("/api/mrv", status_code=201)
async def create_mrv(
    request: schemas.MrvCreate,
    store: RecordStore = Depends(deps.get_store),
) -> dict:
    record = await service.create_mrv(store, request)
    return {"success": True, "mrv": record}


@router.get("/api/mrv/{project_id}")
async def list_mrv(project_id: str, store: RecordStore = Depends(deps.get_store)) -> dict:
    records = await service.list_mrv(store, project_id)
    return {"mrv": records, "count": len(records)}
