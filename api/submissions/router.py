"""
FastAPI router for submission endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, UploadFile

from core import deps
from core.config import Settings
from core.pinata import PinataClient
from core.store import RecordStore

from . import service
from .schemas import MintEvidence

router = APIRouter()


@router.post("/api/submissions", status_code=201)
async def create_submission(
    description: str | None = Form(default=None),
    name: str | None = Form(default=None),
    applicant_address: str | None = Form(default=None, alias="applicantAddress"),
    latitude: str | None = Form(default=None),
    longitude: str | None = Form(default=None),
    file: UploadFile | None = File(default=None),
    store: RecordStore = Depends(deps.get_store),
    content_store: PinataClient = Depends(deps.get_content_store),
    settings: Settings = Depends(deps.get_settings),
) -> dict:
    """
    Upload an image (field `file`) plus its description, pin it to IPFS and
    store the submission with status "pending".
    """
    form = service.SubmissionForm(
        description=description,
        name=name,
        applicant_address=applicant_address,
        latitude=latitude,
        longitude=longitude,
    )
    submission = await service.submit(
        store,
        content_store,
        form=form,
        file=file,
        max_bytes=settings.max_upload_bytes,
    )
    return {"success": True, "submission": submission}


@router.get("/api/submissions")
async def list_submissions(store: RecordStore = Depends(deps.get_store)) -> dict:
    submissions = await service.list_submissions(store)
    return {"submissions": submissions, "count": len(submissions)}


@router.get("/api/submissions/{submission_id}/metadata")
async def submission_metadata(
    submission_id: str,
    store: RecordStore = Depends(deps.get_store),
) -> dict:
    return await service.get_metadata(store, submission_id)


@router.post("/api/submissions/{submission_id}/minted")
async def mark_minted(
    submission_id: str,
    evidence: MintEvidence,
    store: RecordStore = Depends(deps.get_store),
) -> dict:
    submission = await service.mark_minted(store, submission_id, evidence)
    return {"success": True, "submission": submission}
