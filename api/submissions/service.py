"""
Submission "service layer".

This file contains logic that is independent of FastAPI's routing layer:
- Validate the multipart form
- Read file bytes with a size limit
- Pin the image to IPFS, then persist the submission record
- Build the token-metadata view and record mint evidence

Upload and persist are not one transaction. If the insert fails after a
successful pin, the CID stays pinned and is logged as orphaned.
"""

from __future__ import annotations

import logging
import math
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from fastapi import UploadFile

from core.errors import NotFoundError, PayloadTooLargeError, StorageError, ValidationError
from core.pinata import PinataClient
from core.store import RecordStore

from . import repository
from .schemas import MintEvidence, Submission

logger = logging.getLogger(__name__)

UNTITLED = "Untitled Submission"


@dataclass(frozen=True)
class SubmissionForm:
    description: str | None = None
    name: str | None = None
    applicant_address: str | None = None
    latitude: str | None = None
    longitude: str | None = None


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _blank_to_none(value: str | None) -> str | None:
    if value is None or not value.strip():
        return None
    return value


def _optional_float(field: str, raw: str | None) -> float | None:
    raw = _blank_to_none(raw)
    if raw is None:
        return None
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValidationError(f"Invalid {field}: expected a number.") from exc
    if not math.isfinite(value):
        raise ValidationError(f"Invalid {field}: expected a finite number.")
    return value


async def read_upload_bytes(file: UploadFile, max_bytes: int) -> bytes:
    """
    Read the upload into memory, enforcing a maximum size.
    """
    chunk_size = 1024 * 1024  # 1 MiB
    buf = bytearray()

    while True:
        chunk = await file.read(chunk_size)
        if not chunk:
            break
        buf.extend(chunk)
        if len(buf) > max_bytes:
            raise PayloadTooLargeError(f"File too large. Max is {max_bytes} bytes.")

    return bytes(buf)


async def submit(
    store: RecordStore,
    content_store: PinataClient,
    *,
    form: SubmissionForm,
    file: UploadFile | None,
    max_bytes: int,
) -> Submission:
    """
    Validate, pin the image, persist and return the new submission.

    Nothing is written when validation or the pin step fails.
    """
    if _blank_to_none(form.description) is None:
        raise ValidationError("Missing description")
    if file is None or not file.filename:
        raise ValidationError("Missing file (field name 'file')")

    latitude = _optional_float("latitude", form.latitude)
    longitude = _optional_float("longitude", form.longitude)
    title = _blank_to_none(form.name)

    data = await read_upload_bytes(file, max_bytes=max_bytes)
    pinned = await content_store.pin(
        data,
        filename=file.filename,
        content_type=file.content_type,
        metadata={"uploader": title or "anonymous", "description": form.description or ""},
    )

    submission = Submission(
        id=str(uuid.uuid4()),
        applicant_address=_blank_to_none(form.applicant_address),
        title=title,
        description=form.description or "",
        latitude=latitude,
        longitude=longitude,
        content_id=pinned.content_id,
        image_url=pinned.retrieval_url,
        original_filename=file.filename,
        content_type=file.content_type,
        size_bytes=len(data),
        created_at=_utc_now(),
        status="pending",
    )

    try:
        row = await repository.insert_submission(store, submission.model_dump())
    except StorageError:
        logger.error(
            "submission_orphaned_pin id=%s cid=%s filename=%s",
            submission.id,
            pinned.content_id,
            file.filename,
        )
        raise

    logger.info("submission_created id=%s cid=%s size_bytes=%s", submission.id, pinned.content_id, len(data))
    return Submission.model_validate(row)


async def list_submissions(store: RecordStore) -> list[Submission]:
    rows = await repository.list_submissions(store)
    return [Submission.model_validate(row) for row in rows]


async def get_submission(store: RecordStore, submission_id: str) -> Submission:
    row = await repository.get_submission(store, submission_id)
    if row is None:
        raise NotFoundError("Not found")
    return Submission.model_validate(row)


def metadata_view(submission: Submission) -> dict[str, Any]:
    """
    ERC-721 style metadata for a submission's token.
    """
    return {
        "name": submission.title or UNTITLED,
        "description": submission.description or "",
        "image": submission.image_url,
        "metadataURI": submission.image_url,
        "attributes": [
            {"trait_type": "Applicant Address", "value": submission.applicant_address},
            {"trait_type": "Latitude", "value": submission.latitude},
            {"trait_type": "Longitude", "value": submission.longitude},
        ],
    }


async def get_metadata(store: RecordStore, submission_id: str) -> dict[str, Any]:
    submission = await get_submission(store, submission_id)
    return metadata_view(submission)


async def mark_minted(store: RecordStore, submission_id: str, evidence: MintEvidence) -> Submission:
    """
    Set status to "approved" and store the mint evidence verbatim.

    Applies regardless of the current status; repeating the call with the
    same evidence leaves the same record.
    """
    row = await repository.mark_minted(
        store,
        submission_id,
        tx_hash=evidence.tx_hash,
        token_id=evidence.token_id,
        metadata_uri=evidence.metadata_uri,
    )
    if row is None:
        raise NotFoundError("Not found")

    logger.info("submission_minted id=%s tx_hash=%s token_id=%s", submission_id, evidence.tx_hash, evidence.token_id)
    return Submission.model_validate(row)
