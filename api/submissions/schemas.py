"""
Pydantic schemas for submission endpoints.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Submission(BaseModel):
    model_config = ConfigDict(extra="ignore", allow_inf_nan=False)

    id: str
    applicant_address: str | None = None
    title: str | None = None
    description: str
    latitude: float | None = None
    longitude: float | None = None
    content_id: str
    image_url: str
    original_filename: str
    content_type: str | None = None
    size_bytes: int
    created_at: datetime
    status: Literal["pending", "approved"] = "pending"
    tx_hash: str | None = None
    token_id: str | None = None
    metadata_uri: str | None = None


class MintEvidence(BaseModel):
    """
    Proof of an external mint. Stored as given; nothing here is verified.
    """

    model_config = ConfigDict(populate_by_name=True)

    tx_hash: str | None = Field(default=None, alias="txHash")
    token_id: str | None = Field(default=None, alias="tokenId")
    metadata_uri: str | None = Field(default=None, alias="metadataURI")

    @field_validator("token_id", mode="before")
    @classmethod
    def _token_id_as_text(cls, value: Any) -> Any:
        # Wallets send token ids as JSON numbers as often as strings.
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value
