"""
Pinata HTTP client.

Used endpoint:
- POST /pinning/pinFileToIPFS (multipart: file, pinataMetadata, pinataOptions)
  -> {"IpfsHash": "...", "PinSize": 123, "Timestamp": "..."}

Retrieval URLs are built from the returned CID with the gateway template
`{gateway}/ipfs/{cid}`.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from .config import Settings
from .errors import UpstreamError

logger = logging.getLogger(__name__)

PIN_FILE_PATH = "/pinning/pinFileToIPFS"


@dataclass(frozen=True)
class PinResult:
    content_id: str
    retrieval_url: str


def _normalize_base_url(base_url: str, name: str) -> str:
    base_url = (base_url or "").strip()
    if not base_url:
        raise UpstreamError(f"{name} is empty.")
    return base_url.rstrip("/")


def gateway_url(gateway_base: str, content_id: str) -> str:
    return f"{_normalize_base_url(gateway_base, 'PINATA_GATEWAY_URL')}/ipfs/{content_id}"


class PinataClient:
    def __init__(
        self,
        *,
        jwt: str,
        api_url: str,
        gateway_base: str,
        timeout_s: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.jwt = (jwt or "").strip()
        self.api_url = api_url
        self.gateway_base = gateway_base
        self.timeout_s = timeout_s
        # Tests hand in an httpx.MockTransport here.
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "PinataClient":
        return cls(
            jwt=settings.pinata_jwt,
            api_url=settings.pinata_api_url,
            gateway_base=settings.pinata_gateway_url,
            timeout_s=settings.pinata_timeout_s,
        )

    async def pin(
        self,
        data: bytes,
        *,
        filename: str,
        content_type: str | None,
        metadata: dict[str, str],
    ) -> PinResult:
        """
        Pin `data` to IPFS through Pinata and return its CID + gateway URL.
        """
        if not self.jwt:
            raise UpstreamError("Pinata is not configured.", details="PINATA_JWT is not set.")
        base_url = _normalize_base_url(self.api_url, "PINATA_API_URL")

        files = {"file": (filename, data, content_type or "application/octet-stream")}
        form = {
            "pinataMetadata": json.dumps({"name": filename, "keyvalues": metadata}),
            "pinataOptions": json.dumps({"cidVersion": 1}),
        }

        try:
            async with httpx.AsyncClient(
                base_url=base_url,
                timeout=self.timeout_s,
                transport=self._transport,
            ) as client:
                resp = await client.post(
                    PIN_FILE_PATH,
                    files=files,
                    data=form,
                    headers={"Authorization": f"Bearer {self.jwt}"},
                )
        except httpx.HTTPError as exc:
            raise UpstreamError("Failed to reach Pinata.", details=str(exc)) from exc

        if resp.status_code < 200 or resp.status_code >= 300:
            # Avoid dumping huge bodies; include a small snippet.
            body = resp.text[:500]
            raise UpstreamError(
                "Pinata upload failed.",
                details=f"status {resp.status_code}: {body}",
            )

        try:
            payload: dict[str, Any] = resp.json()
        except ValueError as exc:
            raise UpstreamError("Pinata returned a non-JSON response.", details=resp.text[:500]) from exc

        content_id = str(payload.get("IpfsHash") or "").strip() if isinstance(payload, dict) else ""
        if not content_id:
            raise UpstreamError("Pinata returned no content identifier.", details=str(payload)[:500])

        logger.info("pinata_pinned cid=%s filename=%s bytes=%s", content_id, filename, len(data))
        return PinResult(content_id=content_id, retrieval_url=gateway_url(self.gateway_base, content_id))
