from __future__ import annotations

import sys
from pathlib import Path
from typing import Iterator

import pytest

# Ensure local "api/" takes precedence, matching how uvicorn runs `main:app` from there.
ROOT = Path(__file__).resolve().parents[1]
API = ROOT / "api"

api_str = str(API)
if api_str not in sys.path:
    sys.path.insert(0, api_str)

from fastapi.testclient import TestClient  # noqa: E402

from core.config import Settings  # noqa: E402
from core.errors import UpstreamError  # noqa: E402
from core.filestore import JsonFileStore  # noqa: E402
from core.pinata import PinResult  # noqa: E402
from main import create_app  # noqa: E402


class FakeContentStore:
    """Stands in for PinataClient; records every pin call."""

    def __init__(self) -> None:
        self.calls: list[dict] = []
        self.error: UpstreamError | None = None

    async def pin(self, data: bytes, *, filename: str, content_type: str | None, metadata: dict) -> PinResult:
        self.calls.append(
            {"data": data, "filename": filename, "content_type": content_type, "metadata": metadata}
        )
        if self.error is not None:
            raise self.error
        cid = f"bafytest{len(self.calls)}"
        return PinResult(content_id=cid, retrieval_url=f"https://gateway.test/ipfs/{cid}")


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    return tmp_path / "data"


@pytest.fixture
def settings(data_dir: Path) -> Settings:
    return Settings(pinata_jwt="test-jwt", data_dir=str(data_dir), max_upload_bytes=1024)


@pytest.fixture
def store(data_dir: Path) -> JsonFileStore:
    return JsonFileStore(data_dir)


@pytest.fixture
def content_store() -> FakeContentStore:
    return FakeContentStore()


@pytest.fixture
def client(settings: Settings, store: JsonFileStore, content_store: FakeContentStore) -> Iterator[TestClient]:
    app = create_app(settings, store=store, content_store=content_store)
    with TestClient(app) as c:
        yield c
