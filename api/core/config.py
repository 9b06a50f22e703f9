"""
Process settings, read once from the environment at startup.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_PINATA_API_URL = "https://api.pinata.cloud"
DEFAULT_PINATA_GATEWAY_URL = "https://gateway.pinata.cloud"
DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024  # 10 MiB

STORAGE_BACKENDS = {"file", "postgres"}


def _env_str(name: str, default: str) -> str:
    return os.environ.get(name, default).strip() or default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    pinata_jwt: str = ""
    pinata_api_url: str = DEFAULT_PINATA_API_URL
    pinata_gateway_url: str = DEFAULT_PINATA_GATEWAY_URL
    pinata_timeout_s: float = 60.0
    storage_backend: str = "file"
    data_dir: str = "data"
    database_url: str = ""
    db_pool_min_size: int = 1
    db_pool_max_size: int = 5
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    cors_allow_origins: tuple[str, ...] = ("*",)
    host: str = "0.0.0.0"
    port: int = 4000
    log_level: str = "info"


def _origins(raw: str) -> tuple[str, ...]:
    origins = tuple(part.strip() for part in raw.split(",") if part.strip())
    return origins or ("*",)


def load_settings() -> Settings:
    """
    Build Settings from environment variables.

    Raises RuntimeError for a configuration the app cannot start with.
    """
    backend = _env_str("STORAGE_BACKEND", "file").lower()
    if backend not in STORAGE_BACKENDS:
        raise RuntimeError(
            f"Invalid STORAGE_BACKEND '{backend}'. Allowed: {sorted(STORAGE_BACKENDS)}"
        )

    database_url = os.environ.get("DATABASE_URL", "").strip()
    if backend == "postgres" and not database_url:
        raise RuntimeError("DATABASE_URL is not set (required for STORAGE_BACKEND=postgres).")

    max_upload_bytes = _env_int("MAX_UPLOAD_BYTES", DEFAULT_MAX_UPLOAD_BYTES)
    if max_upload_bytes <= 0:
        raise RuntimeError("Invalid MAX_UPLOAD_BYTES. It must be > 0.")

    return Settings(
        pinata_jwt=os.environ.get("PINATA_JWT", "").strip(),
        pinata_api_url=_env_str("PINATA_API_URL", DEFAULT_PINATA_API_URL),
        pinata_gateway_url=_env_str("PINATA_GATEWAY_URL", DEFAULT_PINATA_GATEWAY_URL),
        pinata_timeout_s=_env_float("PINATA_TIMEOUT_S", 60.0),
        storage_backend=backend,
        data_dir=_env_str("DATA_DIR", "data"),
        database_url=database_url,
        db_pool_min_size=_env_int("DB_POOL_MIN_SIZE", 1),
        db_pool_max_size=_env_int("DB_POOL_MAX_SIZE", 5),
        max_upload_bytes=max_upload_bytes,
        cors_allow_origins=_origins(os.environ.get("CORS_ALLOW_ORIGINS", "*")),
        host=_env_str("HOST", "0.0.0.0"),
        port=_env_int("PORT", 4000),
        log_level=_env_str("LOG_LEVEL", "info").lower(),
    )
