from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional


def _get_env(*keys: str, default: Optional[str] = None) -> Optional[str]:
    for k in keys:
        v = os.getenv(k)
        if v is not None and str(v).strip() != "":
            return v.strip()
    return default


def _get_int(*keys: str, default: int) -> int:
    v = _get_env(*keys)
    if v is None:
        return default
    try:
        return int(v)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    db_path: str
    storage_path: str
    storage_quota: int  # bytes, 0 disables the check
    debug: bool
    log_level: Optional[str]


def load_settings() -> Settings:
    """Read settings from the environment. Called again by tests after patching os.environ."""
    return Settings(
        db_path=_get_env("MARKET_DB_PATH", default="data/market.sqlite"),
        storage_path=_get_env(
            "MARKET_STORAGE_PATH", default="data/local_storage.sqlite"
        ),
        storage_quota=_get_int("MARKET_STORAGE_QUOTA", default=5 * 1024 * 1024),
        debug=bool(_get_env("DEBUG")),
        log_level=_get_env("MARKET_LOG_LEVEL"),
    )


settings = load_settings()
