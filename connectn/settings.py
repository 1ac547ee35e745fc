from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


@dataclass(frozen=True, slots=True)
class Settings:
    redis_url: str
    log_level: str
    session_code_length: int
    max_board_dimension: int
    lock_ttl_ms: int


_SETTINGS: Settings | None = None


def project_root() -> Path:
    # connectn/settings.py -> connectn/ -> project root
    return Path(__file__).resolve().parents[1]


def _int_from_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}") from e


def settings_from_env() -> Settings:
    env_path = project_root() / ".env"
    if env_path.exists():
        load_dotenv(dotenv_path=env_path, override=False)

    return Settings(
        redis_url=os.environ.get("REDIS_URL", "redis://localhost:6379/0"),
        log_level=os.environ.get("CONNECTN_LOG_LEVEL", "INFO").upper(),
        session_code_length=_int_from_env("CONNECTN_CODE_LENGTH", 6),
        max_board_dimension=_int_from_env("CONNECTN_MAX_BOARD_DIMENSION", 20),
        lock_ttl_ms=_int_from_env("CONNECTN_LOCK_TTL_MS", 5_000),
    )


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = settings_from_env()
    return _SETTINGS


def reset_settings_for_tests() -> None:
    global _SETTINGS
    _SETTINGS = None
