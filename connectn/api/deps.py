from __future__ import annotations

from collections.abc import Generator

import redis
from fastapi import Depends

from connectn.infra.redis_client import create_redis
from connectn.session_store import SessionRegistry
from connectn.settings import get_settings


def get_redis() -> Generator[redis.Redis, None, None]:
    client = create_redis()
    try:
        yield client
    finally:
        client.close()


def get_registry(r: redis.Redis = Depends(get_redis)) -> SessionRegistry:
    settings = get_settings()
    return SessionRegistry(
        r,
        code_length=settings.session_code_length,
        max_board_dimension=settings.max_board_dimension,
    )
