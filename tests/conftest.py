from __future__ import annotations

from collections.abc import Generator

import fakeredis
import pytest
from fastapi.testclient import TestClient

from connectn.session_store import SessionRegistry


@pytest.fixture(autouse=True)
def _hermetic_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Pin settings to defaults so a developer's environment can't leak in."""

    from connectn.settings import reset_settings_for_tests

    for name in (
        "CONNECTN_LOG_LEVEL",
        "CONNECTN_CODE_LENGTH",
        "CONNECTN_MAX_BOARD_DIMENSION",
        "CONNECTN_LOCK_TTL_MS",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_settings_for_tests()
    yield
    reset_settings_for_tests()


@pytest.fixture()
def fake_redis() -> fakeredis.FakeRedis:
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture()
def registry(fake_redis: fakeredis.FakeRedis) -> SessionRegistry:
    return SessionRegistry(fake_redis, max_board_dimension=20)


@pytest.fixture()
def client_and_redis() -> Generator[tuple[TestClient, fakeredis.FakeRedis], None, None]:
    """FastAPI TestClient wired to an isolated fakeredis instance."""

    from connectn.api.deps import get_redis
    from connectn.main import app

    r = fakeredis.FakeRedis(decode_responses=True)

    def _override() -> Generator[fakeredis.FakeRedis, None, None]:
        yield r

    app.dependency_overrides[get_redis] = _override
    with TestClient(app) as c:
        yield c, r
    app.dependency_overrides.clear()
