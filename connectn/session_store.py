from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Callable

import redis

from connectn.api.models import GameConfig, SessionState
from connectn.errors import SessionNotFound
from connectn.naming import generate_session_code, normalize_session_code
from connectn.session import new_session, validate_config
from connectn.streams import EventLog, drop_event_log

logger = logging.getLogger(__name__)

KEY_NAMESPACE = "connectn:"
SESSIONS_SET_KEY = f"{KEY_NAMESPACE}sessions"
SESSION_KEY_PREFIX = f"{KEY_NAMESPACE}session:"  # + {code}
CONNECTION_KEY_PREFIX = f"{KEY_NAMESPACE}connection:"  # + {connection_id} -> set of codes


def _now() -> datetime:
    return datetime.now(tz=UTC)


def _session_key(code: str) -> str:
    return f"{SESSION_KEY_PREFIX}{code}"


def _connection_key(connection_id: str) -> str:
    return f"{CONNECTION_KEY_PREFIX}{connection_id}"


class SessionRegistry:
    """Mapping from session code to authoritative SessionState.

    An explicit store object: handlers receive one instead of reaching for a
    module-level map, so every test can build an isolated registry over its own
    (fake) redis client.
    """

    def __init__(
        self,
        r: redis.Redis,
        *,
        code_length: int = 6,
        max_board_dimension: int | None = None,
        code_factory: Callable[[int], str] = generate_session_code,
        max_code_attempts: int = 20,
    ) -> None:
        self.redis = r
        self.code_length = code_length
        self.max_board_dimension = max_board_dimension
        self.code_factory = code_factory
        self.max_code_attempts = max_code_attempts

    def create(self, *, config: GameConfig, connection_id: str, player_name: str) -> SessionState:
        """Validate the config and store a new session under a unique code."""

        validate_config(config, max_dimension=self.max_board_dimension)

        for _ in range(self.max_code_attempts):
            code = self.code_factory(self.code_length)
            state = new_session(code=code, config=config, creator_id=connection_id, creator_name=player_name)
            if self.redis.set(_session_key(code), state.model_dump_json(), nx=True):
                break
            logger.warning("Session code collision detected, regenerating: %s", code)
        else:
            raise RuntimeError(f"Could not allocate a unique session code after {self.max_code_attempts} attempts")

        self.redis.sadd(SESSIONS_SET_KEY, code)
        self.redis.sadd(_connection_key(connection_id), code)
        logger.info("Created session %s (%s) for %s", code, config.game_mode.value, player_name)
        return state

    def get(self, code: str) -> SessionState | None:
        raw = self.redis.get(_session_key(normalize_session_code(code)))
        if not raw:
            return None
        return SessionState.model_validate_json(raw)

    def require(self, code: str) -> SessionState:
        state = self.get(code)
        if state is None:
            raise SessionNotFound(normalize_session_code(code))
        return state

    def save(self, state: SessionState) -> None:
        state.last_updated_at = _now()
        self.redis.set(_session_key(state.code), state.model_dump_json())

    def bind_connection(self, *, connection_id: str, code: str) -> None:
        self.redis.sadd(_connection_key(connection_id), code)

    def codes_for_connection(self, connection_id: str) -> list[str]:
        return sorted(self.redis.smembers(_connection_key(connection_id)))

    def forget_connection(self, connection_id: str) -> None:
        self.redis.delete(_connection_key(connection_id))

    def delete(self, state: SessionState) -> None:
        """Remove the session, its connection index entries and its event log."""

        self.redis.delete(_session_key(state.code))
        self.redis.srem(SESSIONS_SET_KEY, state.code)
        for p in state.players:
            self.redis.srem(_connection_key(p.connection_id), state.code)
        drop_event_log(r=self.redis, log=EventLog(session_code=state.code))
        logger.info("Deleted session %s", state.code)

    def list_sessions(self) -> list[SessionState]:
        out: list[SessionState] = []
        for code in sorted(self.redis.smembers(SESSIONS_SET_KEY)):
            state = self.get(code)
            if state is not None:
                out.append(state)
        out.sort(key=lambda s: s.created_at, reverse=True)
        return out

    def purge(self) -> int:
        """Drop every session, connection index, event log and lock.

        Sessions live only as long as their sockets, and sockets don't survive
        a restart, so anything left in redis at startup can never be finished
        or abandoned. Returns how many sessions were dropped.
        """

        dropped = self.redis.scard(SESSIONS_SET_KEY)
        keys = list(self.redis.scan_iter(match=f"{KEY_NAMESPACE}*"))
        if keys:
            self.redis.delete(*keys)
        if dropped:
            logger.info("Purged %s stale session(s)", dropped)
        return dropped

    def __contains__(self, code: str) -> bool:
        return bool(self.redis.exists(_session_key(normalize_session_code(code))))
