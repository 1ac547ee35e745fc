from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import assert_never

from connectn.api.messages import (
    ClientMessage,
    CreateSession,
    ErrorMessage,
    JoinSession,
    MakeMove,
    ParticipantDisconnected,
    PlayerSummary,
    ResetSession,
    ServerMessage,
    SessionCreated,
    SessionJoined,
    SessionReset,
    SessionStart,
    parse_client_message,
)
from connectn.api.models import SessionState
from connectn.errors import GameError
from connectn.lock import session_lock
from connectn.naming import normalize_session_code
from connectn.session import abandon_session, apply_move, join_session, reset_session
from connectn.session_store import SessionRegistry
from connectn.settings import get_settings
from connectn.streams import EventLog, publish_event

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Delivery:
    """One outbound message and the connections that should receive it."""

    recipients: tuple[str, ...]
    message: ServerMessage


def _everyone(state: SessionState) -> tuple[str, ...]:
    return tuple(p.connection_id for p in state.players)


def _log_broadcast(*, registry: SessionRegistry, state: SessionState, message: ServerMessage) -> None:
    fields = {"type": message.type, "payload": json.dumps(message.to_payload())}
    publish_event(r=registry.redis, log=EventLog(session_code=state.code), fields=fields)


def _broadcast(*, registry: SessionRegistry, state: SessionState, message: ServerMessage) -> Delivery:
    _log_broadcast(registry=registry, state=state, message=message)
    return Delivery(recipients=_everyone(state), message=message)


def _handle_create(*, registry: SessionRegistry, connection_id: str, message: CreateSession) -> list[Delivery]:
    state = registry.create(config=message.to_config(), connection_id=connection_id, player_name=message.player_name)
    return [Delivery(recipients=(connection_id,), message=SessionCreated(session_code=state.code))]


def _handle_join(*, registry: SessionRegistry, connection_id: str, message: JoinSession) -> list[Delivery]:
    code = normalize_session_code(message.session_code)
    with session_lock(r=registry.redis, code=code, ttl_ms=get_settings().lock_ttl_ms):
        state = registry.require(code)
        join_session(state=state, connection_id=connection_id, player_name=message.player_name)
        registry.save(state)
        registry.bind_connection(connection_id=connection_id, code=code)

    start = SessionStart(
        players=[PlayerSummary(name=p.name, seat_number=p.seat) for p in state.players],
        config=state.config,
        current_player=state.current_player,
    )
    return [
        Delivery(
            recipients=(connection_id,),
            message=SessionJoined(session_code=code, config=state.config),
        ),
        _broadcast(registry=registry, state=state, message=start),
    ]


def _handle_move(*, registry: SessionRegistry, connection_id: str, message: MakeMove) -> list[Delivery]:
    code = normalize_session_code(message.session_code)
    with session_lock(r=registry.redis, code=code, ttl_ms=get_settings().lock_ttl_ms):
        state = registry.require(code)
        outcome = apply_move(state=state, connection_id=connection_id, column=message.column)
        registry.save(state)
    return [_broadcast(registry=registry, state=state, message=outcome.to_message())]


def _handle_reset(*, registry: SessionRegistry, connection_id: str, message: ResetSession) -> list[Delivery]:
    code = normalize_session_code(message.session_code)
    with session_lock(r=registry.redis, code=code, ttl_ms=get_settings().lock_ttl_ms):
        state = registry.require(code)
        reset_session(state=state, connection_id=connection_id)
        registry.save(state)
    reset = SessionReset(config=state.config, current_player=state.current_player)
    return [_broadcast(registry=registry, state=state, message=reset)]


def _error(connection_id: str, e: GameError) -> list[Delivery]:
    return [Delivery(recipients=(connection_id,), message=ErrorMessage(message=str(e), reason=e.reason))]


def dispatch(*, registry: SessionRegistry, connection_id: str, message: ClientMessage) -> list[Delivery]:
    """Process one inbound message to completion and return what to send.

    Rejections become a single `error` delivery to the requester; the
    registry is left exactly as it was.
    """

    try:
        if isinstance(message, CreateSession):
            return _handle_create(registry=registry, connection_id=connection_id, message=message)
        elif isinstance(message, JoinSession):
            return _handle_join(registry=registry, connection_id=connection_id, message=message)
        elif isinstance(message, MakeMove):
            return _handle_move(registry=registry, connection_id=connection_id, message=message)
        elif isinstance(message, ResetSession):
            return _handle_reset(registry=registry, connection_id=connection_id, message=message)
        else:
            assert_never(message)
    except GameError as e:
        logger.info("Rejected %s from %s: %s (%s)", message.type, connection_id, e, e.reason)
        return _error(connection_id, e)


def dispatch_raw(*, registry: SessionRegistry, connection_id: str, raw: str | bytes) -> list[Delivery]:
    try:
        message = parse_client_message(raw)
    except GameError as e:
        logger.info("Rejected malformed frame from %s: %s", connection_id, e)
        return _error(connection_id, e)
    return dispatch(registry=registry, connection_id=connection_id, message=message)


def handle_disconnect(*, registry: SessionRegistry, connection_id: str) -> list[Delivery]:
    """Abandon and delete every session the connection sits in."""

    deliveries: list[Delivery] = []
    for code in registry.codes_for_connection(connection_id):
        state = registry.get(code)
        if state is None:
            continue
        if not any(p.connection_id == connection_id for p in state.players):
            continue
        departed = abandon_session(state=state, connection_id=connection_id)
        remaining = tuple(p.connection_id for p in state.players if p.connection_id != connection_id)
        registry.delete(state)
        if remaining:
            deliveries.append(Delivery(recipients=remaining, message=ParticipantDisconnected(name=departed.name)))
    registry.forget_connection(connection_id)
    return deliveries
