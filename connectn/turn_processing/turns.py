from __future__ import annotations

from connectn.api.models import PlayerState, SessionState
from connectn.core.board import other_seat
from connectn.errors import NotAParticipant, OutOfTurn


def find_player(*, state: SessionState, connection_id: str) -> PlayerState | None:
    return next((p for p in state.players if p.connection_id == connection_id), None)


def require_player(*, state: SessionState, connection_id: str) -> PlayerState:
    player = find_player(state=state, connection_id=connection_id)
    if player is None:
        raise NotAParticipant()
    return player


def assert_is_players_turn(*, state: SessionState, seat: int) -> None:
    if seat != state.current_player:
        raise OutOfTurn(state.current_player)


def advance_turn(*, state: SessionState) -> int:
    """Hand the move to the other seat and return it."""

    state.current_player = other_seat(state.current_player)
    return state.current_player
