"""Authoritative per-session game logic.

Every operation validates first and raises a `GameError` without touching the
state; only a fully validated request mutates the board, the roster or the
status. Functions here are transport-free and work on a `SessionState` held in
memory; persistence is the registry's job.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime

from connectn.api.messages import MoveApplied
from connectn.api.models import GameConfig, GameMode, LastMove, PlayerState, SessionState, SessionStatus
from connectn.core.board import Board, Coord
from connectn.core.capture import CaptureStrategy, adjacent_captures, apply_captures, group_captures
from connectn.core.win_detector import find_winner
from connectn.errors import AlreadySeated, InvalidConfig, SessionAlreadyActive, SessionFull
from connectn.fsm import SessionFSM
from connectn.turn_processing.turns import advance_turn, require_player
from connectn.turn_processing.validators import ValidationContext, pipeline_for_action

logger = logging.getLogger(__name__)

SEATS = (1, 2)

CAPTURE_STRATEGIES: dict[GameMode, CaptureStrategy] = {
    GameMode.capture: adjacent_captures,
    GameMode.extreme_capture: group_captures,
}


@dataclass(frozen=True, slots=True)
class MoveOutcome:
    """Decided result of one validated move."""

    row: int
    column: int
    mover_seat: int
    next_player: int | None = None
    winner_seat: int | None = None
    winning_cells: list[Coord] = field(default_factory=list)
    captured_cells: list[Coord] = field(default_factory=list)
    draw: bool = False

    @property
    def finished(self) -> bool:
        return self.winner_seat is not None or self.draw

    def to_message(self) -> MoveApplied:
        return MoveApplied(
            row=self.row,
            column=self.column,
            mover_seat=self.mover_seat,
            next_player=self.next_player,
            winner_seat=self.winner_seat,
            winning_cells=self.winning_cells or None,
            captured_cells=self.captured_cells or None,
            draw=True if self.draw else None,
        )


def _now() -> datetime:
    return datetime.now(tz=UTC)


def validate_config(config: GameConfig, *, max_dimension: int | None = None) -> None:
    if config.rows < 1 or config.cols < 1:
        raise InvalidConfig(f"Board must have at least one row and one column, got {config.rows}x{config.cols}")
    if max_dimension is not None and max(config.rows, config.cols) > max_dimension:
        raise InvalidConfig(f"Board dimensions cannot exceed {max_dimension}")
    if config.connect_n < 3:
        raise InvalidConfig("Connect value must be at least 3")
    largest = max(config.rows, config.cols)
    if config.connect_n > largest:
        raise InvalidConfig(
            f"Connect value ({config.connect_n}) cannot be greater than the largest board dimension ({largest})"
        )


def capture_strategy_for(mode: GameMode) -> CaptureStrategy | None:
    return CAPTURE_STRATEGIES.get(mode)


def new_session(*, code: str, config: GameConfig, creator_id: str, creator_name: str) -> SessionState:
    """Create a session with the creator in seat 1, awaiting an opponent."""

    now = _now()
    return SessionState(
        code=code,
        config=config,
        board=Board.empty(config.rows, config.cols),
        players=[PlayerState(connection_id=creator_id, name=creator_name, seat=1)],
        current_player=1,
        status=SessionStatus.awaiting_opponent,
        created_at=now,
        last_updated_at=now,
    )


def _clear_board(state: SessionState) -> None:
    state.board = Board.empty(state.config.rows, state.config.cols)
    state.current_player = 1
    state.winner = None
    state.winning_cells = []
    state.draw = False
    state.move_count = 0
    state.last_move = None


def join_session(*, state: SessionState, connection_id: str, player_name: str) -> PlayerState:
    """Seat the second player and start the game."""

    if any(p.connection_id == connection_id for p in state.players):
        raise AlreadySeated()
    if len(state.players) >= len(SEATS):
        raise SessionFull()
    if state.status != SessionStatus.awaiting_opponent:
        raise SessionAlreadyActive()

    fsm = SessionFSM(state)
    player = PlayerState(connection_id=connection_id, name=player_name, seat=2)
    state.players.append(player)
    _clear_board(state)
    fsm.opponent_joined()
    fsm.sync_status_to_model()
    state.last_updated_at = _now()

    logger.info("Session %s started: %s vs %s", state.code, state.players[0].name, player.name)
    return player


def play_column(*, state: SessionState, seat: int, column: int) -> MoveOutcome:
    """Commit, capture, then detect a terminal state. Assumes a validated move."""

    fsm = SessionFSM(state)
    board = state.board

    row = board.drop(column, seat)

    captured: list[Coord] = []
    strategy = capture_strategy_for(state.config.game_mode)
    if strategy is not None:
        captured = strategy(board, seat)
        apply_captures(board, captured, seat)

    state.move_count += 1
    state.last_move = LastMove(row=row, column=column, seat=seat, captured_cells=captured)
    state.last_updated_at = _now()

    win = find_winner(board, state.config.connect_n)
    if win is not None:
        state.winner = win.seat
        state.winning_cells = list(win.cells)
        fsm.game_over()
        fsm.sync_status_to_model()
        logger.info("Session %s won by seat %s after %s moves", state.code, win.seat, state.move_count)
        return MoveOutcome(
            row=row,
            column=column,
            mover_seat=seat,
            winner_seat=win.seat,
            winning_cells=list(win.cells),
            captured_cells=captured,
        )

    if board.is_full():
        state.draw = True
        fsm.game_over()
        fsm.sync_status_to_model()
        logger.info("Session %s ended in a draw", state.code)
        return MoveOutcome(row=row, column=column, mover_seat=seat, captured_cells=captured, draw=True)

    next_player = advance_turn(state=state)
    return MoveOutcome(row=row, column=column, mover_seat=seat, next_player=next_player, captured_cells=captured)


def apply_move(*, state: SessionState, connection_id: str, column: int) -> MoveOutcome:
    ctx = ValidationContext(session_code=state.code, connection_id=connection_id, action="move", column=column)
    pipeline_for_action("move").validate(ctx=ctx, state=state)
    player = require_player(state=state, connection_id=connection_id)
    return play_column(state=state, seat=player.seat, column=column)


def reset_session(*, state: SessionState, connection_id: str) -> None:
    """Fresh board under the same code and roster; seat 1 moves first."""

    ctx = ValidationContext(session_code=state.code, connection_id=connection_id, action="reset")
    pipeline_for_action("reset").validate(ctx=ctx, state=state)

    fsm = SessionFSM(state)
    _clear_board(state)
    fsm.restart()
    fsm.sync_status_to_model()
    state.last_updated_at = _now()
    logger.info("Session %s reset", state.code)


def abandon_session(*, state: SessionState, connection_id: str) -> PlayerState:
    """End the session because `connection_id` left. Returns the departed player."""

    player = require_player(state=state, connection_id=connection_id)
    fsm = SessionFSM(state)
    fsm.abandon()
    fsm.sync_status_to_model()
    state.last_updated_at = _now()
    logger.info("Session %s abandoned: %s disconnected", state.code, player.name)
    return player
