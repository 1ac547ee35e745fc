from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from connectn.api.models import SessionState, SessionStatus
from connectn.errors import ColumnFull, SessionFinished, SessionNotStarted
from connectn.turn_processing.turns import assert_is_players_turn, require_player


@dataclass(frozen=True, slots=True)
class ValidationContext:
    """Inputs available to validators.

    Plain values only, so a rejected action can be logged as-is.
    """

    session_code: str
    connection_id: str
    action: str
    column: int | None = None


class TurnValidator(ABC):
    """A small, composable validation unit for an incoming action."""

    @abstractmethod
    def validate(self, *, ctx: ValidationContext, state: SessionState) -> None:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class ParticipantValidator(TurnValidator):
    """The acting connection must hold a seat in the session."""

    def validate(self, *, ctx: ValidationContext, state: SessionState) -> None:
        require_player(state=state, connection_id=ctx.connection_id)


@dataclass(frozen=True, slots=True)
class StatusValidator(TurnValidator):
    """Reject actions outside the statuses that allow them."""

    allow_finished: bool = False

    def validate(self, *, ctx: ValidationContext, state: SessionState) -> None:
        if state.status == SessionStatus.awaiting_opponent:
            raise SessionNotStarted()
        if state.status == SessionStatus.finished and not self.allow_finished:
            raise SessionFinished()
        if state.status == SessionStatus.abandoned:
            raise SessionFinished("Game was abandoned")


@dataclass(frozen=True, slots=True)
class SeatTurnValidator(TurnValidator):
    """Only the seat equal to `current_player` may move."""

    def validate(self, *, ctx: ValidationContext, state: SessionState) -> None:
        player = require_player(state=state, connection_id=ctx.connection_id)
        assert_is_players_turn(state=state, seat=player.seat)


@dataclass(frozen=True, slots=True)
class ColumnValidator(TurnValidator):
    """The target column must be on the board and still have a free cell."""

    def validate(self, *, ctx: ValidationContext, state: SessionState) -> None:
        if ctx.column is None:
            raise ValueError("column is required")
        # lowest_empty_row raises OutOfBounds for columns off the grid.
        if state.board.lowest_empty_row(ctx.column) is None:
            raise ColumnFull(ctx.column)


@dataclass(frozen=True, slots=True)
class ValidatorPipeline:
    validators: tuple[TurnValidator, ...]

    def validate(self, *, ctx: ValidationContext, state: SessionState) -> None:
        for v in self.validators:
            v.validate(ctx=ctx, state=state)


DEFAULT_ACTION_PIPELINES: dict[str, ValidatorPipeline] = {
    "move": ValidatorPipeline(
        validators=(
            ParticipantValidator(),
            SeatTurnValidator(),
            StatusValidator(),
            ColumnValidator(),
        )
    ),
    "reset": ValidatorPipeline(
        validators=(
            ParticipantValidator(),
            StatusValidator(allow_finished=True),
        )
    ),
}


def pipeline_for_action(action: str) -> ValidatorPipeline:
    pipe = DEFAULT_ACTION_PIPELINES.get(action)
    if pipe is None:
        raise ValueError(f"Unknown action: {action}")
    return pipe
