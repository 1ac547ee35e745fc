"""Real-time message contract.

Inbound and outbound frames are closed sets of tagged variants keyed on `type`.
Field names are camelCase on the wire; snake_case is accepted on input.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import Field, TypeAdapter, ValidationError

from connectn.api.models import GameConfig, GameMode, WireModel
from connectn.core.board import Coord
from connectn.errors import InvalidMessage


# client -> core


class CreateSession(WireModel):
    type: Literal["create-session"] = "create-session"
    rows: int
    cols: int
    connect_n: int
    game_mode: GameMode = GameMode.classic
    player_name: str = Field(..., min_length=1, max_length=64)

    def to_config(self) -> GameConfig:
        return GameConfig(rows=self.rows, cols=self.cols, connect_n=self.connect_n, game_mode=self.game_mode)


class JoinSession(WireModel):
    type: Literal["join-session"] = "join-session"
    session_code: str
    player_name: str = Field(..., min_length=1, max_length=64)


class MakeMove(WireModel):
    type: Literal["make-move"] = "make-move"
    session_code: str
    column: int


class ResetSession(WireModel):
    type: Literal["reset-session"] = "reset-session"
    session_code: str


ClientMessage = Annotated[
    Union[CreateSession, JoinSession, MakeMove, ResetSession],
    Field(discriminator="type"),
]


# core -> client


class SessionCreated(WireModel):
    type: Literal["session-created"] = "session-created"
    session_code: str
    seat_number: int = 1


class SessionJoined(WireModel):
    type: Literal["session-joined"] = "session-joined"
    session_code: str
    seat_number: int = 2
    config: GameConfig


class PlayerSummary(WireModel):
    name: str
    seat_number: int


class SessionStart(WireModel):
    type: Literal["session-start"] = "session-start"
    players: list[PlayerSummary]
    config: GameConfig
    current_player: int


class MoveApplied(WireModel):
    type: Literal["move-applied"] = "move-applied"
    row: int
    column: int
    mover_seat: int
    next_player: int | None = None
    winner_seat: int | None = None
    winning_cells: list[Coord] | None = None
    captured_cells: list[Coord] | None = None
    draw: bool | None = None


class SessionReset(WireModel):
    type: Literal["session-reset"] = "session-reset"
    config: GameConfig
    current_player: int


class ParticipantDisconnected(WireModel):
    type: Literal["participant-disconnected"] = "participant-disconnected"
    name: str


class ErrorMessage(WireModel):
    type: Literal["error"] = "error"
    message: str
    reason: str


ServerMessage = Annotated[
    Union[
        SessionCreated,
        SessionJoined,
        SessionStart,
        MoveApplied,
        SessionReset,
        ParticipantDisconnected,
        ErrorMessage,
    ],
    Field(discriminator="type"),
]

_client_adapter: TypeAdapter[ClientMessage] = TypeAdapter(ClientMessage)
_server_adapter: TypeAdapter[ServerMessage] = TypeAdapter(ServerMessage)


def parse_client_message(raw: str | bytes | dict[str, object]) -> ClientMessage:
    try:
        if isinstance(raw, dict):
            return _client_adapter.validate_python(raw)
        return _client_adapter.validate_json(raw)
    except ValidationError as e:
        first = e.errors()[0] if e.errors() else {}
        where = ".".join(str(p) for p in first.get("loc", ()))
        detail = f"{where}: {first.get('msg', 'invalid')}" if where else str(first.get("msg", "invalid"))
        raise InvalidMessage(f"Invalid message ({detail})") from e


def parse_server_message(raw: str | bytes | dict[str, object]) -> ServerMessage:
    if isinstance(raw, dict):
        return _server_adapter.validate_python(raw)
    return _server_adapter.validate_json(raw)
