from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from connectn.core.board import Board, Coord


class WireModel(BaseModel):
    """Base for anything that crosses the wire: camelCase out, either case in."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> dict[str, object]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class GameMode(StrEnum):
    classic = "classic"
    # 8-neighbour surround rule.
    capture = "capture"
    # 4-connected group / liberty rule.
    extreme_capture = "extreme-capture"


class SessionStatus(StrEnum):
    awaiting_opponent = "awaiting_opponent"
    active = "active"
    finished = "finished"
    abandoned = "abandoned"


class GameConfig(WireModel):
    rows: int = 6
    cols: int = 7
    connect_n: int = 4
    game_mode: GameMode = GameMode.classic


class PlayerState(BaseModel):
    connection_id: str
    name: str
    seat: int


class LastMove(BaseModel):
    row: int
    column: int
    seat: int
    captured_cells: list[Coord] = Field(default_factory=list)


class SessionState(BaseModel):
    code: str
    config: GameConfig
    board: Board
    players: list[PlayerState] = Field(default_factory=list)

    current_player: int = 1
    status: SessionStatus = SessionStatus.awaiting_opponent

    # Populated once a move ends the game.
    winner: int | None = None
    winning_cells: list[Coord] = Field(default_factory=list)
    draw: bool = False

    move_count: int = 0
    last_move: LastMove | None = None

    created_at: datetime
    last_updated_at: datetime


class SessionListResponse(BaseModel):
    sessions: list[SessionState]
