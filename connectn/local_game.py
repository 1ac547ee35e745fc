from __future__ import annotations

from connectn.api.models import GameConfig, SessionState
from connectn.session import MoveOutcome, apply_move, join_session, new_session, reset_session, validate_config

LOCAL_CODE = "LOCAL"


def _seat_connection(seat: int) -> str:
    return f"local:{seat}"


class LocalGame:
    """Single-device play: both seats share one screen, moves alternate.

    Runs the exact session pipeline the server uses, so a game played here and
    the same moves streamed over the network end in the same state.
    """

    def __init__(self, config: GameConfig | None = None, *, names: tuple[str, str] = ("Player 1", "Player 2")):
        self.config = config or GameConfig()
        validate_config(self.config)
        self.state: SessionState = new_session(
            code=LOCAL_CODE,
            config=self.config,
            creator_id=_seat_connection(1),
            creator_name=names[0],
        )
        join_session(state=self.state, connection_id=_seat_connection(2), player_name=names[1])

    @property
    def current_player(self) -> int:
        return self.state.current_player

    def drop(self, column: int) -> MoveOutcome:
        return apply_move(state=self.state, connection_id=_seat_connection(self.state.current_player), column=column)

    def play(self, columns: list[int]) -> list[MoveOutcome]:
        return [self.drop(c) for c in columns]

    def reset(self) -> None:
        reset_session(state=self.state, connection_id=_seat_connection(1))
