from __future__ import annotations

import pytest

from connectn.api.models import GameConfig, GameMode, SessionStatus
from connectn.errors import ColumnFull, InvalidConfig, SessionFinished
from connectn.local_game import LocalGame


def test_local_game_alternates_and_finds_winner() -> None:
    game = LocalGame(names=("Ann", "Ben"))
    assert game.state.status == SessionStatus.active
    assert [p.name for p in game.state.players] == ["Ann", "Ben"]

    outcomes = game.play([0, 0, 1, 1, 2, 2])
    assert [o.mover_seat for o in outcomes] == [1, 2, 1, 2, 1, 2]
    assert game.current_player == 1

    final = game.drop(3)
    assert final.winner_seat == 1
    assert final.winning_cells == [(5, 0), (5, 1), (5, 2), (5, 3)]
    assert game.state.status == SessionStatus.finished

    with pytest.raises(SessionFinished):
        game.drop(4)


def test_local_game_reset_starts_over() -> None:
    game = LocalGame(GameConfig(rows=3, cols=3, connect_n=3))
    game.play([0, 0, 0])
    with pytest.raises(ColumnFull):
        game.drop(0)

    game.reset()
    assert game.current_player == 1
    assert game.state.move_count == 0
    assert all(cell == 0 for row in game.state.board.cells for cell in row)
    assert game.drop(0).row == 2


def test_local_game_runs_capture_rules() -> None:
    game = LocalGame(GameConfig(rows=3, cols=4, connect_n=4, game_mode=GameMode.capture))
    outcomes = game.play([1, 0, 1, 3, 0])
    assert outcomes[-1].captured_cells == [(2, 0)]
    assert game.state.board.get(2, 0) == 1


def test_local_game_rejects_bad_config() -> None:
    with pytest.raises(InvalidConfig):
        LocalGame(GameConfig(rows=3, cols=3, connect_n=5))
