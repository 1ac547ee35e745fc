from __future__ import annotations

import fakeredis
import pytest

from connectn.actions import Delivery, dispatch, dispatch_raw, handle_disconnect
from connectn.api.messages import CreateSession, JoinSession, MakeMove, ResetSession
from connectn.api.models import GameMode, SessionStatus
from connectn.session_store import SessionRegistry


@pytest.fixture()
def registry(fake_redis: fakeredis.FakeRedis) -> SessionRegistry:
    return SessionRegistry(fake_redis, code_factory=lambda n: "ROOM42")


def _payloads(deliveries: list[Delivery]) -> list[tuple[tuple[str, ...], dict[str, object]]]:
    return [(d.recipients, d.message.to_payload()) for d in deliveries]


def _start(registry: SessionRegistry, mode: GameMode = GameMode.classic, rows: int = 6, cols: int = 7, n: int = 4) -> str:
    out = dispatch(
        registry=registry,
        connection_id="alice",
        message=CreateSession(rows=rows, cols=cols, connect_n=n, game_mode=mode, player_name="Alice"),
    )
    code = out[0].message.session_code  # type: ignore[union-attr]
    dispatch(registry=registry, connection_id="bob", message=JoinSession(session_code=code, player_name="Bob"))
    return code


def test_create_replies_to_creator_only(registry: SessionRegistry) -> None:
    out = dispatch(
        registry=registry,
        connection_id="alice",
        message=CreateSession(rows=6, cols=7, connect_n=4, player_name="Alice"),
    )
    assert _payloads(out) == [(("alice",), {"type": "session-created", "sessionCode": "ROOM42", "seatNumber": 1})]


def test_join_sends_joined_then_start_to_both(registry: SessionRegistry) -> None:
    dispatch(registry=registry, connection_id="alice", message=CreateSession(rows=6, cols=7, connect_n=4, player_name="Alice"))
    out = dispatch(registry=registry, connection_id="bob", message=JoinSession(session_code="room42", player_name="Bob"))

    config = {"rows": 6, "cols": 7, "connectN": 4, "gameMode": "classic"}
    assert _payloads(out) == [
        (("bob",), {"type": "session-joined", "sessionCode": "ROOM42", "seatNumber": 2, "config": config}),
        (
            ("alice", "bob"),
            {
                "type": "session-start",
                "players": [{"name": "Alice", "seatNumber": 1}, {"name": "Bob", "seatNumber": 2}],
                "config": config,
                "currentPlayer": 1,
            },
        ),
    ]
    assert registry.require("ROOM42").status == SessionStatus.active


def test_winning_scenario_over_messages(registry: SessionRegistry) -> None:
    code = _start(registry)
    last: list[Delivery] = []
    for i, col in enumerate([0, 0, 1, 1, 2, 2, 3]):
        mover = "alice" if i % 2 == 0 else "bob"
        last = dispatch(registry=registry, connection_id=mover, message=MakeMove(session_code=code, column=col))

    assert _payloads(last) == [
        (
            ("alice", "bob"),
            {
                "type": "move-applied",
                "row": 5,
                "column": 3,
                "moverSeat": 1,
                "winnerSeat": 1,
                "winningCells": [[5, 0], [5, 1], [5, 2], [5, 3]],
            },
        )
    ]
    assert registry.require(code).status == SessionStatus.finished


def test_non_terminal_move_reports_next_player(registry: SessionRegistry) -> None:
    code = _start(registry)
    out = dispatch(registry=registry, connection_id="alice", message=MakeMove(session_code=code, column=3))
    assert _payloads(out) == [
        (("alice", "bob"), {"type": "move-applied", "row": 5, "column": 3, "moverSeat": 1, "nextPlayer": 2})
    ]


@pytest.mark.parametrize(
    "connection_id,message,reason",
    [
        ("carol", JoinSession(session_code="ROOM42", player_name="Carol"), "SessionFull"),
        ("carol", JoinSession(session_code="NOPE00", player_name="Carol"), "SessionNotFound"),
        ("carol", MakeMove(session_code="ROOM42", column=0), "NotAParticipant"),
        ("bob", MakeMove(session_code="ROOM42", column=0), "OutOfTurn"),
        ("alice", MakeMove(session_code="ROOM42", column=7), "OutOfBounds"),
        ("alice", MakeMove(session_code="NOPE00", column=0), "SessionNotFound"),
        ("carol", ResetSession(session_code="ROOM42"), "NotAParticipant"),
        ("carol", CreateSession(rows=6, cols=7, connect_n=2, player_name="Carol"), "InvalidConfig"),
        ("carol", CreateSession(rows=6, cols=7, connect_n=8, player_name="Carol"), "InvalidConfig"),
    ],
)
def test_errors_go_to_requester_only_and_change_nothing(
    registry: SessionRegistry, fake_redis: fakeredis.FakeRedis, connection_id: str, message, reason: str
) -> None:
    _start(registry)
    before = fake_redis.get("connectn:session:ROOM42")

    out = dispatch(registry=registry, connection_id=connection_id, message=message)

    assert len(out) == 1
    assert out[0].recipients == (connection_id,)
    payload = out[0].message.to_payload()
    assert payload["type"] == "error"
    assert payload["reason"] == reason
    assert payload["message"]
    assert fake_redis.get("connectn:session:ROOM42") == before


def test_column_full_error(registry: SessionRegistry) -> None:
    code = _start(registry, rows=3, cols=3, n=3)
    for i in range(3):
        mover = "alice" if i % 2 == 0 else "bob"
        dispatch(registry=registry, connection_id=mover, message=MakeMove(session_code=code, column=0))
    out = dispatch(registry=registry, connection_id="bob", message=MakeMove(session_code=code, column=0))
    assert out[0].message.to_payload()["reason"] == "ColumnFull"


def test_move_after_finish_and_reset(registry: SessionRegistry) -> None:
    code = _start(registry)
    for i, col in enumerate([0, 0, 1, 1, 2, 2, 3]):
        dispatch(registry=registry, connection_id="alice" if i % 2 == 0 else "bob", message=MakeMove(session_code=code, column=col))

    out = dispatch(registry=registry, connection_id="bob", message=MakeMove(session_code=code, column=4))
    assert out[0].message.to_payload()["reason"] == "OutOfTurn"
    out = dispatch(registry=registry, connection_id="alice", message=MakeMove(session_code=code, column=4))
    assert out[0].message.to_payload()["reason"] == "SessionFinished"

    out = dispatch(registry=registry, connection_id="bob", message=ResetSession(session_code=code))
    assert _payloads(out) == [
        (
            ("alice", "bob"),
            {
                "type": "session-reset",
                "config": {"rows": 6, "cols": 7, "connectN": 4, "gameMode": "classic"},
                "currentPlayer": 1,
            },
        )
    ]
    state = registry.require(code)
    assert state.status == SessionStatus.active
    assert state.current_player == 1
    assert all(cell == 0 for row in state.board.cells for cell in row)


def test_capture_is_authoritative_in_networked_play(registry: SessionRegistry) -> None:
    code = _start(registry, mode=GameMode.capture, rows=3, cols=4, n=4)
    out: list[Delivery] = []
    for i, col in enumerate([1, 0, 1, 3, 0]):
        out = dispatch(registry=registry, connection_id="alice" if i % 2 == 0 else "bob", message=MakeMove(session_code=code, column=col))

    payload = out[0].message.to_payload()
    assert payload["capturedCells"] == [[2, 0]]
    assert payload["nextPlayer"] == 2
    assert registry.require(code).board.cells[2][0] == 1


def test_broadcasts_are_logged_to_event_stream(registry: SessionRegistry, fake_redis: fakeredis.FakeRedis) -> None:
    code = _start(registry)
    dispatch(registry=registry, connection_id="alice", message=MakeMove(session_code=code, column=3))
    types = [fields["type"] for _, fields in fake_redis.xrange(f"connectn:events:{code}")]
    assert types == ["session-start", "move-applied"]


def test_malformed_frames_are_rejected(registry: SessionRegistry) -> None:
    for raw in ["not json", '{"type": "fly-away"}', '{"type": "make-move", "sessionCode": "ROOM42"}']:
        out = dispatch_raw(registry=registry, connection_id="alice", raw=raw)
        assert out[0].recipients == ("alice",)
        assert out[0].message.to_payload()["reason"] == "InvalidMessage"


def test_raw_frames_accept_wire_field_names(registry: SessionRegistry) -> None:
    out = dispatch_raw(
        registry=registry,
        connection_id="alice",
        raw='{"type": "create-session", "rows": 6, "cols": 7, "connectN": 4, "gameMode": "extreme-capture", "playerName": "Alice"}',
    )
    assert out[0].message.to_payload()["sessionCode"] == "ROOM42"
    assert registry.require("ROOM42").config.game_mode == GameMode.extreme_capture


def test_disconnect_abandons_and_notifies_remaining(registry: SessionRegistry, fake_redis: fakeredis.FakeRedis) -> None:
    code = _start(registry)
    dispatch(registry=registry, connection_id="alice", message=MakeMove(session_code=code, column=3))

    out = handle_disconnect(registry=registry, connection_id="bob")

    assert _payloads(out) == [(("alice",), {"type": "participant-disconnected", "name": "Bob"})]
    assert registry.get(code) is None
    assert fake_redis.exists(f"connectn:events:{code}") == 0

    after = dispatch(registry=registry, connection_id="alice", message=MakeMove(session_code=code, column=3))
    assert after[0].message.to_payload()["reason"] == "SessionNotFound"


def test_disconnect_while_waiting_removes_session(registry: SessionRegistry) -> None:
    dispatch(registry=registry, connection_id="alice", message=CreateSession(rows=6, cols=7, connect_n=4, player_name="Alice"))
    assert handle_disconnect(registry=registry, connection_id="alice") == []
    assert registry.get("ROOM42") is None


def test_disconnect_of_unknown_connection_is_noop(registry: SessionRegistry) -> None:
    code = _start(registry)
    assert handle_disconnect(registry=registry, connection_id="ghost") == []
    assert registry.require(code).status == SessionStatus.active
