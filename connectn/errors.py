from __future__ import annotations

from typing import ClassVar


class GameError(ValueError):
    """Base class for recoverable, requester-only failures.

    Every subclass carries a stable `reason` so clients can branch on it without
    parsing the human-readable message. None of these ever mutate shared state.
    """

    reason: ClassVar[str] = "GameError"
    default_message: ClassVar[str] = "Request rejected"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class SessionNotFound(GameError):
    reason = "SessionNotFound"
    default_message = "Session not found"

    def __init__(self, code: str | None = None) -> None:
        self.code = code
        super().__init__(f"Session {code} not found" if code else None)


class SessionFull(GameError):
    reason = "SessionFull"
    default_message = "Session is full"


class SessionAlreadyActive(GameError):
    reason = "SessionAlreadyActive"
    default_message = "Game already in progress"


class SessionNotStarted(GameError):
    reason = "SessionNotStarted"
    default_message = "Waiting for an opponent to join"


class SessionFinished(GameError):
    reason = "SessionFinished"
    default_message = "Game is over"


class SessionBusy(GameError):
    reason = "SessionBusy"
    default_message = "Session is busy"


class NotAParticipant(GameError):
    reason = "NotAParticipant"
    default_message = "You are not in this game"


class AlreadySeated(GameError):
    reason = "AlreadySeated"
    default_message = "You already have a seat in this game"


class OutOfTurn(GameError):
    reason = "OutOfTurn"
    default_message = "Not your turn"

    def __init__(self, expected_seat: int | None = None) -> None:
        self.expected_seat = expected_seat
        super().__init__(f"Not your turn (current player is {expected_seat})" if expected_seat else None)


class ColumnFull(GameError):
    reason = "ColumnFull"
    default_message = "Column is full"

    def __init__(self, column: int | None = None) -> None:
        self.column = column
        super().__init__(f"Column {column} is full" if column is not None else None)


class OutOfBounds(GameError):
    reason = "OutOfBounds"
    default_message = "Position is outside the board"


class InvalidConfig(GameError):
    reason = "InvalidConfig"
    default_message = "Invalid board configuration"


class InvalidMessage(GameError):
    reason = "InvalidMessage"
    default_message = "Invalid message"
