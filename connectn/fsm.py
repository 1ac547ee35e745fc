from __future__ import annotations

from statemachine import State, StateMachine

from connectn.api.models import SessionState, SessionStatus


class SessionFSM(StateMachine):
    """Status machine wrapped around a SessionState.

    Session operations do their own validation and raise domain errors first;
    the FSM only guards that the status moves along a legal edge:
    awaiting_opponent -> active -> finished, reset back to active, and
    abandoned (final) from anywhere.
    """

    awaiting_opponent = State(
        SessionStatus.awaiting_opponent.value,
        value=SessionStatus.awaiting_opponent.value,
        initial=True,
    )
    playing = State(SessionStatus.active.value, value=SessionStatus.active.value)
    finished = State(SessionStatus.finished.value, value=SessionStatus.finished.value)
    abandoned = State(SessionStatus.abandoned.value, value=SessionStatus.abandoned.value, final=True)

    opponent_joined = awaiting_opponent.to(playing)
    game_over = playing.to(finished)
    restart = finished.to(playing) | playing.to(playing)
    abandon = awaiting_opponent.to(abandoned) | playing.to(abandoned) | finished.to(abandoned)

    def __init__(self, session: SessionState):
        self.session = session
        super().__init__(start_value=session.status.value)

    def sync_status_to_model(self) -> None:
        self.session.status = SessionStatus(str(self.current_state.value))
