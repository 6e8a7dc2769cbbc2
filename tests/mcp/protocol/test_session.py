"""Tests for the session state machine."""

import pytest

from dsos.mcp.protocol.session import InvalidStateTransition, Session, SessionState


class TestSession:

    def test_starts_uninitialized(self):
        session = Session()
        assert session.state == SessionState.UNINITIALIZED
        assert not session.is_ready
        assert session.pending is None

    def test_happy_path(self):
        session = Session()
        session.transition(SessionState.INITIALIZING)
        assert session.is_initializing
        session.transition(SessionState.READY)
        assert session.is_ready

    @pytest.mark.parametrize(
        "path",
        [
            [SessionState.READY],
            [SessionState.INITIALIZING, SessionState.INITIALIZING],
            [SessionState.INITIALIZING, SessionState.READY, SessionState.INITIALIZING],
        ],
    )
    def test_invalid_transitions(self, path):
        session = Session()
        with pytest.raises(InvalidStateTransition):
            for state in path:
                session.transition(state)

    def test_reset_drops_pending(self):
        session = Session()
        session.transition(SessionState.INITIALIZING)
        session.pending = object()
        session.reset()
        assert session.state == SessionState.UNINITIALIZED
        assert session.pending is None

    def test_listeners_see_transitions(self):
        session = Session()
        seen = []
        session.on_transition(lambda old, new: seen.append((old, new)))
        session.on_transition(lambda old, new: 1 / 0)

        session.transition(SessionState.INITIALIZING)
        session.transition(SessionState.READY)
        session.reset()
        session.reset()

        assert seen == [
            (SessionState.UNINITIALIZED, SessionState.INITIALIZING),
            (SessionState.INITIALIZING, SessionState.READY),
            (SessionState.READY, SessionState.UNINITIALIZED),
        ]
