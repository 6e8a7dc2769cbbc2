"""Session lifecycle state for the Figma MCP handshake."""

from __future__ import annotations

import asyncio
from enum import Enum, auto
from typing import Callable


class SessionState(Enum):
    """
    Handshake lifecycle states.

    State transitions:
        UNINITIALIZED -> INITIALIZING -> READY
              ^               |            |
              +---------------+------------+

    INITIALIZING falls back to UNINITIALIZED when the handshake fails;
    READY falls back when the server reports the session as lost.
    """

    UNINITIALIZED = auto()
    INITIALIZING = auto()
    READY = auto()

    def __str__(self) -> str:
        return self.name


class InvalidStateTransition(Exception):
    """Raised when an invalid state transition is attempted."""

    def __init__(self, from_state: SessionState, to_state: SessionState):
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Invalid state transition: {from_state.name} -> {to_state.name}"
        )


# Type for state transition callbacks
StateTransitionCallback = Callable[[SessionState, SessionState], None]


class Session:
    """
    Handshake state plus the shared in-flight handshake.

    Only the connection manager mutates a Session. While INITIALIZING,
    ``pending`` holds the one task every concurrent caller awaits.
    """

    VALID_TRANSITIONS: dict[SessionState, list[SessionState]] = {
        SessionState.UNINITIALIZED: [SessionState.INITIALIZING],
        SessionState.INITIALIZING: [
            SessionState.READY,
            SessionState.UNINITIALIZED,  # Handshake failed
        ],
        SessionState.READY: [
            SessionState.UNINITIALIZED,  # Session lost or client closed
        ],
    }

    def __init__(self) -> None:
        self._state = SessionState.UNINITIALIZED
        self._listeners: list[StateTransitionCallback] = []
        self.pending: asyncio.Task[None] | None = None
        self.handshakes: int = 0

    @property
    def state(self) -> SessionState:
        """Current session state."""
        return self._state

    @property
    def is_ready(self) -> bool:
        """Check if the handshake has completed."""
        return self._state == SessionState.READY

    @property
    def is_initializing(self) -> bool:
        return self._state == SessionState.INITIALIZING

    def can_transition_to(self, new_state: SessionState) -> bool:
        """Check if transition to new_state is valid."""
        return new_state in self.VALID_TRANSITIONS.get(self._state, [])

    def transition(self, new_state: SessionState) -> None:
        """
        Transition to a new state.

        Raises:
            InvalidStateTransition: If the transition is not valid.
        """
        if not self.can_transition_to(new_state):
            raise InvalidStateTransition(self._state, new_state)
        self._set(new_state)

    def reset(self) -> None:
        """Return to UNINITIALIZED and drop any shared handshake."""
        self.pending = None
        if self._state != SessionState.UNINITIALIZED:
            self._set(SessionState.UNINITIALIZED)

    def on_transition(self, callback: StateTransitionCallback) -> None:
        """
        Register a callback for state transitions.

        Args:
            callback: Function called with (old_state, new_state).
        """
        self._listeners.append(callback)

    def _set(self, new_state: SessionState) -> None:
        old_state = self._state
        self._state = new_state

        for listener in self._listeners:
            try:
                listener(old_state, new_state)
            except Exception:
                # Don't let listener errors affect the session
                pass

    def __repr__(self) -> str:
        return f"Session(state={self._state!r})"
