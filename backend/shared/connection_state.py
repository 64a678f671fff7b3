"""Connection state machine shared by server and client sessions."""

from enum import StrEnum


class ConnectionState(StrEnum):
    CONNECTING = "connecting"
    OPEN = "open"
    RECONNECTING = "reconnecting"
    CLOSED = "closed"


# CLOSED is terminal: nothing leaves it.
ALLOWED_TRANSITIONS: dict[ConnectionState, frozenset[ConnectionState]] = {
    ConnectionState.CONNECTING: frozenset({ConnectionState.OPEN, ConnectionState.RECONNECTING, ConnectionState.CLOSED}),
    ConnectionState.OPEN: frozenset({ConnectionState.RECONNECTING, ConnectionState.CLOSED}),
    ConnectionState.RECONNECTING: frozenset({ConnectionState.CONNECTING, ConnectionState.CLOSED}),
    ConnectionState.CLOSED: frozenset(),
}


class InvalidTransitionError(Exception):
    def __init__(self, current: ConnectionState, target: ConnectionState) -> None:
        self.current = current
        self.target = target
        super().__init__(f"invalid connection state transition {current.value} -> {target.value}")


def can_transition(current: ConnectionState, target: ConnectionState) -> bool:
    return target in ALLOWED_TRANSITIONS[current]
