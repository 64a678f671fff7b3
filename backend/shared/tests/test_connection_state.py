import pytest

from shared.connection_state import ALLOWED_TRANSITIONS, ConnectionState, InvalidTransitionError, can_transition


class TestConnectionState:
    @pytest.mark.parametrize(
        ("current", "target"),
        [
            (ConnectionState.CONNECTING, ConnectionState.OPEN),
            (ConnectionState.CONNECTING, ConnectionState.RECONNECTING),
            (ConnectionState.OPEN, ConnectionState.RECONNECTING),
            (ConnectionState.RECONNECTING, ConnectionState.CONNECTING),
            (ConnectionState.OPEN, ConnectionState.CLOSED),
        ],
    )
    def test_allowed_transitions(self, current, target):
        assert can_transition(current, target)

    @pytest.mark.parametrize(
        ("current", "target"),
        [
            (ConnectionState.OPEN, ConnectionState.CONNECTING),
            (ConnectionState.RECONNECTING, ConnectionState.OPEN),
            (ConnectionState.CLOSED, ConnectionState.CONNECTING),
            (ConnectionState.CLOSED, ConnectionState.OPEN),
        ],
    )
    def test_forbidden_transitions(self, current, target):
        assert not can_transition(current, target)

    def test_every_state_can_close_except_closed(self):
        for state, targets in ALLOWED_TRANSITIONS.items():
            assert (ConnectionState.CLOSED in targets) is (state is not ConnectionState.CLOSED)

    def test_invalid_transition_error_message(self):
        err = InvalidTransitionError(ConnectionState.CLOSED, ConnectionState.OPEN)
        assert err.current is ConnectionState.CLOSED
        assert str(err) == "invalid connection state transition closed -> open"
