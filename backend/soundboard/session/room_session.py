"""Server-side session: one client transport's membership in a room."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

from shared.connection_state import ConnectionState, InvalidTransitionError, can_transition
from shared.errors import MalformedMessageError
from shared.wire import SoundEvent, decode_event

if TYPE_CHECKING:
    from soundboard.messaging.protocol import ConnectionProtocol
    from soundboard.messaging.router import BroadcastRouter

logger = structlog.get_logger()

DEFAULT_DELIVER_TIMEOUT_SECONDS = 1.0


class RoomSession:
    """Own one transport's lifecycle inside a single room.

    Lifecycle:
    - Created in CONNECTING when the endpoint accepts the channel
    - mark_open() once the registry has accepted the membership
    - mark_closed() on disconnect; CLOSED is terminal

    The room registry only holds a reference to the session. Removing the
    session from the room never closes its connection.
    """

    def __init__(
        self,
        connection: ConnectionProtocol,
        nickname: str,
        deliver_timeout_seconds: float = DEFAULT_DELIVER_TIMEOUT_SECONDS,
    ) -> None:
        self._connection = connection
        self._nickname = nickname
        self._deliver_timeout_seconds = deliver_timeout_seconds
        self._state = ConnectionState.CONNECTING
        self._log = logger.bind(
            session_id=connection.connection_id,
            room_id=connection.room_id,
            nickname=nickname,
        )

    @property
    def session_id(self) -> str:
        return self._connection.connection_id

    @property
    def room_id(self) -> str:
        return self._connection.room_id

    @property
    def nickname(self) -> str:
        return self._nickname

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state is ConnectionState.OPEN

    def mark_open(self) -> None:
        self._transition(ConnectionState.OPEN)

    def mark_closed(self) -> None:
        if self._state is not ConnectionState.CLOSED:
            self._transition(ConnectionState.CLOSED)

    async def deliver(self, event: SoundEvent) -> bool:
        """Push an event to this client. Best effort, at most once.

        Returns False without sending when the session is not open. A send
        that fails or does not finish within the deliver timeout closes the
        session instead of raising, so a client that stopped reading cannot
        hold up the sender.
        """
        if not self.is_open:
            return False
        try:
            await asyncio.wait_for(self._connection.send_event(event), timeout=self._deliver_timeout_seconds)
        except TimeoutError:
            self._log.warning("delivery timed out, closing session", timeout=self._deliver_timeout_seconds)
            self.mark_closed()
            return False
        except (ConnectionError, RuntimeError, OSError) as e:
            self._log.info("delivery failed, closing session", error=str(e))
            self.mark_closed()
            return False
        return True

    async def handle_inbound(self, raw: str | bytes, router: BroadcastRouter) -> int:
        """Decode a frame from this client and hand it to the router.

        The event is re-tagged with the session's own nickname. Malformed
        frames are logged and dropped without touching the session state.
        Returns the number of sibling deliveries.
        """
        if not self.is_open:
            return 0
        try:
            event = decode_event(raw)
        except MalformedMessageError as e:
            self._log.warning("malformed message dropped", error=str(e))
            return 0

        if event.nickname != self._nickname:
            event = event.model_copy(update={"nickname": self._nickname})
        return await router.route(self, event)

    def _transition(self, target: ConnectionState) -> None:
        if not can_transition(self._state, target):
            raise InvalidTransitionError(self._state, target)
        self._log.debug("session state changed", previous=self._state, state=target)
        self._state = target
