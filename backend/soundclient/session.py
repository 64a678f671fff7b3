"""Client connection session with automatic reconnection.

One ConnectionSession is a participant's logical membership in a room. It
keeps the same session_id for its whole life while the underlying transport
may be replaced many times by reconnects.

State machine (see shared.connection_state):
    CONNECTING -> OPEN            handshake succeeded
    CONNECTING -> RECONNECTING    handshake failed
    OPEN -> RECONNECTING          transport lost while still in the room
    RECONNECTING -> CONNECTING    retry timer fired
    any -> CLOSED                 leave(), or retry policy exhausted
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING
from urllib.parse import quote, urlencode
from uuid import uuid4

from pydantic import ValidationError

from shared.connection_state import ConnectionState, InvalidTransitionError, can_transition
from shared.errors import InvalidInputError, MalformedMessageError, TransportLostError
from shared.wire import MAX_NICKNAME_LENGTH, SoundEvent, contains_control_chars, decode_event, encode_event
from soundclient.retry import RetryPolicy

if TYPE_CHECKING:
    from collections.abc import Callable

    from soundclient.transport import Connector, Transport

logger = logging.getLogger(__name__)


class ConnectionSession:
    """Keep one client connected to a room and surface its sound events.

    ``on_event`` is the playback hook: it receives every decoded SoundEvent
    from other participants. ``on_state_change`` lets the UI show a
    reconnecting status. Neither callback may block; exceptions they raise
    are logged and swallowed.
    """

    def __init__(
        self,
        room_id: str,
        nickname: str,
        *,
        connector: Connector,
        ws_base_url: str,
        on_event: Callable[[SoundEvent], None] | None = None,
        on_state_change: Callable[[ConnectionState, ConnectionState], None] | None = None,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        clean_nickname = nickname.strip()
        if not clean_nickname:
            raise InvalidInputError("nickname must not be empty")
        if len(clean_nickname) > MAX_NICKNAME_LENGTH:
            raise InvalidInputError(f"nickname must be at most {MAX_NICKNAME_LENGTH} characters")
        if contains_control_chars(clean_nickname):
            raise InvalidInputError("nickname must not contain control characters")
        if not room_id.strip():
            raise InvalidInputError("room id must not be empty")

        self.session_id = str(uuid4())
        self._room_id = room_id.strip()
        self._nickname = clean_nickname
        self._connector = connector
        self._ws_base_url = ws_base_url.rstrip("/")
        self._on_event = on_event
        self._on_state_change = on_state_change
        self._retry_policy = retry_policy or RetryPolicy()

        self._state = ConnectionState.CONNECTING
        self._started = False
        self._transport: Transport | None = None
        self._reader_task: asyncio.Task[None] | None = None
        self._retry_task: asyncio.Task[None] | None = None
        self._retry_attempt = 0
        self.connection_count = 0
        self.exhausted = False

    @property
    def room_id(self) -> str:
        return self._room_id

    @property
    def nickname(self) -> str:
        return self._nickname

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state is ConnectionState.OPEN

    @property
    def retry_pending(self) -> bool:
        return self._retry_task is not None and not self._retry_task.done()

    @property
    def url(self) -> str:
        return f"{self._ws_base_url}/ws/{quote(self._room_id, safe='')}?{urlencode({'nickname': self._nickname})}"

    async def start(self) -> None:
        """Make the first connection attempt. A failure schedules a retry."""
        if self._started or self._state is ConnectionState.CLOSED:
            raise RuntimeError("session already started")
        self._started = True
        await self._attempt_connect()

    async def send_sound(self, sound_type: int) -> bool:
        """Send a sound trigger to the room.

        Returns False without sending when the session is not open; nothing
        is queued for later.
        """
        try:
            event = SoundEvent(type=sound_type, nickname=self._nickname)
        except ValidationError as e:
            raise InvalidInputError(f"invalid sound type {sound_type!r}") from e

        transport = self._transport
        if not self.is_open or transport is None:
            logger.info("sound %s not sent, session is %s", sound_type, self._state.value)
            return False
        try:
            await transport.send_text(encode_event(event))
        except TransportLostError as e:
            logger.info("send failed for session %s: %s", self.session_id, e)
            await self._handle_transport_lost(transport)
            return False
        return True

    async def leave(self) -> None:
        """Leave the room for good.

        The state flips to CLOSED and any pending retry is cancelled before
        the first suspension point, so no further connection attempt can
        start once this coroutine has begun.
        """
        if self._state is ConnectionState.CLOSED:
            return
        self._set_state(ConnectionState.CLOSED)

        current = asyncio.current_task()
        retry_task, self._retry_task = self._retry_task, None
        if retry_task is not None and retry_task is not current:
            retry_task.cancel()

        reader_task, self._reader_task = self._reader_task, None
        transport, self._transport = self._transport, None
        if reader_task is not None and reader_task is not current:
            reader_task.cancel()

        if transport is not None:
            with contextlib.suppress(TransportLostError):
                await transport.close()
        if reader_task is not None and reader_task is not current:
            with contextlib.suppress(asyncio.CancelledError):
                await reader_task
        logger.info("session %s left room %s", self.session_id, self._room_id)

    async def _attempt_connect(self) -> None:
        if self._state is ConnectionState.RECONNECTING:
            self._set_state(ConnectionState.CONNECTING)
        logger.info("connecting session %s to %s", self.session_id, self.url)
        try:
            transport = await self._connector(self.url)
        except TransportLostError as e:
            logger.warning("connection attempt failed for session %s: %s", self.session_id, e)
            await self._handle_transport_lost(None)
            return

        if self._state is ConnectionState.CLOSED:
            with contextlib.suppress(TransportLostError):
                await transport.close()
            return

        self._transport = transport
        self._retry_attempt = 0
        self.connection_count += 1
        self._set_state(ConnectionState.OPEN)
        self._reader_task = asyncio.create_task(self._read_loop(transport))

    async def _read_loop(self, transport: Transport) -> None:
        try:
            while True:
                raw = await transport.receive_frame()
                self._dispatch(raw)
        except TransportLostError as e:
            logger.info("transport lost for session %s: %s", self.session_id, e)
        await self._handle_transport_lost(transport)

    def _dispatch(self, raw: str | bytes) -> None:
        try:
            event = decode_event(raw)
        except MalformedMessageError as e:
            logger.warning("malformed message dropped for session %s: %s", self.session_id, e)
            return
        if self._on_event is None:
            return
        try:
            self._on_event(event)
        except Exception:
            logger.exception("on_event callback failed for session %s", self.session_id)

    async def _handle_transport_lost(self, transport: Transport | None) -> None:
        """React to a dropped or failed transport.

        Ignored after leave() and for transports that are no longer current,
        so a send failure and the reader noticing the same drop only schedule
        one retry. The retry is scheduled before the old transport is torn
        down, so the state change happens without a suspension point.
        """
        if self._state not in (ConnectionState.OPEN, ConnectionState.CONNECTING):
            return
        if transport is not None and transport is not self._transport:
            return
        reader_task, self._reader_task = self._reader_task, None
        self._transport = None
        self._set_state(ConnectionState.RECONNECTING)
        self._schedule_retry()

        if reader_task is not None and reader_task is not asyncio.current_task():
            reader_task.cancel()
        if transport is not None:
            with contextlib.suppress(TransportLostError):
                await transport.close()

    def _schedule_retry(self) -> None:
        pending = self._retry_task
        if pending is not None and not pending.done() and pending is not asyncio.current_task():
            logger.debug("retry already pending for session %s", self.session_id)
            return

        self._retry_attempt += 1
        if not self._retry_policy.allows(self._retry_attempt):
            logger.error(
                "giving up on session %s after %d reconnect attempts",
                self.session_id,
                self._retry_attempt - 1,
            )
            self.exhausted = True
            self._set_state(ConnectionState.CLOSED)
            return

        delay = self._retry_policy.next_delay()
        logger.info("reconnecting session %s in %.2fs (attempt %d)", self.session_id, delay, self._retry_attempt)
        self._retry_task = asyncio.create_task(self._retry_after(delay))

    async def _retry_after(self, delay: float) -> None:
        try:
            await asyncio.sleep(delay)
            if self._state is ConnectionState.RECONNECTING:
                await self._attempt_connect()
        finally:
            if self._retry_task is asyncio.current_task():
                self._retry_task = None

    def _set_state(self, target: ConnectionState) -> None:
        previous = self._state
        if not can_transition(previous, target):
            raise InvalidTransitionError(previous, target)
        self._state = target
        if self._on_state_change is None:
            return
        try:
            self._on_state_change(target, previous)
        except Exception:
            logger.exception("on_state_change callback failed for session %s", self.session_id)
