from __future__ import annotations

import contextlib
from typing import TYPE_CHECKING
from uuid import uuid4

import structlog
from starlette.websockets import WebSocket, WebSocketDisconnect

from shared.errors import RoomNotFoundError
from shared.wire import MAX_NICKNAME_LENGTH, contains_control_chars
from soundboard.messaging.protocol import ConnectionProtocol
from soundboard.session.room_session import DEFAULT_DELIVER_TIMEOUT_SECONDS, RoomSession

if TYPE_CHECKING:
    from soundboard.messaging.router import BroadcastRouter
    from soundboard.rooms.registry import RoomRegistry

logger = structlog.get_logger()

CLOSE_INVALID_NICKNAME = 4000
CLOSE_ROOM_NOT_FOUND = 4004


class WebSocketConnection(ConnectionProtocol):
    def __init__(self, websocket: WebSocket, room_id: str, connection_id: str | None = None) -> None:
        self._websocket = websocket
        self._room_id = room_id
        self._connection_id = connection_id or str(uuid4())

    @property
    def connection_id(self) -> str:
        return self._connection_id

    @property
    def room_id(self) -> str:
        return self._room_id

    async def send_text(self, data: str) -> None:
        try:
            await self._websocket.send_text(data)
        except WebSocketDisconnect:
            raise ConnectionError("WebSocket already disconnected") from None

    async def receive_frame(self) -> str | bytes:
        message = await self._websocket.receive()
        if message["type"] == "websocket.disconnect":
            raise ConnectionError("WebSocket already disconnected")
        text = message.get("text")
        if text is not None:
            return text
        return message.get("bytes") or b""

    async def close(self, code: int = 1000, reason: str = "") -> None:
        with contextlib.suppress(WebSocketDisconnect, RuntimeError):
            await self._websocket.close(code=code, reason=reason)


def _valid_nickname(nickname: str) -> bool:
    return 0 < len(nickname) <= MAX_NICKNAME_LENGTH and not contains_control_chars(nickname)


async def websocket_endpoint(
    websocket: WebSocket,
    registry: RoomRegistry,
    router: BroadcastRouter,
    deliver_timeout_seconds: float = DEFAULT_DELIVER_TIMEOUT_SECONDS,
) -> None:
    """Serve one realtime channel at /ws/{room_id}?nickname=...

    Join is two-phase: the nickname and room are validated before the
    handshake is accepted, then membership is registered. A room reclaimed
    between the two phases closes the channel instead of leaving a
    half-joined session.
    """
    room_id = websocket.path_params["room_id"]
    nickname = websocket.query_params.get("nickname", "").strip()
    log = logger.bind(room_id=room_id, nickname=nickname)

    if not _valid_nickname(nickname):
        log.info("join rejected", reason="invalid_nickname")
        await websocket.close(code=CLOSE_INVALID_NICKNAME, reason="invalid_nickname")
        return
    if not registry.has_room(room_id):
        log.info("join rejected", reason="room_not_found")
        await websocket.close(code=CLOSE_ROOM_NOT_FOUND, reason="room_not_found")
        return

    await websocket.accept()

    connection = WebSocketConnection(websocket, room_id=room_id)
    session = RoomSession(connection, nickname, deliver_timeout_seconds=deliver_timeout_seconds)
    log = log.bind(session_id=session.session_id)
    structlog.contextvars.bind_contextvars(room_id=room_id, session_id=session.session_id)
    try:
        registry.add_member(room_id, session)
    except RoomNotFoundError:
        log.info("join rejected", reason="room_reclaimed")
        session.mark_closed()
        await connection.close(code=CLOSE_ROOM_NOT_FOUND, reason="room_not_found")
        structlog.contextvars.clear_contextvars()
        return

    session.mark_open()
    log.info("session joined", members=len(registry.members(room_id)))

    try:
        while True:
            raw = await connection.receive_frame()
            await session.handle_inbound(raw, router)
    except (WebSocketDisconnect, RuntimeError, ConnectionError):
        pass
    except Exception:
        log.exception("unexpected error in sound websocket")
    finally:
        registry.remove_member(room_id, session)
        session.mark_closed()
        log.info("session left")
        structlog.contextvars.clear_contextvars()
