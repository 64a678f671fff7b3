"""In-memory room registry: the only shared mutable state on the server."""

from __future__ import annotations

import secrets
import time
from typing import TYPE_CHECKING

import structlog

from shared.errors import InvalidInputError, RoomNotFoundError
from soundboard.rooms.models import MAX_ROOM_NAME_LENGTH, Room

if TYPE_CHECKING:
    from soundboard.session.room_session import RoomSession

logger = structlog.get_logger()

_ROOM_ID_BYTES = 8


class RoomRegistry:
    """Map room ids to rooms and their live membership.

    Every method is synchronous, so each mutation runs to completion without
    yielding to the event loop. Readers therefore always observe either the
    state before or after an add/remove/reclaim, never a partial update.

    Reclamation policy: a room that has been empty for ``idle_grace_seconds``
    is removed by reclaim_idle_rooms() (driven by the lifecycle manager's
    reaper). With a grace of 0 the room is removed inside the remove_member()
    call that empties it.
    """

    def __init__(self, idle_grace_seconds: float = 60.0) -> None:
        if idle_grace_seconds < 0:
            raise ValueError(f"idle_grace_seconds must be >= 0, got {idle_grace_seconds}")
        self._rooms: dict[str, Room] = {}
        self._idle_grace_seconds = idle_grace_seconds

    @property
    def idle_grace_seconds(self) -> float:
        return self._idle_grace_seconds

    @property
    def room_count(self) -> int:
        return len(self._rooms)

    def create_room(self, name: str) -> Room:
        """Store a new room under a fresh unique id and return it."""
        clean_name = name.strip()
        if not clean_name:
            raise InvalidInputError("room name must not be empty")
        if len(clean_name) > MAX_ROOM_NAME_LENGTH:
            raise InvalidInputError(f"room name must be at most {MAX_ROOM_NAME_LENGTH} characters")

        room_id = self._new_room_id()
        room = Room(room_id=room_id, name=clean_name)
        self._rooms[room_id] = room
        return room

    def get_room(self, room_id: str) -> Room:
        room = self._rooms.get(room_id)
        if room is None:
            raise RoomNotFoundError(room_id)
        return room

    def has_room(self, room_id: str) -> bool:
        return room_id in self._rooms

    def add_member(self, room_id: str, session: RoomSession) -> None:
        room = self.get_room(room_id)
        room.members[session.session_id] = session
        room.empty_since = None

    def remove_member(self, room_id: str, session: RoomSession) -> None:
        """Remove a session from a room. Removing an absent member is a no-op."""
        room = self._rooms.get(room_id)
        if room is None or room.members.pop(session.session_id, None) is None:
            return
        if room.is_empty:
            room.empty_since = time.monotonic()
            if self._idle_grace_seconds == 0:
                self._discard(room_id, reason="last_member_left")

    def members(self, room_id: str) -> tuple[RoomSession, ...]:
        """Snapshot of a room's members; empty for unknown rooms."""
        room = self._rooms.get(room_id)
        if room is None:
            return ()
        return tuple(room.members.values())

    def reclaim_idle_rooms(self, now: float | None = None) -> list[str]:
        """Remove rooms that have been empty for at least the grace window."""
        if now is None:
            now = time.monotonic()
        expired = [
            room_id
            for room_id, room in self._rooms.items()
            if room.is_empty and room.idle_for(now) >= self._idle_grace_seconds
        ]
        for room_id in expired:
            self._discard(room_id, reason="idle")
        return expired

    def _discard(self, room_id: str, *, reason: str) -> None:
        room = self._rooms.pop(room_id, None)
        if room is not None:
            logger.info("room reclaimed", room_id=room_id, reason=reason)

    def _new_room_id(self) -> str:
        while True:
            room_id = secrets.token_urlsafe(_ROOM_ID_BYTES)
            if room_id not in self._rooms:
                return room_id
