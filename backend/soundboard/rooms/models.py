"""Room models for the soundboard server."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from shared.wire import RoomInfo

if TYPE_CHECKING:
    from soundboard.session.room_session import RoomSession

MAX_ROOM_NAME_LENGTH = 100


@dataclass
class Room:
    """A named broadcast domain.

    ``members`` holds non-owning references to the live sessions in the room,
    keyed by session id. The room never opens or closes a member's channel.
    ``empty_since`` is the monotonic time the room last became empty (creation
    time for a room nobody joined yet), or None while it has members.
    """

    room_id: str
    name: str
    empty_since: float | None = field(default_factory=time.monotonic)
    members: dict[str, RoomSession] = field(default_factory=dict)  # session_id -> RoomSession

    @property
    def member_count(self) -> int:
        return len(self.members)

    @property
    def is_empty(self) -> bool:
        return not self.members

    def idle_for(self, now: float) -> float:
        """Seconds the room has been empty, 0 while it has members."""
        if self.empty_since is None:
            return 0.0
        return max(0.0, now - self.empty_since)

    def to_info(self) -> RoomInfo:
        return RoomInfo(id=self.room_id, name=self.name)
