"""Room-wide fan-out of sound events."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from shared.wire import SoundEvent
    from soundboard.rooms.registry import RoomRegistry
    from soundboard.session.room_session import RoomSession

logger = structlog.get_logger()


class BroadcastRouter:
    """
    Deliver each routed event to every session in the origin's room.

    The only session skipped is the originating transport itself; other
    connections opened by the same participant still receive the event.
    Contains no WebSocket I/O of its own and can be tested with mock
    connections.
    """

    def __init__(self, registry: RoomRegistry) -> None:
        self._registry = registry

    async def route(self, origin: RoomSession, event: SoundEvent) -> int:
        """Fan an event out to the origin's siblings. Returns the delivery count.

        The membership snapshot is taken before the first await, so sessions
        joining or leaving mid-fan-out never produce a partial view. Deliveries
        run concurrently; a slow or dead session does not hold up the others,
        and a room with no siblings is a silent no-op.
        """
        recipients = [s for s in self._registry.members(origin.room_id) if s.session_id != origin.session_id]
        if not recipients:
            return 0

        results = await asyncio.gather(*(s.deliver(event) for s in recipients), return_exceptions=True)
        delivered = 0
        for session, result in zip(recipients, results, strict=True):
            if isinstance(result, BaseException):
                logger.warning("delivery raised", session_id=session.session_id, error=repr(result))
            elif result:
                delivered += 1

        logger.debug(
            "sound routed",
            room_id=origin.room_id,
            sound_type=event.type,
            nickname=event.nickname,
            recipients=len(recipients),
            delivered=delivered,
        )
        return delivered
