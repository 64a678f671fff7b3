"""Room lifecycle: creation, lookup, and periodic reclamation of idle rooms."""

from __future__ import annotations

import asyncio
import contextlib
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from soundboard.rooms.models import Room
    from soundboard.rooms.registry import RoomRegistry

logger = structlog.get_logger()


class RoomLifecycleManager:
    """Create and look up rooms, and run the idle-room reaper.

    Purely state management on top of the injected registry; the HTTP
    handlers translate its exceptions into responses.
    """

    def __init__(self, registry: RoomRegistry, reaper_interval_seconds: float = 10.0) -> None:
        self._registry = registry
        self._reaper_interval_seconds = reaper_interval_seconds
        self._reaper_task: asyncio.Task[None] | None = None

    @property
    def registry(self) -> RoomRegistry:
        return self._registry

    def create_room(self, name: str) -> Room:
        """Create a room. Raises InvalidInputError for a blank name."""
        room = self._registry.create_room(name)
        logger.info("room created", room_id=room.room_id, name=room.name)
        return room

    def get_room(self, room_id: str) -> Room:
        """Look up a room. Raises RoomNotFoundError if it never existed or was reclaimed."""
        return self._registry.get_room(room_id)

    def start_reaper(self) -> None:
        """Start the periodic reaper task. Calling it twice keeps the first task."""
        if self._reaper_task is not None:
            return
        self._reaper_task = asyncio.create_task(self._reaper_loop())

    async def stop_reaper(self) -> None:
        if self._reaper_task is not None:
            self._reaper_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._reaper_task
            self._reaper_task = None

    async def _reaper_loop(self) -> None:
        while True:
            await asyncio.sleep(self._reaper_interval_seconds)
            try:
                self.reclaim_idle_rooms()
            except Exception:
                logger.exception("room reaper sweep failed")

    def reclaim_idle_rooms(self) -> list[str]:
        reclaimed = self._registry.reclaim_idle_rooms()
        if reclaimed:
            logger.info("idle rooms reclaimed", count=len(reclaimed), remaining=self._registry.room_count)
        return reclaimed
