from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from soundboard.messaging.router import BroadcastRouter
from soundboard.rooms.registry import RoomRegistry
from soundboard.session.room_session import RoomSession
from soundboard.tests.mocks import MockConnection

if TYPE_CHECKING:
    from collections.abc import Callable


@pytest.fixture
def registry() -> RoomRegistry:
    return RoomRegistry(idle_grace_seconds=60)


@pytest.fixture
def router(registry: RoomRegistry) -> BroadcastRouter:
    return BroadcastRouter(registry)


@pytest.fixture
def join(registry: RoomRegistry) -> Callable[[str, str], tuple[RoomSession, MockConnection]]:
    """Open a session on a mock connection and register it in a room."""

    def _join(room_id: str, nickname: str) -> tuple[RoomSession, MockConnection]:
        connection = MockConnection(room_id=room_id)
        session = RoomSession(connection, nickname)
        registry.add_member(room_id, session)
        session.mark_open()
        return session, connection

    return _join
