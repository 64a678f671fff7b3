"""Join a soundboard room from the terminal.

Usage: uv run python bin/join-room.py <nickname> [room_id]

Without a room id a new room called "Party" is created and its id printed so
others can join. Type a sound number (1-6) and press enter to play it; type
"q" to leave.
"""

import asyncio
import logging
import sys
from pathlib import Path

# Add backend to path for imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "backend"))

from shared.connection_state import ConnectionState
from shared.errors import InvalidInputError, RoomNotFoundError, SoundboardError
from shared.logging import setup_logging
from shared.wire import SoundEvent
from soundclient.api import RoomApiClient
from soundclient.feed import ActivityFeed
from soundclient.retry import RetryPolicy
from soundclient.session import ConnectionSession
from soundclient.settings import SoundClientSettings
from soundclient.sounds import SOUNDS
from soundclient.transport import websocket_connector


async def main() -> None:
    if len(sys.argv) not in (2, 3):
        print(f"Usage: {sys.argv[0]} <nickname> [room_id]")
        sys.exit(1)

    nickname = sys.argv[1]
    settings = SoundClientSettings()
    setup_logging(log_dir=None, level=logging.WARNING, service="soundclient")

    async with RoomApiClient(settings.api_base_url, timeout=settings.http_timeout_seconds) as api:
        try:
            if len(sys.argv) == 3:
                room = await api.get_room(sys.argv[2])
            else:
                room = await api.create_room("Party")
        except (InvalidInputError, RoomNotFoundError) as e:
            print(f"Error: {e}")
            sys.exit(1)
        except SoundboardError as e:
            print(f"Server unreachable: {e}")
            sys.exit(1)

    print(f"Room: {room.name} (id: {room.id})")
    print("Sounds: " + ", ".join(f"{k}={s.emoji} {s.name}" for k, s in SOUNDS.items()))

    feed = ActivityFeed(nickname)

    def on_event(event: SoundEvent) -> None:
        entry = feed.record_event(event)
        if entry is not None:
            print(entry)

    def on_state_change(state: ConnectionState, _previous: ConnectionState) -> None:
        if state is ConnectionState.OPEN:
            print(feed.record_joined())
        elif state is ConnectionState.RECONNECTING:
            print("Connection lost, reconnecting...")

    try:
        session = ConnectionSession(
            room.id,
            nickname,
            connector=websocket_connector(open_timeout=settings.connect_timeout_seconds),
            ws_base_url=settings.ws_base_url,
            on_event=on_event,
            on_state_change=on_state_change,
            retry_policy=RetryPolicy.from_settings(settings),
        )
    except InvalidInputError as e:
        print(f"Error: {e}")
        sys.exit(1)

    await session.start()
    try:
        while session.state is not ConnectionState.CLOSED:
            line = (await asyncio.to_thread(sys.stdin.readline)).strip()
            if not line or line == "q":
                break
            if not line.isdigit():
                print("Enter a sound number or q")
                continue
            if await session.send_sound(int(line)):
                entry = feed.record_local_sound(int(line))
                if entry is not None:
                    print(entry)
            else:
                print("Not connected. Please wait...")
        if session.exhausted:
            print("Gave up reconnecting.")
    finally:
        await session.leave()


if __name__ == "__main__":
    asyncio.run(main())
