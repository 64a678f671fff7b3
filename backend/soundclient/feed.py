"""Recent-activity feed shown next to the soundboard."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING

from soundclient.sounds import get_sound_info

if TYPE_CHECKING:
    from shared.wire import SoundEvent

MAX_FEED_ENTRIES = 20
SELF_DISPLAY_NAME = "You"


@dataclass(frozen=True)
class ActivityEntry:
    emoji: str
    nickname: str
    action: str

    def __str__(self) -> str:
        return f"{self.emoji} {self.nickname} {self.action}"


class ActivityFeed:
    """Newest-first list of the last ``max_entries`` things that happened in the room.

    Sound types missing from the catalog are ignored, matching the playback
    side which has nothing to play for them.
    """

    def __init__(self, own_nickname: str, max_entries: int = MAX_FEED_ENTRIES) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._own_nickname = own_nickname
        self._entries: deque[ActivityEntry] = deque(maxlen=max_entries)

    @property
    def entries(self) -> list[ActivityEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def record_joined(self) -> ActivityEntry:
        return self._add(ActivityEntry("🎉", SELF_DISPLAY_NAME, "joined the room"))

    def record_local_sound(self, sound_type: int) -> ActivityEntry | None:
        """Record a sound this client played itself."""
        return self._record_sound(sound_type, SELF_DISPLAY_NAME)

    def record_event(self, event: SoundEvent) -> ActivityEntry | None:
        """Record a sound received from the room."""
        display_name = SELF_DISPLAY_NAME if event.nickname == self._own_nickname else event.nickname
        return self._record_sound(event.type, display_name)

    def _record_sound(self, sound_type: int, display_name: str) -> ActivityEntry | None:
        sound = get_sound_info(sound_type)
        if sound is None:
            return None
        return self._add(ActivityEntry(sound.emoji, display_name, f"played {sound.name}"))

    def _add(self, entry: ActivityEntry) -> ActivityEntry:
        self._entries.appendleft(entry)
        return entry
