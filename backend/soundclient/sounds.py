"""Display catalog for sound types.

The server never interprets a sound type; this table only gives the client
something to show for the types the default soundboard ships with.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class SoundInfo:
    name: str
    emoji: str


SOUNDS: dict[int, SoundInfo] = {
    1: SoundInfo("Clap", "👏"),
    2: SoundInfo("Drum", "🥁"),
    3: SoundInfo("Bell", "🔔"),
    4: SoundInfo("Whoosh", "💨"),
    5: SoundInfo("Pop", "🎈"),
    6: SoundInfo("Horn", "📯"),
}


def get_sound_info(sound_type: int) -> SoundInfo | None:
    return SOUNDS.get(sound_type)
