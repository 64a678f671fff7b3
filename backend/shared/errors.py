"""Typed exceptions shared by the soundboard server and client.

Callers catch the specific subclass at their boundary: HTTP handlers convert
InvalidInputError/RoomNotFoundError into 400/404 responses, sessions swallow
MalformedMessageError after logging it, and the client session recovers from
TransportLostError with its retry policy.
"""


class SoundboardError(Exception):
    """Base exception for soundboard domain errors."""


class InvalidInputError(SoundboardError):
    """Creation or join parameters are blank or out of range."""


class RoomNotFoundError(SoundboardError):
    """No room exists with the requested id.

    Distinct from an empty room, which is still a valid lookup result
    until it is reclaimed.
    """

    def __init__(self, room_id: str) -> None:
        self.room_id = room_id
        super().__init__(f"room not found: {room_id}")


class TransportLostError(SoundboardError):
    """The realtime channel dropped or could not be opened."""


class MalformedMessageError(SoundboardError):
    """A frame on an open channel could not be decoded into a SoundEvent."""
