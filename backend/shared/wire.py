"""JSON wire format for sound events.

Both directions carry the same text frame: an object with exactly two
fields, ``type`` (sound identifier) and ``nickname``. Anything else is
malformed input.
"""

from __future__ import annotations

import json

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from shared.errors import MalformedMessageError

MAX_FRAME_SIZE = 4096
MAX_NICKNAME_LENGTH = 50

# ASCII control character boundaries for input validation
_SPACE_ORD = 0x20
_DEL_ORD = 0x7F


def contains_control_chars(value: str) -> bool:
    return any(ord(c) < _SPACE_ORD or ord(c) == _DEL_ORD for c in value)


class SoundEvent(BaseModel):
    """A sound cue triggered by one participant.

    ``type`` is opaque to the broadcast core: it is validated as a positive
    integer and passed through to the sound catalog on the receiving side.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    type: int = Field(ge=1, strict=True)
    nickname: str = Field(min_length=1, max_length=MAX_NICKNAME_LENGTH)

    @field_validator("nickname")
    @classmethod
    def _validate_nickname(cls, v: str) -> str:
        if contains_control_chars(v):
            raise ValueError("nickname must not contain control characters")
        return v


class RoomInfo(BaseModel):
    """Room payload exchanged over the HTTP API."""

    id: str
    name: str


def encode_event(event: SoundEvent) -> str:
    """Encode a SoundEvent to a JSON text frame."""
    return json.dumps(event.model_dump())


def decode_event(raw: str | bytes) -> SoundEvent:
    """Decode a text or binary frame into a SoundEvent.

    Raises MalformedMessageError if the frame is oversized, not JSON, or does
    not match the two-field event shape.
    """
    if isinstance(raw, bytes):
        byte_len = len(raw)
    else:
        byte_len = len(raw.encode("utf-8"))
    if byte_len > MAX_FRAME_SIZE:
        raise MalformedMessageError(f"frame too large ({byte_len} bytes, max {MAX_FRAME_SIZE})")
    try:
        data = json.loads(raw)
    except (ValueError, UnicodeDecodeError) as e:
        raise MalformedMessageError(f"invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise MalformedMessageError(f"expected object, got {type(data).__name__}")
    try:
        return SoundEvent.model_validate(data)
    except ValidationError as e:
        raise MalformedMessageError(f"invalid sound event: {e.error_count()} validation error(s)") from e
