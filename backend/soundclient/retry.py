"""Reconnect policy for client sessions."""

from __future__ import annotations

import random
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from soundclient.settings import SoundClientSettings


class RetryPolicy(BaseModel):
    """Fixed-delay reconnect policy.

    The defaults retry forever every 2 seconds with no jitter. Setting
    max_attempts bounds the number of consecutive failed reconnects before
    the session gives up; jitter_seconds adds a uniform random offset so a
    room full of clients does not reconnect in lockstep.
    """

    delay_seconds: float = Field(default=2.0, ge=0)
    max_attempts: int | None = Field(default=None, ge=1)
    jitter_seconds: float = Field(default=0.0, ge=0)

    @classmethod
    def from_settings(cls, settings: SoundClientSettings) -> RetryPolicy:
        return cls(
            delay_seconds=settings.reconnect_delay_seconds,
            max_attempts=settings.max_reconnect_attempts,
            jitter_seconds=settings.reconnect_jitter_seconds,
        )

    def allows(self, attempt: int) -> bool:
        """Whether the given 1-based retry attempt may be scheduled."""
        return self.max_attempts is None or attempt <= self.max_attempts

    def next_delay(self) -> float:
        if self.jitter_seconds == 0:
            return self.delay_seconds
        return self.delay_seconds + random.uniform(0, self.jitter_seconds)  # noqa: S311
