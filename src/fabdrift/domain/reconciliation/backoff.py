"""Exponential backoff schedule for the reconciliation poller."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator


@dataclass(frozen=True, slots=True)
class BackoffPolicy:
    """Attempt budget and delay curve, in milliseconds.

    The delay starts at ``initial_delay_ms`` and is multiplied after every
    sleep, capped at ``max_delay_ms``. There is no sleep after the last
    attempt, so ``max_attempts`` attempts yield ``max_attempts - 1`` delays.
    """

    max_attempts: int = 10
    initial_delay_ms: int = 1000
    max_delay_ms: int = 30000
    multiplier: float = 2.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.initial_delay_ms < 0 or self.max_delay_ms < 0:
            raise ValueError("Delays must be non-negative")
        if self.multiplier < 1:
            raise ValueError("multiplier must be at least 1")

    def delays(self) -> Iterator[int]:
        delay = float(self.initial_delay_ms)
        for _ in range(self.max_attempts - 1):
            yield int(min(delay, self.max_delay_ms))
            delay = min(delay * self.multiplier, self.max_delay_ms)


__all__ = ["BackoffPolicy"]
