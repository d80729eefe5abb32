"""Port for suspending between reconciliation attempts."""

from __future__ import annotations

import asyncio
from typing import Protocol, runtime_checkable


@runtime_checkable
class Scheduler(Protocol):
    async def sleep(self, seconds: float) -> None: ...


class AsyncioScheduler:
    """Real scheduler backed by ``asyncio.sleep``."""

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


__all__ = ["AsyncioScheduler", "Scheduler"]
