"""Domain port definitions for adapters."""

from __future__ import annotations

from .fetching import FetchError, ResourceFetcher, ResourceNotFoundError
from .persistence import TopologyStore
from .scheduling import AsyncioScheduler, Scheduler

__all__ = [
    "AsyncioScheduler",
    "FetchError",
    "ResourceFetcher",
    "ResourceNotFoundError",
    "Scheduler",
    "TopologyStore",
]
