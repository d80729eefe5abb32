"""Ports for reading resources from a live cluster."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from fabdrift.domain.model import Resource


class FetchError(RuntimeError):
    """A cluster read failed; callers retry on their own schedule."""

    def __init__(self, message: str, *, kind: str | None = None) -> None:
        super().__init__(message)
        self.kind = kind


class ResourceNotFoundError(FetchError):
    """The requested kind or namespace does not exist (HTTP 404)."""


@runtime_checkable
class ResourceFetcher(Protocol):
    """Async callable listing every resource of one kind in a namespace."""

    async def __call__(
        self,
        kind: str,
        api_version: str,
        namespace: str,
        label_selector: str | None = None,
    ) -> list[Resource]: ...


__all__ = ["FetchError", "ResourceFetcher", "ResourceNotFoundError"]
