"""Ports for persisting topologies."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from pathlib import Path

    from fabdrift.domain.model import PersistedLayout, TopologyModel


@runtime_checkable
class TopologyStore(Protocol):
    """Persistence contract for fabric topologies keyed by fabric id."""

    def save(self, model: TopologyModel, fabric_id: str, *, layout: PersistedLayout) -> Path: ...

    def load(self, fabric_id: str, *, layout: PersistedLayout | None = None) -> TopologyModel: ...

    def exists(self, fabric_id: str, *, layout: PersistedLayout | None = None) -> bool: ...

    def list_fabrics(self) -> list[str]: ...

    def delete(self, fabric_id: str) -> bool: ...


__all__ = ["TopologyStore"]
