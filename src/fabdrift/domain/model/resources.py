"""Cluster/manifest resources reduced to their comparable surface."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping

type ResourceKey = tuple[str, str]


@dataclass(frozen=True, kw_only=True)
class Resource:
    """A Kubernetes-style object.

    Identity is ``(kind, name)``; namespace, labels and payload are compared by
    the diff engine but never participate in matching.
    """

    kind: str
    name: str
    api_version: str = "v1"
    namespace: str | None = None
    labels: Mapping[str, str] = field(default_factory=dict["str", "str"])
    annotations: Mapping[str, str] = field(default_factory=dict["str", "str"])
    spec: Mapping[str, Any] | None = None

    @property
    def key(self) -> ResourceKey:
        return (self.kind, self.name)

    def __str__(self) -> str:
        return f"{self.kind}/{self.name}"


@dataclass(frozen=True, slots=True)
class ResourceKind:
    """Kind plus API version; enough to route a list call."""

    kind: str
    api_version: str

    @classmethod
    def of(cls, resource: Resource) -> ResourceKind:
        return cls(kind=resource.kind, api_version=resource.api_version)


__all__ = ["Resource", "ResourceKey", "ResourceKind"]
