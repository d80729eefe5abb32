"""Canonical fabric intent (the minimal spec a topology is generated from)."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from fabdrift.domain.model.enums import EndpointType, LeafClassRole

if TYPE_CHECKING:
    from collections.abc import Mapping

DEFAULT_SPEC_VERSION = "1.0.0"
_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")


@dataclass(frozen=True, slots=True, kw_only=True)
class EndpointProfile:
    name: str
    ports_per_endpoint: int = 1
    count: int | None = None
    type: EndpointType = EndpointType.SERVER
    redundancy: bool = False
    nics: int = 1


@dataclass(frozen=True, slots=True, kw_only=True)
class LeafClass:
    """One group of leaves sharing an uplink count and a set of server types."""

    id: str
    name: str
    uplinks_per_leaf: int
    endpoint_profiles: tuple[EndpointProfile, ...]
    count: int
    role: LeafClassRole = LeafClassRole.STANDARD
    leaf_model_id: str | None = None
    detected_from: tuple[str, ...] = ()
    signature: str | None = None


@dataclass(frozen=True, kw_only=True)
class FabricSpec:
    """Canonical intent.

    When ``leaf_classes`` is populated the scalar fields (``uplinks_per_leaf``,
    ``endpoint_profile``, ``endpoint_count``) are advisory only.
    """

    name: str
    spine_model_id: str | None
    leaf_model_id: str | None
    uplinks_per_leaf: int | None = None
    endpoint_profile: EndpointProfile | None = None
    endpoint_count: int | None = None
    leaf_classes: tuple[LeafClass, ...] | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict["str", "Any"])
    version: str = DEFAULT_SPEC_VERSION

    @property
    def is_multi_class(self) -> bool:
        return bool(self.leaf_classes)

    def constraint_violations(self) -> list[str]:
        """Return human-readable violations of the fabric spec naming rules."""

        problems: list[str] = []
        if not 3 <= len(self.name) <= 50:
            problems.append("Fabric name must be between 3 and 50 characters")
        if not _NAME_PATTERN.match(self.name):
            problems.append(
                "Fabric name can only contain alphanumeric characters, hyphens, and underscores"
            )
        if self.leaf_classes is not None and len(self.leaf_classes) > 10:
            problems.append("Maximum 10 leaf classes allowed")
        for leaf_class in self.leaf_classes or ():
            if not leaf_class.endpoint_profiles:
                problems.append(f"Leaf class {leaf_class.id} has no endpoint profiles")
        return problems


__all__ = ["DEFAULT_SPEC_VERSION", "EndpointProfile", "FabricSpec", "LeafClass"]
