"""Public domain model surface."""

from __future__ import annotations

from fabdrift.domain.model.enums import (
    ConnectionType,
    DeviceKind,
    EndpointType,
    Impact,
    LeafClassRole,
    PersistedLayout,
    ProvenanceSource,
    SwitchRole,
    TopologyType,
)
from fabdrift.domain.model.fabric import (
    DEFAULT_SPEC_VERSION,
    EndpointProfile,
    FabricSpec,
    LeafClass,
)
from fabdrift.domain.model.provenance import (
    DetectedPatterns,
    ImportProvenance,
    ProvenanceRecorder,
)
from fabdrift.domain.model.resources import Resource, ResourceKey, ResourceKind
from fabdrift.domain.model.topology import (
    Connection,
    Device,
    PortRef,
    Server,
    Switch,
    TopologyModel,
)

__all__ = [  # noqa: RUF022
    # topology
    "Connection",
    "Device",
    "PortRef",
    "Server",
    "Switch",
    "TopologyModel",
    # fabric intent
    "DEFAULT_SPEC_VERSION",
    "EndpointProfile",
    "FabricSpec",
    "LeafClass",
    # provenance
    "DetectedPatterns",
    "ImportProvenance",
    "ProvenanceRecorder",
    # resources
    "Resource",
    "ResourceKey",
    "ResourceKind",
    # enums
    "ConnectionType",
    "DeviceKind",
    "EndpointType",
    "Impact",
    "LeafClassRole",
    "PersistedLayout",
    "ProvenanceSource",
    "SwitchRole",
    "TopologyType",
]
