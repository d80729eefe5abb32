"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class SwitchRole(StrEnum):
    SPINE = "spine"
    LEAF = "leaf"


class DeviceKind(StrEnum):
    """Discriminator for the three device collections of a topology."""

    SPINE = "spine"
    LEAF = "leaf"
    SERVER = "server"


class ConnectionType(StrEnum):
    UPLINK = "uplink"
    ENDPOINT = "endpoint"


class TopologyType(StrEnum):
    SINGLE_CLASS = "single-class"
    MULTI_CLASS = "multi-class"


class EndpointType(StrEnum):
    SERVER = "server"
    STORAGE = "storage"
    COMPUTE = "compute"
    NETWORK = "network"


class LeafClassRole(StrEnum):
    STANDARD = "standard"
    BORDER = "border"


class ProvenanceSource(StrEnum):
    IMPORT = "import"


class Impact(StrEnum):
    """Impact level of one semantic difference, ordered from worst to mildest."""

    BREAKING = "breaking"
    SEMANTIC = "semantic"
    COSMETIC = "cosmetic"


class PersistedLayout(StrEnum):
    LEGACY = "legacy"
    MANIFEST = "manifest"
