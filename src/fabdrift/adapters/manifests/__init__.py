"""Custom-resource manifest adapter package."""

from __future__ import annotations

from .codec import (
    CONNECTIONS_FILE,
    FABRIC_FILE,
    MANIFEST_FILES,
    SERVERS_FILE,
    SWITCHES_FILE,
    ManifestDocuments,
    decode,
    encode,
    resources_for,
    to_resources,
)
from .names import sanitize_name, unique_names
from .schema import FABRIC_API_VERSION, WIRING_API_VERSION

__all__ = [
    "CONNECTIONS_FILE",
    "FABRIC_API_VERSION",
    "FABRIC_FILE",
    "MANIFEST_FILES",
    "SERVERS_FILE",
    "SWITCHES_FILE",
    "WIRING_API_VERSION",
    "ManifestDocuments",
    "decode",
    "encode",
    "resources_for",
    "sanitize_name",
    "unique_names",
    "to_resources",
]
