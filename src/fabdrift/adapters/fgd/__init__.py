"""Legacy FGD adapter package."""

from __future__ import annotations

from .codec import (
    CONNECTIONS_FILE,
    FGD_FILES,
    SERVERS_FILE,
    SWITCHES_FILE,
    FgdDocuments,
    decode,
    encode,
)

__all__ = [
    "CONNECTIONS_FILE",
    "FGD_FILES",
    "SERVERS_FILE",
    "SWITCHES_FILE",
    "FgdDocuments",
    "decode",
    "encode",
]
