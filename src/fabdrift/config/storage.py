"""Persisted fabric storage configuration."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import env_str

DEFAULT_FGD_DIR: Final[str] = "./fgd"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    fgd_dir: Path

    def resolve_fgd_dir(self) -> Path:
        return self.fgd_dir.expanduser().resolve()


def get_storage_config() -> StorageConfig:
    return StorageConfig(fgd_dir=Path(env_str("FABDRIFT_FGD_DIR", DEFAULT_FGD_DIR)))
