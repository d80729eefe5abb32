"""Import and capacity-check configuration."""

from __future__ import annotations

from dataclasses import dataclass

from fabdrift.domain.importer import DEFAULT_CAPACITY_WARNING_THRESHOLD

from .env import env_float
from .errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class ImportConfig:
    capacity_warning_threshold: float = DEFAULT_CAPACITY_WARNING_THRESHOLD


def get_import_config() -> ImportConfig:
    threshold = env_float(
        "FABDRIFT_CAPACITY_WARNING_THRESHOLD",
        DEFAULT_CAPACITY_WARNING_THRESHOLD,
        minimum=0.0,
    )
    if threshold > 1.0:
        raise ConfigurationError(
            f"FABDRIFT_CAPACITY_WARNING_THRESHOLD must be at most 1.0, got {threshold}"
        )
    return ImportConfig(capacity_warning_threshold=threshold)
