"""Errors raised while reading fabdrift settings from the environment."""

from __future__ import annotations

from collections.abc import Iterable


class ConfigurationError(RuntimeError):
    """An environment value is present but unusable."""


class MissingConfigurationError(ConfigurationError):
    """One or more required variables are unset or blank."""

    def __init__(self, names: Iterable[str]) -> None:
        self.names = tuple(sorted(names))
        super().__init__(f"Missing configuration for: {', '.join(self.names)}")
