"""Reconciliation poller schedule configuration."""

from __future__ import annotations

from fabdrift.domain.reconciliation import BackoffPolicy

from .env import env_float, env_int
from .errors import ConfigurationError


def get_backoff_policy() -> BackoffPolicy:
    defaults = BackoffPolicy()
    try:
        return BackoffPolicy(
            max_attempts=env_int(
                "FABDRIFT_POLL_MAX_ATTEMPTS", defaults.max_attempts, minimum=1
            ),
            initial_delay_ms=env_int(
                "FABDRIFT_POLL_INITIAL_DELAY", defaults.initial_delay_ms, minimum=0
            ),
            max_delay_ms=env_int("FABDRIFT_POLL_MAX_DELAY", defaults.max_delay_ms, minimum=0),
            multiplier=env_float("FABDRIFT_POLL_MULTIPLIER", defaults.multiplier, minimum=1.0),
        )
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc
