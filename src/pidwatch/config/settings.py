"""Tunables for :class:`pidwatch.process_handle.ProcessHandle`."""

from __future__ import annotations

import math
from dataclasses import dataclass

from .errors import ConfigurationError
from .runtime import env_bool, env_seconds

TERMINATE_TIMEOUT_ENV = "PIDWATCH_TERMINATE_TIMEOUT_SECONDS"
FORCE_KILL_TIMEOUT_ENV = "PIDWATCH_FORCE_KILL_TIMEOUT_SECONDS"
WAIT_ON_DESTROY_ENV = "PIDWATCH_WAIT_ON_DESTROY"

DEFAULT_TERMINATE_TIMEOUT_SECONDS = 0.2
DEFAULT_FORCE_KILL_TIMEOUT_SECONDS = 2.0


@dataclass(frozen=True)
class HandleSettings:
    """Timeouts and defaults applied to a handle at construction time."""

    terminate_timeout: float = DEFAULT_TERMINATE_TIMEOUT_SECONDS
    force_kill_timeout: float = DEFAULT_FORCE_KILL_TIMEOUT_SECONDS
    wait_on_destroy: bool = True

    def __post_init__(self) -> None:
        for field_name in ("terminate_timeout", "force_kill_timeout"):
            value = getattr(self, field_name)
            if not (math.isfinite(value) and value >= 0):
                raise ConfigurationError.invalid_value(field_name, value, "Must be finite and non-negative")

    @classmethod
    def from_env(cls) -> "HandleSettings":
        """Build settings from ``PIDWATCH_*`` environment variables."""
        return cls(
            terminate_timeout=env_seconds(TERMINATE_TIMEOUT_ENV, or_value=DEFAULT_TERMINATE_TIMEOUT_SECONDS),
            force_kill_timeout=env_seconds(FORCE_KILL_TIMEOUT_ENV, or_value=DEFAULT_FORCE_KILL_TIMEOUT_SECONDS),
            wait_on_destroy=env_bool(WAIT_ON_DESTROY_ENV, or_value=True),
        )


__all__ = ["HandleSettings"]
