"""Environment-backed configuration helpers."""

from .errors import ConfigurationError
from .runtime import env_bool, env_float, env_seconds, env_str
from .settings import HandleSettings

__all__ = [
    "ConfigurationError",
    "HandleSettings",
    "env_bool",
    "env_float",
    "env_seconds",
    "env_str",
]
