from __future__ import annotations

"""Exception types for configuration handling."""


class ConfigurationError(RuntimeError):
    """Raised when configuration values are missing or malformed."""

    @classmethod
    def cast_failed(cls, name: str, raw_value: str, expected: str) -> "ConfigurationError":
        """Create error for an environment value of the wrong type."""
        return cls(f"Environment variable {name!r} must be {expected} (got {raw_value!r})")

    @classmethod
    def missing_value(cls, name: str) -> "ConfigurationError":
        """Create error for a required value that is not set."""
        return cls(f"Required environment variable {name!r} is not set")

    @classmethod
    def invalid_value(cls, param_name: str, value, reason: str = "") -> "ConfigurationError":
        """Create error for invalid value."""
        msg = f"Invalid value for {param_name}: {value!r}"
        if reason:
            msg += f". {reason}"
        return cls(msg)


__all__ = ["ConfigurationError"]
