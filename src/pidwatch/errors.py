"""Error types raised by process handles."""

from __future__ import annotations


class ProcessHandleError(Exception):
    """Base class for caller-facing process handle errors."""


class InvalidPidError(ProcessHandleError, ValueError):
    """Raised when a PID that cannot name a single process is assigned."""

    def __init__(self, pid: object, *, reason: str = "Attempt to assign an invalid PID") -> None:
        super().__init__(f"{reason}: {pid!r}")
        self.pid = pid
        self.reason = reason

    @classmethod
    def not_an_integer(cls, pid: object) -> "InvalidPidError":
        """Create error for a PID of the wrong type."""
        return cls(pid, reason="PID must be an integer")


class PidAlreadyAssignedError(ProcessHandleError, RuntimeError):
    """Raised when a handle that already watches a PID is pointed at another."""

    def __init__(self, current_pid: int, requested_pid: int) -> None:
        super().__init__(f"Handle is already watching PID {current_pid}; refusing to watch PID {requested_pid}")
        self.current_pid = current_pid
        self.requested_pid = requested_pid


class ProcessTerminationError(ProcessHandleError, RuntimeError):
    """Raised when a process outlives a forced kill."""

    @classmethod
    def persisted_after_kill(cls, pid: int, timeout: float) -> "ProcessTerminationError":
        """Create error for a process still present after SIGKILL."""
        return cls(f"Process {pid} persisted after SIGKILL for {timeout}s; manual intervention required.")


__all__ = [
    "InvalidPidError",
    "PidAlreadyAssignedError",
    "ProcessHandleError",
    "ProcessTerminationError",
]
