"""Thread-safe handles for watching externally spawned processes."""

from .config import ConfigurationError, HandleSettings
from .errors import InvalidPidError, PidAlreadyAssignedError, ProcessHandleError, ProcessTerminationError
from .process_backend import ExitStatus, ProcessBackend, PsutilProcessBackend, SignalKind
from .process_handle import ProcessHandle

__all__ = [
    "ConfigurationError",
    "ExitStatus",
    "HandleSettings",
    "InvalidPidError",
    "PidAlreadyAssignedError",
    "ProcessBackend",
    "ProcessHandle",
    "ProcessHandleError",
    "ProcessTerminationError",
    "PsutilProcessBackend",
    "SignalKind",
]
