"""
OS process primitives used by :class:`pidwatch.process_handle.ProcessHandle`.

The handle never talks to the operating system directly. It goes through a
``ProcessBackend``, which makes the kill/waitpid machinery substitutable in
tests. ``PsutilProcessBackend`` is the production implementation.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


class SignalKind(enum.Enum):
    """Termination requests a backend can deliver."""

    TERMINATE = "terminate"  # SIGTERM, catchable
    KILL = "kill"  # SIGKILL, uncatchable


@dataclass(frozen=True)
class ExitStatus:
    """How a reaped process ended.

    ``exit_code`` is set when the process exited on its own, ``signal`` when it
    was killed by a signal. Both are ``None`` when the process was gone but its
    status could not be collected (it was not our child or someone else reaped
    it first).
    """

    exit_code: Optional[int] = None
    signal: Optional[int] = None

    @property
    def exited_normally(self) -> bool:
        """True when the process exited on its own with an exit code."""
        return self.exit_code is not None

    @property
    def signaled(self) -> bool:
        """True when the process was killed by a signal."""
        return self.signal is not None

    @classmethod
    def from_returncode(cls, returncode: Optional[int]) -> "ExitStatus":
        """Translate a ``subprocess``-style return code (negative means signal)."""
        if returncode is None:
            return cls()
        if returncode < 0:
            return cls(signal=-int(returncode))
        return cls(exit_code=int(returncode))


class ProcessBackend(Protocol):
    """The three OS operations a process handle depends on."""

    def probe_alive(self, pid: int) -> bool:
        """Return whether ``pid`` still exists. Must neither block nor reap."""
        ...

    def blocking_wait(self, pid: int, timeout: Optional[float] = None) -> Optional[ExitStatus]:
        """Block until ``pid`` terminates and reap it.

        Returns ``None`` only when ``timeout`` elapsed with the process still
        running.
        """
        ...

    def send_signal(self, pid: int, kind: SignalKind) -> bool:
        """Deliver ``kind`` to ``pid``; return whether delivery succeeded."""
        ...


def _load_psutil():
    try:
        import psutil
    except ImportError as import_exc:  # policy_guard: allow-silent-handler
        raise RuntimeError("psutil is required for process control but is not installed") from import_exc
    return psutil


class PsutilProcessBackend:
    """``ProcessBackend`` implemented on top of psutil."""

    def __init__(self) -> None:
        self._psutil = _load_psutil()

    def probe_alive(self, pid: int) -> bool:
        return bool(self._psutil.pid_exists(pid))

    def blocking_wait(self, pid: int, timeout: Optional[float] = None) -> Optional[ExitStatus]:
        psutil = self._psutil
        try:
            returncode = psutil.Process(pid).wait(timeout=timeout)
        except psutil.TimeoutExpired:  # policy_guard: allow-silent-handler
            return None
        except psutil.NoSuchProcess:  # policy_guard: allow-silent-handler
            logger.debug("Process %s was already gone when waited on; exit status unknown", pid)
            return ExitStatus()
        return ExitStatus.from_returncode(returncode)

    def send_signal(self, pid: int, kind: SignalKind) -> bool:
        psutil = self._psutil
        try:
            proc = psutil.Process(pid)
            if kind is SignalKind.KILL:
                proc.kill()
            else:
                proc.terminate()
        except psutil.NoSuchProcess:  # policy_guard: allow-silent-handler
            logger.debug("Cannot %s process %s: no such process", kind.value, pid)
            return False
        except psutil.AccessDenied:  # policy_guard: allow-silent-handler
            logger.debug("Cannot %s process %s: access denied", kind.value, pid)
            return False
        return True


__all__ = ["ExitStatus", "ProcessBackend", "PsutilProcessBackend", "SignalKind"]
