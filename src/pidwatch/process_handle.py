"""
Thread-safe handle for a child process whose PID may arrive late.

A spawning thread typically learns the child's PID only after the spawn call
returns, while other threads may already want to query, wait on or terminate
that child. ``ProcessHandle`` lets the PID be assigned after construction; any
operation that needs the PID blocks until it is assigned. Before assignment the
child is assumed to have started successfully, so to observers a process is
always either running or terminated.

Usage:
    handle = ProcessHandle()
    threading.Thread(target=lambda: handle.assign_pid(spawn())).start()
    ...
    handle.terminate().wait()
    handle.close()
"""

from __future__ import annotations

import logging
import math
import threading
import time
from typing import Optional

from .config import HandleSettings
from .errors import InvalidPidError, PidAlreadyAssignedError, ProcessTerminationError
from .process_backend import ExitStatus, ProcessBackend, PsutilProcessBackend, SignalKind

logger = logging.getLogger(__name__)


def _validate_pid(pid: object) -> int:
    if isinstance(pid, bool) or not isinstance(pid, int):
        raise InvalidPidError.not_an_integer(pid)
    # 0 and negative values address process groups or "any child"; a handle
    # watches exactly one process.
    if pid < 1:
        raise InvalidPidError(pid)
    return pid


class ProcessHandle:
    """Watches a single process for the whole lifetime of the handle.

    All state lives behind one lock, shared with the condition used to
    announce PID assignment. Reaping is serialized by a second lock so the
    blocking OS wait runs at most once per PID without holding the state lock
    for the duration of the wait.
    """

    def __init__(
        self,
        pid: Optional[int] = None,
        *,
        backend: Optional[ProcessBackend] = None,
        settings: Optional[HandleSettings] = None,
    ) -> None:
        self._settings = settings if settings is not None else HandleSettings.from_env()
        self._backend: ProcessBackend = backend if backend is not None else PsutilProcessBackend()

        self._lock = threading.Lock()
        self._pid_assigned = threading.Condition(self._lock)
        self._reap_lock = threading.Lock()

        self._pid: Optional[int] = None
        self._exit_status: Optional[ExitStatus] = None
        self._has_exited = False
        self._wait_on_destroy = self._settings.wait_on_destroy
        self._closed = False

        if pid is not None:
            self.assign_pid(pid)

    def __repr__(self) -> str:
        with self._lock:
            return f"{type(self).__name__}(pid={self._pid!r}, has_exited={self._has_exited!r})"

    def __bool__(self) -> bool:
        return self.has_pid()

    def __enter__(self) -> "ProcessHandle":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __del__(self) -> None:
        if getattr(self, "_closed", True):
            return
        if self._pid is not None and self._wait_on_destroy and not self._has_exited:
            logger.warning("ProcessHandle for PID %s was discarded without close(); the process was not reaped", self._pid)

    def assign_pid(self, pid: int) -> "ProcessHandle":
        """Start watching ``pid`` and wake every thread waiting for it.

        Assigning the PID already being watched is a no-op.

        Raises:
            InvalidPidError: If ``pid`` is not a positive integer
            PidAlreadyAssignedError: If a different PID is already assigned
        """
        pid = _validate_pid(pid)
        with self._pid_assigned:
            if self._pid is not None:
                if self._pid != pid:
                    raise PidAlreadyAssignedError(self._pid, pid)
                return self
            self._pid = pid
            self._pid_assigned.notify_all()
        logger.debug("Watching process %s", pid)
        return self

    def _await_pid(self) -> int:
        # Caller holds self._lock.
        self._pid_assigned.wait_for(lambda: self._pid is not None)
        return self._pid  # type: ignore[return-value]

    def get_pid(self) -> int:
        """Return the watched PID, blocking until one has been assigned."""
        with self._pid_assigned:
            return self._await_pid()

    def has_pid(self) -> bool:
        with self._lock:
            return self._pid is not None

    def is_running(self) -> bool:
        """Return whether the process is running, without blocking.

        Before a PID is assigned the process is optimistically reported as
        running. A failed liveness probe marks the process exited for good.
        """
        with self._lock:
            if not self._has_exited and self._pid is not None:
                if not self._backend.probe_alive(self._pid):
                    logger.debug("Process %s no longer exists", self._pid)
                    self._has_exited = True
            return not self._has_exited

    def _reap(self, pid: int, timeout: Optional[float] = None) -> bool:
        """Collect the exit status of ``pid`` unless it is already known.

        Returns False if ``timeout`` elapsed first.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        if not self._reap_lock.acquire(timeout=-1 if timeout is None else timeout):
            return False
        try:
            with self._lock:
                if self._has_exited:
                    return True
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            status = self._backend.blocking_wait(pid, remaining)
            if status is None:
                return False
            with self._lock:
                # reset() may have detached the handle while we were blocked.
                if self._pid == pid:
                    self._exit_status = status
                self._has_exited = True
            logger.debug("Reaped process %s: %s", pid, status)
            return True
        finally:
            self._reap_lock.release()

    def wait(self) -> Optional[ExitStatus]:
        """Block until a PID is assigned and that process has exited.

        Safe to call any number of times from any number of threads; the
        process is reaped once and later calls return the same status. The
        status is ``None`` when the exit was only observed through a failed
        liveness probe.
        """
        with self._pid_assigned:
            pid = self._await_pid()
        self._reap(pid)
        with self._lock:
            return self._exit_status

    def reset(self) -> "ProcessHandle":
        """Detach from the process without waiting for it.

        Afterwards the process counts as exited: ``is_running()`` returns False
        and ``close()`` will not block. Do not call ``get_pid()`` or ``wait()``
        on a reset handle; no PID will ever be assigned again.
        """
        with self._lock:
            self._pid = None
            self._exit_status = None
            self._has_exited = True
        return self

    def terminate(self) -> "ProcessHandle":
        """Ask the process to exit (SIGTERM) and return immediately.

        Delivery failures are logged, not raised: the process may simply have
        exited in the meantime. Use ``handle.terminate().wait()`` to wait for
        the process to actually go away.
        """
        with self._lock:
            if self._pid is None or self._has_exited:
                return self
            pid = self._pid
            if not self._backend.send_signal(pid, SignalKind.TERMINATE):
                logger.warning("Failed to terminate process %s", pid)
        return self

    def terminate_now(self, timeout: Optional[float] = None) -> Optional[ExitStatus]:
        """Terminate the process and return once it is gone.

        Sends SIGTERM, waits up to ``timeout`` seconds (the configured
        terminate timeout when omitted), then falls back to SIGKILL.

        Raises:
            ProcessTerminationError: If the process survives SIGKILL for the
                configured force-kill timeout
            ValueError: If ``timeout`` is negative or not finite
        """
        if timeout is not None and not (math.isfinite(timeout) and timeout >= 0):
            raise ValueError(f"timeout must be a finite, non-negative number of seconds (got {timeout!r})")
        grace = self._settings.terminate_timeout if timeout is None else timeout
        with self._pid_assigned:
            # A reset or already reaped handle has nothing left to terminate.
            if self._has_exited:
                return self._exit_status
            pid = self._await_pid()

        self.terminate()
        if not self._reap(pid, grace):
            logger.info("Process %s did not terminate within %ss; sending SIGKILL", pid, grace)
            with self._lock:
                still_running = not self._has_exited
            if still_running and not self._backend.send_signal(pid, SignalKind.KILL):
                logger.warning("Failed to kill process %s", pid)

            force_timeout = self._settings.force_kill_timeout
            if not self._reap(pid, force_timeout):
                raise ProcessTerminationError.persisted_after_kill(pid, force_timeout)

        with self._lock:
            return self._exit_status

    def exited_properly(self) -> bool:
        """Whether the process exited on its own rather than by a signal. Implies ``wait()``."""
        status = self.wait()
        return status is not None and status.exited_normally

    def get_exit_status(self) -> Optional[int]:
        """Return the exit code, meaningful only if ``exited_properly()``. Implies ``wait()``."""
        status = self.wait()
        return status.exit_code if status is not None else None

    def succeeded(self) -> bool:
        """Whether the process exited normally with code 0. Implies ``wait()``."""
        return self.get_exit_status() == 0

    def get_wait_on_destroy(self) -> bool:
        with self._lock:
            return self._wait_on_destroy

    def set_wait_on_destroy(self, wait_on_destroy: bool) -> "ProcessHandle":
        with self._lock:
            self._wait_on_destroy = bool(wait_on_destroy)
        return self

    def close(self) -> None:
        """Release the handle, first waiting for the process if required.

        Blocks until the process exits when a PID is assigned and
        ``wait_on_destroy`` is set, so the child is reaped rather than left as
        a zombie. Does not block after ``reset()`` or once the process has
        exited. Calling ``close()`` again is a no-op.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
            must_wait = self._pid is not None and self._wait_on_destroy and not self._has_exited
        if must_wait:
            self.wait()


__all__ = ["ProcessHandle"]
