"""Root pytest configuration and shared fixtures."""

from __future__ import annotations

import threading
from typing import Dict, List, Optional, Set, Tuple

import pytest

from pidwatch.config import HandleSettings, runtime
from pidwatch.process_backend import ExitStatus, SignalKind

SIGKILL_NUMBER = 9
SIGTERM_NUMBER = 15

_SIGNAL_NUMBERS = {SignalKind.TERMINATE: SIGTERM_NUMBER, SignalKind.KILL: SIGKILL_NUMBER}


class FakeProcessBackend:
    """In-memory process table for testing.

    A process stays alive, and visible to ``probe_alive``, until it has both
    exited (see :meth:`exit`) and been reaped by ``blocking_wait``, the same
    way a zombie still answers ``kill(pid, 0)``.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._exit_events: Dict[int, threading.Event] = {}
        self._statuses: Dict[int, ExitStatus] = {}
        self.gone: Set[int] = set()
        self.reap_calls: List[int] = []
        self.probe_calls: List[int] = []
        self.signals: List[Tuple[int, SignalKind]] = []
        self.honored_signals: Set[SignalKind] = {SignalKind.TERMINATE, SignalKind.KILL}
        self.wait_started = threading.Event()

    def _event(self, pid: int) -> threading.Event:
        with self._lock:
            return self._exit_events.setdefault(pid, threading.Event())

    def exit(self, pid: int, status: Optional[ExitStatus] = None) -> None:
        """Make ``pid`` terminate with ``status`` (exit code 0 by default)."""
        with self._lock:
            self._statuses[pid] = status if status is not None else ExitStatus(exit_code=0)
        self._event(pid).set()

    def vanish(self, pid: int) -> None:
        """Make ``pid`` disappear as if someone else had reaped it."""
        with self._lock:
            self.gone.add(pid)
        self._event(pid).set()

    def probe_alive(self, pid: int) -> bool:
        with self._lock:
            self.probe_calls.append(pid)
            return pid not in self.gone

    def blocking_wait(self, pid: int, timeout: Optional[float] = None) -> Optional[ExitStatus]:
        with self._lock:
            self.reap_calls.append(pid)
        self.wait_started.set()
        if not self._event(pid).wait(timeout):
            return None
        with self._lock:
            self.gone.add(pid)
            return self._statuses.get(pid, ExitStatus())

    def send_signal(self, pid: int, kind: SignalKind) -> bool:
        with self._lock:
            self.signals.append((pid, kind))
            if pid in self.gone:
                return False
        if kind in self.honored_signals:
            self.exit(pid, ExitStatus(signal=_SIGNAL_NUMBERS[kind]))
        return True


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Keep PIDWATCH_* variables and .env files from leaking into tests."""
    for name in (
        "PIDWATCH_TERMINATE_TIMEOUT_SECONDS",
        "PIDWATCH_FORCE_KILL_TIMEOUT_SECONDS",
        "PIDWATCH_WAIT_ON_DESTROY",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(runtime, "_DEFAULT_VALUES", {})
    yield


@pytest.fixture
def backend() -> FakeProcessBackend:
    return FakeProcessBackend()


@pytest.fixture
def settings() -> HandleSettings:
    return HandleSettings(terminate_timeout=0.05, force_kill_timeout=0.2)
