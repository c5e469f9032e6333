import os
import time

import pytest

from ssi.job_control import JobRegistry


class FakeWaitpid:
    """
    Stand-in for os.waitpid(-1, WNOHANG).

    `exited` holds (pid, status) pairs ready to be collected; `running`
    says whether any child is still alive once those are drained.
    """

    def __init__(self, exited=(), running=True):
        self.exited = list(exited)
        self.running = running
        self.calls = []

    def exit(self, pid, code=0):
        self.exited.append((pid, code << 8))

    def __call__(self, pid, options):
        self.calls.append((pid, options))
        if self.exited:
            return self.exited.pop(0)
        if self.running:
            return 0, 0
        raise ChildProcessError("no child processes")


def reap_until(reaper, pid, timeout=5.0):
    """Poll the reaper until `pid` has been collected"""
    deadline = time.monotonic() + timeout
    collected = []
    while time.monotonic() < deadline:
        collected.extend(reaper.reap_all())
        if any(term.pid == pid for term in collected):
            return collected
        time.sleep(0.02)
    raise AssertionError(f"pid {pid} was not reaped within {timeout}s")


def collect(pid):
    """Blocking wait used for cleanup; tolerates already-reaped pids"""
    try:
        return os.waitpid(pid, 0)[1]
    except ChildProcessError:
        return None


@pytest.fixture
def registry():
    return JobRegistry()


@pytest.fixture
def fake_waitpid():
    return FakeWaitpid()
