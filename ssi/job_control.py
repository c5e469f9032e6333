"""
Background job bookkeeping.

A job is registered right after its background spawn and leaves the
registry exactly once: either the Reaper sees it terminate, or the
ShutdownHandler drains it when the interpreter exits.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

import psutil

from ssi.config import TERMINATE_SIGNAL
from ssi.process import decode_status

log = logging.getLogger(__name__)


class DuplicateJobError(ValueError):
    """A live pid was registered twice"""


@dataclass(frozen=True)
class BackgroundJob:
    pid: int
    command: str
    cwd: str

    def describe(self):
        return f"{self.cwd}/{self.command}"


@dataclass(frozen=True)
class Termination:
    """A child collected by the Reaper; `job` is None for untracked pids."""

    pid: int
    status: int
    job: Optional[BackgroundJob] = None

    @property
    def exit_code(self):
        return decode_status(self.status)

    def notice(self):
        return f"{self.pid}: {self.job.describe()} has terminated."


class JobRegistry:
    """Live background jobs keyed by pid, in registration order."""

    def __init__(self):
        self._jobs = {}

    def register(self, pid, command, cwd):
        if pid in self._jobs:
            raise DuplicateJobError(f"PID {pid} is already registered")
        job = BackgroundJob(pid=pid, command=str(command), cwd=str(cwd))
        self._jobs[pid] = job
        log.debug("registered job %d: %s", pid, job.describe())
        return job

    def remove(self, pid):
        """Remove and return the job for `pid`, or None if it is not tracked"""
        return self._jobs.pop(pid, None)

    def get(self, pid):
        return self._jobs.get(pid)

    def jobs(self):
        """Snapshot of the live jobs, most recently started first"""
        return tuple(reversed(self._jobs.values()))

    def drain(self):
        """Remove every job and return them, most recently started first"""
        drained = self.jobs()
        self._jobs.clear()
        return drained

    def __len__(self):
        return len(self._jobs)

    def __contains__(self, pid):
        return pid in self._jobs

    def __iter__(self):
        return iter(self.jobs())


class Reaper:
    """
    Collects terminated children without blocking.

    `waitpid` defaults to os.waitpid; tests pass a fake with the same
    (pid, options) -> (pid, status) contract.
    """

    def __init__(self, registry, waitpid=os.waitpid):
        self.registry = registry
        self._waitpid = waitpid

    def _poll(self):
        """Yield (pid, status) for every child that has already exited"""
        while True:
            try:
                pid, status = self._waitpid(-1, os.WNOHANG)
            except ChildProcessError:
                return
            if pid == 0:
                return
            yield pid, status

    def reap_all(self):
        """
        Reap every finished child and announce the tracked ones.
        Returns: list of Termination
        """
        reaped = []
        for pid, status in self._poll():
            job = self.registry.remove(pid)
            term = Termination(pid=pid, status=status, job=job)
            if job is not None:
                print(term.notice())
            else:
                log.debug("reaped untracked pid %d", pid)
            reaped.append(term)
        return reaped

    def sweep(self):
        """Reap whatever has exited, ignoring the registry"""
        count = 0
        for pid, _ in self._poll():
            log.debug("swept pid %d", pid)
            count += 1
        return count


def terminate_process(pid):
    """Ask `pid` to exit; returns False if it could not be signalled"""
    try:
        psutil.Process(pid).send_signal(TERMINATE_SIGNAL)
        return True
    except psutil.NoSuchProcess:
        return False
    except psutil.AccessDenied as e:
        log.warning("could not terminate job %d: %s", pid, e)
        return False


def job_status(pid):
    """psutil status of a job, for listings"""
    try:
        return psutil.Process(pid).status()
    except psutil.NoSuchProcess:
        return "terminated"
    except psutil.AccessDenied:
        return "unknown"


class ShutdownHandler:
    """Terminate every background job and clear the registry on exit."""

    def __init__(self, registry, reaper, terminate=terminate_process):
        self.registry = registry
        self.reaper = reaper
        self._terminate = terminate

    def run(self):
        """
        Signal every drained job, then do one non-blocking sweep.
        Jobs that ignore the signal are not waited for.
        Returns: the drained jobs
        """
        drained = self.registry.drain()
        for job in drained:
            if self._terminate(job.pid):
                log.debug("sent termination request to job %d", job.pid)
        self.reaper.sweep()
        return drained
