"""
Process launcher: fork a child, exec the target program, wait for it.

The child restores default SIGINT handling before exec so Ctrl+C reaches
it even while the interpreter itself ignores the signal. Background
children get stdout/stderr pointed at the null device; stdin is inherited.
"""

import logging
import os
import signal
import sys

from ssi.config import NULL_DEVICE

log = logging.getLogger(__name__)

STDOUT_FILENO = 1
STDERR_FILENO = 2


class LaunchError(OSError):
    """fork() failed, no child was created"""


def decode_status(status):
    """Turn a raw waitpid status into a shell-style exit code"""
    if os.WIFSIGNALED(status):
        return 128 + os.WTERMSIG(status)
    return os.waitstatus_to_exitcode(status)


class ProcessLauncher:
    """Creates child processes and waits for foreground ones."""

    def __init__(self, fork=os.fork, waitpid=os.waitpid):
        self._fork = fork
        self._waitpid = waitpid

    def launch(self, executable, argv, background=False):
        """
        Start `executable` (looked up in PATH) with `argv`.
        Returns: pid of the child
        Raises: LaunchError if the child could not be created
        """
        # Buffered parent output must land before anything the child writes
        sys.stdout.flush()
        sys.stderr.flush()
        try:
            pid = self._fork()
        except OSError as e:
            raise LaunchError(e.errno, f"{executable}: {e.strerror}") from e

        if pid == 0:
            self._exec_child(executable, argv, background)

        log.debug("spawned pid %d (%s, background=%s)", pid, executable, background)
        return pid

    @staticmethod
    def _exec_child(executable, argv, background):
        # Runs in the child only; never returns
        try:
            signal.signal(signal.SIGINT, signal.SIG_DFL)
            if background:
                try:
                    fd = os.open(NULL_DEVICE, os.O_WRONLY)
                except OSError:
                    pass
                else:
                    os.dup2(fd, STDOUT_FILENO)
                    os.dup2(fd, STDERR_FILENO)
                    os.close(fd)
            os.execvp(executable, argv)
        except OSError as e:
            os.write(STDERR_FILENO, f"{executable}: {e.strerror}\n".encode())
        finally:
            os._exit(1)

    def wait(self, pid):
        """
        Block until `pid` terminates, ignoring SIGINT meanwhile.
        Returns: exit code (128+N for a child killed by signal N)
        """
        previous = signal.signal(signal.SIGINT, signal.SIG_IGN)
        try:
            _, status = self._waitpid(pid, 0)
        except ChildProcessError:
            # Already collected elsewhere
            log.debug("pid %d was reaped before the foreground wait", pid)
            return 0
        finally:
            signal.signal(signal.SIGINT, previous)
        code = decode_status(status)
        log.debug("foreground pid %d exited with %d", pid, code)
        return code

    def run(self, argv):
        """
        Run argv in the foreground and return its exit code.
        SIGINT is ignored from before the fork until the child is reaped.
        """
        previous = signal.signal(signal.SIGINT, signal.SIG_IGN)
        try:
            pid = self.launch(argv[0], argv, background=False)
            return self.wait(pid)
        finally:
            signal.signal(signal.SIGINT, previous)
