"""
The dispatch loop.

Each cycle reaps finished children, reads a line, and either runs a
builtin or launches an external program in the foreground and waits for
it. An exit status from a builtin (or end of input) ends the loop and
runs the shutdown handler before the exit code is returned.
"""

import logging
import sys

from ssi.builtin import Builtins, ShellStatus
from ssi.history import init_readline, load_history, read_line, save_history
from ssi.job_control import JobRegistry, Reaper, ShutdownHandler
from ssi.parser import tokenize
from ssi.process import LaunchError, ProcessLauncher
from ssi.prompt import get_prompt

log = logging.getLogger(__name__)

EXIT_CODES = {
    ShellStatus.EXIT_SUCCESS: 0,
    ShellStatus.EXIT_FAILURE: 1,
}


class Shell:
    def __init__(self, registry=None, launcher=None, reaper=None, builtins=None,
                 shutdown=None, read_line=read_line, prompt=get_prompt):
        self.registry = registry if registry is not None else JobRegistry()
        self.launcher = launcher or ProcessLauncher()
        self.reaper = reaper or Reaper(self.registry)
        self.builtins = builtins or Builtins(self.registry, self.launcher)
        self.shutdown = shutdown or ShutdownHandler(self.registry, self.reaper)
        self.read_line = read_line
        self.prompt = prompt

    def dispatch(self, argv):
        """Run one tokenized command and return its ShellStatus"""
        handler = self.builtins.get(argv[0])
        if handler is not None:
            return handler(argv)

        try:
            exit_code = self.launcher.run(argv)
        except LaunchError as e:
            print(f"ssi: {e.strerror}", file=sys.stderr)
            return ShellStatus.CONTINUE

        if exit_code != 0:
            print(f"ssi: process exited with code {exit_code}", file=sys.stderr)
        return ShellStatus.CONTINUE

    def step(self):
        """
        One cycle: reap, read, dispatch.
        Returns: ShellStatus (EXIT_SUCCESS at end of input)

        Ctrl+C anywhere in the cycle abandons the current command only.
        """
        try:
            self.reaper.reap_all()
            line = self.read_line(self.prompt())
            if line is None:
                return ShellStatus.EXIT_SUCCESS

            argv = tokenize(line)
            if not argv:
                return ShellStatus.CONTINUE
            return self.dispatch(argv)
        except KeyboardInterrupt:
            print()
            return ShellStatus.CONTINUE

    def run(self):
        """Loop until exit; returns the process exit code"""
        status = ShellStatus.CONTINUE
        try:
            while status is ShellStatus.CONTINUE:
                status = self.step()
        finally:
            drained = self.shutdown.run()
            log.debug("shutdown terminated %d background job(s)", len(drained))
        return EXIT_CODES.get(status, 0)


def main_loop():
    """Interactive entry point with readline history"""
    init_readline()
    load_history()
    try:
        return Shell().run()
    finally:
        save_history()
