import os
import sys
from enum import Enum

from ssi.history import show_history
from ssi.job_control import job_status
from ssi.parser import build_full_command
from ssi.process import LaunchError


class ShellStatus(Enum):
    CONTINUE = 0
    EXIT_SUCCESS = 1
    EXIT_FAILURE = 2


HELP_TEXT = """SSI help:
 Built-in commands:
  cd [dir|-|~]        : change directory
  pwd                 : print working directory
  bg <cmd> [args...]  : run a command in the background
  bglist [-l]         : list background jobs
  history             : show command history
  help                : print this help
  exit [n]            : exit the shell
"""


class Builtins:
    """
    In-process commands. Each handler takes the full argument vector
    (argv[0] is the builtin name) and returns a ShellStatus.
    """

    def __init__(self, registry, launcher):
        self.registry = registry
        self.launcher = launcher
        self.prev_dir = None
        self.table = {
            "exit": self.builtin_exit,
            "cd": self.builtin_cd,
            "pwd": self.builtin_pwd,
            "bg": self.builtin_bg,
            "bglist": self.builtin_bglist,
            "history": self.builtin_history,
            "help": self.builtin_help,
        }

    def get(self, name):
        return self.table.get(name)

    def __contains__(self, name):
        return name in self.table

    def builtin_exit(self, argv):
        if len(argv) > 1:
            try:
                code = int(argv[1])
            except ValueError:
                print(f"exit: {argv[1]}: numeric argument required", file=sys.stderr)
                return ShellStatus.EXIT_FAILURE
            if code != 0:
                return ShellStatus.EXIT_FAILURE
        return ShellStatus.EXIT_SUCCESS

    def builtin_cd(self, argv):
        """Change directory: no arg -> $HOME, '-' -> previous, '~' -> $HOME"""
        try:
            cwd = os.getcwd()
        except OSError as e:
            print(f"cwd: {e.strerror}", file=sys.stderr)
            return ShellStatus.CONTINUE

        target = argv[1] if len(argv) > 1 else None
        if target is None or target.startswith("~"):
            home = os.getenv("HOME")
            if not home:
                print("cd: $HOME not set", file=sys.stderr)
                return ShellStatus.CONTINUE
            target = home if target is None else home + target[1:]
        elif target == "-":
            if self.prev_dir is None:
                print("cd: OLDPWD not set", file=sys.stderr)
                return ShellStatus.CONTINUE
            target = self.prev_dir
            print(target)

        try:
            os.chdir(target)
        except OSError as e:
            print(f"cd: {target}: {e.strerror}", file=sys.stderr)
            return ShellStatus.CONTINUE

        self.prev_dir = cwd
        return ShellStatus.CONTINUE

    def builtin_pwd(self, argv):
        try:
            print(os.getcwd())
        except OSError as e:
            print(f"pwd: {e.strerror}", file=sys.stderr)
        return ShellStatus.CONTINUE

    def builtin_bg(self, argv):
        """Launch argv[1:] in the background and track it"""
        if len(argv) < 2:
            print("bg: missing command", file=sys.stderr)
            return ShellStatus.CONTINUE

        sub_argv = argv[1:]
        try:
            pid = self.launcher.launch(sub_argv[0], sub_argv, background=True)
        except LaunchError as e:
            print(f"ssi: {e.strerror}", file=sys.stderr)
            return ShellStatus.CONTINUE

        try:
            self.registry.register(pid, build_full_command(sub_argv), os.getcwd())
        except MemoryError:
            print(f"bg: could not track PID {pid}: out of memory", file=sys.stderr)
            return ShellStatus.CONTINUE
        except OSError as e:
            # cwd vanished under us; the job keeps running untracked
            print(f"bg: could not track PID {pid}: {e.strerror}", file=sys.stderr)
            return ShellStatus.CONTINUE

        print(f"Starting background process: PID {pid}")
        return ShellStatus.CONTINUE

    def builtin_bglist(self, argv):
        """List background jobs, most recent first; -l adds process status"""
        long_format = "-l" in argv[1:]
        count = 0
        for job in self.registry.jobs():
            line = f"{job.pid}:  {job.describe()}"
            if long_format:
                line += f"  [{job_status(job.pid)}]"
            print(line)
            count += 1
        print(f"Total Background jobs:  {count}")
        return ShellStatus.CONTINUE

    def builtin_history(self, argv):
        show_history()
        return ShellStatus.CONTINUE

    def builtin_help(self, argv):
        print(HELP_TEXT, end="")
        return ShellStatus.CONTINUE
