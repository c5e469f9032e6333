import getpass
import os
import socket


def get_user():
    try:
        return os.getlogin()
    except OSError:
        try:
            return getpass.getuser()
        except (KeyError, OSError):
            return os.getenv("USER") or "user"


def get_prompt():
    """Generate the prompt: user@host: cwd > """
    try:
        cwd = os.getcwd()
    except OSError:
        cwd = "?"
    return f"{get_user()}@{socket.gethostname()}: {cwd} > "
