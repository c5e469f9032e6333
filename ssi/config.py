import logging
import os
import signal
import sys

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
LOG_FORMAT = "%(name)s: %(levelname)s: %(message)s"


def env_int(name, default):
    """Integer from the environment; a bad value warns and keeps the default"""
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        print(f"Warning: {name}={value!r} is not an integer, using {default}", file=sys.stderr)
        return default


def env_log_level(name, default="WARNING"):
    value = os.getenv(name)
    if value is None:
        return default
    if value.upper() not in LOG_LEVELS:
        print(f"Warning: {name}={value!r} is not one of {', '.join(LOG_LEVELS)}, "
              f"using {default}", file=sys.stderr)
        return default
    return value.upper()


HISTORY_FILE = os.path.expanduser(os.getenv("SSI_HISTFILE", "~/.ssi_history"))
MAX_HISTORY = env_int("SSI_HISTSIZE", 1000)

LOG_LEVEL = env_log_level("SSI_LOG_LEVEL")

# Background jobs write here instead of the terminal
NULL_DEVICE = os.devnull
TERMINATE_SIGNAL = signal.SIGTERM


def configure_logging(level=None):
    """Send diagnostics to stderr so they never mix with command output"""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root = logging.getLogger("ssi")
    root.handlers[:] = [handler]
    root.setLevel(level or LOG_LEVEL)
    return root
