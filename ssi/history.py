import os
import sys

import readline

from ssi.config import HISTORY_FILE, MAX_HISTORY


def init_readline():
    """Configure readline key bindings like a Linux terminal"""
    try:
        if not sys.stdin.isatty():
            return

        readline.parse_and_bind("\\e[A: previous-history")
        readline.parse_and_bind("\\e[B: next-history")

        # Ctrl+Left/Right jump between words
        readline.parse_and_bind("\\e[1;5D: backward-word")
        readline.parse_and_bind("\\e[1;5C: forward-word")

        readline.parse_and_bind("set editing-mode emacs")
    except Exception as e:
        print(f"Warning: Could not configure readline: {e}", file=sys.stderr)


def save_history(path=HISTORY_FILE):
    try:
        readline.set_history_length(MAX_HISTORY)
        readline.write_history_file(path)
    except OSError as e:
        print(f"Warning: Could not save history: {e}", file=sys.stderr)


def load_history(path=HISTORY_FILE):
    try:
        if os.path.exists(path):
            readline.read_history_file(path)
            readline.set_history_length(MAX_HISTORY)
    except OSError as e:
        print(f"Warning: Could not load history: {e}", file=sys.stderr)


def show_history():
    """Print the whole history, numbered from 1"""
    hlen = readline.get_current_history_length()
    for i in range(1, hlen + 1):
        print(f"{i}\t{readline.get_history_item(i)}")


def read_line(prompt):
    """
    Read one line through readline.
    Returns: the line, or None at end of input
    """
    try:
        return input(prompt)
    except EOFError:
        print()
        return None
