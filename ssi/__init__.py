"""SSI - a simple shell interpreter with background job control."""

__version__ = "1.0.0"
