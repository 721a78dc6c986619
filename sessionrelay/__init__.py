"""sessionrelay - live session status relay."""

__version__ = "1.0.0"
