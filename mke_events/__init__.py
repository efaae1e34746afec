"""Milwaukee event discovery backend."""

__version__ = "1.0.0"
