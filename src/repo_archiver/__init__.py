"""Interactive archiving of old GitHub repositories."""

__version__ = "0.1.0"
