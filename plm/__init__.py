"""plm - plugin placement and sync manager for AI assistants."""

__version__ = "0.1.0"
