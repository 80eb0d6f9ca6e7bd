"""Control client for the networked liquid mixer."""

__version__ = "0.1.0"
