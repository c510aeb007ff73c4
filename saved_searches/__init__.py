"""Saved searches: stored queries re-run periodically to notify their owners of new results."""

__version__ = "1.0.0"
