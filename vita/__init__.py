"""VITA: task and habit tracking API."""

__version__ = "0.1.0"
