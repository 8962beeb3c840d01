"""Notion workspace discovery and task status monitoring."""

__version__ = "0.1.0"
