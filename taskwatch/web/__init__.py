"""HTTP trigger surface."""

from .server import TaskwatchServer

__all__ = ["TaskwatchServer"]
