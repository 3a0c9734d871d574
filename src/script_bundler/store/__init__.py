"""File store implementations."""

from .base import FileStore
from .local import LocalFileStore
from .memory import InMemoryFileStore

__all__ = ["FileStore", "InMemoryFileStore", "LocalFileStore"]
