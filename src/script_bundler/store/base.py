"""File store capability consumed by the bundler."""

from __future__ import annotations

from typing import Protocol


class FileStore(Protocol):
    """Text and binary file access over logical posix paths."""

    def exists(self, path: str) -> bool:
        """Return True when a file or directory exists at path."""

    def is_directory(self, path: str) -> bool:
        """Return True when path is a directory."""

    def size(self, path: str) -> int:
        """Return the size of a file in bytes."""

    def read_text(self, path: str) -> str:
        """Return file contents, raising FileNotFoundError when absent."""

    def write_text(self, path: str, content: str) -> None:
        """Write file contents, creating parent directories."""

    def read_bytes(self, path: str) -> bytes:
        """Return raw file contents, raising FileNotFoundError when absent."""

    def write_bytes(self, path: str, data: bytes) -> None:
        """Write raw file contents, creating parent directories."""

    def list_directory(self, path: str) -> list[str]:
        """Return sorted entry names of a directory."""

    def tag(self, path: str, label: str) -> None:
        """Attach a label to a file."""

    def tags(self, path: str) -> tuple[str, ...]:
        """Return sorted labels attached to a file."""
