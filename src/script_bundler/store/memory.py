"""Dict-backed file store."""

from __future__ import annotations

from dataclasses import dataclass, field

from script_bundler.security import normalize_logical_path


@dataclass(slots=True)
class InMemoryFileStore:
    """In-memory store; directories are implied by file paths."""

    _files: dict[str, bytes] = field(default_factory=dict)
    _tags: dict[str, set[str]] = field(default_factory=dict)

    @classmethod
    def from_texts(cls, files: dict[str, str]) -> InMemoryFileStore:
        """Build a store from logical path to UTF-8 text mappings."""
        store = cls()
        for path, content in files.items():
            store.write_text(path, content)
        return store

    def exists(self, path: str) -> bool:
        """Return True when a file or implied directory exists at path."""
        key = normalize_logical_path(path)
        return key in self._files or self.is_directory(key)

    def is_directory(self, path: str) -> bool:
        """Return True when any file lives below path."""
        key = normalize_logical_path(path)
        if not key:
            return True
        prefix = f"{key}/"
        return any(name.startswith(prefix) for name in self._files)

    def size(self, path: str) -> int:
        """Return the size of a file in bytes."""
        return len(self.read_bytes(path))

    def read_text(self, path: str) -> str:
        """Return UTF-8 file contents."""
        return self.read_bytes(path).decode("utf-8")

    def write_text(self, path: str, content: str) -> None:
        """Store UTF-8 file contents."""
        self.write_bytes(path, content.encode("utf-8"))

    def read_bytes(self, path: str) -> bytes:
        """Return raw file contents."""
        key = normalize_logical_path(path)
        if key not in self._files:
            raise FileNotFoundError(key)
        return self._files[key]

    def write_bytes(self, path: str, data: bytes) -> None:
        """Store raw file contents."""
        self._files[normalize_logical_path(path)] = bytes(data)

    def list_directory(self, path: str) -> list[str]:
        """Return sorted names of direct children of path."""
        key = normalize_logical_path(path)
        if key and not self.is_directory(key):
            raise FileNotFoundError(key)
        prefix = f"{key}/" if key else ""
        names: set[str] = set()
        for name in self._files:
            if not name.startswith(prefix):
                continue
            names.add(name[len(prefix) :].split("/", 1)[0])
        return sorted(names)

    def tag(self, path: str, label: str) -> None:
        """Attach a label to path."""
        self._tags.setdefault(normalize_logical_path(path), set()).add(label)

    def tags(self, path: str) -> tuple[str, ...]:
        """Return sorted labels attached to path."""
        return tuple(sorted(self._tags.get(normalize_logical_path(path), set())))
