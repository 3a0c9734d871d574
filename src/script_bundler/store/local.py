"""Local directory file store with sandboxed path resolution."""

from __future__ import annotations

import json
from pathlib import Path

from script_bundler.security import normalize_logical_path, resolve_store_path

TAGS_FILE_NAME = "tags.json"


class LocalFileStore:
    """File store rooted at one scripts directory.

    Tags are kept in ``<data_dir>/tags.json`` keyed by logical path. When the
    data directory lives inside the root it is hidden from directory listings.
    """

    def __init__(self, root: Path, data_dir: Path | None = None) -> None:
        self._root = root.resolve()
        self._data_dir = (data_dir or self._root / ".script_bundler").resolve()

    @property
    def root(self) -> Path:
        """Return the resolved store root."""
        return self._root

    def _resolve(self, path: str) -> Path:
        return resolve_store_path(store_root=self._root, candidate=path)

    def exists(self, path: str) -> bool:
        """Return True when a file or directory exists at path."""
        return self._resolve(path).exists()

    def is_directory(self, path: str) -> bool:
        """Return True when path is a directory."""
        return self._resolve(path).is_dir()

    def size(self, path: str) -> int:
        """Return the size of a file in bytes."""
        return self._resolve(path).stat().st_size

    def read_text(self, path: str) -> str:
        """Return UTF-8 file contents without newline translation."""
        with self._resolve(path).open("r", encoding="utf-8", newline="") as handle:
            return handle.read()

    def write_text(self, path: str, content: str) -> None:
        """Write UTF-8 file contents without newline translation."""
        resolved = self._resolve(path)
        resolved.parent.mkdir(parents=True, exist_ok=True)
        with resolved.open("w", encoding="utf-8", newline="") as handle:
            handle.write(content)

    def read_bytes(self, path: str) -> bytes:
        """Return raw file contents."""
        return self._resolve(path).read_bytes()

    def write_bytes(self, path: str, data: bytes) -> None:
        """Write raw file contents."""
        resolved = self._resolve(path)
        resolved.parent.mkdir(parents=True, exist_ok=True)
        resolved.write_bytes(data)

    def list_directory(self, path: str) -> list[str]:
        """Return sorted entry names, hiding the bundler data directory."""
        resolved = self._resolve(path)
        names: list[str] = []
        for entry in resolved.iterdir():
            if entry.resolve() == self._data_dir:
                continue
            names.append(entry.name)
        return sorted(names)

    def tag(self, path: str, label: str) -> None:
        """Persist a label for path in the tags file."""
        key = normalize_logical_path(path)
        payload = self._load_tags()
        labels = set(payload.get(key, []))
        labels.add(label)
        payload[key] = sorted(labels)
        self._data_dir.mkdir(parents=True, exist_ok=True)
        tags_path = self._data_dir / TAGS_FILE_NAME
        tags_path.write_text(json.dumps(payload, sort_keys=True, indent=2) + "\n", encoding="utf-8")

    def tags(self, path: str) -> tuple[str, ...]:
        """Return sorted labels recorded for path."""
        key = normalize_logical_path(path)
        return tuple(self._load_tags().get(key, []))

    def _load_tags(self) -> dict[str, list[str]]:
        tags_path = self._data_dir / TAGS_FILE_NAME
        if not tags_path.exists():
            return {}
        try:
            payload = json.loads(tags_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ValueError(f"Tags file is not valid JSON: {tags_path}") from exc
        if not isinstance(payload, dict):
            raise ValueError(f"Tags file must contain a JSON object: {tags_path}")
        output: dict[str, list[str]] = {}
        for key, value in payload.items():
            if isinstance(key, str) and isinstance(value, list):
                output[key] = sorted(str(item) for item in value)
        return output
