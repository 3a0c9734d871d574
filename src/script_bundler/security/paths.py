"""Path resolution helpers for store-scoped access."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Final

WINDOWS_ABSOLUTE_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[a-zA-Z]:[\\/]")


class PathBlockedError(Exception):
    """Raised when a requested path violates sandbox policy."""

    code = "PATH_BLOCKED"

    def __init__(self, reason: str, hint: str) -> None:
        super().__init__(reason)
        self.reason = reason
        self.hint = hint


def _normalize_relative_input(candidate: str) -> tuple[str, bool]:
    """Normalize path separators and detect absolute-style inputs."""
    normalized = candidate.replace("\\", "/")
    if normalized.startswith("/"):
        return normalized, True
    if WINDOWS_ABSOLUTE_PATTERN.match(normalized):
        return normalized, True
    return normalized, False


def normalize_logical_path(candidate: str) -> str:
    """Return a posix logical path with empty and '.' segments removed."""
    normalized, is_absolute_style = _normalize_relative_input(candidate)
    if is_absolute_style:
        raise PathBlockedError(
            reason="Absolute logical paths are not supported.",
            hint="Use a path relative to the scripts directory such as 'Main.js'.",
        )
    parts = [part for part in normalized.split("/") if part not in ("", ".")]
    if any(part == ".." for part in parts):
        raise PathBlockedError(
            reason="Path traversal is blocked.",
            hint="Remove '..' segments and use a path relative to the scripts directory.",
        )
    return "/".join(parts)


def join_logical_path(*segments: str) -> str:
    """Join logical path segments, skipping empty ones."""
    return normalize_logical_path("/".join(segment for segment in segments if segment))


def resolve_store_path(store_root: Path, candidate: str) -> Path:
    """Resolve a logical path against the store root with sandbox enforcement.

    Absolute and '..' paths are rejected outright; symlinks that resolve
    outside the root are rejected after resolution.
    """
    root = store_root.resolve()
    logical = normalize_logical_path(candidate)
    if not logical:
        return root
    resolved = (root / Path(*logical.split("/"))).resolve(strict=False)
    if not resolved.is_relative_to(root):
        raise PathBlockedError(
            reason="Resolved path escapes the scripts directory.",
            hint="Use a path located under the configured scripts directory.",
        )
    return resolved
