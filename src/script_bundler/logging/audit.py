"""JSONL audit trail of bundler commands."""

from __future__ import annotations

import json
from collections import deque
from collections.abc import Iterator
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path

# Script names and store paths are safe to record verbatim.
_VERBATIM_KEYS = frozenset({"script", "output_path", "source"})


@dataclass(slots=True, frozen=True)
class AuditEvent:
    """Outcome of one bundler command, without any script content."""

    timestamp: str
    request_id: str
    command: str
    ok: bool
    blocked: bool
    error_code: str | None
    metadata: dict[str, object]


def utc_timestamp() -> str:
    """Return an ISO-8601 UTC timestamp with millisecond precision."""
    return datetime.now(tz=UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def sanitize_arguments(arguments: dict[str, object]) -> dict[str, object]:
    """Reduce command arguments to names, paths, counts and shapes.

    Any other string is logged only as its length so script text never
    reaches the audit file.
    """
    sanitized: dict[str, object] = {}
    for key in sorted(arguments):
        value = arguments[key]
        if key in _VERBATIM_KEYS and isinstance(value, str):
            sanitized[key] = value
        elif isinstance(value, (int, float, bool)) or value is None:
            sanitized[key] = value
        elif isinstance(value, str):
            sanitized[f"{key}_present"] = True
            sanitized[f"{key}_length"] = len(value)
        elif isinstance(value, (list, tuple)):
            sanitized[f"{key}_type"] = "list"
            sanitized[f"{key}_length"] = len(value)
        elif isinstance(value, dict):
            sanitized[f"{key}_type"] = "dict"
            sanitized[f"{key}_keys"] = sorted(str(k) for k in value)
        else:
            sanitized[f"{key}_type"] = type(value).__name__
    return sanitized


class JsonlAuditLogger:
    """Appends audit events to a JSONL file and reads back the most recent ones."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        """Return the JSONL file location."""
        return self._path

    def append(self, event: AuditEvent) -> None:
        """Write one event as a single sorted-key JSON line."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(asdict(event), sort_keys=True) + "\n")

    def read(
        self,
        since: str | None = None,
        limit: int = 50,
        command: str | None = None,
    ) -> list[dict[str, object]]:
        """Return up to limit newest events, oldest first.

        ``since`` is an inclusive ISO timestamp lower bound; ``command`` keeps
        only events of one command. Unparseable lines are skipped.
        """
        if limit < 1:
            return []
        recent: deque[dict[str, object]] = deque(maxlen=limit)
        for record in self._records():
            if since is not None:
                timestamp = record.get("timestamp")
                if not isinstance(timestamp, str) or timestamp < since:
                    continue
            if command is not None and record.get("command") != command:
                continue
            recent.append(record)
        return list(recent)

    def _records(self) -> Iterator[dict[str, object]]:
        if not self._path.exists():
            return
        with self._path.open("r", encoding="utf-8") as handle:
            for line in handle:
                if not line.strip():
                    continue
                try:
                    record = json.loads(line)
                except json.JSONDecodeError:
                    continue
                if isinstance(record, dict):
                    yield record
