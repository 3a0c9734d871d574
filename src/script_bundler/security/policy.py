"""Size limits policy for safe script reads and bundle assembly."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class SecurityLimits:
    """Runtime limits applied while reading scripts and assembling bundles."""

    max_file_bytes: int = 1024 * 1024
    max_bundle_bytes: int = 4 * 1024 * 1024


@dataclass(slots=True, frozen=True)
class PolicyBlockedError(Exception):
    """Raised when limits policy blocks an operation."""

    reason: str
    hint: str

    code = "POLICY_BLOCKED"


def enforce_script_size_policy(path: str, size: int, limits: SecurityLimits) -> None:
    """Raise PolicyBlockedError when one script exceeds max_file_bytes."""
    if size > limits.max_file_bytes:
        raise PolicyBlockedError(
            reason=f"Script exceeds max_file_bytes limit: {path}",
            hint="Split the script or increase limits.max_file_bytes in script_bundler.toml.",
        )


def enforce_bundle_size_policy(size: int, limits: SecurityLimits) -> None:
    """Raise PolicyBlockedError once a bundle being assembled exceeds max_bundle_bytes."""
    if size > limits.max_bundle_bytes:
        raise PolicyBlockedError(
            reason="Assembled bundle exceeds max_bundle_bytes limit.",
            hint="Reduce the number of inlined scripts or increase limits.max_bundle_bytes.",
        )
