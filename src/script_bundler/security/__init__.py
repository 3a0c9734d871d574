"""Sandboxing and size limit primitives."""

from .paths import (
    PathBlockedError,
    join_logical_path,
    normalize_logical_path,
    resolve_store_path,
)
from .policy import (
    PolicyBlockedError,
    SecurityLimits,
    enforce_bundle_size_policy,
    enforce_script_size_policy,
)

__all__ = [
    "PathBlockedError",
    "PolicyBlockedError",
    "SecurityLimits",
    "enforce_bundle_size_policy",
    "enforce_script_size_policy",
    "join_logical_path",
    "normalize_logical_path",
    "resolve_store_path",
]
