"""Script bundling interfaces."""

from .engine import (
    bundle_output_path,
    bundle_script,
    list_bundle_roots,
    script_path,
    write_bundle,
)
from .errors import BundleError, CyclicImportError, MissingDependencyError
from .imports import find_imports
from .models import BundleResult, BundleUnit, ImportStatement, ModuleEdge, ScriptGraph

__all__ = [
    "BundleError",
    "BundleResult",
    "BundleUnit",
    "CyclicImportError",
    "ImportStatement",
    "MissingDependencyError",
    "ModuleEdge",
    "ScriptGraph",
    "bundle_output_path",
    "bundle_script",
    "find_imports",
    "list_bundle_roots",
    "script_path",
    "write_bundle",
]
