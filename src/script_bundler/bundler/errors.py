"""Fatal bundling errors."""

from __future__ import annotations


class BundleError(Exception):
    """Base class for failures that abort a whole bundling run."""

    code = "BUNDLE_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class MissingDependencyError(BundleError):
    """Raised when a script or one of its imports does not exist."""

    code = "MISSING_DEPENDENCY"

    def __init__(self, script_name: str, importer: str | None) -> None:
        if importer is None:
            message = f"Script not found: {script_name}"
        else:
            message = f"Script '{importer}' imports missing script '{script_name}'"
        super().__init__(message)
        self.script_name = script_name
        self.importer = importer


class CyclicImportError(BundleError):
    """Raised when a script imports itself directly or transitively."""

    code = "CYCLIC_IMPORT"

    def __init__(self, chain: tuple[str, ...]) -> None:
        super().__init__("Import cycle detected: " + " -> ".join(chain))
        self.chain = chain
