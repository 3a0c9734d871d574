"""Install bundled scripts together with their per-script resource directories."""

from __future__ import annotations

from dataclasses import dataclass

from script_bundler.bundler import bundle_script, write_bundle
from script_bundler.config import BundleOptions
from script_bundler.security import SecurityLimits, join_logical_path
from script_bundler.store import FileStore

RESOURCE_DIRECTORIES = ("Features", "Resources", "i18n")


@dataclass(slots=True, frozen=True)
class InstallResult:
    """Outcome of installing one script into a target directory."""

    script_name: str
    installed_path: str
    dependencies: tuple[str, ...]
    resources: tuple[str, ...]


def install_script(
    script_name: str,
    source: FileStore,
    target: FileStore,
    *,
    source_directory: str = "",
    options: BundleOptions | None = None,
    limits: SecurityLimits | None = None,
) -> InstallResult:
    """Bundle script_name from source and install it with its resources into target."""
    resolved_options = options or BundleOptions()
    result = bundle_script(
        script_name,
        source,
        source_directory,
        options=resolved_options,
        limits=limits,
    )
    installed_path = write_bundle(target, "", result, options=resolved_options)

    scripts = list(dict.fromkeys((script_name, *result.dependencies)))
    copied: list[str] = []
    for directory in RESOURCE_DIRECTORIES:
        for name in scripts:
            copied.extend(
                _sync_directory(
                    source,
                    target,
                    source_path=join_logical_path(source_directory, directory, name),
                    target_path=join_logical_path(directory, name),
                )
            )
    return InstallResult(
        script_name=script_name,
        installed_path=installed_path,
        dependencies=tuple(scripts[1:]),
        resources=tuple(copied),
    )


def _sync_directory(
    source: FileStore,
    target: FileStore,
    source_path: str,
    target_path: str,
) -> list[str]:
    if not source.is_directory(source_path):
        return []
    copied: list[str] = []
    for entry in source.list_directory(source_path):
        child_source = join_logical_path(source_path, entry)
        child_target = join_logical_path(target_path, entry)
        if source.is_directory(child_source):
            copied.extend(_sync_directory(source, target, child_source, child_target))
            continue
        target.write_bytes(child_target, source.read_bytes(child_source))
        copied.append(child_target)
    return copied
