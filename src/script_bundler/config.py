"""Configuration loading and deterministic merge order."""

from __future__ import annotations

import re
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path

from script_bundler.security import SecurityLimits

CONFIG_FILE_NAME = "script_bundler.toml"
DATA_DIR_NAME = ".script_bundler"

MAX_FILE_BYTES_CAP = 4 * 1024 * 1024
MAX_BUNDLE_BYTES_CAP = 16 * 1024 * 1024
MAX_HEADER_LINES_CAP = 50

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


@dataclass(slots=True, frozen=True)
class BundleOptions:
    """Script naming and rewriting conventions used while bundling."""

    extension: str = ".js"
    header_lines: int = 3
    bundle_suffix: str = " (Bundled)"
    import_function: str = "importModule"
    self_alias: str = "__module"
    bundled_tag: str = "bundled"
    shared_dependencies: bool = False


@dataclass(slots=True, frozen=True)
class BundlerConfig:
    """Fully merged bundler configuration."""

    scripts_dir: Path
    data_dir: Path
    limits: SecurityLimits
    bundle: BundleOptions

    def to_public_dict(self) -> dict[str, object]:
        """Return serializable config snapshot."""
        return {
            "scripts_dir": str(self.scripts_dir),
            "data_dir": str(self.data_dir),
            "limits": {
                "max_file_bytes": self.limits.max_file_bytes,
                "max_bundle_bytes": self.limits.max_bundle_bytes,
            },
            "bundle": {
                "extension": self.bundle.extension,
                "header_lines": self.bundle.header_lines,
                "bundle_suffix": self.bundle.bundle_suffix,
                "import_function": self.bundle.import_function,
                "self_alias": self.bundle.self_alias,
                "bundled_tag": self.bundle.bundled_tag,
                "shared_dependencies": self.bundle.shared_dependencies,
            },
        }


@dataclass(slots=True, frozen=True)
class CliOverrides:
    """Optional startup overrides applied at highest precedence."""

    data_dir: Path | None = None
    max_file_bytes: int | None = None
    max_bundle_bytes: int | None = None
    shared_dependencies: bool | None = None


def default_config(scripts_dir: Path) -> BundlerConfig:
    """Build default config for a given scripts directory."""
    resolved_root = scripts_dir.resolve()
    return BundlerConfig(
        scripts_dir=resolved_root,
        data_dir=resolved_root / DATA_DIR_NAME,
        limits=SecurityLimits(),
        bundle=BundleOptions(),
    )


def load_config_file(scripts_dir: Path) -> dict[str, object]:
    """Load optional script_bundler.toml from the scripts directory."""
    config_path = scripts_dir / CONFIG_FILE_NAME
    if not config_path.exists():
        return {}
    with config_path.open("rb") as handle:
        payload = tomllib.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"{CONFIG_FILE_NAME} must contain a top-level table.")
    return payload


def _get_table(payload: dict[str, object], key: str) -> dict[str, object]:
    value = payload.get(key, {})
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{key}' must be a table.")
    return value


def _optional_string(value: object, name: str, default: str) -> str:
    if value is None:
        return default
    if not isinstance(value, str):
        raise ValueError(f"Config field '{name}' must be a string.")
    return value


def _optional_identifier(value: object, name: str, default: str) -> str:
    text = _optional_string(value, name, default)
    if not _IDENTIFIER_RE.match(text):
        raise ValueError(f"Config field '{name}' must be a plain identifier.")
    return text


def _optional_bool(value: object, name: str, default: bool) -> bool:
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ValueError(f"Config field '{name}' must be a boolean.")
    return value


def merge_config(
    base: BundlerConfig, payload: dict[str, object], overrides: CliOverrides
) -> BundlerConfig:
    """Merge defaults, config file, then CLI/startup overrides."""
    limits_payload = _get_table(payload, "limits")
    bundle_payload = _get_table(payload, "bundle")

    max_file_bytes = _optional_positive_int_with_cap(
        limits_payload.get("max_file_bytes"),
        "limits.max_file_bytes",
        base.limits.max_file_bytes,
        MAX_FILE_BYTES_CAP,
    )
    max_bundle_bytes = _optional_positive_int_with_cap(
        limits_payload.get("max_bundle_bytes"),
        "limits.max_bundle_bytes",
        base.limits.max_bundle_bytes,
        MAX_BUNDLE_BYTES_CAP,
    )

    extension = _optional_string(
        bundle_payload.get("extension"), "bundle.extension", base.bundle.extension
    )
    if not extension.startswith(".") or len(extension) < 2:
        raise ValueError("Config field 'bundle.extension' must start with '.'.")

    header_lines = base.bundle.header_lines
    if "header_lines" in bundle_payload:
        raw_header_lines = bundle_payload["header_lines"]
        if (
            isinstance(raw_header_lines, bool)
            or not isinstance(raw_header_lines, int)
            or raw_header_lines < 0
        ):
            raise ValueError("Config field 'bundle.header_lines' must be a non-negative integer.")
        if raw_header_lines > MAX_HEADER_LINES_CAP:
            raise ValueError(f"Config field 'bundle.header_lines' must be <= {MAX_HEADER_LINES_CAP}.")
        header_lines = raw_header_lines

    bundle = BundleOptions(
        extension=extension,
        header_lines=header_lines,
        bundle_suffix=_optional_string(
            bundle_payload.get("bundle_suffix"),
            "bundle.bundle_suffix",
            base.bundle.bundle_suffix,
        ),
        import_function=_optional_identifier(
            bundle_payload.get("import_function"),
            "bundle.import_function",
            base.bundle.import_function,
        ),
        self_alias=_optional_identifier(
            bundle_payload.get("self_alias"),
            "bundle.self_alias",
            base.bundle.self_alias,
        ),
        bundled_tag=_optional_string(
            bundle_payload.get("bundled_tag"),
            "bundle.bundled_tag",
            base.bundle.bundled_tag,
        ),
        shared_dependencies=_optional_bool(
            bundle_payload.get("shared_dependencies"),
            "bundle.shared_dependencies",
            base.bundle.shared_dependencies,
        ),
    )
    if not bundle.bundled_tag:
        raise ValueError("Config field 'bundle.bundled_tag' must not be empty.")

    merged = BundlerConfig(
        scripts_dir=base.scripts_dir,
        data_dir=base.data_dir,
        limits=SecurityLimits(
            max_file_bytes=max_file_bytes,
            max_bundle_bytes=max_bundle_bytes,
        ),
        bundle=bundle,
    )
    return apply_cli_overrides(merged, overrides)


def apply_cli_overrides(config: BundlerConfig, overrides: CliOverrides) -> BundlerConfig:
    """Apply startup overrides at highest precedence."""
    limits = SecurityLimits(
        max_file_bytes=_optional_positive_int_with_cap(
            overrides.max_file_bytes,
            "overrides.max_file_bytes",
            config.limits.max_file_bytes,
            MAX_FILE_BYTES_CAP,
        ),
        max_bundle_bytes=_optional_positive_int_with_cap(
            overrides.max_bundle_bytes,
            "overrides.max_bundle_bytes",
            config.limits.max_bundle_bytes,
            MAX_BUNDLE_BYTES_CAP,
        ),
    )
    bundle = config.bundle
    if overrides.shared_dependencies is not None:
        bundle = replace(bundle, shared_dependencies=overrides.shared_dependencies)
    data_dir = overrides.data_dir or config.data_dir
    return BundlerConfig(
        scripts_dir=config.scripts_dir,
        data_dir=data_dir.resolve(),
        limits=limits,
        bundle=bundle,
    )


def load_effective_config(
    scripts_dir: Path, overrides: CliOverrides | None = None
) -> BundlerConfig:
    """Load effective config using merge order defaults -> config file -> overrides."""
    resolved_root = scripts_dir.resolve()
    base = default_config(resolved_root)
    payload = load_config_file(resolved_root)
    return merge_config(base, payload, overrides or CliOverrides())


def _optional_positive_int_with_cap(
    value: object,
    name: str,
    default: int,
    cap: int | None,
) -> int:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"Config field '{name}' must be a positive integer.")
    if cap is not None and value > cap:
        raise ValueError(f"Config field '{name}' must be <= {cap}.")
    return value
