"""Command-line entrypoint for bundling and installing scripts."""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import replace
from pathlib import Path
from typing import TextIO

from script_bundler.bundler import (
    BundleError,
    BundleResult,
    bundle_script,
    list_bundle_roots,
    write_bundle,
)
from script_bundler.config import BundlerConfig, CliOverrides, load_effective_config
from script_bundler.installer import InstallResult, install_script
from script_bundler.logging import AuditEvent, JsonlAuditLogger, sanitize_arguments, utc_timestamp
from script_bundler.security import PathBlockedError, PolicyBlockedError
from script_bundler.store import FileStore, LocalFileStore


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for bundler commands."""
    parser = argparse.ArgumentParser(prog="script-bundler")
    parser.add_argument("--scripts-dir", required=False, default=".")
    parser.add_argument("--data-dir", required=False, default=None)
    parser.add_argument("--max-file-bytes", type=int, required=False, default=None)
    parser.add_argument("--max-bundle-bytes", type=int, required=False, default=None)
    parser.add_argument(
        "--shared-dependencies", choices=("true", "false"), required=False, default=None
    )
    commands = parser.add_subparsers(dest="command", required=True)

    bundle = commands.add_parser("bundle", help="Bundle one script and its imports.")
    bundle.add_argument("--script", required=False, default=None)

    commands.add_parser("list", help="List scripts that can be bundled.")

    install = commands.add_parser(
        "install", help="Bundle a script from another directory and install it here."
    )
    install.add_argument("--source", required=True)
    install.add_argument("--script", required=False, default=None)

    audit = commands.add_parser("audit", help="Print recent audit log entries.")
    audit.add_argument("--limit", type=int, required=False, default=20)
    audit.add_argument("--since", required=False, default=None)
    audit.add_argument("--command", required=False, default=None, dest="audit_command")
    return parser


class BundlerApp:
    """Bundler operations over one scripts directory, with audit logging."""

    def __init__(self, config: BundlerConfig, store: FileStore | None = None) -> None:
        self._config = config
        self._store: FileStore = store or LocalFileStore(
            root=config.scripts_dir, data_dir=config.data_dir
        )
        self._audit_logger = JsonlAuditLogger(path=config.data_dir / "audit.jsonl")
        self._request_counter = 0

    @property
    def config(self) -> BundlerConfig:
        """Return the effective configuration."""
        return self._config

    @property
    def store(self) -> FileStore:
        """Return the scripts directory store."""
        return self._store

    @property
    def audit_logger(self) -> JsonlAuditLogger:
        """Return the audit logger."""
        return self._audit_logger

    def list_roots(self) -> list[str]:
        """Return scripts eligible as bundle roots."""
        request_id = self.next_request_id()
        roots = list_bundle_roots(self._store, options=self._config.bundle)
        self.log_event(
            request_id=request_id,
            command="list",
            arguments={"script_count": len(roots)},
            ok=True,
        )
        return roots

    def bundle(self, script_name: str) -> tuple[BundleResult, str]:
        """Bundle script_name, write the result and return it with its output path."""
        request_id = self.next_request_id()
        arguments: dict[str, object] = {"script": script_name}
        try:
            result = bundle_script(
                script_name,
                self._store,
                options=self._config.bundle,
                limits=self._config.limits,
            )
        except (BundleError, PathBlockedError, PolicyBlockedError) as exc:
            self._log_failure(request_id, "bundle", arguments, exc)
            raise
        try:
            output_path = write_bundle(self._store, "", result, options=self._config.bundle)
        except OSError:
            self.log_event(
                request_id=request_id,
                command="bundle",
                arguments=arguments,
                ok=False,
                error_code="WRITE_FAILURE",
            )
            raise
        self.log_event(
            request_id=request_id,
            command="bundle",
            arguments={
                **arguments,
                "output_path": output_path,
                "dependency_count": len(result.dependencies),
                "edge_count": len(result.edges),
                "bundle_bytes": len(result.content.encode("utf-8")),
            },
            ok=True,
        )
        return result, output_path

    def source_roots(self, source_dir: Path) -> list[str]:
        """Return scripts in source_dir that can be installed."""
        return list_bundle_roots(LocalFileStore(root=source_dir), options=self._config.bundle)

    def install(self, script_name: str, source_dir: Path) -> InstallResult:
        """Bundle script_name from source_dir and install it into the scripts directory."""
        request_id = self.next_request_id()
        arguments: dict[str, object] = {"script": script_name, "source": str(source_dir)}
        source = LocalFileStore(root=source_dir)
        try:
            installed = install_script(
                script_name,
                source,
                self._store,
                options=self._config.bundle,
                limits=self._config.limits,
            )
        except (BundleError, PathBlockedError, PolicyBlockedError) as exc:
            self._log_failure(request_id, "install", arguments, exc)
            raise
        except OSError:
            self.log_event(
                request_id=request_id,
                command="install",
                arguments=arguments,
                ok=False,
                error_code="WRITE_FAILURE",
            )
            raise
        self.log_event(
            request_id=request_id,
            command="install",
            arguments={
                **arguments,
                "output_path": installed.installed_path,
                "dependency_count": len(installed.dependencies),
                "resource_count": len(installed.resources),
            },
            ok=True,
        )
        return installed

    def next_request_id(self) -> str:
        """Generate sequential request IDs for audit events."""
        self._request_counter += 1
        return f"req-{self._request_counter:06d}"

    def log_event(
        self,
        request_id: str,
        command: str,
        arguments: dict[str, object],
        ok: bool,
        error_code: str | None = None,
        blocked: bool = False,
    ) -> None:
        """Log one sanitized audit event."""
        event = AuditEvent(
            timestamp=utc_timestamp(),
            request_id=request_id,
            command=command,
            ok=ok,
            blocked=blocked,
            error_code=error_code,
            metadata=sanitize_arguments(arguments),
        )
        self._audit_logger.append(event)

    def _log_failure(
        self,
        request_id: str,
        command: str,
        arguments: dict[str, object],
        error: BundleError | PathBlockedError | PolicyBlockedError,
    ) -> None:
        self.log_event(
            request_id=request_id,
            command=command,
            arguments=arguments,
            ok=False,
            error_code=error.code,
            blocked=not isinstance(error, BundleError),
        )


def select_script(choices: list[str], in_stream: TextIO, out_stream: TextIO) -> str | None:
    """Present a numbered menu and return the chosen script, or None when cancelled."""
    if not choices:
        out_stream.write("No scripts available for bundling.\n")
        return None
    for index, name in enumerate(choices, start=1):
        out_stream.write(f"{index:>3}. {name}\n")
    out_stream.write("Select a script (number or name, empty to cancel): ")
    out_stream.flush()
    answer = in_stream.readline().strip()
    if not answer or answer.lower() == "q":
        return None
    if answer.isdigit():
        position = int(answer)
        if 1 <= position <= len(choices):
            return choices[position - 1]
        return None
    if answer in choices:
        return answer
    return None


def create_app(
    scripts_dir: str,
    data_dir: str | None = None,
    cli_overrides: CliOverrides | None = None,
) -> BundlerApp:
    """Create a configured bundler app for one scripts directory."""
    overrides = cli_overrides or CliOverrides()
    if data_dir is not None and overrides.data_dir is None:
        overrides = replace(overrides, data_dir=Path(data_dir).resolve())
    config = load_effective_config(scripts_dir=Path(scripts_dir).resolve(), overrides=overrides)
    return BundlerApp(config=config)


def main(
    argv: list[str] | None = None,
    *,
    in_stream: TextIO | None = None,
    out_stream: TextIO | None = None,
    err_stream: TextIO | None = None,
) -> int:
    """Entrypoint for the script-bundler command."""
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    stdin = in_stream or sys.stdin
    stdout = out_stream or sys.stdout
    stderr = err_stream or sys.stderr

    shared_dependencies: bool | None = None
    if args.shared_dependencies == "true":
        shared_dependencies = True
    if args.shared_dependencies == "false":
        shared_dependencies = False
    overrides = CliOverrides(
        data_dir=Path(args.data_dir).resolve() if args.data_dir is not None else None,
        max_file_bytes=args.max_file_bytes,
        max_bundle_bytes=args.max_bundle_bytes,
        shared_dependencies=shared_dependencies,
    )
    app = create_app(scripts_dir=args.scripts_dir, cli_overrides=overrides)

    try:
        if args.command == "list":
            for name in app.list_roots():
                stdout.write(f"{name}\n")
            return 0
        if args.command == "bundle":
            return _run_bundle(app, args.script, stdin, stdout)
        if args.command == "install":
            return _run_install(app, args.script, Path(args.source).resolve(), stdin, stdout)
        if args.command == "audit":
            for entry in app.audit_logger.read(
                since=args.since, limit=args.limit, command=args.audit_command
            ):
                stdout.write(f"{json.dumps(entry, sort_keys=True)}\n")
            return 0
    except BundleError as exc:
        stderr.write(f"error[{exc.code}]: {exc.message}\n")
        return 1
    except (PathBlockedError, PolicyBlockedError) as exc:
        stderr.write(f"error[{exc.code}]: {exc.reason}\n")
        stderr.write(f"hint: {exc.hint}\n")
        return 1
    parser.error(f"unknown command: {args.command}")
    return 2


def _run_bundle(app: BundlerApp, script_name: str | None, stdin: TextIO, stdout: TextIO) -> int:
    if script_name is None:
        script_name = select_script(app.list_roots(), stdin, stdout)
        if script_name is None:
            stdout.write("\nNo script selected.\n")
            return 0
        stdout.write("\n")
    _, output_path = app.bundle(script_name)
    stdout.write(f"{output_path}\n")
    return 0


def _run_install(
    app: BundlerApp,
    script_name: str | None,
    source_dir: Path,
    stdin: TextIO,
    stdout: TextIO,
) -> int:
    if script_name is None:
        script_name = select_script(app.source_roots(source_dir), stdin, stdout)
        if script_name is None:
            stdout.write("\nNo script selected.\n")
            return 0
        stdout.write("\n")
    installed = app.install(script_name, source_dir)
    stdout.write(f"{installed.installed_path}\n")
    for resource in installed.resources:
        stdout.write(f"  {resource}\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
