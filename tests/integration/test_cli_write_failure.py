from __future__ import annotations

from pathlib import Path

import pytest

from script_bundler.cli import BundlerApp
from script_bundler.config import load_effective_config
from script_bundler.store import LocalFileStore

HEADER = "// h1\n// h2\n// h3\n"


class _FullDiskStore(LocalFileStore):
    def write_text(self, path: str, content: str) -> None:
        raise OSError(28, "No space left on device", path)


def _app(root: Path) -> BundlerApp:
    return BundlerApp(config=load_effective_config(root), store=_FullDiskStore(root=root))


def test_bundle_write_failure_is_audited_and_reraised(tmp_path: Path) -> None:
    (tmp_path / "Main.js").write_text(HEADER + "run();\n", encoding="utf-8")
    app = _app(tmp_path)

    with pytest.raises(OSError) as error:
        app.bundle("Main")

    assert error.value.errno == 28
    assert not (tmp_path / "Main (Bundled).js").exists()
    event = app.audit_logger.read()[-1]
    assert event["command"] == "bundle"
    assert event["ok"] is False
    assert event["blocked"] is False
    assert event["error_code"] == "WRITE_FAILURE"
    assert event["metadata"] == {"script": "Main"}


def test_install_write_failure_is_audited_and_reraised(tmp_path: Path) -> None:
    source = tmp_path / "repository"
    source.mkdir()
    (source / "Main.js").write_text(HEADER + "run();\n", encoding="utf-8")
    target = tmp_path / "scriptable"
    target.mkdir()
    app = _app(target)

    with pytest.raises(OSError):
        app.install("Main", source)

    assert not (target / "Main (Bundled).js").exists()
    event = app.audit_logger.read()[-1]
    assert event["command"] == "install"
    assert event["error_code"] == "WRITE_FAILURE"
