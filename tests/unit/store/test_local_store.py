from __future__ import annotations

from pathlib import Path

import pytest

from script_bundler.security import PathBlockedError
from script_bundler.store import LocalFileStore


def test_write_and_read_round_trip_creates_parents(tmp_path: Path) -> None:
    store = LocalFileStore(root=tmp_path)

    store.write_text("Resources/Main/data.txt", "line\r\nnext\n")

    assert store.read_text("Resources/Main/data.txt") == "line\r\nnext\n"
    assert store.is_directory("Resources/Main")
    assert store.size("Resources/Main/data.txt") == len(b"line\r\nnext\n")


def test_list_directory_hides_data_dir(tmp_path: Path) -> None:
    (tmp_path / "B.js").write_text("b", encoding="utf-8")
    (tmp_path / "A.js").write_text("a", encoding="utf-8")
    store = LocalFileStore(root=tmp_path)
    store.tag("A.js", "bundled")

    assert (tmp_path / ".script_bundler" / "tags.json").exists()
    assert store.list_directory("") == ["A.js", "B.js"]


def test_tags_persist_across_instances(tmp_path: Path) -> None:
    (tmp_path / "Main (Bundled).js").write_text("x", encoding="utf-8")
    LocalFileStore(root=tmp_path).tag("Main (Bundled).js", "bundled")
    LocalFileStore(root=tmp_path).tag("./Main (Bundled).js", "reviewed")

    assert LocalFileStore(root=tmp_path).tags("Main (Bundled).js") == ("bundled", "reviewed")
    assert LocalFileStore(root=tmp_path).tags("Other.js") == ()


def test_missing_file_raises_file_not_found(tmp_path: Path) -> None:
    store = LocalFileStore(root=tmp_path)

    assert store.exists("Ghost.js") is False
    with pytest.raises(FileNotFoundError):
        store.read_text("Ghost.js")


def test_traversal_is_blocked(tmp_path: Path) -> None:
    store = LocalFileStore(root=tmp_path / "scripts")

    with pytest.raises(PathBlockedError):
        store.write_text("../escape.js", "x")


def test_corrupt_tags_file_is_reported(tmp_path: Path) -> None:
    data_dir = tmp_path / ".script_bundler"
    data_dir.mkdir()
    (data_dir / "tags.json").write_text("{broken", encoding="utf-8")

    with pytest.raises(ValueError, match="Tags file is not valid JSON"):
        LocalFileStore(root=tmp_path).tags("A.js")
