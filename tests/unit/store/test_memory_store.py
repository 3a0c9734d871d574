from __future__ import annotations

import pytest

from script_bundler.store import InMemoryFileStore


def test_directories_are_implied_by_files() -> None:
    store = InMemoryFileStore.from_texts({"Resources/Main/a.txt": "a", "Main.js": "m"})

    assert store.is_directory("")
    assert store.is_directory("Resources")
    assert store.exists("Resources/Main")
    assert not store.is_directory("Main.js")
    assert store.list_directory("") == ["Main.js", "Resources"]
    assert store.list_directory("Resources") == ["Main"]


def test_missing_paths_raise_file_not_found() -> None:
    store = InMemoryFileStore()

    with pytest.raises(FileNotFoundError):
        store.read_text("Ghost.js")
    with pytest.raises(FileNotFoundError):
        store.list_directory("Nowhere")


def test_bytes_and_tags_round_trip() -> None:
    store = InMemoryFileStore()
    store.write_bytes("img/icon.png", b"\x89PNG")
    store.tag("img/icon.png", "b")
    store.tag("./img/icon.png", "a")

    assert store.read_bytes("img/icon.png") == b"\x89PNG"
    assert store.size("img/icon.png") == 4
    assert store.tags("img/icon.png") == ("a", "b")
