from __future__ import annotations

import pytest

from script_bundler.bundler import (
    bundle_output_path,
    bundle_script,
    list_bundle_roots,
    write_bundle,
)
from script_bundler.config import BundleOptions
from script_bundler.security import PolicyBlockedError, SecurityLimits
from script_bundler.store import InMemoryFileStore

HEADER = "// h1\n// h2\n// h3\n"


def test_write_bundle_uses_suffix_and_tags_output() -> None:
    store = InMemoryFileStore.from_texts({"Main.js": HEADER + "run();\n"})
    result = bundle_script("Main", store)

    path = write_bundle(store, "", result)

    assert path == "Main (Bundled).js"
    assert store.read_text(path) == HEADER + "run();\n"
    assert store.tags(path) == ("bundled",)


def test_bundle_output_path_honors_options() -> None:
    options = BundleOptions(extension=".mjs", bundle_suffix=".bundle")

    assert bundle_output_path("dist", "Main", options) == "dist/Main.bundle.mjs"


def test_list_bundle_roots_excludes_bundled_and_foreign_files() -> None:
    store = InMemoryFileStore.from_texts(
        {
            "Zeta.js": HEADER,
            "Alpha.js": HEADER,
            "notes.txt": "x",
            "Resources/Alpha/data.js": "x",
        }
    )
    write_bundle(store, "", bundle_script("Alpha", store))

    assert list_bundle_roots(store) == ["Alpha", "Zeta"]


def test_oversized_script_is_blocked() -> None:
    store = InMemoryFileStore.from_texts({"Big.js": HEADER + "x" * 64})

    with pytest.raises(PolicyBlockedError) as error:
        bundle_script("Big", store, limits=SecurityLimits(max_file_bytes=32))

    assert error.value.reason == "Script exceeds max_file_bytes limit: Big.js"


def test_oversized_bundle_is_blocked() -> None:
    store = InMemoryFileStore.from_texts(
        {
            "Dep.js": HEADER + "y" * 40 + "\n",
            "Main.js": HEADER + 'const d = importModule("Dep");\n',
        }
    )

    with pytest.raises(PolicyBlockedError) as error:
        bundle_script("Main", store, limits=SecurityLimits(max_file_bytes=100, max_bundle_bytes=60))

    assert error.value.reason == "Assembled bundle exceeds max_bundle_bytes limit."


def _layered_diamond(depth: int) -> dict[str, str]:
    files: dict[str, str] = {}
    for level in range(depth):
        for side in ("L", "R"):
            name = f"{side}{level}"
            if level == depth - 1:
                files[f"{name}.js"] = HEADER + f"const __module = '{name}';\n"
                continue
            files[f"{name}.js"] = (
                HEADER
                + f'const left = importModule("L{level + 1}");\n'
                + f'const right = importModule("R{level + 1}");\n'
            )
    files["Main.js"] = HEADER + 'const left = importModule("L0");\nconst right = importModule("R0");\n'
    return files


def test_deep_diamond_stops_at_bundle_limit() -> None:
    store = InMemoryFileStore.from_texts(_layered_diamond(40))

    with pytest.raises(PolicyBlockedError) as error:
        bundle_script("Main", store, limits=SecurityLimits(max_bundle_bytes=1024))

    assert error.value.reason == "Assembled bundle exceeds max_bundle_bytes limit."


def test_shared_dependencies_keep_deep_diamond_small() -> None:
    store = InMemoryFileStore.from_texts(_layered_diamond(40))

    result = bundle_script(
        "Main",
        store,
        options=BundleOptions(shared_dependencies=True),
        limits=SecurityLimits(max_bundle_bytes=64 * 1024),
    )

    assert len(result.dependencies) == 80
    assert result.content.count("const __module") == 0
