from __future__ import annotations

import pytest

from script_bundler.bundler import CyclicImportError, MissingDependencyError, bundle_script
from script_bundler.config import BundleOptions
from script_bundler.store import InMemoryFileStore

HEADER = "// h1\n// h2\n// h3\n"


def _imports(*names: str, marker: str) -> str:
    lines = [f'const m{index} = importModule("{name}");\n' for index, name in enumerate(names)]
    return HEADER + "".join(lines) + f"const __module = {{ marker: '{marker}' }};\n"


def test_missing_dependency_aborts_bundle() -> None:
    store = InMemoryFileStore.from_texts({"Main.js": _imports("Ghost", marker="main")})

    with pytest.raises(MissingDependencyError) as error:
        bundle_script("Main", store)

    assert error.value.code == "MISSING_DEPENDENCY"
    assert error.value.script_name == "Ghost"
    assert error.value.importer == "Main"


def test_missing_transitive_dependency_names_its_importer() -> None:
    store = InMemoryFileStore.from_texts(
        {
            "Main.js": _imports("Mid", marker="main"),
            "Mid.js": _imports("Ghost", marker="mid"),
        }
    )

    with pytest.raises(MissingDependencyError) as error:
        bundle_script("Main", store)

    assert error.value.importer == "Mid"


def test_missing_root_script_is_reported() -> None:
    with pytest.raises(MissingDependencyError) as error:
        bundle_script("Nope", InMemoryFileStore())

    assert error.value.importer is None
    assert error.value.message == "Script not found: Nope"


def test_self_import_is_rejected() -> None:
    store = InMemoryFileStore.from_texts({"Loop.js": _imports("Loop", marker="loop")})

    with pytest.raises(CyclicImportError) as error:
        bundle_script("Loop", store)

    assert error.value.chain == ("Loop", "Loop")
    assert error.value.code == "CYCLIC_IMPORT"


def test_transitive_cycle_is_rejected_with_chain() -> None:
    store = InMemoryFileStore.from_texts(
        {
            "A.js": _imports("B", marker="a"),
            "B.js": _imports("C", marker="b"),
            "C.js": _imports("A", marker="c"),
        }
    )

    with pytest.raises(CyclicImportError) as error:
        bundle_script("A", store)

    assert error.value.chain == ("A", "B", "C", "A")
    assert "A -> B -> C -> A" in error.value.message


def test_diamond_import_is_inlined_once_per_edge() -> None:
    store = InMemoryFileStore.from_texts(
        {
            "Main.js": _imports("X", "Y", marker="main"),
            "X.js": _imports("Z", marker="x"),
            "Y.js": _imports("Z", marker="y"),
            "Z.js": _imports(marker="z-body"),
        }
    )

    result = bundle_script("Main", store)

    assert result.content.count("z-body") == 2
    assert result.dependencies == ("Z", "X", "Z", "Y")
    assert [edge.alias for edge in result.edges] == ["X_Z_1", "Main_X_2", "Y_Z_3", "Main_Y_4"]


def test_shared_dependencies_inline_each_script_once() -> None:
    store = InMemoryFileStore.from_texts(
        {
            "Main.js": _imports("X", "Y", marker="main"),
            "X.js": _imports("Z", marker="x"),
            "Y.js": _imports("Z", marker="y"),
            "Z.js": _imports(marker="z-body"),
        }
    )

    result = bundle_script("Main", store, options=BundleOptions(shared_dependencies=True))

    assert result.content.count("z-body") == 1
    assert result.dependencies == ("Z", "X", "Y")
    assert "const m0 = X_Z_1;" in result.content
    assert result.content.count("= X_Z_1;") == 2


def test_same_parent_child_pair_gets_distinct_aliases() -> None:
    store = InMemoryFileStore.from_texts(
        {
            "Main.js": _imports("X", "Y", marker="main"),
            "Y.js": _imports("X", marker="y"),
            "X.js": _imports("Z", marker="x"),
            "Z.js": _imports(marker="z"),
        }
    )

    result = bundle_script("Main", store)

    pair_aliases = [edge.alias for edge in result.edges if (edge.parent, edge.child) == ("X", "Z")]
    assert pair_aliases == ["X_Z_1", "X_Z_3"]


def test_repeated_import_of_same_script_is_inlined_once() -> None:
    main = HEADER + 'const a = importModule("Util");\nconst b = importModule("Util");\n'
    store = InMemoryFileStore.from_texts({"Main.js": main, "Util.js": _imports(marker="util")})

    result = bundle_script("Main", store)

    assert result.dependencies == ("Util",)
    assert "const a = Main_Util_1;\nconst b = Main_Util_1;\n" in result.content
