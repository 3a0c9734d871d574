"""Recursive script bundling engine.

A bundle is assembled depth-first: every imported script is inlined before
the body of its importer, so the final text lists leaf scripts first and the
root script's own body last. Each inlined dependency gets an alias of the
form ``<parent>_<child>_<n>``; its self-reference identifier is renamed to
that alias and its ``module.exports`` statements are dropped, while the
importer's ``importModule("child")`` calls are replaced with the alias.

Every reachable script is read once up front, so cycles and missing scripts
are reported before assembly starts and aliases are chosen against the
identifiers of the whole graph. The bundle size limit is checked after every
append, so an oversized graph stops as soon as the limit is crossed.
"""

from __future__ import annotations

from dataclasses import dataclass

from script_bundler.bundler.errors import CyclicImportError, MissingDependencyError
from script_bundler.bundler.imports import (
    alias_stem,
    find_imports,
    group_imports,
    identifiers_in,
    rename_self_alias,
    replace_calls,
    split_header,
    strip_exports,
)
from script_bundler.bundler.models import BundleResult, BundleUnit, ModuleEdge, ScriptGraph
from script_bundler.config import BundleOptions
from script_bundler.security import (
    SecurityLimits,
    enforce_bundle_size_policy,
    enforce_script_size_policy,
    join_logical_path,
)
from script_bundler.store import FileStore


@dataclass(slots=True, frozen=True)
class _BundleContext:
    """Read-only collaborators shared by every recursive step of one run."""

    store: FileStore
    base_directory: str
    options: BundleOptions
    limits: SecurityLimits


def script_path(base_directory: str, script_name: str, options: BundleOptions) -> str:
    """Return the logical path of a script inside base_directory."""
    return join_logical_path(base_directory, f"{script_name}{options.extension}")


def bundle_output_path(base_directory: str, script_name: str, options: BundleOptions) -> str:
    """Return the logical path a bundle of script_name is written to."""
    return join_logical_path(
        base_directory, f"{script_name}{options.bundle_suffix}{options.extension}"
    )


def bundle_script(
    script_name: str,
    store: FileStore,
    base_directory: str = "",
    *,
    options: BundleOptions | None = None,
    limits: SecurityLimits | None = None,
) -> BundleResult:
    """Inline script_name and its transitive imports into one script.

    Pure text transformation: nothing is written to the store. Raises
    MissingDependencyError, CyclicImportError, PathBlockedError or
    PolicyBlockedError; any failure aborts the whole run.
    """
    context = _BundleContext(
        store=store,
        base_directory=base_directory,
        options=options or BundleOptions(),
        limits=limits or SecurityLimits(),
    )
    graph = _load_graph(script_name, context)
    unit, module_name, header = _bundle_unit(
        script_name=script_name,
        parent=None,
        unit=BundleUnit(),
        graph=graph,
        context=context,
    )
    return BundleResult(
        script_name=script_name,
        content=unit.content,
        module_name=module_name,
        header=header,
        dependencies=unit.dependencies,
        edges=unit.edges,
    )


def write_bundle(
    store: FileStore,
    base_directory: str,
    result: BundleResult,
    *,
    options: BundleOptions | None = None,
) -> str:
    """Write an assembled bundle next to its root script and tag it as bundled."""
    resolved_options = options or BundleOptions()
    path = bundle_output_path(base_directory, result.script_name, resolved_options)
    store.write_text(path, result.content)
    store.tag(path, resolved_options.bundled_tag)
    return path


def list_bundle_roots(
    store: FileStore,
    base_directory: str = "",
    *,
    options: BundleOptions | None = None,
) -> list[str]:
    """Return script names eligible as bundle roots, sorted."""
    resolved_options = options or BundleOptions()
    extension = resolved_options.extension
    names: list[str] = []
    for entry in store.list_directory(base_directory):
        if not entry.endswith(extension) or entry == extension:
            continue
        path = join_logical_path(base_directory, entry)
        if store.is_directory(path):
            continue
        if resolved_options.bundled_tag in store.tags(path):
            continue
        names.append(entry[: -len(extension)])
    return sorted(names)


def _load_graph(script_name: str, context: _BundleContext) -> ScriptGraph:
    texts: dict[str, str] = {}
    imports: dict[str, list[tuple[str, tuple[str, ...]]]] = {}
    _visit_script(script_name, None, (), texts, imports, context)
    identifiers: set[str] = set()
    for text in texts.values():
        identifiers.update(identifiers_in(text))
    return ScriptGraph(texts=texts, imports=imports, identifiers=frozenset(identifiers))


def _visit_script(
    script_name: str,
    importer: str | None,
    chain: tuple[str, ...],
    texts: dict[str, str],
    imports: dict[str, list[tuple[str, tuple[str, ...]]]],
    context: _BundleContext,
) -> None:
    chain = chain + (script_name,)
    text = _read_script(script_name, importer=importer, context=context)
    texts[script_name] = text
    grouped = group_imports(find_imports(text, context.options.import_function))
    imports[script_name] = grouped
    for dependency, _ in grouped:
        if dependency in chain:
            raise CyclicImportError(chain + (dependency,))
        if dependency in texts:
            continue
        _visit_script(dependency, script_name, chain, texts, imports, context)


def _bundle_unit(
    script_name: str,
    parent: str | None,
    unit: BundleUnit,
    graph: ScriptGraph,
    context: _BundleContext,
) -> tuple[BundleUnit, str | None, str]:
    options = context.options
    text = graph.texts[script_name]

    for dependency, calls in graph.imports[script_name]:
        alias = unit.alias_for(dependency) if options.shared_dependencies else None
        if alias is None:
            unit, alias, _ = _bundle_unit(
                script_name=dependency,
                parent=script_name,
                unit=unit,
                graph=graph,
                context=context,
            )
        text = replace_calls(text, calls, alias)

    header, body = split_header(text, options.header_lines)
    if parent is None:
        unit = unit.append(body).prepend(header)
        enforce_bundle_size_policy(unit.byte_count, context.limits)
        return unit, None, header

    unit, alias = _assign_alias(parent, script_name, unit, graph.identifiers)
    body = strip_exports(rename_self_alias(body, options.self_alias, alias))
    unit = unit.append(body)
    enforce_bundle_size_policy(unit.byte_count, context.limits)
    return unit, alias, header


def _assign_alias(
    parent: str, child: str, unit: BundleUnit, identifiers: frozenset[str]
) -> tuple[BundleUnit, str]:
    # Ordinals only grow within a run, so assigned aliases never repeat.
    stem = alias_stem(parent, child)
    ordinal = unit.next_ordinal
    alias = f"{stem}_{ordinal}"
    while alias in identifiers:
        ordinal += 1
        alias = f"{stem}_{ordinal}"
    unit = unit.with_edge(ModuleEdge(parent=parent, child=child, alias=alias), ordinal + 1)
    return unit, alias


def _read_script(script_name: str, importer: str | None, context: _BundleContext) -> str:
    path = script_path(context.base_directory, script_name, context.options)
    if not context.store.exists(path) or context.store.is_directory(path):
        raise MissingDependencyError(script_name=script_name, importer=importer)
    enforce_script_size_policy(path, context.store.size(path), context.limits)
    return context.store.read_text(path)
