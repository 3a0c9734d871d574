"""Typed models for script bundling runs."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(slots=True, frozen=True)
class ImportStatement:
    """One cross-script import found in a script source."""

    statement: str
    call: str
    script_name: str
    offset: int


@dataclass(slots=True, frozen=True)
class ModuleEdge:
    """Alias assigned to a child script inlined under one parent."""

    parent: str
    child: str
    alias: str


@dataclass(slots=True, frozen=True)
class ScriptGraph:
    """Every script reachable from one root, read once before assembly."""

    texts: dict[str, str]
    imports: dict[str, list[tuple[str, tuple[str, ...]]]]
    identifiers: frozenset[str]


@dataclass(slots=True, frozen=True)
class _Link(Generic[T]):
    value: T
    previous: _Link[T] | None = None


def _unwind(link: _Link[T] | None) -> list[T]:
    values: list[T] = []
    while link is not None:
        values.append(link.value)
        link = link.previous
    values.reverse()
    return values


@dataclass(slots=True, frozen=True)
class BundleUnit:
    """Immutable accumulator threaded through one bundling run.

    Pieces and edges are kept as shared linked chains, so appending never
    copies what was accumulated before. ``byte_count`` tracks the UTF-8 size
    of ``content`` without materializing it.
    """

    pieces: _Link[str] | None = None
    edge_chain: _Link[ModuleEdge] | None = None
    byte_count: int = 0
    ends_with_newline: bool = False
    next_ordinal: int = 1

    @property
    def content(self) -> str:
        """Return the accumulated text."""
        return "".join(_unwind(self.pieces))

    @property
    def edges(self) -> tuple[ModuleEdge, ...]:
        """Return inlined dependency edges in assignment order."""
        return tuple(_unwind(self.edge_chain))

    @property
    def dependencies(self) -> tuple[str, ...]:
        """Return inlined script names in assignment order."""
        return tuple(edge.child for edge in self.edges)

    def append(self, text: str) -> BundleUnit:
        """Return a unit with text appended on its own line."""
        if not text:
            return self
        pieces = self.pieces
        byte_count = self.byte_count
        if pieces is not None and not self.ends_with_newline:
            pieces = _Link("\n", pieces)
            byte_count += 1
        return replace(
            self,
            pieces=_Link(text, pieces),
            byte_count=byte_count + len(text.encode("utf-8")),
            ends_with_newline=text.endswith("\n"),
        )

    def prepend(self, text: str) -> BundleUnit:
        """Return a unit with text placed before all accumulated content."""
        if not text:
            return self
        unit = BundleUnit(edge_chain=self.edge_chain, next_ordinal=self.next_ordinal)
        return unit.append(text).append(self.content)

    def with_edge(self, edge: ModuleEdge, next_ordinal: int) -> BundleUnit:
        """Return a unit recording one inlined dependency edge."""
        return replace(self, edge_chain=_Link(edge, self.edge_chain), next_ordinal=next_ordinal)

    def alias_for(self, script_name: str) -> str | None:
        """Return the first alias assigned to script_name in this run."""
        alias: str | None = None
        link = self.edge_chain
        while link is not None:
            if link.value.child == script_name:
                alias = link.value.alias
            link = link.previous
        return alias


@dataclass(slots=True, frozen=True)
class BundleResult:
    """Fully assembled bundle for one root script."""

    script_name: str
    content: str
    module_name: str | None
    header: str
    dependencies: tuple[str, ...]
    edges: tuple[ModuleEdge, ...]
