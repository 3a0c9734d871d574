"""Lexical scanning and rewriting of cross-script import conventions."""

from __future__ import annotations

import re
from functools import lru_cache

from script_bundler.bundler.models import ImportStatement

_IDENTIFIER_RE = re.compile(r"[A-Za-z_$][A-Za-z0-9_$]*")
_NON_IDENTIFIER_CHARS_RE = re.compile(r"[^A-Za-z0-9_$]")
_EXPORTS_RE = re.compile(
    r"\bmodule\.exports\s*=\s*(?:\{[^}]*\}|[A-Za-z_$][A-Za-z0-9_$]*)[ \t]*;?"
)


@lru_cache(maxsize=16)
def _import_pattern(import_function: str) -> re.Pattern[str]:
    return re.compile(
        r"\b(?:const|let|var)\s+"
        r"(?:\{[^}]*\}|[A-Za-z_$][A-Za-z0-9_$]*)\s*=\s*"
        rf"(?P<call>(?<![\w$.]){re.escape(import_function)}\(\s*"
        r"(?P<quote>[\"'])(?P<name>[^\"'\n]+)(?P=quote)\s*\))"
        r"[ \t]*;?"
    )


@lru_cache(maxsize=16)
def _self_alias_pattern(self_alias: str) -> re.Pattern[str]:
    return re.compile(rf"(?<![\w$.]){re.escape(self_alias)}(?![\w$])")


def find_imports(text: str, import_function: str = "importModule") -> list[ImportStatement]:
    """Return import statements in source order."""
    statements: list[ImportStatement] = []
    for match in _import_pattern(import_function).finditer(text):
        statements.append(
            ImportStatement(
                statement=match.group(0),
                call=match.group("call"),
                script_name=match.group("name").strip(),
                offset=match.start(),
            )
        )
    return statements


def group_imports(statements: list[ImportStatement]) -> list[tuple[str, tuple[str, ...]]]:
    """Group import calls by script name, keeping first-discovery order."""
    grouped: dict[str, list[str]] = {}
    for statement in statements:
        calls = grouped.setdefault(statement.script_name, [])
        if statement.call not in calls:
            calls.append(statement.call)
    return [(name, tuple(calls)) for name, calls in grouped.items()]


def replace_calls(text: str, calls: tuple[str, ...], alias: str) -> str:
    """Replace every literal occurrence of the given import calls with alias."""
    for call in calls:
        text = text.replace(call, alias)
    return text


def split_header(text: str, header_lines: int) -> tuple[str, str]:
    """Split text into its leading host-directive header and the remaining body."""
    position = 0
    for _ in range(header_lines):
        newline = text.find("\n", position)
        if newline == -1:
            return text, ""
        position = newline + 1
    return text[:position], text[position:]


def rename_self_alias(text: str, self_alias: str, alias: str) -> str:
    """Rename whole-identifier occurrences of self_alias to alias."""
    return _self_alias_pattern(self_alias).sub(alias, text)


def strip_exports(text: str) -> str:
    """Remove module.exports registration statements."""
    return _EXPORTS_RE.sub("", text)


def identifiers_in(text: str) -> frozenset[str]:
    """Return every identifier-shaped token in text."""
    return frozenset(_IDENTIFIER_RE.findall(text))


def alias_stem(parent: str, child: str) -> str:
    """Return the '<parent>_<child>' stem with non-identifier characters removed."""
    parent_part = _NON_IDENTIFIER_CHARS_RE.sub("", parent)
    child_part = _NON_IDENTIFIER_CHARS_RE.sub("", child)
    stem = f"{parent_part}_{child_part}"
    if stem[0].isdigit():
        stem = f"_{stem}"
    return stem
