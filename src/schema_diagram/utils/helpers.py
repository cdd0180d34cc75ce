"""Utility helper functions."""

from bisect import bisect_right
from typing import Iterable, Sequence


def line_starts(source: str) -> list[int]:
    """Offsets at which each line of the source begins."""
    starts = [0]
    pos = source.find("\n")
    while pos != -1:
        starts.append(pos + 1)
        pos = source.find("\n", pos + 1)
    return starts


def pos_to_line_col(source: str, pos: int, starts: Sequence[int] | None = None) -> tuple[int, int]:
    """Convert a character offset into a 1-based (line, column) pair.

    Args:
        source: Source text
        pos: Character offset, clamped to the text length
        starts: Precomputed line_starts(source), reused across lookups

    Returns:
        (line, column) tuple
    """
    if starts is None:
        starts = line_starts(source)
    pos = max(0, min(pos, len(source)))
    line = bisect_right(starts, pos)
    return line, pos - starts[line - 1] + 1


def split_qualified_name(name: str) -> tuple[str | None, str]:
    """Split 'a.b.C' into ('a.b', 'C').

    Args:
        name: Simple or dotted name

    Returns:
        (namespace or None, simple name)
    """
    namespace, sep, simple = name.rpartition(".")
    if not sep:
        return None, name
    return namespace or None, simple


def qualify(name: str, namespace: str | None) -> str:
    """Build an entity id from a simple name and an optional namespace."""
    return f"{namespace}.{name}" if namespace else name


def namespace_of(entity_id: str | None) -> str | None:
    """Namespace part of an entity id, if any."""
    if not entity_id:
        return None
    return split_qualified_name(entity_id)[0]


def simple_name(name: str) -> str:
    """Last segment of a dotted name."""
    return split_qualified_name(name)[1]


def resolve_reference(name: str, namespace: str | None, known_ids: Iterable[str]) -> str:
    """Resolve a named-type reference to an entity id.

    Dotted names are already fully qualified. A bare name that is already a
    known id stays bare; otherwise it is qualified with the enclosing
    namespace. The target does not have to exist yet.

    Args:
        name: Name as written in the source
        namespace: Enclosing namespace
        known_ids: Ids registered so far

    Returns:
        Entity id the reference points at
    """
    if "." in name or not namespace or name in known_ids:
        return name
    return qualify(name, namespace)


def unique_name(base: str, existing: Iterable[str]) -> str:
    """Return base, or base_N with the first unused N >= 2."""
    taken = set(existing)
    if base not in taken:
        return base
    n = 2
    while f"{base}_{n}" in taken:
        n += 1
    return f"{base}_{n}"
