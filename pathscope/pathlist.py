"""Search-path value codec plus diff/merge helpers for ordered entry lists."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass

from .entry import PathEntry
from .environment import EnvironmentSnapshot

PATH_SEPARATOR = ";"


@dataclass(frozen=True)
class PathDiff:
    """One entry added to or removed from a path."""

    entry: PathEntry
    added: bool

    @property
    def symbolic(self) -> str:
        return self.entry.symbolic


def split_path_value(
    value: str,
    separator: str = PATH_SEPARATOR,
    environ: Mapping[str, str] | None = None,
) -> list[PathEntry]:
    """Parse a stored path value, skipping empty segments."""
    return [PathEntry.from_symbolic(part, environ) for part in value.split(separator) if part]


def join_path_value(entries: Iterable[PathEntry], separator: str = PATH_SEPARATOR) -> str:
    return separator.join(entry.symbolic for entry in entries)


def diff_paths(old: Sequence[PathEntry], new: Sequence[PathEntry]) -> list[PathDiff]:
    """Removed entries in ``old`` order, followed by added entries in ``new`` order.

    Reordering alone produces no diff rows.
    """
    old_keys = {entry.key for entry in old}
    new_keys = {entry.key for entry in new}
    removed = [PathDiff(entry, added=False) for entry in old if entry.key not in new_keys]
    added = [PathDiff(entry, added=True) for entry in new if entry.key not in old_keys]
    return removed + added


def dedupe_path(entries: Iterable[PathEntry]) -> list[PathEntry]:
    """Keep the first occurrence of each directory."""
    seen: set[str] = set()
    out: list[PathEntry] = []
    for entry in entries:
        if entry.key in seen:
            continue
        seen.add(entry.key)
        out.append(entry)
    return out


def merge_candidates(
    path: Sequence[PathEntry],
    candidates: Iterable[str],
    snapshot: EnvironmentSnapshot | None = None,
) -> list[PathEntry]:
    """Append discovered directories to ``path``, keeping one entry per directory."""
    discovered = (PathEntry.from_file_path(candidate, snapshot) for candidate in candidates)
    return dedupe_path([*path, *discovered])


__all__ = [
    "PATH_SEPARATOR",
    "PathDiff",
    "dedupe_path",
    "diff_paths",
    "join_path_value",
    "merge_candidates",
    "split_path_value",
]
