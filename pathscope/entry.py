"""Immutable search-path entries in symbolic and resolved form."""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from dataclasses import dataclass, field

from .environment import EnvironmentSnapshot, default_environment_snapshot, expand_placeholders

_INVALID_PATH_CHARS_RE = re.compile(r'["<>|\x00-\x1f]')
_DRIVE_WITH_EXTRA_SEGMENTS_RE = re.compile(r"^([A-Za-z]:[^:]*):")
_SEPARATORS = os.sep + (os.altsep or "")


def sanitize_symbolic(symbolic: str) -> str:
    """Normalize raw path text without ever rejecting it.

    Illegal characters are dropped, forward slashes become ``os.sep`` and a
    drive-prefixed string with further ``:`` segments keeps only the first one.
    """
    text = _INVALID_PATH_CHARS_RE.sub("", symbolic)
    text = text.replace("/", os.sep)
    match = _DRIVE_WITH_EXTRA_SEGMENTS_RE.match(text)
    if match is not None:
        text = match.group(1)
    return text


def _trim_trailing_separators(path: str) -> str:
    drive, tail = os.path.splitdrive(path)
    stripped = tail.rstrip(_SEPARATORS)
    if not stripped:
        return drive + tail[:1]
    return drive + stripped


def resolve_symbolic(symbolic: str, environ: Mapping[str, str] | None = None) -> str:
    """Expand placeholders and return the absolute, normalized directory."""
    expanded = expand_placeholders(symbolic, environ)
    return _trim_trailing_separators(os.path.abspath(expanded))


def _is_file(entry: os.DirEntry) -> bool:
    try:
        return entry.is_file()
    except OSError:
        return False


@dataclass(frozen=True)
class PathMatch:
    """One file found in a search-path directory."""

    directory: str
    filename: str

    @property
    def full_path(self) -> str:
        return os.path.join(self.directory, self.filename)

    def __str__(self) -> str:
        return self.full_path


@dataclass(frozen=True, eq=False)
class PathEntry:
    """One directory of the ordered search path.

    ``symbolic`` keeps ``%NAME%`` placeholders as the user wrote them;
    ``resolved`` is the absolute directory they stand for. Entries compare
    equal when their resolved paths match case-insensitively.
    """

    symbolic: str
    resolved: str = field(repr=False)

    @classmethod
    def from_symbolic(cls, symbolic: str, environ: Mapping[str, str] | None = None) -> PathEntry:
        clean = sanitize_symbolic(symbolic)
        return cls(symbolic=clean, resolved=resolve_symbolic(clean, environ))

    @classmethod
    def from_file_path(cls, path: str, snapshot: EnvironmentSnapshot | None = None) -> PathEntry:
        """Build an entry for a concrete directory, re-introducing placeholders.

        The longest directory-valued environment variable that prefixes
        ``path`` is replaced by its ``%NAME%`` token. The resolved form is
        taken from ``path`` itself.
        """
        env_snapshot = default_environment_snapshot() if snapshot is None else snapshot
        clean = sanitize_symbolic(path)
        symbolic = env_snapshot.placeholder_for(clean)
        return cls(
            symbolic=clean if symbolic is None else symbolic,
            resolved=_trim_trailing_separators(os.path.abspath(clean)),
        )

    @property
    def key(self) -> str:
        return self.resolved.casefold()

    def exists(self) -> bool:
        return os.path.isdir(self.resolved)

    def find(self, prefix: str) -> list[PathMatch]:
        """List files in this directory whose name starts with ``prefix``.

        Any enumeration failure (missing directory, access denied) yields an
        empty list.
        """
        folded_prefix = os.path.normcase(prefix)
        try:
            with os.scandir(self.resolved) as entries:
                names = [
                    entry.name
                    for entry in entries
                    if os.path.normcase(entry.name).startswith(folded_prefix) and _is_file(entry)
                ]
        except OSError:
            return []
        names.sort(key=str.casefold)
        return [PathMatch(self.resolved, name) for name in names]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PathEntry):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __str__(self) -> str:
        return self.symbolic


__all__ = [
    "PathEntry",
    "PathMatch",
    "resolve_symbolic",
    "sanitize_symbolic",
]
