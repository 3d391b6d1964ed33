"""Environment-variable helpers for symbolic search-path entries.

Expands ``%NAME%`` placeholders, builds the memoized snapshot used to turn
concrete directories back into placeholder form, and reads ``PATH``/``PATHEXT``
from an environment mapping.
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache

PLACEHOLDER_RE = re.compile(r"%([^%]+)%")
MIN_PLACEHOLDER_VALUE_LENGTH = 3
DEFAULT_PATHEXT = ".COM;.EXE;.BAT;.CMD;.VBS;.VBE;.JS;.JSE;.WSF;.WSH;.MSC"


def _lookup(environ: Mapping[str, str], name: str) -> str | None:
    """Return ``environ[name]``, falling back to a case-insensitive match."""
    value = environ.get(name)
    if value is not None:
        return value
    folded = name.casefold()
    for key, candidate in environ.items():
        if key.casefold() == folded:
            return candidate
    return None


def expand_placeholders(text: str, environ: Mapping[str, str] | None = None) -> str:
    """Substitute ``%NAME%`` tokens with environment values.

    Unknown names are left untouched, matching how the shell treats them.
    """
    if "%" not in text:
        return text
    env = os.environ if environ is None else environ

    def replace(match: re.Match[str]) -> str:
        value = _lookup(env, match.group(1))
        return match.group(0) if value is None else value

    return PLACEHOLDER_RE.sub(replace, text)


@dataclass(frozen=True)
class EnvironmentSnapshot:
    """Directory-valued environment variables, longest value first."""

    variables: tuple[tuple[str, str], ...] = ()

    @classmethod
    def from_environ(
        cls,
        environ: Mapping[str, str] | None = None,
        *,
        is_dir=os.path.isdir,
    ) -> EnvironmentSnapshot:
        """Keep variables whose value is an existing directory longer than 3 chars."""
        env = os.environ if environ is None else environ
        variables: list[tuple[str, str]] = []
        for name, value in env.items():
            if not value or len(value) <= MIN_PLACEHOLDER_VALUE_LENGTH:
                continue
            try:
                if not is_dir(value):
                    continue
            except (OSError, ValueError):
                continue
            variables.append((name, value))
        variables.sort(key=lambda item: (-len(item[1]), item[0]))
        return cls(variables=tuple(variables))

    def placeholder_for(self, path: str) -> str | None:
        """Return ``path`` with its longest matching variable prefix replaced.

        ``None`` means no variable value is a prefix of ``path``.
        """
        folded_path = os.path.normcase(path)
        for name, value in self.variables:
            if folded_path.startswith(os.path.normcase(value)):
                return f"%{name}%{path[len(value):]}"
        return None


@lru_cache(maxsize=1)
def default_environment_snapshot() -> EnvironmentSnapshot:
    """Process-wide snapshot of ``os.environ``, computed on first use."""
    return EnvironmentSnapshot.from_environ()


def executable_extensions(environ: Mapping[str, str] | None = None) -> list[str]:
    """Return the ``PATHEXT`` entries, or the Windows default list when unset."""
    env = os.environ if environ is None else environ
    raw = _lookup(env, "PATHEXT") or DEFAULT_PATHEXT
    return [part.strip() for part in raw.split(";") if part.strip()]


def read_search_path(environ: Mapping[str, str] | None = None, separator: str = os.pathsep) -> list[str]:
    """Split the ``PATH`` value into its non-empty segments."""
    env = os.environ if environ is None else environ
    raw = _lookup(env, "PATH") or ""
    return [part for part in raw.split(separator) if part]


__all__ = [
    "DEFAULT_PATHEXT",
    "EnvironmentSnapshot",
    "default_environment_snapshot",
    "executable_extensions",
    "expand_placeholders",
    "read_search_path",
]
