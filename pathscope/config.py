"""Persistent JSON config helpers.

Stores discovery depth, extra executable extensions, and listing-cache TTL.
All access is defensive: malformed or missing config falls back safely.
"""

from __future__ import annotations

import json
from pathlib import Path

from platformdirs import user_config_dir

APP_NAME = "pathscope"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
DEFAULT_DISCOVERY_MAX_DEPTH = 3


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON, ignoring write failures."""
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except (OSError, TypeError, ValueError):
        pass


def load_discovery_max_depth() -> int:
    """Return the persisted discovery depth, or the default when invalid.

    Booleans and non-positive integers are rejected.
    """
    value = load_config().get("discovery_max_depth")
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        return DEFAULT_DISCOVERY_MAX_DEPTH
    return value


def save_discovery_max_depth(max_depth: int) -> None:
    if max_depth <= 0:
        return
    config = load_config()
    config["discovery_max_depth"] = int(max_depth)
    save_config(config)


def _normalize_extension(value: str) -> str | None:
    stripped = value.strip().lower()
    if not stripped or stripped == ".":
        return None
    return stripped if stripped.startswith(".") else f".{stripped}"


def load_extra_extensions() -> list[str]:
    """Load extra executable extensions, normalized to ``.ext`` lower case.

    Non-string items and blanks are dropped; duplicates keep first position.
    """
    value = load_config().get("extra_extensions")
    if not isinstance(value, list):
        return []
    out: list[str] = []
    for item in value:
        if not isinstance(item, str):
            continue
        normalized = _normalize_extension(item)
        if normalized is not None and normalized not in out:
            out.append(normalized)
    return out


def save_extra_extensions(extensions: list[str]) -> None:
    normalized: list[str] = []
    for item in extensions:
        candidate = _normalize_extension(str(item))
        if candidate is not None and candidate not in normalized:
            normalized.append(candidate)
    config = load_config()
    config["extra_extensions"] = normalized
    save_config(config)


def load_listing_cache_ttl() -> float | None:
    """Return the listing-cache TTL in seconds, ``None`` meaning never expire."""
    value = load_config().get("listing_cache_ttl_seconds")
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        return None
    return float(value)


def save_listing_cache_ttl(ttl_seconds: float | None) -> None:
    config = load_config()
    if ttl_seconds is None or ttl_seconds <= 0:
        config.pop("listing_cache_ttl_seconds", None)
    else:
        config["listing_cache_ttl_seconds"] = float(ttl_seconds)
    save_config(config)


__all__ = [
    "APP_NAME",
    "CONFIG_PATH",
    "DEFAULT_DISCOVERY_MAX_DEPTH",
    "load_config",
    "load_discovery_max_depth",
    "load_extra_extensions",
    "load_listing_cache_ttl",
    "save_config",
    "save_discovery_max_depth",
    "save_extra_extensions",
    "save_listing_cache_ttl",
]
