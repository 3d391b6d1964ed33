"""Command-line front door for pathscope.

Reads the process search path, then runs a shadowing check, a prefix search,
or a ``bin`` directory discovery and prints the result.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import Sequence
from pathlib import Path

from . import config
from .conflicts import ConflictEngine
from .discovery import DirectoryDiscovery, EventProgress
from .entry import PathEntry
from .environment import executable_extensions, read_search_path
from .issues import ALERT_ISSUES, ALERT_MISSING
from .listing_cache import DirectoryListingCache
from .pathlist import join_path_value, merge_candidates, split_path_value

RESET = "\033[0m"
ALERT_COLORS = {
    ALERT_ISSUES: "\033[33m",
    ALERT_MISSING: "\033[31m",
}
ALERT_LABELS = {
    ALERT_ISSUES: "issues",
    ALERT_MISSING: "missing",
}


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def _load_entries(path_value: str | None, separator: str) -> list[PathEntry]:
    if path_value is None:
        return [PathEntry.from_symbolic(part) for part in read_search_path(separator=separator)]
    return split_path_value(path_value, separator)


def _build_engine() -> ConflictEngine:
    extensions = executable_extensions() + config.load_extra_extensions()
    cache = DirectoryListingCache(ttl_seconds=config.load_listing_cache_ttl())
    return ConflictEngine(extensions, listing_cache=cache)


def _colorize(text: str, alert_level: int, use_color: bool) -> str:
    color = ALERT_COLORS.get(alert_level)
    if not use_color or color is None:
        return text
    return f"{color}{text}{RESET}"


def run_check(entries: Sequence[PathEntry], use_color: bool) -> int:
    """Print every entry with its issues; returns the highest alert level."""
    with _build_engine() as engine:
        annotated = engine.check(entries)
        engine.wait_until_idle()

    worst = 0
    out: list[str] = []
    for item in annotated:
        level = item.alert_level
        worst = max(worst, level)
        label = ALERT_LABELS.get(level)
        header = item.symbolic if label is None else f"{item.symbolic} [{label}]"
        out.append(_colorize(header, level, use_color) + "\n")
        for issue in item.issues:
            out.append(f"    {issue}\n")
    sys.stdout.write("".join(out))
    return worst


def run_search(entries: Sequence[PathEntry], prefix: str) -> None:
    with _build_engine() as engine:
        engine.check(entries)
        matches = engine.search(prefix)
    sys.stdout.write("".join(f"{match.full_path}\n" for match in matches))


def run_discover(root: Path, max_depth: int, entries: Sequence[PathEntry] | None, separator: str) -> None:
    progress = EventProgress()
    discovery = DirectoryDiscovery(str(root), max_depth, progress)
    try:
        candidates = discovery.run()
    except KeyboardInterrupt:
        progress.cancel()
        candidates = discovery.results
    if entries is None:
        sys.stdout.write("".join(f"{candidate}\n" for candidate in candidates))
        return
    merged = merge_candidates(entries, candidates)
    sys.stdout.write(join_path_value(merged, separator) + "\n")


def main(argv: Sequence[str] | None = None) -> None:
    """Parse CLI arguments and dispatch to one subcommand.

    ``argv`` is primarily for tests; when omitted ``sys.argv`` is used.
    """
    parser = argparse.ArgumentParser(description="Inspect the executable search path for shadowed files.")
    parser.add_argument("--path", default=None, help="Search path value to inspect. Defaults to $PATH.")
    parser.add_argument("--separator", default=os.pathsep, help="Separator between path entries.")
    parser.add_argument("--no-color", action="store_true", help="Disable color output even on TTY.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log scan activity to stderr.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("check", help="Report missing and shadowing directories.")

    search_parser = subparsers.add_parser("search", help="List files a prefix resolves to.")
    search_parser.add_argument("prefix", help="Filename prefix.")

    discover_parser = subparsers.add_parser("discover", help="Find bin directories under ROOT.")
    discover_parser.add_argument("root", help="Directory to walk.")
    discover_parser.add_argument(
        "--max-depth",
        type=_positive_int,
        default=None,
        help=f"Levels to descend (default: config or {config.DEFAULT_DISCOVERY_MAX_DEPTH}).",
    )
    discover_parser.add_argument(
        "--merge",
        action="store_true",
        help="Print the search path with new candidates appended instead of the bare list.",
    )
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(name)s %(levelname)s %(message)s")

    if args.command == "discover":
        root = Path(args.root)
        if not root.is_dir():
            raise SystemExit(f"Directory not found: {root}")
        max_depth = args.max_depth if args.max_depth is not None else config.load_discovery_max_depth()
        entries = _load_entries(args.path, args.separator) if args.merge else None
        run_discover(root, max_depth, entries, args.separator)
        return

    entries = _load_entries(args.path, args.separator)
    if args.command == "search":
        run_search(entries, args.prefix)
        return

    use_color = not args.no_color and sys.stdout.isatty()
    if run_check(entries, use_color) >= ALERT_MISSING:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
