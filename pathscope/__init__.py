"""Public package surface for pathscope.

Exports the search-path model, the background conflict engine, prefix search
and ``bin`` directory discovery. ``main`` runs the command-line front door.
"""

from __future__ import annotations

from .conflicts import ConflictEngine, ConflictScanResult, EngineDisposedError, MISSING_DIRECTORY_ISSUE
from .discovery import DirectoryDiscovery, DiscoveryState, EventProgress, ProgressSink
from .entry import PathEntry, PathMatch
from .environment import EnvironmentSnapshot, default_environment_snapshot
from .issues import ALERT_ISSUES, ALERT_MISSING, ALERT_OK, IssueSet
from .listing_cache import DirectoryListingCache
from .pathlist import PathDiff, diff_paths, join_path_value, merge_candidates, split_path_value
from .search import PrefixSearchIndex


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)


__all__ = [
    "ALERT_ISSUES",
    "ALERT_MISSING",
    "ALERT_OK",
    "ConflictEngine",
    "ConflictScanResult",
    "DirectoryDiscovery",
    "DirectoryListingCache",
    "DiscoveryState",
    "EngineDisposedError",
    "EnvironmentSnapshot",
    "EventProgress",
    "IssueSet",
    "MISSING_DIRECTORY_ISSUE",
    "PathDiff",
    "PathEntry",
    "PathMatch",
    "PrefixSearchIndex",
    "ProgressSink",
    "default_environment_snapshot",
    "diff_paths",
    "join_path_value",
    "main",
    "merge_candidates",
    "split_path_value",
]
