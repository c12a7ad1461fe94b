"""Consumer-side dependency declarations and repository references."""

from staticpack.sync.dependencies import (
    DependencyDeclaration,
    load_dependencies,
    parse_dependencies,
)
from staticpack.sync.references import SyncReport, synchronize
from staticpack.sync.references import run as run_sync

__all__ = [
    "DependencyDeclaration",
    "SyncReport",
    "load_dependencies",
    "parse_dependencies",
    "run_sync",
    "synchronize",
]
