"""Repository inspection and crash recovery entry points (`staticpack list`, `staticpack recover`)."""

from __future__ import annotations

import sys
from pathlib import Path

from staticpack import config as cfg
from staticpack.errors import StaticPackError
from staticpack.link.mutator import recover_leftovers


def list_packages(repository: Path) -> list[str]:
    """Package directory names in repository, sorted; staging and hidden entries skipped."""
    if not repository.is_dir():
        return []
    return sorted(p.name for p in repository.iterdir() if p.is_dir() and not p.name.startswith("."))


def run_list(repository: Path | None = None, project_root: Path | None = None) -> int:
    """Print every package in the repository. Returns 0 or 1."""
    try:
        config = cfg.load_project_config(project_root or Path.cwd())
    except StaticPackError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    repo = cfg.repository_root(config, repository)
    names = list_packages(repo)
    if not names:
        print(f"No packages in {repo}")
        return 0
    for name in names:
        print(name)
    return 0


def run_recover(project_root: Path) -> int:
    """Restore forced-linkage units left mutated by an interrupted build. Returns 0 or 1."""
    try:
        restored = recover_leftovers(cfg.state_dir(project_root.resolve()))
    except StaticPackError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    if restored:
        for unit in restored:
            print(f"✅ Restored {unit}")
    else:
        print("Nothing to recover.")
    return 0
