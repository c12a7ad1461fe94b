"""Materialize declared dependencies as symlinks into the package repository.

<workspace>/<reference_dir>/<name> -> <repository>/<name>[-<version>]-<configuration>

The reference directory is owned by this tool: after every run it holds exactly one
symlink per resolved declaration. Regular files and directories in it are never touched.
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from staticpack import config as cfg
from staticpack.errors import StaticPackError, WorkspaceError
from staticpack.helpers import is_writable_dir
from staticpack.sync.dependencies import DependencyDeclaration, load_dependencies

log = logging.getLogger(__name__)


@dataclass
class SyncReport:
    created: list[str] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)
    replaced: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)
    conflicts: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.missing and not self.conflicts


def link_points_to(link: Path, target: Path) -> bool:
    """True when link is a symlink whose destination is target."""
    if not link.is_symlink():
        return False
    dest = Path(os.readlink(link))
    if not dest.is_absolute():
        dest = link.parent / dest
    return os.path.normpath(dest) == os.path.normpath(target)


def _relink(link: Path, target: Path) -> None:
    try:
        if link.is_symlink():
            link.unlink()
        link.symlink_to(target, target_is_directory=True)
    except OSError as e:
        msg = f"Cannot link {link} -> {target}: {e}"
        raise WorkspaceError(msg) from e


def synchronize(
    workspace: Path,
    declarations: list[DependencyDeclaration],
    repository: Path,
    configuration: str,
    reference_dir: str = "StaticPackages",
) -> SyncReport:
    """Create/replace a reference per resolvable declaration, then prune stale references."""
    ref_dir = workspace / reference_dir
    if not is_writable_dir(ref_dir):
        msg = f"Reference directory is not writable or cannot be created: {ref_dir}"
        raise WorkspaceError(msg)

    report = SyncReport()
    keep: set[str] = set()
    for dep in declarations:
        target = repository / dep.directory_name(configuration)
        link = ref_dir / dep.name
        label = dep.directory_name(configuration)
        if not target.is_dir():
            log.warning("%s: no package %s in %s", dep.name, label, repository)
            report.missing.append(label)
            continue
        if link.is_symlink():
            if link_points_to(link, target):
                report.unchanged.append(label)
                keep.add(dep.name)
                continue
            _relink(link, target)
            report.replaced.append(label)
        elif link.exists():
            log.warning("%s exists and is not a symlink; leaving it alone", link)
            report.conflicts.append(label)
            continue
        else:
            _relink(link, target)
            report.created.append(label)
        keep.add(dep.name)
        log.debug("%s -> %s", link, target)

    for entry in sorted(ref_dir.iterdir()):
        if entry.is_symlink() and entry.name not in keep:
            try:
                entry.unlink()
            except OSError as e:
                msg = f"Cannot remove stale reference {entry}: {e}"
                raise WorkspaceError(msg) from e
            report.removed.append(entry.name)
            log.debug("Removed stale reference %s", entry)
    return report


def run(
    workspace: Path,
    *,
    repository: Path | None = None,
    configuration: str | None = None,
    strict: bool = False,
    config: dict[str, Any] | None = None,
) -> int:
    """Sync references for the consumer at workspace. Returns 0, or 1 on fatal errors
    (and, with strict, on unresolved declarations)."""
    workspace = workspace.resolve()
    try:
        config = config if config is not None else cfg.load_project_config(workspace)
        repo = cfg.repository_root(config, repository)
        declarations = load_dependencies(cfg.project_path(workspace, config, "dependency_list"))
        report = synchronize(
            workspace,
            declarations,
            repo,
            configuration or config["configuration"],
            config["reference_dir"],
        )
    except StaticPackError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    for label in report.created:
        print(f"✅ Linked {label}")
    for label in report.replaced:
        print(f"🔁 Relinked {label}")
    for name in report.removed:
        print(f"🧹 Removed stale reference {name}")
    for label in report.missing:
        print(f"❌ Not found in {repo}: {label}", file=sys.stderr)
    print(
        f"{len(report.created) + len(report.replaced) + len(report.unchanged)} reference(s) in place, "
        f"{len(report.removed)} removed, {len(report.missing)} unresolved"
    )
    if strict and not report.ok:
        return 1
    return 0
