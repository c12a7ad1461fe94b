"""`staticpack build`: mutate -> build per architecture -> restore -> combine -> assemble.

Every fatal condition raises a StaticPackError; run() reports it and returns 1. The
forced-linkage units are restored whichever step fails, because the per-architecture
builds run inside ForceLinkTransaction.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any

from staticpack import config as cfg
from staticpack.build import universal, xcodebuild
from staticpack.errors import ConfigurationError, StaticPackError, WorkspaceError
from staticpack.helpers import is_writable_dir, read_list_file, resolve_under
from staticpack.link.mutator import ForceLinkTransaction, recover_leftovers
from staticpack.link.trampoline import Trampoline, plan_trampolines
from staticpack.package.assembler import assemble, collect_headers
from staticpack.package.layout import (
    SOURCE_MODE_BINARY,
    SOURCE_MODES,
    PackageDescriptor,
    includes_binary,
)
from staticpack.package.resources import check_resource_names, find_resources

log = logging.getLogger(__name__)


def _read_list(project_root: Path, config: dict[str, Any], key: str, *, required: bool) -> list[str]:
    path = cfg.project_path(project_root, config, key)
    if not path.is_file():
        if required:
            msg = f"{key.replace('_', ' ')} not found: {path}"
            raise ConfigurationError(msg)
        log.debug("No %s at %s", key, path)
        return []
    return read_list_file(path)


def force_link_units(project_root: Path, config: dict[str, Any]) -> list[Path]:
    """Forced-linkage units from the configured list (empty when the list file is absent)."""
    return [
        resolve_under(project_root, e)
        for e in _read_list(project_root, config, "force_link_list", required=False)
    ]


def _excluded_paths(project_root: Path, config: dict[str, Any], repository: Path) -> list[Path]:
    return [
        cfg.project_path(project_root, config, "build_dir"),
        cfg.state_dir(project_root),
        cfg.project_path(project_root, config, "header_list"),
        cfg.project_path(project_root, config, "force_link_list"),
        cfg.project_path(project_root, config, "dependency_list"),
        cfg.project_path(project_root, config, "reference_dir"),
        repository,
    ]


def build_package(
    project_root: Path,
    *,
    configuration: str | None = None,
    version: str | None = None,
    source_mode: str = SOURCE_MODE_BINARY,
    min_os_version: str | None = None,
    repository: Path | None = None,
    strict_resources: bool = False,
    config: dict[str, Any] | None = None,
) -> Path:
    """Run the whole assembly pipeline. Returns the published package directory."""
    project_root = project_root.resolve()
    config = config if config is not None else cfg.load_project_config(project_root)
    if source_mode not in SOURCE_MODES:
        msg = f"Unknown source mode {source_mode!r} (use {', '.join(SOURCE_MODES)})"
        raise ConfigurationError(msg)
    descriptor = PackageDescriptor(
        name=config["name"],
        version=version or None,
        configuration=configuration or config["configuration"],
        architectures=tuple(config["architectures"]) if includes_binary(source_mode) else (),
    )
    min_os_version = min_os_version or config["min_os_version"] or None
    resource_policy = cfg.RESOURCE_POLICY_REJECT if strict_resources else config["resource_policy"]

    repo = cfg.repository_root(config, repository)
    if not is_writable_dir(repo):
        msg = f"Repository root is not writable or cannot be created: {repo}"
        raise WorkspaceError(msg)

    state = cfg.state_dir(project_root)
    recover_leftovers(state)

    headers = collect_headers(
        project_root, _read_list(project_root, config, "header_list", required=True)
    )
    resources_root = cfg.project_path(project_root, config, "resources_dir")
    excluded = _excluded_paths(project_root, config, repo)
    if resource_policy == cfg.RESOURCE_POLICY_REJECT:
        check_resource_names(
            descriptor.name, find_resources(resources_root, excluded), resource_policy
        )

    binary: Path | None = None
    trampolines: list[Trampoline] = []
    if includes_binary(source_mode):
        build_dir = cfg.project_path(project_root, config, "build_dir")
        build_args = (
            project_root,
            config["target"],
            descriptor.configuration,
            list(descriptor.architectures),
            config["sdk"],
            build_dir,
            min_os_version,
        )
        if source_mode == SOURCE_MODE_BINARY:
            units = force_link_units(project_root, config)
            trampolines = plan_trampolines(descriptor.name, units)
            with ForceLinkTransaction(units, descriptor.name, state):
                xcodebuild.build_all_architectures(*build_args)
        else:
            xcodebuild.build_all_architectures(*build_args)
        universal_dir = build_dir / f"{descriptor.configuration}-{config['sdk']}" / "universal"
        binary = universal.run(
            build_dir,
            descriptor.name,
            descriptor.configuration,
            config["sdk"],
            list(descriptor.architectures),
            universal_dir / universal.library_file_name(descriptor.name),
        )

    source_root = cfg.project_path(project_root, config, "source_dir")
    return assemble(
        descriptor,
        repo,
        headers=headers,
        resources_root=resources_root,
        source_root=source_root,
        exclude=excluded,
        source_mode=source_mode,
        binary=binary,
        trampolines=trampolines,
        resource_policy=resource_policy,
        min_os_version=min_os_version,
    )


def run(
    project_root: Path,
    *,
    configuration: str | None = None,
    version: str | None = None,
    source_mode: str = SOURCE_MODE_BINARY,
    min_os_version: str | None = None,
    repository: Path | None = None,
    strict_resources: bool = False,
) -> int:
    """Build and publish the package for project_root. Returns 0 or 1."""
    try:
        final = build_package(
            project_root,
            configuration=configuration,
            version=version,
            source_mode=source_mode,
            min_os_version=min_os_version,
            repository=repository,
            strict_resources=strict_resources,
        )
    except StaticPackError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    print(f"🎉 Package written: {final}")
    return 0
