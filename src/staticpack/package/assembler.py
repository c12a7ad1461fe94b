"""Assemble a package directory in a staging area and publish it under its final name.

Nothing is ever visible under the final name until the package is complete: the tree is
built in <repository>/.<dirname>.staging, the previous package (if any) is moved aside,
the staging tree is renamed into place, and only then is the previous package deleted.
"""

from __future__ import annotations

import logging
import os
import plistlib
import shutil
from pathlib import Path

from staticpack.config import RESOURCE_POLICY_WARN
from staticpack.errors import ConfigurationError, MissingHeaderError
from staticpack.helpers import resolve_under, sha256_file
from staticpack.link.bootstrap import emit_bootstrap
from staticpack.link.trampoline import Trampoline
from staticpack.package.layout import (
    HEADERS_DIR,
    INFO_PLIST,
    RESOURCES_DIR,
    SOURCE_MODE_BINARY,
    SOURCES_DIR,
    PackageDescriptor,
    embeds_source,
    includes_binary,
)
from staticpack.package.resources import check_resource_names, find_resources, find_sources

log = logging.getLogger(__name__)


def collect_headers(project_root: Path, entries: list[str]) -> list[Path]:
    """Resolve declared header paths. Raises MissingHeaderError / ConfigurationError."""
    out: list[Path] = []
    by_name: dict[str, Path] = {}
    for entry in entries:
        p = resolve_under(project_root, entry)
        if not p.is_file():
            msg = f"Public header not found: {entry}"
            raise MissingHeaderError(msg)
        if p.name in by_name:
            msg = f"Public headers {by_name[p.name]} and {p} share the name {p.name}"
            raise ConfigurationError(msg)
        by_name[p.name] = p
        out.append(p)
    return out


def info_plist(descriptor: PackageDescriptor, min_os_version: str | None = None) -> bytes:
    """Framework Info.plist; sorted keys so identical inputs give identical bytes."""
    info: dict[str, object] = {
        "CFBundleDevelopmentRegion": "en",
        "CFBundleExecutable": descriptor.name,
        "CFBundleIdentifier": f"staticpack.{descriptor.name}",
        "CFBundleInfoDictionaryVersion": "6.0",
        "CFBundleName": descriptor.name,
        "CFBundlePackageType": "FMWK",
        "CFBundleShortVersionString": descriptor.version or "0",
        "StaticPackConfiguration": descriptor.configuration,
        "StaticPackArchitectures": sorted(descriptor.architectures),
    }
    if min_os_version:
        info["MinimumOSVersion"] = min_os_version
    return plistlib.dumps(info, sort_keys=True)


def _copy_tree_files(src_root: Path, rel_paths: list[Path], dest_root: Path) -> None:
    for rel in rel_paths:
        dst = dest_root / rel
        dst.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(src_root / rel, dst)


def _write_binary_holder(
    staging: Path, descriptor: PackageDescriptor, binary: Path, min_os_version: str | None
) -> None:
    holder = staging / descriptor.framework_dir
    holder.mkdir(parents=True)
    dst = holder / descriptor.name
    shutil.copy2(binary, dst)
    (holder / f"{descriptor.name}.sha256").write_text(sha256_file(dst) + "\n")
    (holder / INFO_PLIST).write_bytes(info_plist(descriptor, min_os_version))


def publish(staging: Path, final: Path) -> Path:
    """Swap staging into place as final, replacing any previous package."""
    previous = final.with_name(f".{final.name}.previous")
    if previous.exists():
        shutil.rmtree(previous)
    if final.exists() or final.is_symlink():
        os.replace(final, previous)
    os.replace(staging, final)
    if previous.exists():
        shutil.rmtree(previous)
    return final


def assemble(
    descriptor: PackageDescriptor,
    repository: Path,
    *,
    headers: list[Path],
    resources_root: Path,
    source_root: Path,
    exclude: list[Path] | None = None,
    source_mode: str = SOURCE_MODE_BINARY,
    binary: Path | None = None,
    trampolines: list[Trampoline] | None = None,
    resource_policy: str = RESOURCE_POLICY_WARN,
    min_os_version: str | None = None,
) -> Path:
    """Build the package tree and publish it. Returns the final package directory."""
    if includes_binary(source_mode) and (binary is None or not binary.is_file()):
        msg = f"Universal binary missing for {descriptor.identity}: {binary}"
        raise ConfigurationError(msg)
    exclude = list(exclude or [])
    resources = find_resources(resources_root, exclude)
    violations = check_resource_names(descriptor.name, resources, resource_policy)

    final = repository / descriptor.directory_name
    staging = repository / f".{descriptor.directory_name}.staging"
    if staging.exists():
        shutil.rmtree(staging)
    staging.mkdir(parents=True)
    try:
        if includes_binary(source_mode):
            _write_binary_holder(staging, descriptor, binary, min_os_version)

        headers_dir = staging / HEADERS_DIR
        headers_dir.mkdir()
        for h in headers:
            shutil.copy2(h, headers_dir / h.name)

        (staging / RESOURCES_DIR).mkdir()
        _copy_tree_files(resources_root, resources, staging / RESOURCES_DIR)

        if embeds_source(source_mode):
            _copy_tree_files(source_root, find_sources(source_root, exclude), staging / SOURCES_DIR)
        emit_bootstrap(
            descriptor.name, trampolines or [], staging, embed_source=embeds_source(source_mode)
        )
        publish(staging, final)
    except BaseException:
        shutil.rmtree(staging, ignore_errors=True)
        raise

    print(
        f"📦 {descriptor.directory_name}: {len(headers)} header(s), {len(resources)} resource(s)"
        + (f", {len(violations)} naming warning(s)" if violations else "")
    )
    return final
