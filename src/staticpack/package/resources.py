"""Resource and source discovery by file-type convention, and the resource prefix policy.

There is no resource manifest: everything under the resource tree that is not a source,
header or project-metadata file is a resource. Resources from every package end up in
one consumer namespace, so each should be named <package>_<...>.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from pathlib import Path

from staticpack.config import RESOURCE_POLICY_REJECT
from staticpack.errors import ResourceNamingError

log = logging.getLogger(__name__)

RESOURCE_NAME_SEPARATOR = "_"

SOURCE_EXTENSIONS = frozenset({".c", ".cc", ".cpp", ".cxx", ".m", ".mm", ".s", ".swift"})
HEADER_EXTENSIONS = frozenset({".h", ".hh", ".hpp", ".hxx", ".inl", ".pch"})
# Directories and files that describe the project rather than ship with it
METADATA_DIR_SUFFIXES = frozenset({".xcodeproj", ".xcworkspace", ".framework", ".xcframework"})
METADATA_FILE_SUFFIXES = frozenset({".xcconfig", ".pbxproj", ".xcscheme", ".modulemap"})
METADATA_FILE_NAMES = frozenset({"staticpack.yaml", "Makefile", "CMakeLists.txt"})


def is_source(p: Path) -> bool:
    return p.suffix.lower() in SOURCE_EXTENSIONS


def is_header(p: Path) -> bool:
    return p.suffix.lower() in HEADER_EXTENSIONS


def is_metadata(p: Path) -> bool:
    return (
        p.name.startswith(".")
        or p.name in METADATA_FILE_NAMES
        or p.suffix.lower() in METADATA_FILE_SUFFIXES
    )


def walk_files(root: Path, exclude: Iterable[Path] = ()) -> list[Path]:
    """Files under root as sorted relative paths, skipping hidden/metadata dirs and exclude."""
    if not root.is_dir():
        return []
    excluded = {p.resolve() for p in exclude}
    out: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(root):
        here = Path(dirpath)
        dirnames[:] = sorted(
            d
            for d in dirnames
            if not d.startswith(".")
            and Path(d).suffix.lower() not in METADATA_DIR_SUFFIXES
            and (here / d).resolve() not in excluded
        )
        for f in sorted(filenames):
            p = here / f
            if p.resolve() in excluded or (p.is_symlink() and not p.exists()):
                continue
            out.append(p.relative_to(root))
    return sorted(out)


def find_resources(root: Path, exclude: Iterable[Path] = ()) -> list[Path]:
    """Relative paths of resource files under root."""
    return [
        p
        for p in walk_files(root, exclude)
        if not (is_source(p) or is_header(p) or is_metadata(p))
    ]


def find_sources(root: Path, exclude: Iterable[Path] = ()) -> list[Path]:
    """Relative paths of source units and headers under root (what embedding needs to compile)."""
    return [p for p in walk_files(root, exclude) if is_source(p) or is_header(p)]


def resource_prefix(package_name: str) -> str:
    return package_name + RESOURCE_NAME_SEPARATOR


def check_resource_names(package_name: str, resources: list[Path], policy: str) -> list[Path]:
    """Return resources whose file name lacks the package prefix.

    Under the warn policy each violation is logged and packaging continues; under the
    reject policy all violations are logged, then ResourceNamingError is raised.
    """
    prefix = resource_prefix(package_name)
    violations = [p for p in resources if not p.name.startswith(prefix)]
    for p in violations:
        log.warning(
            "Resource %s is not prefixed with %r; it may collide with other packages' resources",
            p.as_posix(),
            prefix,
        )
    if violations and policy == RESOURCE_POLICY_REJECT:
        raise ResourceNamingError([p.as_posix() for p in violations])
    return violations
