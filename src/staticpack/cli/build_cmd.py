"""`staticpack build`: build every architecture, fuse, and publish the package."""

import sys
from pathlib import Path

from staticpack.build.pipeline import run as run_pipeline
from staticpack.package.layout import (
    SOURCE_MODE_BINARY,
    SOURCE_MODE_BOTH,
    SOURCE_MODE_SOURCE,
)


def run_build_argv(argv: list[str] | None = None) -> None:
    """Parse argv and run the assembly pipeline (--configuration, --version, --embed-source, ...)."""
    import argparse

    if argv is None:
        argv = sys.argv[2:] if len(sys.argv) > 2 else []  # skip 'staticpack build'
    ap = argparse.ArgumentParser(
        prog="staticpack build", description="Build, fuse and package a static library"
    )
    ap.add_argument(
        "--configuration",
        "-c",
        default=None,
        help="Build configuration (default: from staticpack.yaml, else Release)",
    )
    ap.add_argument("--version", default=None, help="Version tag appended to the package name")
    mode = ap.add_mutually_exclusive_group()
    mode.add_argument(
        "--embed-source",
        action="store_const",
        const=SOURCE_MODE_BOTH,
        dest="source_mode",
        help="Ship the sources next to the binary",
    )
    mode.add_argument(
        "--source-only",
        action="store_const",
        const=SOURCE_MODE_SOURCE,
        dest="source_mode",
        help="Ship the sources instead of a binary (no build)",
    )
    ap.add_argument("--min-os-version", default=None, help="Platform version floor")
    ap.add_argument("--repository", type=Path, default=None, help="Repository root override")
    ap.add_argument(
        "--strict-resources",
        action="store_true",
        help="Fail instead of warning when resources lack the package-name prefix",
    )
    ap.add_argument(
        "--project-root",
        type=Path,
        default=Path.cwd(),
        help="Project root (default: cwd)",
    )
    ap.set_defaults(source_mode=SOURCE_MODE_BINARY)
    args = ap.parse_args(argv)
    rc = run_pipeline(
        args.project_root,
        configuration=args.configuration,
        version=args.version,
        source_mode=args.source_mode,
        min_os_version=args.min_os_version,
        repository=args.repository,
        strict_resources=args.strict_resources,
    )
    sys.exit(rc)
