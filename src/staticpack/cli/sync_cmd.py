"""`staticpack sync`: link declared dependencies from the repository into the workspace."""

import sys
from pathlib import Path

from staticpack.sync.references import run as run_sync


def run_sync_argv(argv: list[str] | None = None) -> None:
    """Parse argv and synchronize references (--repository, --configuration, --strict, --workspace)."""
    import argparse

    if argv is None:
        argv = sys.argv[2:] if len(sys.argv) > 2 else []
    ap = argparse.ArgumentParser(
        prog="staticpack sync", description="Link declared packages into the workspace"
    )
    ap.add_argument("--repository", type=Path, default=None, help="Repository root override")
    ap.add_argument("--configuration", "-c", default=None, help="Configuration to link")
    ap.add_argument(
        "--strict",
        action="store_true",
        help="Exit 1 when a declared dependency cannot be resolved",
    )
    ap.add_argument(
        "--workspace",
        type=Path,
        default=Path.cwd(),
        help="Consumer workspace (default: cwd)",
    )
    args = ap.parse_args(argv)
    rc = run_sync(
        args.workspace,
        repository=args.repository,
        configuration=args.configuration,
        strict=args.strict,
    )
    sys.exit(rc)
