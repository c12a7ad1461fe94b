"""`staticpack list` and `staticpack recover`."""

import argparse
import sys
from pathlib import Path

from staticpack.repository import run_list, run_recover


def _absolute(s: str) -> Path:
    return Path(s).expanduser().resolve()


def _parse(prog: str, argv: list[str], *, with_repository: bool) -> argparse.Namespace:
    ap = argparse.ArgumentParser(prog=prog)
    if with_repository:
        ap.add_argument("--repository", type=_absolute, default=None, help="Repository root override")
    ap.add_argument(
        "--project-root",
        type=_absolute,
        default=Path.cwd(),
        help="Project root (default: cwd)",
    )
    args, rest = ap.parse_known_args(argv)
    if rest:
        print(f"{prog}: unexpected arguments: {' '.join(rest)}", file=sys.stderr)
        sys.exit(1)
    return args


def run_list_argv(argv: list[str] | None = None) -> None:
    """staticpack list [--repository PATH] [--project-root PATH]"""
    if argv is None:
        argv = sys.argv[2:] if len(sys.argv) > 2 else []
    args = _parse("staticpack list", argv, with_repository=True)
    sys.exit(run_list(args.repository, args.project_root))


def run_recover_argv(argv: list[str] | None = None) -> None:
    """staticpack recover [--project-root PATH]"""
    if argv is None:
        argv = sys.argv[2:] if len(sys.argv) > 2 else []
    args = _parse("staticpack recover", argv, with_repository=False)
    sys.exit(run_recover(args.project_root))
