"""Main CLI entry point for staticpack."""

import logging
import os
import sys

from staticpack.cli import build_cmd, repo_cmd, sync_cmd

LOG_LEVEL_ENV = "STATICPACK_LOG_LEVEL"


def _configure_logging(verbose: bool) -> None:
    level = "DEBUG" if verbose else os.environ.get(LOG_LEVEL_ENV, "INFO").upper()
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _usage() -> None:
    print("Usage: staticpack [--verbose] <command> [args...]", file=sys.stderr)
    print("Commands:", file=sys.stderr)
    print(
        "  build    - Build every architecture, fuse a universal binary, publish the package",
        file=sys.stderr,
    )
    print(
        "  sync     - Link declared dependencies from the repository into this workspace",
        file=sys.stderr,
    )
    print(
        "  recover  - Restore sources left mutated by an interrupted build",
        file=sys.stderr,
    )
    print("  list     - List packages in the repository", file=sys.stderr)


def main() -> None:
    """Main CLI entry point."""
    args = sys.argv[1:]
    verbose = bool(args) and args[0] == "--verbose"
    if verbose:
        args = args[1:]
    if not args:
        _usage()
        sys.exit(1)
    _configure_logging(verbose)

    command, rest = args[0], args[1:]
    if command == "build":
        build_cmd.run_build_argv(rest)
    elif command == "sync":
        sync_cmd.run_sync_argv(rest)
    elif command == "recover":
        repo_cmd.run_recover_argv(rest)
    elif command == "list":
        repo_cmd.run_list_argv(rest)
    elif command in ("-h", "--help", "help"):
        _usage()
        sys.exit(0)
    else:
        print(f"Error: Unknown command: {command}", file=sys.stderr)
        _usage()
        sys.exit(1)


if __name__ == "__main__":
    main()
