"""Shared helpers for staticpack (text, list files, checksums, path, naming).

Used by link, build, package, sync and cli modules.
"""

from __future__ import annotations

import hashlib
import os
import re
from pathlib import Path

# --- Text ---

_IDENT_ILLEGAL = re.compile(r"[^a-z0-9_]")
_SAFE_NAME = re.compile(r"^[A-Za-z0-9_.+-]+$")


def to_c_identifier(s: str) -> str:
    """Lower-case s and replace every character illegal in a C identifier with '_'.

    Total: any string maps to a non-empty identifier that never starts with a digit.
    """
    out = _IDENT_ILLEGAL.sub("_", s.lower())
    if not out or out[0].isdigit():
        out = "_" + out
    return out


def is_safe_name(s: str) -> bool:
    """Package names and versions: letters, digits, '_', '.', '+', '-' (no path separators)."""
    return bool(_SAFE_NAME.match(s)) and s not in (".", "..")


# --- List files ---


def parse_list_text(text: str) -> list[str]:
    """One entry per line; strip whitespace, skip blank lines and '#' comments."""
    out: list[str] = []
    for line in text.replace("\r\n", "\n").split("\n"):
        line = line.split("#", 1)[0].strip()
        if line:
            out.append(line)
    return out


def read_list_file(path: Path) -> list[str]:
    """Read a plain-text list file (see parse_list_text). Raises FileNotFoundError if absent."""
    return parse_list_text(path.read_text())


# --- Checksums ---


def sha256_bytes(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def sha256_file(path: Path) -> str:
    """Hex sha256 of a file's content."""
    h = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            h.update(chunk)
    return h.hexdigest()


# --- Path ---


def resolve_under(root: Path, rel: str) -> Path:
    """Resolve rel against root unless it is already absolute."""
    p = Path(rel).expanduser()
    return p if p.is_absolute() else root / p


def relative_or_self(p: Path, root: Path) -> Path:
    """p relative to root for display; p itself when it is not under root."""
    try:
        return p.relative_to(root)
    except ValueError:
        return p


def is_writable_dir(path: Path) -> bool:
    """True when path is (or can be created as) a directory we can write into."""
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError:
        return False
    return path.is_dir() and os.access(path, os.W_OK | os.X_OK)


# --- Naming ---


def package_identity(name: str, version: str | None = None) -> str:
    """Package identity: name, with '-version' appended when a version tag is given."""
    return f"{name}-{version}" if version else name


def package_dir_name(name: str, version: str | None, configuration: str) -> str:
    """On-disk package directory: <name>[-<version>]-<configuration>."""
    return f"{package_identity(name, version)}-{configuration}"
