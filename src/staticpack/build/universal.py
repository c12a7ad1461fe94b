"""Fuse per-architecture static libraries into one universal binary with lipo."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from pathlib import Path

from staticpack.build.xcodebuild import arch_build_dir
from staticpack.errors import BuildError, ConfigurationError, MissingBinaryError

log = logging.getLogger(__name__)

LIPO_ENV = "STATICPACK_LIPO"


def library_file_name(name: str) -> str:
    return f"lib{name}.a"


def per_arch_binaries(
    build_dir: Path,
    name: str,
    configuration: str,
    sdk: str,
    architectures: list[str],
) -> dict[str, Path]:
    """Expected binary per architecture. Raises MissingBinaryError for the first one absent."""
    if not architectures:
        msg = "At least one architecture is required"
        raise ConfigurationError(msg)
    if len(set(architectures)) != len(architectures):
        msg = f"Duplicate architectures: {architectures}"
        raise ConfigurationError(msg)
    out: dict[str, Path] = {}
    for arch in sorted(architectures):
        p = arch_build_dir(build_dir, configuration, sdk, arch) / library_file_name(name)
        if not p.is_file():
            raise MissingBinaryError(arch, p)
        out[arch] = p
    return out


def lipo_command(inputs: dict[str, Path], output: Path) -> list[str]:
    """lipo -create argv; inputs sorted by architecture so the call does not depend on order."""
    lipo = os.environ.get(LIPO_ENV) or "lipo"
    return [lipo, "-create", *(str(inputs[a]) for a in sorted(inputs)), "-output", str(output)]


def combine(inputs: dict[str, Path], output: Path) -> Path:
    """Write the universal binary to output. A single architecture is copied unchanged."""
    output.parent.mkdir(parents=True, exist_ok=True)
    if len(inputs) == 1:
        (src,) = inputs.values()
        shutil.copyfile(src, output)
        return output
    cmd = lipo_command(inputs, output)
    log.debug("Running %s", " ".join(cmd))
    try:
        r = subprocess.run(cmd, capture_output=True, text=True)
    except FileNotFoundError as e:
        msg = f"{cmd[0]} not found in PATH (set {LIPO_ENV} to override)"
        raise BuildError(msg) from e
    if r.returncode != 0:
        msg = f"lipo failed: {(r.stderr or r.stdout).strip()}"
        raise BuildError(msg)
    print(f"✅ Universal binary ({', '.join(sorted(inputs))}): {output.name}")
    return output


def run(
    build_dir: Path,
    name: str,
    configuration: str,
    sdk: str,
    architectures: list[str],
    output: Path,
) -> Path:
    """Locate every per-architecture binary and fuse them into output."""
    return combine(per_arch_binaries(build_dir, name, configuration, sdk, architectures), output)
