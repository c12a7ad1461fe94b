"""Per-architecture builds, universal binary fusion and the assembly pipeline."""

from .pipeline import build_package
from .pipeline import run as run_build
from .universal import combine, per_arch_binaries
from .xcodebuild import arch_build_dir, build_architecture

__all__ = [
    "arch_build_dir",
    "build_architecture",
    "build_package",
    "combine",
    "per_arch_binaries",
    "run_build",
]
