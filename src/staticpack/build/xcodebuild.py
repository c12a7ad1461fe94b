"""Build one static library target once per architecture with xcodebuild.

Each architecture is built into its own directory so the combiner finds
<build_dir>/<configuration>-<sdk>/<arch>/lib<name>.a. Builds run sequentially and block.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path

from staticpack.errors import BuildError, ConfigurationError

log = logging.getLogger(__name__)

# sdk prefix -> build setting carrying the platform version floor
DEPLOYMENT_TARGET_SETTINGS: dict[str, str] = {
    "iphoneos": "IPHONEOS_DEPLOYMENT_TARGET",
    "iphonesimulator": "IPHONEOS_DEPLOYMENT_TARGET",
    "macosx": "MACOSX_DEPLOYMENT_TARGET",
    "appletvos": "TVOS_DEPLOYMENT_TARGET",
    "appletvsimulator": "TVOS_DEPLOYMENT_TARGET",
    "watchos": "WATCHOS_DEPLOYMENT_TARGET",
    "watchsimulator": "WATCHOS_DEPLOYMENT_TARGET",
}


def find_project(project_root: Path) -> Path:
    """The single *.xcodeproj under project_root. Raises ConfigurationError if none or several."""
    found = sorted(project_root.glob("*.xcodeproj"))
    if not found:
        msg = f"No .xcodeproj found in {project_root}"
        raise ConfigurationError(msg)
    if len(found) > 1:
        msg = f"Several .xcodeproj in {project_root}: {', '.join(p.name for p in found)}"
        raise ConfigurationError(msg)
    return found[0]


def arch_build_dir(build_dir: Path, configuration: str, sdk: str, arch: str) -> Path:
    """Output directory for one architecture's build products."""
    return build_dir / f"{configuration}-{sdk}" / arch


def _deployment_setting(sdk: str) -> str | None:
    for prefix, setting in DEPLOYMENT_TARGET_SETTINGS.items():
        if sdk.startswith(prefix):
            return setting
    return None


def build_command(
    project: Path,
    target: str,
    configuration: str,
    arch: str,
    sdk: str,
    out_dir: Path,
    min_os_version: str | None = None,
) -> list[str]:
    """xcodebuild argv for one architecture."""
    cmd = [
        "xcodebuild",
        "-project",
        str(project),
        "-target",
        target,
        "-configuration",
        configuration,
        "-sdk",
        sdk,
        "-arch",
        arch,
        "ONLY_ACTIVE_ARCH=NO",
        f"CONFIGURATION_BUILD_DIR={out_dir}",
    ]
    if min_os_version:
        setting = _deployment_setting(sdk)
        if setting is None:
            log.warning(
                "No deployment target setting known for sdk %s; ignoring %s", sdk, min_os_version
            )
        else:
            cmd.append(f"{setting}={min_os_version}")
    cmd.append("build")
    return cmd


def build_architecture(
    project_root: Path,
    target: str,
    configuration: str,
    arch: str,
    sdk: str,
    build_dir: Path,
    min_os_version: str | None = None,
) -> Path:
    """Run xcodebuild for one architecture. Returns the output directory. Raises BuildError."""
    project = find_project(project_root)
    out_dir = arch_build_dir(build_dir, configuration, sdk, arch)
    # A library left by an earlier run must never stand in for this build's output.
    if out_dir.exists():
        shutil.rmtree(out_dir)
    cmd = build_command(project, target, configuration, arch, sdk, out_dir, min_os_version)
    print(f"🔨 Building {target} ({configuration}, {arch})...")
    log.debug("Running %s", " ".join(cmd))
    try:
        r = subprocess.run(cmd, cwd=str(project_root))
    except FileNotFoundError as e:
        msg = "xcodebuild not found in PATH"
        raise BuildError(msg) from e
    if r.returncode != 0:
        msg = f"xcodebuild failed for {arch} (exit {r.returncode})"
        raise BuildError(msg)
    return out_dir


def build_all_architectures(
    project_root: Path,
    target: str,
    configuration: str,
    architectures: list[str],
    sdk: str,
    build_dir: Path,
    min_os_version: str | None = None,
) -> dict[str, Path]:
    """Build each architecture in order. Returns {arch: output dir}."""
    return {
        arch: build_architecture(
            project_root, target, configuration, arch, sdk, build_dir, min_os_version
        )
        for arch in architectures
    }
