"""Project configuration (staticpack.yaml) with defaults and environment overrides.

staticpack.yaml is optional and lives at the project root:
- name: package name (default: project directory name)
- target: build target passed to xcodebuild (default: name)
- architectures: list of architectures (default: arm64, x86_64)
- sdk, configuration, min_os_version: build settings
- build_dir, source_dir, resources_dir: paths relative to project root
- header_list, force_link_list, dependency_list: plain-text list files
- reference_dir: consumer-side directory holding package references
- repository: package repository root
- resource_policy: warn (default) or reject
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml

from staticpack.errors import ConfigurationError
from staticpack.helpers import is_safe_name, resolve_under

CONFIG_FILE_NAME = "staticpack.yaml"
REPOSITORY_ENV = "STATICPACK_REPOSITORY"
DEFAULT_REPOSITORY = "~/.staticpack/repository"
STATE_DIR_NAME = ".staticpack"

RESOURCE_POLICY_WARN = "warn"
RESOURCE_POLICY_REJECT = "reject"
RESOURCE_POLICIES = (RESOURCE_POLICY_WARN, RESOURCE_POLICY_REJECT)

DEFAULT_PROJECT_CONFIG: dict[str, Any] = {
    "name": "",
    "target": "",
    "architectures": ["arm64", "x86_64"],
    "sdk": "iphoneos",
    "configuration": "Release",
    "min_os_version": "",
    "build_dir": "build",
    "source_dir": ".",
    "resources_dir": "",
    "header_list": "public_headers.txt",
    "force_link_list": "force_link.txt",
    "dependency_list": "dependencies.txt",
    "reference_dir": "StaticPackages",
    "repository": "",
    "resource_policy": RESOURCE_POLICY_WARN,
}


def resolve_project_config(data: dict[str, Any] | None, project_root: Path) -> dict[str, Any]:
    """Return config dict with defaults filled; unknown keys are ignored."""
    out = dict(DEFAULT_PROJECT_CONFIG)
    for k, v in (data or {}).items():
        if k not in out or v is None:
            continue
        if k == "architectures":
            if isinstance(v, str):
                v = v.split()
            if not isinstance(v, list) or not all(isinstance(a, str) for a in v):
                msg = f"architectures must be a list of strings, got {v!r}"
                raise ConfigurationError(msg)
            out[k] = list(v)
        else:
            out[k] = str(v)
    if not out["name"]:
        out["name"] = project_root.resolve().name
    if not out["target"]:
        out["target"] = out["name"]
    if not out["resources_dir"]:
        out["resources_dir"] = out["source_dir"]
    if not is_safe_name(out["name"]):
        msg = f"Invalid package name: {out['name']!r}"
        raise ConfigurationError(msg)
    if out["resource_policy"] not in RESOURCE_POLICIES:
        policy = out["resource_policy"]
        msg = f"resource_policy must be one of {', '.join(RESOURCE_POLICIES)}, got {policy!r}"
        raise ConfigurationError(msg)
    return out


def load_project_config(project_root: Path) -> dict[str, Any]:
    """Load staticpack.yaml from project_root (if present) and resolve defaults."""
    path = project_root / CONFIG_FILE_NAME
    data: Any = None
    if path.is_file():
        try:
            with path.open() as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            msg = f"Cannot parse {path}: {e}"
            raise ConfigurationError(msg) from e
        if data is not None and not isinstance(data, dict):
            msg = f"{path} must contain a mapping"
            raise ConfigurationError(msg)
    return resolve_project_config(data, project_root)


def repository_root(config: dict[str, Any] | None = None, override: Path | None = None) -> Path:
    """Repository root: explicit override, then $STATICPACK_REPOSITORY, then config, then default."""
    if override is not None:
        return Path(override).expanduser().resolve()
    env = os.environ.get(REPOSITORY_ENV)
    if env:
        return Path(env).expanduser().resolve()
    if config and config.get("repository"):
        return Path(config["repository"]).expanduser().resolve()
    return Path(DEFAULT_REPOSITORY).expanduser().resolve()


def project_path(project_root: Path, config: dict[str, Any], key: str) -> Path:
    """Path-valued config key resolved against project_root."""
    return resolve_under(project_root, config[key])


def state_dir(project_root: Path) -> Path:
    """Per-project state directory (holds mutation snapshots)."""
    return project_root / STATE_DIR_NAME
