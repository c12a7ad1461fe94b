"""Package identity and on-disk layout.

<repository>/<name>[-<version>]-<configuration>/
  <name>.framework/<name>          universal binary
  <name>.framework/<name>.sha256
  <name>.framework/Info.plist
  Headers/                         public headers (flattened)
  Resources/                       resource files (tree preserved)
  <name>_force_link.c              bootstrap unit (binary-only packages)
  Sources/                         embedded sources (source modes)
"""

from __future__ import annotations

from dataclasses import dataclass

from staticpack.errors import ConfigurationError
from staticpack.helpers import is_safe_name, package_dir_name, package_identity

HEADERS_DIR = "Headers"
RESOURCES_DIR = "Resources"
SOURCES_DIR = "Sources"
INFO_PLIST = "Info.plist"

SOURCE_MODE_BINARY = "binary"
SOURCE_MODE_SOURCE = "source"
SOURCE_MODE_BOTH = "both"
SOURCE_MODES = (SOURCE_MODE_BINARY, SOURCE_MODE_SOURCE, SOURCE_MODE_BOTH)


def includes_binary(source_mode: str) -> bool:
    return source_mode in (SOURCE_MODE_BINARY, SOURCE_MODE_BOTH)


def embeds_source(source_mode: str) -> bool:
    return source_mode in (SOURCE_MODE_SOURCE, SOURCE_MODE_BOTH)


@dataclass(frozen=True)
class PackageDescriptor:
    name: str
    version: str | None
    configuration: str
    architectures: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not is_safe_name(self.name):
            msg = f"Invalid package name: {self.name!r}"
            raise ConfigurationError(msg)
        if self.version is not None and not is_safe_name(self.version):
            msg = f"Invalid version tag: {self.version!r}"
            raise ConfigurationError(msg)
        if not is_safe_name(self.configuration):
            msg = f"Invalid configuration name: {self.configuration!r}"
            raise ConfigurationError(msg)

    @property
    def identity(self) -> str:
        return package_identity(self.name, self.version)

    @property
    def directory_name(self) -> str:
        return package_dir_name(self.name, self.version, self.configuration)

    @property
    def framework_dir(self) -> str:
        return f"{self.name}.framework"
