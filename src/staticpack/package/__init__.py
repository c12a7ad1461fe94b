"""Package layout, resource conventions and assembly."""

from staticpack.package.assembler import assemble, collect_headers, publish
from staticpack.package.layout import (
    SOURCE_MODE_BINARY,
    SOURCE_MODE_BOTH,
    SOURCE_MODE_SOURCE,
    SOURCE_MODES,
    PackageDescriptor,
)
from staticpack.package.resources import check_resource_names, find_resources

__all__ = [
    "SOURCE_MODES",
    "SOURCE_MODE_BINARY",
    "SOURCE_MODE_BOTH",
    "SOURCE_MODE_SOURCE",
    "PackageDescriptor",
    "assemble",
    "check_resource_names",
    "collect_headers",
    "find_resources",
    "publish",
]
