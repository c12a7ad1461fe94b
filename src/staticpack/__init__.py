"""staticpack: package static libraries into versioned, linkable directories.

Forced-linkage bootstrapping (link), universal binary assembly (build, package) and
consumer-side reference synchronization (sync).
"""

from staticpack.errors import StaticPackError

__version__ = "0.1.0"

__all__ = ["StaticPackError", "__version__"]
