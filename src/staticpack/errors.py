"""Exception taxonomy for staticpack.

Every fatal condition raises a subclass of StaticPackError; the `run()` entry points
catch the family, print `error: ...` and return 1. Advisory conditions (resource naming
under the warn policy, unresolved dependencies) are logged instead of raised.
"""

from __future__ import annotations


class StaticPackError(Exception):
    """Base class for all fatal staticpack errors."""


class ConfigurationError(StaticPackError, ValueError):
    """Project configuration or one of the declared lists is invalid."""


class MissingHeaderError(ConfigurationError):
    """A declared public header does not exist."""


class IdentifierCollisionError(ConfigurationError):
    """Two forced-linkage units derive the same trampoline identifier."""


class MissingBinaryError(StaticPackError):
    """A per-architecture binary was not produced by the build."""

    def __init__(self, arch: str, path: object) -> None:
        self.arch = arch
        self.path = path
        super().__init__(
            f"no {arch} binary at {path} (the project's product name must match the package name)"
        )


class BuildError(StaticPackError, RuntimeError):
    """The external build or the universal-binary tool failed."""


class WorkspaceError(StaticPackError):
    """Repository root or consumer workspace cannot be created or written."""


class MutationError(StaticPackError, RuntimeError):
    """A source unit could not be backed up, mutated or restored."""


class RecoveryError(MutationError):
    """A leftover snapshot from an interrupted run cannot be restored safely."""


class ResourceNamingError(StaticPackError, ValueError):
    """Resource files violate the package-name prefix convention under the reject policy."""

    def __init__(self, violations: list[str]) -> None:
        self.violations = violations
        super().__init__(
            f"{len(violations)} resource(s) not prefixed with the package name: "
            + ", ".join(violations)
        )
