"""Consumer-side dependency declarations: one `name [version]` per line."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from staticpack.errors import ConfigurationError
from staticpack.helpers import is_safe_name, package_dir_name, parse_list_text


@dataclass(frozen=True)
class DependencyDeclaration:
    name: str
    version: str | None = None

    def directory_name(self, configuration: str) -> str:
        return package_dir_name(self.name, self.version, configuration)


def parse_dependencies(text: str, source: str = "<dependencies>") -> list[DependencyDeclaration]:
    """Parse declarations. Raises ConfigurationError on malformed lines or duplicate names."""
    out: list[DependencyDeclaration] = []
    seen: set[str] = set()
    for line in parse_list_text(text):
        parts = line.split()
        if len(parts) > 2 or not all(is_safe_name(p) for p in parts):
            msg = f"{source}: malformed dependency declaration {line!r} (expected 'name [version]')"
            raise ConfigurationError(msg)
        name = parts[0]
        if name in seen:
            msg = f"{source}: {name} declared more than once"
            raise ConfigurationError(msg)
        seen.add(name)
        out.append(DependencyDeclaration(name, parts[1] if len(parts) > 1 else None))
    return out


def load_dependencies(path: Path) -> list[DependencyDeclaration]:
    if not path.is_file():
        msg = f"Dependency list not found: {path}"
        raise ConfigurationError(msg)
    return parse_dependencies(path.read_text(), source=str(path))
