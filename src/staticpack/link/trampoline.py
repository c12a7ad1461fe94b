"""Trampoline identifiers and rendering.

The mutator appends `render_unit_block()` to each forced-linkage unit and the bootstrap
emitter repeats `render_declaration()` verbatim, so both go through this module.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from staticpack.errors import IdentifierCollisionError
from staticpack.helpers import to_c_identifier

IDENTIFIER_PREFIX = "staticpack_force_link"
BLOCK_BEGIN = "/* staticpack:begin forced-linkage trampoline (generated; removed after build) */"
BLOCK_END = "/* staticpack:end */"


@dataclass(frozen=True)
class Trampoline:
    identifier: str
    unit: Path


def trampoline_identifier(package_name: str, unit: Path | str) -> str:
    """Deterministic C identifier for unit: prefix, package name, file name (lower-cased).

    The package name keeps identifiers distinct across packages linked into one consumer.
    """
    return f"{IDENTIFIER_PREFIX}_{to_c_identifier(package_name)}_{to_c_identifier(Path(unit).name)}"


def plan_trampolines(package_name: str, units: list[Path]) -> list[Trampoline]:
    """One Trampoline per unit, in list order. Raises IdentifierCollisionError on duplicates."""
    seen: dict[str, Path] = {}
    out: list[Trampoline] = []
    for unit in units:
        ident = trampoline_identifier(package_name, unit)
        if ident in seen:
            msg = (
                f"{unit} and {seen[ident]} both derive trampoline identifier {ident}; "
                "rename one of them"
            )
            raise IdentifierCollisionError(msg)
        seen[ident] = unit
        out.append(Trampoline(ident, unit))
    return out


def render_declaration(identifier: str) -> str:
    """C-linkage declaration of the trampoline (valid in C, C++, Objective-C and Objective-C++)."""
    return f'#ifdef __cplusplus\nextern "C"\n#endif\nvoid {identifier}(void);\n'


def render_definition(identifier: str) -> str:
    return f"void {identifier}(void) {{}}\n"


def render_unit_block(identifier: str, *, leading_newline: bool = False) -> str:
    """Block appended to a forced-linkage unit: declaration plus empty definition."""
    lead = "\n" if leading_newline else ""
    return (
        f"{lead}\n{BLOCK_BEGIN}\n"
        f"{render_declaration(identifier)}"
        f"{render_definition(identifier)}"
        f"{BLOCK_END}\n"
    )
