"""Emit the companion bootstrap unit that references every forced-linkage trampoline."""

from __future__ import annotations

from pathlib import Path

from staticpack.helpers import to_c_identifier
from staticpack.link.trampoline import Trampoline, render_declaration


def bootstrap_file_name(package_name: str) -> str:
    return f"{package_name}_force_link.c"


def driver_name(package_name: str) -> str:
    """Name of the driver function calling every trampoline."""
    return f"{to_c_identifier(package_name)}_force_link_all"


def render_bootstrap(package_name: str, trampolines: list[Trampoline]) -> str:
    """C source: each trampoline's declaration as appended to its unit, then the driver."""
    lines = [
        f"/* Generated by staticpack for {package_name}. Add this file to the consuming target. */",
        f"/* It references code the linker would otherwise strip from lib{package_name}.a. */",
        "",
    ]
    for t in trampolines:
        lines.append(f"/* {t.unit.name} */")
        lines.append(render_declaration(t.identifier))
    driver = driver_name(package_name)
    lines.append('#ifdef __cplusplus\nextern "C"\n#endif')
    lines.append(f"void {driver}(void);")
    lines.append(f"void {driver}(void)")
    lines.append("{")
    lines.extend(f"    {t.identifier}();" for t in trampolines)
    lines.append("}")
    lines.append("")
    return "\n".join(lines)


def emit_bootstrap(
    package_name: str,
    trampolines: list[Trampoline],
    dest_dir: Path,
    *,
    embed_source: bool = False,
) -> Path | None:
    """Write <dest_dir>/<name>_force_link.c. Skipped (returns None) when source is embedded
    or there is nothing to force-link."""
    if embed_source or not trampolines:
        return None
    dest_dir.mkdir(parents=True, exist_ok=True)
    out = dest_dir / bootstrap_file_name(package_name)
    out.write_text(render_bootstrap(package_name, trampolines))
    return out
