"""Pytest fixtures for staticpack tests."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest

HEADER_MAIN = "#pragma once\nvoid mylib_start(void);\n"
HEADER_UTIL = "#pragma once\nint mylib_util(int x);\n"
WIDGET_EXTRAS = (
    '#import "Widget.h"\n\n@implementation Widget (Extras)\n- (void)shine {}\n@end\n'
)
REGISTRY = "static int registered;\nvoid registry_touch(void) { registered = 1; }"  # no final newline


@pytest.fixture(autouse=True)
def _no_repository_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("STATICPACK_REPOSITORY", raising=False)
    monkeypatch.delenv("STATICPACK_LIPO", raising=False)


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A static library project: xcodeproj, headers, forced-linkage units, resources."""
    root = tmp_path / "mylib"
    (root / "mylib.xcodeproj").mkdir(parents=True)
    (root / "mylib.xcodeproj" / "project.pbxproj").write_text("// !$*UTF8*$!\n")
    (root / "staticpack.yaml").write_text("name: mylib\narchitectures: [arm64, x86_64]\n")
    (root / "public_headers.txt").write_text("# public API\ninclude/mylib.h\ninclude/mylib_util.h\n")
    (root / "force_link.txt").write_text("src/Widget+Extras.m\nsrc/registry.c\n")
    (root / "include").mkdir()
    (root / "include" / "mylib.h").write_text(HEADER_MAIN)
    (root / "include" / "mylib_util.h").write_text(HEADER_UTIL)
    (root / "src").mkdir()
    (root / "src" / "Widget+Extras.m").write_text(WIDGET_EXTRAS)
    (root / "src" / "registry.c").write_text(REGISTRY)
    (root / "src" / "core.c").write_text('#include "private.h"\nvoid mylib_start(void) {}\n')
    (root / "src" / "private.h").write_text("#pragma once\n")
    (root / "assets").mkdir()
    (root / "assets" / "mylib_icon.png").write_bytes(b"\x89PNG\r\n\x1a\nicon")
    (root / "assets" / "mylib_strings.json").write_text('{"hello": "world"}\n')
    return root


@pytest.fixture
def repository(tmp_path: Path) -> Path:
    return tmp_path / "repo"


class FakeToolchain:
    """Stands in for xcodebuild and lipo behind subprocess.run.

    xcodebuild writes lib<target>.a into CONFIGURATION_BUILD_DIR and records the content of
    every forced-linkage unit as seen during the build; lipo concatenates its inputs.
    """

    def __init__(self, project_root: Path) -> None:
        self.project_root = project_root
        self.calls: list[list[str]] = []
        self.seen_during_build: dict[str, dict[str, str]] = {}
        self.fail_arch: str | None = None
        self.skip_arch: str | None = None
        self.fail_lipo = False

    def __call__(self, cmd: list[str], **_kwargs: Any) -> MagicMock:
        self.calls.append(list(cmd))
        if cmd[0] == "xcodebuild":
            return self._xcodebuild(cmd)
        if cmd[0].endswith("lipo"):
            return self._lipo(cmd)
        return MagicMock(returncode=127, stdout="", stderr="unknown tool")

    def _xcodebuild(self, cmd: list[str]) -> MagicMock:
        arch = cmd[cmd.index("-arch") + 1]
        target = cmd[cmd.index("-target") + 1]
        setting = next(a for a in cmd if a.startswith("CONFIGURATION_BUILD_DIR="))
        out_dir = Path(setting.split("=", 1)[1])
        units = (self.project_root / "force_link.txt").read_text().split()
        seen = {u: (self.project_root / u).read_text() for u in units}
        self.seen_during_build[arch] = seen
        if arch == self.fail_arch:
            return MagicMock(returncode=65)
        if arch != self.skip_arch:
            out_dir.mkdir(parents=True, exist_ok=True)
            symbols = sorted(set(re.findall(r"staticpack_force_link_\w+", " ".join(seen.values()))))
            lib = out_dir / f"lib{target}.a"
            lib.write_text(f"!<arch>\n{arch}\n" + "\n".join(symbols) + "\n")
        return MagicMock(returncode=0)

    def _lipo(self, cmd: list[str]) -> MagicMock:
        if self.fail_lipo:
            return MagicMock(returncode=1, stdout="", stderr="lipo: fatal error")
        out = Path(cmd[cmd.index("-output") + 1])
        inputs = cmd[cmd.index("-create") + 1 : cmd.index("-output")]
        out.write_bytes(b"FAT\n" + b"".join(Path(p).read_bytes() for p in inputs))
        return MagicMock(returncode=0, stdout="", stderr="")


@pytest.fixture
def toolchain(project: Path, monkeypatch: pytest.MonkeyPatch) -> FakeToolchain:
    fake = FakeToolchain(project)
    monkeypatch.setattr("subprocess.run", fake)
    return fake


def snapshot_tree(root: Path) -> dict[str, bytes]:
    """Relative path -> bytes for every file under root."""
    return {
        p.relative_to(root).as_posix(): p.read_bytes()
        for p in sorted(root.rglob("*"))
        if p.is_file()
    }


@pytest.fixture
def tree_snapshot():
    return snapshot_tree
