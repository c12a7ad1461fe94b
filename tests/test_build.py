"""Tests for staticpack.build.xcodebuild and staticpack.build.universal."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest


def _write_arch_libs(build_dir: Path, archs: list[str], name: str = "mylib") -> None:
    for arch in archs:
        d = build_dir / "Release-iphoneos" / arch
        d.mkdir(parents=True, exist_ok=True)
        (d / f"lib{name}.a").write_text(f"{arch} objects\n")


class TestBuildCommand:
    def test_includes_arch_configuration_and_output_dir(self, tmp_path: Path) -> None:
        from staticpack.build.xcodebuild import build_command

        cmd = build_command(
            tmp_path / "mylib.xcodeproj", "mylib", "Release", "arm64", "iphoneos", tmp_path / "out"
        )
        assert cmd[0] == "xcodebuild"
        assert cmd[cmd.index("-arch") + 1] == "arm64"
        assert cmd[cmd.index("-configuration") + 1] == "Release"
        assert f"CONFIGURATION_BUILD_DIR={tmp_path / 'out'}" in cmd
        assert cmd[-1] == "build"

    def test_min_os_version_maps_to_platform_setting(self, tmp_path: Path) -> None:
        from staticpack.build.xcodebuild import build_command

        ios = build_command(tmp_path, "t", "Release", "arm64", "iphonesimulator", tmp_path, "12.0")
        mac = build_command(tmp_path, "t", "Release", "arm64", "macosx14.0", tmp_path, "11.0")
        assert "IPHONEOS_DEPLOYMENT_TARGET=12.0" in ios
        assert "MACOSX_DEPLOYMENT_TARGET=11.0" in mac

    def test_unknown_sdk_ignores_version_floor(self, tmp_path: Path) -> None:
        from staticpack.build.xcodebuild import build_command

        cmd = build_command(tmp_path, "t", "Release", "arm64", "driverkit", tmp_path, "1.0")
        assert not any("DEPLOYMENT_TARGET" in a for a in cmd)


class TestBuildArchitecture:
    def test_no_project_is_configuration_error(self, tmp_path: Path) -> None:
        from staticpack.build.xcodebuild import build_architecture
        from staticpack.errors import ConfigurationError

        with pytest.raises(ConfigurationError, match=".xcodeproj"):
            build_architecture(tmp_path, "t", "Release", "arm64", "iphoneos", tmp_path / "build")

    def test_nonzero_exit_is_build_error(self, tmp_path: Path) -> None:
        from staticpack.build.xcodebuild import build_architecture
        from staticpack.errors import BuildError

        (tmp_path / "mylib.xcodeproj").mkdir()
        with patch("staticpack.build.xcodebuild.subprocess.run") as m_run:
            m_run.return_value = MagicMock(returncode=65)
            with pytest.raises(BuildError, match="x86_64"):
                build_architecture(tmp_path, "t", "Release", "x86_64", "iphoneos", tmp_path / "b")

    def test_builds_each_architecture_in_order(self, tmp_path: Path) -> None:
        from staticpack.build.xcodebuild import build_all_architectures

        (tmp_path / "mylib.xcodeproj").mkdir()
        with patch("staticpack.build.xcodebuild.subprocess.run") as m_run:
            m_run.return_value = MagicMock(returncode=0)
            got = build_all_architectures(
                tmp_path, "t", "Debug", ["x86_64", "arm64"], "iphoneos", tmp_path / "b"
            )
        archs = [c[0][0][c[0][0].index("-arch") + 1] for c in m_run.call_args_list]
        assert archs == ["x86_64", "arm64"]
        assert got["arm64"] == tmp_path / "b" / "Debug-iphoneos" / "arm64"

    def test_previous_output_is_cleared_before_building(self, tmp_path: Path) -> None:
        from staticpack.build.xcodebuild import build_architecture

        (tmp_path / "mylib.xcodeproj").mkdir()
        stale = tmp_path / "b" / "Release-iphoneos" / "arm64" / "libmylib.a"
        stale.parent.mkdir(parents=True)
        stale.write_text("from an earlier run")
        with patch("staticpack.build.xcodebuild.subprocess.run") as m_run:
            m_run.return_value = MagicMock(returncode=0)
            build_architecture(tmp_path, "mylib", "Release", "arm64", "iphoneos", tmp_path / "b")
        assert not stale.exists()


class TestPerArchBinaries:
    def test_all_present(self, tmp_path: Path) -> None:
        from staticpack.build.universal import per_arch_binaries

        _write_arch_libs(tmp_path, ["arm64", "x86_64"])
        got = per_arch_binaries(tmp_path, "mylib", "Release", "iphoneos", ["x86_64", "arm64"])
        assert list(got) == ["arm64", "x86_64"]

    def test_missing_arch_is_named(self, tmp_path: Path) -> None:
        from staticpack.build.universal import per_arch_binaries
        from staticpack.errors import MissingBinaryError

        _write_arch_libs(tmp_path, ["arm64"])
        with pytest.raises(MissingBinaryError, match="x86_64") as exc:
            per_arch_binaries(tmp_path, "mylib", "Release", "iphoneos", ["arm64", "x86_64"])
        assert exc.value.arch == "x86_64"

    def test_product_name_mismatch_reports_missing(self, tmp_path: Path) -> None:
        from staticpack.build.universal import per_arch_binaries
        from staticpack.errors import MissingBinaryError

        _write_arch_libs(tmp_path, ["arm64"], name="MyLibrary")
        with pytest.raises(MissingBinaryError, match="product name"):
            per_arch_binaries(tmp_path, "mylib", "Release", "iphoneos", ["arm64"])

    def test_empty_or_duplicate_architectures(self, tmp_path: Path) -> None:
        from staticpack.build.universal import per_arch_binaries
        from staticpack.errors import ConfigurationError

        with pytest.raises(ConfigurationError):
            per_arch_binaries(tmp_path, "mylib", "Release", "iphoneos", [])
        with pytest.raises(ConfigurationError):
            per_arch_binaries(tmp_path, "mylib", "Release", "iphoneos", ["arm64", "arm64"])


class TestCombine:
    def test_lipo_inputs_sorted_regardless_of_order(self, tmp_path: Path) -> None:
        from staticpack.build.universal import lipo_command

        a = {"x86_64": tmp_path / "x", "arm64": tmp_path / "a"}
        b = {"arm64": tmp_path / "a", "x86_64": tmp_path / "x"}
        assert lipo_command(a, tmp_path / "o") == lipo_command(b, tmp_path / "o")
        assert lipo_command(a, tmp_path / "o")[2:4] == [str(tmp_path / "a"), str(tmp_path / "x")]

    def test_lipo_override_from_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        from staticpack.build.universal import lipo_command

        monkeypatch.setenv("STATICPACK_LIPO", "llvm-lipo")
        assert lipo_command({"arm64": tmp_path / "a"}, tmp_path / "o")[0] == "llvm-lipo"

    def test_single_architecture_is_copied(self, tmp_path: Path) -> None:
        from staticpack.build.universal import combine

        src = tmp_path / "lib.a"
        src.write_bytes(b"arm64 only")
        with patch("staticpack.build.universal.subprocess.run") as m_run:
            out = combine({"arm64": src}, tmp_path / "u" / "libmylib.a")
        assert out.read_bytes() == b"arm64 only"
        assert not m_run.called

    def test_lipo_failure_is_build_error(self, tmp_path: Path) -> None:
        from staticpack.build.universal import combine
        from staticpack.errors import BuildError

        with patch("staticpack.build.universal.subprocess.run") as m_run:
            m_run.return_value = MagicMock(returncode=1, stdout="", stderr="bad input")
            with pytest.raises(BuildError, match="bad input"):
                combine({"arm64": tmp_path / "a", "x86_64": tmp_path / "b"}, tmp_path / "o")

    def test_run_fuses_all_architectures(self, tmp_path: Path) -> None:
        from staticpack.build.universal import run

        _write_arch_libs(tmp_path, ["arm64", "x86_64"])
        with patch("staticpack.build.universal.subprocess.run") as m_run:
            m_run.return_value = MagicMock(returncode=0)
            run(tmp_path, "mylib", "Release", "iphoneos", ["arm64", "x86_64"], tmp_path / "o.a")
        (cmd,) = m_run.call_args[0]
        assert cmd[:2] == ["lipo", "-create"]
        assert cmd[-2:] == ["-output", str(tmp_path / "o.a")]
