"""Forced-linkage source mutation as a snapshot -> mutate -> restore transaction.

Snapshots live in <state_dir>/backups/, keyed by the sha256 of the unit's absolute path:
  <key>.bak   byte copy of the unit (mtime preserved)
  <key>.json  {"path": ..., "sha256": ..., "mutated_sha256": ..., "backup": ...}
The manifest is written after the backup, so a manifest always names a complete backup.
"""

from __future__ import annotations

import json
import logging
import os
import shutil
import signal
import threading
from pathlib import Path
from types import FrameType, TracebackType
from typing import Any

from staticpack.errors import ConfigurationError, MutationError, RecoveryError
from staticpack.helpers import sha256_bytes, sha256_file
from staticpack.link.trampoline import Trampoline, plan_trampolines, render_unit_block

log = logging.getLogger(__name__)

BACKUP_DIR_NAME = "backups"
_TERMINATING_SIGNALS = tuple(
    getattr(signal, name) for name in ("SIGTERM", "SIGHUP") if hasattr(signal, name)
)


def backups_dir(state_dir: Path) -> Path:
    return state_dir / BACKUP_DIR_NAME


def snapshot_key(unit: Path) -> str:
    return sha256_bytes(str(unit.resolve()).encode())


def _discard(backup: Path, manifest: Path) -> None:
    manifest.unlink(missing_ok=True)
    backup.unlink(missing_ok=True)


def _terminate(signum: int, _frame: FrameType | None) -> None:
    # Turn SIGTERM/SIGHUP into an exception so __exit__ restores the units.
    raise SystemExit(128 + signum)


def check_units(units: list[Path]) -> None:
    """Every unit must exist and be writable. Raises ConfigurationError naming the first offender."""
    for unit in units:
        if not unit.is_file():
            msg = f"Forced-linkage unit not found: {unit}"
            raise ConfigurationError(msg)
        if not os.access(unit, os.W_OK):
            msg = f"Forced-linkage unit not writable: {unit}"
            raise ConfigurationError(msg)


class ForceLinkTransaction:
    """Context manager appending trampolines to units and restoring them on every exit path.

    Usage:
        with ForceLinkTransaction(units, "mylib", state_dir) as tx:
            build()           # units carry tx.trampolines while the block runs
    """

    def __init__(
        self,
        units: list[Path],
        package_name: str,
        state_dir: Path,
        *,
        handle_signals: bool = True,
    ) -> None:
        self.units = [Path(u).resolve() for u in units]
        self.package_name = package_name
        self.state_dir = state_dir
        self.handle_signals = handle_signals
        self.trampolines: list[Trampoline] = []
        self._snapshots: list[tuple[Path, Path, Path, str]] = []
        self._previous_handlers: dict[int, Any] = {}

    # --- context manager ---

    def __enter__(self) -> ForceLinkTransaction:
        self.trampolines = plan_trampolines(self.package_name, self.units)
        check_units(self.units)
        recover_leftovers(self.state_dir)
        try:
            backups_dir(self.state_dir).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            msg = f"Cannot create snapshot directory {backups_dir(self.state_dir)}: {e}"
            raise MutationError(msg) from e
        self._install_signal_handlers()
        try:
            for t in self.trampolines:
                self._mutate(t)
        except BaseException:
            try:
                self.restore()
            finally:
                self._remove_signal_handlers()
            raise
        log.debug("Mutated %d forced-linkage unit(s)", len(self._snapshots))
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        try:
            self.restore()
        finally:
            self._remove_signal_handlers()

    # --- steps ---

    def _mutate(self, t: Trampoline) -> None:
        key = snapshot_key(t.unit)
        backup = backups_dir(self.state_dir) / f"{key}.bak"
        manifest = backups_dir(self.state_dir) / f"{key}.json"
        try:
            original = t.unit.read_bytes()
            block = render_unit_block(
                t.identifier, leading_newline=bool(original) and not original.endswith(b"\n")
            ).encode()
            digest = sha256_bytes(original)
            shutil.copy2(t.unit, backup)
            record = {
                "path": str(t.unit),
                "sha256": digest,
                "mutated_sha256": sha256_bytes(original + block),
                "backup": backup.name,
            }
            tmp = manifest.with_suffix(".json.tmp")
            tmp.write_text(json.dumps(record, indent=2))
            os.replace(tmp, manifest)
        except OSError as e:
            backup.unlink(missing_ok=True)
            msg = f"Cannot snapshot {t.unit}: {e}"
            raise MutationError(msg) from e
        self._snapshots.append((t.unit, backup, manifest, digest))

        try:
            with t.unit.open("ab") as f:
                f.write(block)
        except OSError as e:
            msg = f"Cannot append trampoline to {t.unit}: {e}"
            raise MutationError(msg) from e

    def restore(self) -> None:
        """Restore every snapshotted unit (latest first); raise MutationError if any failed."""
        failures: list[str] = []
        while self._snapshots:
            unit, backup, manifest, digest = self._snapshots.pop()
            try:
                shutil.copy2(backup, unit)
                if sha256_file(unit) != digest:
                    failures.append(f"{unit}: checksum mismatch after restore (snapshot kept)")
                    continue
            except OSError as e:
                failures.append(f"{unit}: {e} (snapshot kept at {backup})")
                continue
            _discard(backup, manifest)
            log.debug("Restored %s", unit)
        if failures:
            msg = "Could not restore forced-linkage unit(s): " + "; ".join(failures)
            raise MutationError(msg)

    # --- signals ---

    def _install_signal_handlers(self) -> None:
        if not self.handle_signals or threading.current_thread() is not threading.main_thread():
            return
        for sig in _TERMINATING_SIGNALS:
            try:
                self._previous_handlers[sig] = signal.signal(sig, _terminate)
            except (OSError, ValueError) as e:
                log.debug("Cannot install handler for signal %s: %s", sig, e)

    def _remove_signal_handlers(self) -> None:
        while self._previous_handlers:
            sig, handler = self._previous_handlers.popitem()
            signal.signal(sig, handler)


def recover_leftovers(state_dir: Path) -> list[Path]:
    """Restore units left mutated by an interrupted run. Returns the units that were restored.

    A snapshot whose unit already matches the original checksum is discarded (the run
    died after restoring). A unit is only restored while it still holds exactly the
    mutated content; a unit edited since the interrupted run, or a backup that does not
    match its manifest, raises RecoveryError and the snapshot is kept for manual repair.
    """
    d = backups_dir(state_dir)
    if not d.is_dir():
        return []
    restored: list[Path] = []
    for manifest in sorted(d.glob("*.json")):
        try:
            data = json.loads(manifest.read_text())
            unit = Path(data["path"])
            digest = data["sha256"]
            mutated = data.get("mutated_sha256")
            backup = d / data["backup"]
        except (OSError, ValueError, KeyError, TypeError) as e:
            msg = f"Unreadable snapshot manifest {manifest}: {e}"
            raise RecoveryError(msg) from e

        log.warning("Found leftover snapshot of %s from an interrupted run", unit)
        if unit.is_file() and sha256_file(unit) == digest:
            _discard(backup, manifest)
            continue
        if not unit.is_file() or sha256_file(unit) != mutated:
            msg = (
                f"{unit} changed since the interrupted run; its original is kept at {backup}, "
                "restore it by hand"
            )
            raise RecoveryError(msg)
        if not backup.is_file() or sha256_file(backup) != digest:
            msg = f"Snapshot of {unit} is missing or corrupt ({backup}); restore it by hand"
            raise RecoveryError(msg)
        try:
            shutil.copy2(backup, unit)
        except OSError as e:
            msg = f"Cannot restore {unit} from {backup}: {e}"
            raise RecoveryError(msg) from e
        _discard(backup, manifest)
        log.warning("Restored %s from its snapshot", unit)
        restored.append(unit)

    manifests = {m.stem for m in d.glob("*.json")}
    for orphan in sorted(d.glob("*.bak")):
        # Backup written but manifest never was: the unit was not mutated yet.
        if orphan.stem not in manifests:
            log.debug("Removing orphan backup %s", orphan)
            orphan.unlink(missing_ok=True)
    return restored
