"""Shortcut synchronizer tests."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Optional

import pytest

from filecat.errors import ShortcutCreateError, ShortcutResolveError
from filecat.shortcuts import (
    ShortcutProvider,
    ShortcutSynchronizer,
    SymlinkShortcutProvider,
    WindowsShortcutProvider,
    default_provider,
    default_scan_locations,
    normalize_path,
    same_path,
)
from filecat.state import FileEntry

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="symlink provider on POSIX")


class ReferenceFileProvider(ShortcutProvider):
    """Shortcuts as text files holding the target path."""

    suffix = ".ref"

    def create(self, shortcut_path: Path, target: str) -> None:
        if shortcut_path.exists():
            raise ShortcutCreateError(f"{shortcut_path} exists")
        shortcut_path.write_text(target, encoding="utf-8")

    def resolve(self, shortcut_path: Path) -> Optional[str]:
        text = shortcut_path.read_text(encoding="utf-8")
        if text == "corrupt":
            raise ShortcutResolveError("corrupt shortcut")
        return text or None

    def is_shortcut(self, path: Path) -> bool:
        return path.suffix == self.suffix


def _entry(path: Path) -> FileEntry:
    return FileEntry(name=path.name, source_path=str(path), extension=path.suffix)


def test_create_and_cleanup_with_reference_files(tmp_path: Path) -> None:
    """Only shortcuts resolving to the target are removed, in nested folders too."""
    desktop = tmp_path / "desktop"
    nested = tmp_path / "start" / "Programs" / "Tools"
    nested.mkdir(parents=True)
    desktop.mkdir()
    target = tmp_path / "files" / "report.txt"
    other = tmp_path / "files" / "other.txt"
    sync = ShortcutSynchronizer(ReferenceFileProvider(), [desktop, tmp_path / "start"])

    first = sync.create(_entry(target), desktop)
    second = sync.create(_entry(target), nested)
    unrelated = sync.create(_entry(other), desktop)
    (desktop / "case.ref").write_text(str(target).upper() + os.sep, encoding="utf-8")

    report = sync.cleanup_referencing(str(target))

    assert first == desktop / "report.txt.ref"
    assert sorted(report.removed) == sorted([first, second, desktop / "case.ref"])
    assert not first.exists()
    assert not second.exists()
    assert unrelated.exists()
    assert report.errors == []


def test_cleanup_skips_unresolvable_and_missing_locations(tmp_path: Path) -> None:
    desktop = tmp_path / "desktop"
    desktop.mkdir()
    (desktop / "broken.ref").write_text("corrupt", encoding="utf-8")
    (desktop / "empty.ref").write_text("", encoding="utf-8")
    sync = ShortcutSynchronizer(ReferenceFileProvider(), [tmp_path / "absent", desktop])

    report = sync.cleanup_referencing(str(tmp_path / "x.txt"))

    assert report.removed == []
    assert (desktop / "broken.ref").exists()
    assert sync.resolve_target(desktop / "broken.ref") is None


def test_cleanup_records_delete_failures(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """A failed delete is reported and the scan continues."""
    desktop = tmp_path / "desktop"
    desktop.mkdir()
    target = tmp_path / "a.txt"
    sync = ShortcutSynchronizer(ReferenceFileProvider(), [desktop])
    stuck = sync.create(_entry(target), desktop)
    (desktop / "copy.ref").write_text(str(target), encoding="utf-8")

    original_unlink = Path.unlink

    def _unlink(self: Path, missing_ok: bool = False) -> None:
        if self == stuck:
            raise PermissionError("in use")
        original_unlink(self, missing_ok=missing_ok)

    monkeypatch.setattr(Path, "unlink", _unlink)

    report = sync.cleanup_referencing(str(target))

    assert report.removed == [desktop / "copy.ref"]
    assert len(report.errors) == 1
    assert stuck.exists()


class GuardedFileProvider(ReferenceFileProvider):
    """Reference provider that cannot inspect files named ``locked*``."""

    def is_shortcut(self, path: Path) -> bool:
        if path.name.startswith("locked"):
            raise PermissionError(13, "Permission denied", str(path))
        return super().is_shortcut(path)


def test_cleanup_continues_past_uninspectable_files(tmp_path: Path) -> None:
    """A file the provider cannot inspect is reported and the scan goes on."""
    desktop = tmp_path / "desktop"
    desktop.mkdir()
    target = tmp_path / "a.txt"
    (desktop / "locked.ref").write_text(str(target), encoding="utf-8")
    (desktop / "z.ref").write_text(str(target), encoding="utf-8")
    sync = ShortcutSynchronizer(GuardedFileProvider(), [desktop])

    reports = sync.cleanup_in_background([str(target)])
    try:
        (report,) = reports.result(timeout=10)
    finally:
        sync.close()

    assert report.removed == [desktop / "z.ref"]
    assert len(report.errors) == 1
    assert "locked.ref" in report.errors[0]
    assert (desktop / "locked.ref").exists()


def test_create_many_isolates_failures(tmp_path: Path) -> None:
    dest = tmp_path / "dest"
    dest.mkdir()
    sync = ShortcutSynchronizer(ReferenceFileProvider(), [])
    good = _entry(tmp_path / "a.txt")
    clash = _entry(tmp_path / "b.txt")
    (dest / "b.txt.ref").write_text("taken", encoding="utf-8")

    result = sync.create_many([good, clash], dest)

    assert result.created == {good.id: dest / "a.txt.ref"}
    assert list(result.failures) == [clash.id]


def test_create_into_missing_directory_fails(tmp_path: Path) -> None:
    sync = ShortcutSynchronizer(ReferenceFileProvider(), [])

    with pytest.raises(ShortcutCreateError):
        sync.create(_entry(tmp_path / "a.txt"), tmp_path / "nowhere")


def test_background_cleanup_returns_reports(tmp_path: Path) -> None:
    desktop = tmp_path / "desktop"
    desktop.mkdir()
    sync = ShortcutSynchronizer(ReferenceFileProvider(), [desktop])
    sync.create(_entry(tmp_path / "a.txt"), desktop)

    reports = sync.cleanup_in_background([str(tmp_path / "a.txt"), str(tmp_path / "b.txt")])
    try:
        result = reports.result(timeout=10)
    finally:
        sync.close()

    assert [len(r.removed) for r in result] == [1, 0]


@posix_only
def test_symlink_provider_round_trip(tmp_path: Path) -> None:
    target = tmp_path / "data" / "a.txt"
    target.parent.mkdir()
    target.write_text("x", encoding="utf-8")
    desktop = tmp_path / "Desktop"
    desktop.mkdir()
    (desktop / "relative").symlink_to(Path("..") / "data" / "a.txt")
    sync = ShortcutSynchronizer(SymlinkShortcutProvider(), [desktop])

    link = sync.create(_entry(target), desktop)

    assert link == desktop / "a.txt"
    assert link.is_symlink()
    assert sync.resolve_target(link) == str(target)
    report = sync.cleanup_referencing(str(target) + "/")
    assert sorted(report.removed) == sorted([link, desktop / "relative"])
    assert target.exists()


def test_path_normalization() -> None:
    base = os.path.abspath("dir")

    assert normalize_path(base + os.sep) == base
    assert same_path(base.upper(), base + os.sep)
    assert normalize_path(os.sep) == os.path.abspath(os.sep)


def test_default_scan_locations_windows() -> None:
    env = {
        "USERPROFILE": "C:/Users/ann",
        "PUBLIC": "C:/Users/Public",
        "APPDATA": "C:/Users/ann/AppData/Roaming",
        "ProgramData": "",
    }

    locations = default_scan_locations(env, platform="win32")

    assert [p.as_posix() for p in locations] == [
        "C:/Users/ann/Desktop",
        "C:/Users/Public/Desktop",
        "C:/Users/ann/AppData/Roaming/Microsoft/Windows/Start Menu",
        "C:/Users/ann/AppData/Roaming/Microsoft/Windows/Start Menu/Programs",
    ]


def test_default_scan_locations_posix(tmp_path: Path) -> None:
    locations = default_scan_locations({"HOME": str(tmp_path)}, platform="linux")

    assert locations[0] == tmp_path / "Desktop"
    assert tmp_path / ".local" / "share" / "applications" in locations
    assert len(locations) == len(set(locations))


def test_default_provider_selection() -> None:
    assert isinstance(default_provider("symlink"), SymlinkShortcutProvider)
    assert isinstance(default_provider("windows"), WindowsShortcutProvider)
    assert WindowsShortcutProvider().shortcut_path(Path("d"), "a.txt") == Path("d/a.txt.lnk")
