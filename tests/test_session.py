"""Catalog session tests covering the category removal cascade."""

from __future__ import annotations

from pathlib import Path
from typing import Optional
from uuid import uuid4

import pytest

from filecat.catalog import ALL, UNCATEGORIZED, CatalogSession
from filecat.config import FilecatConfig
from filecat.errors import AlreadyExistsError, NotFoundError, RootCategoryError
from filecat.shortcuts import ShortcutProvider, ShortcutSynchronizer
from filecat.state import MetadataRepository


class ReferenceFileProvider(ShortcutProvider):
    """Shortcuts as text files holding the target path."""

    suffix = ".ref"

    def create(self, shortcut_path: Path, target: str) -> None:
        shortcut_path.write_text(target, encoding="utf-8")

    def resolve(self, shortcut_path: Path) -> Optional[str]:
        return shortcut_path.read_text(encoding="utf-8")

    def is_shortcut(self, path: Path) -> bool:
        return path.suffix == self.suffix


def _session(tmp_path: Path) -> CatalogSession:
    """Return a session storing metadata and scanning shortcuts under tmp_path.

    Args:
        tmp_path: Temporary directory provided by pytest.

    Returns:
        CatalogSession: Session backed by ``tmp_path / "data"``.
    """
    desktop = tmp_path / "desktop"
    desktop.mkdir(exist_ok=True)
    repository = MetadataRepository(tmp_path / "data")
    synchronizer = ShortcutSynchronizer(ReferenceFileProvider(), [desktop])
    return CatalogSession(repository, synchronizer)


def _file(tmp_path: Path, name: str) -> Path:
    folder = tmp_path / "files"
    folder.mkdir(exist_ok=True)
    path = folder / name
    path.write_text(name, encoding="utf-8")
    return path


def test_category_commands_persist_across_sessions(tmp_path: Path) -> None:
    session = _session(tmp_path)
    session.add_category("Work")
    session.add_category("Reports", parent="Work")
    entry = session.add_entry(_file(tmp_path, "a.txt"), "work/reports")
    session.edit_description(entry.id, "Q3")
    session.save()

    reopened = _session(tmp_path)

    assert reopened.categories.as_list() == ["Work", "Work/Reports"]
    loaded = reopened.files.get(entry.id)
    assert loaded.category == "Work/Reports"
    assert loaded.description == "Q3"


def test_add_category_rejects_duplicates(tmp_path: Path) -> None:
    session = _session(tmp_path)
    session.add_category("Work")

    with pytest.raises(AlreadyExistsError):
        session.add_category("work")

    assert session.categories.as_list() == ["Work"]


def test_remove_category_cascades(tmp_path: Path) -> None:
    """Removing a category uncategorizes its entries and deletes their shortcuts."""
    session = _session(tmp_path)
    desktop = tmp_path / "desktop"
    session.add_category("Work")
    session.add_category("Work/Sub")
    first = session.add_entry(_file(tmp_path, "a.txt"), "Work")
    second = session.add_entry(_file(tmp_path, "b.txt"), "Work")
    kept = session.add_entry(_file(tmp_path, "c.txt"), "Work/Sub")
    created = session.create_shortcuts([first.id, second.id, kept.id], desktop)
    assert not created.failures
    asked: list[tuple[str, int]] = []

    def _confirm(name: str, entries: list) -> bool:
        asked.append((name, len(entries)))
        return True

    result = session.remove_category("WORK", _confirm)

    assert result.removed
    assert asked == [("Work", 2)]
    assert session.categories.as_list() == ["Work/Sub"]
    assert first.category is None and second.category is None
    assert kept.category == "Work/Sub"
    assert not (desktop / "a.txt.ref").exists()
    assert not (desktop / "b.txt.ref").exists()
    assert (desktop / "c.txt.ref").exists()
    assert sum(len(report.removed) for report in result.cleanup) == 2

    reopened = _session(tmp_path)
    assert reopened.categories.as_list() == ["Work/Sub"]
    assert len(reopened.list_entries(UNCATEGORIZED)) == 2


class LockedFileProvider(ReferenceFileProvider):
    """Reference provider that cannot inspect files named ``locked*``."""

    def is_shortcut(self, path: Path) -> bool:
        if path.name.startswith("locked"):
            raise PermissionError(13, "Permission denied", str(path))
        return super().is_shortcut(path)


def test_remove_category_survives_unreadable_desktop_files(tmp_path: Path) -> None:
    desktop = tmp_path / "desktop"
    desktop.mkdir()
    (desktop / "locked.ini").write_text("", encoding="utf-8")
    synchronizer = ShortcutSynchronizer(LockedFileProvider(), [desktop])
    session = CatalogSession(MetadataRepository(tmp_path / "data"), synchronizer)
    session.add_category("Work")
    entry = session.add_entry(_file(tmp_path, "a.txt"), "Work")
    session.create_shortcuts([entry.id], desktop)

    result = session.remove_category("Work", lambda name, entries: True)
    session.close()

    assert result.removed
    assert "Work" not in session.categories
    assert entry.category is None
    assert not (desktop / "a.txt.ref").exists()
    assert [len(report.errors) for report in result.cleanup] == [1]


def test_remove_category_cancelled_leaves_state(tmp_path: Path) -> None:
    session = _session(tmp_path)
    session.add_category("Work")
    entry = session.add_entry(_file(tmp_path, "a.txt"), "Work")
    session.create_shortcuts([entry.id], tmp_path / "desktop")

    declined = session.remove_category("Work", lambda name, entries: False)
    unanswered = session.remove_category("Work")

    assert not declined.removed and not unanswered.removed
    assert "Work" in session.categories
    assert entry.category == "Work"
    assert (tmp_path / "desktop" / "a.txt.ref").exists()


def test_remove_empty_category_skips_confirmation(tmp_path: Path) -> None:
    session = _session(tmp_path)
    session.add_category("Empty")

    def _confirm(name: str, entries: list) -> bool:
        raise AssertionError("confirmation must not be requested")

    result = session.remove_category("Empty", _confirm)

    assert result.removed
    assert result.cleanup == []
    assert "Empty" not in session.categories


@pytest.mark.parametrize("root", [None, "", "  "])
def test_root_category_cannot_be_removed(tmp_path: Path, root: Optional[str]) -> None:
    session = _session(tmp_path)
    session.add_category("Work")
    session.add_entry(_file(tmp_path, "a.txt"), "Work")
    before = session.snapshot()

    with pytest.raises(RootCategoryError):
        session.remove_category(root, lambda name, entries: True)

    assert session.snapshot() == before


def test_remove_unknown_category_raises(tmp_path: Path) -> None:
    session = _session(tmp_path)

    with pytest.raises(NotFoundError):
        session.remove_category("Nope")


def test_uncategorized_filter_ignores_real_categories(tmp_path: Path) -> None:
    session = _session(tmp_path)
    for name in ("A", "B", "C"):
        session.add_category(name)
        session.add_entry(_file(tmp_path, f"{name}.txt"), name)
    loose = session.add_entry(_file(tmp_path, "loose.txt"), None)

    assert session.list_entries(UNCATEGORIZED) == [loose]
    assert len(session.list_entries(ALL)) == 4


def test_create_shortcuts_reports_unknown_ids(tmp_path: Path) -> None:
    session = _session(tmp_path)
    missing = uuid4()

    result = session.create_shortcuts([missing], tmp_path / "desktop")

    assert list(result.failures) == [missing]


def test_from_config_uses_storage_settings(tmp_path: Path) -> None:
    config = FilecatConfig.model_validate(
        {
            "storage": {"data_dir": str(tmp_path / "store"), "filename": "catalog.md"},
            "shortcuts": {"provider": "symlink", "scan_locations": [str(tmp_path)]},
        }
    )

    session = CatalogSession.from_config(config)
    session.add_category("X")
    session.save()

    assert session.metadata_path == tmp_path / "store" / "catalog.md"
    assert session.metadata_path.exists()
    session.close()
