"""Command API over a loaded catalog."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Optional
from uuid import UUID

from filecat.config import FilecatConfig
from filecat.errors import NotFoundError, RootCategoryError
from filecat.shortcuts import (
    CleanupReport,
    ShortcutBatchResult,
    ShortcutSynchronizer,
    default_provider,
)
from filecat.state import Catalog, FileEntry, MetadataRepository

from .categories import CategorySet, join_category_path
from .entries import ALL, AddResult, CategorySelector, FileCatalog
from .tree import CategoryNode, build_category_tree

LOGGER = logging.getLogger(__name__)

ConfirmCallback = Callable[[str, list[FileEntry]], bool]


@dataclass(slots=True)
class RemovalResult:
    """Outcome of removing a category.

    Attributes:
        category: Stored spelling of the category.
        removed: False when the caller declined the confirmation.
        affected: Entries that were (or would have been) uncategorized.
        cleanup: Shortcut cleanup reports, one per affected entry.
    """

    category: str
    removed: bool
    affected: list[FileEntry] = field(default_factory=list)
    cleanup: list[CleanupReport] = field(default_factory=list)


class CatalogSession:
    """A loaded catalog plus the collaborators needed to mutate and save it."""

    def __init__(self, repository: MetadataRepository, synchronizer: ShortcutSynchronizer) -> None:
        """Load the catalog from ``repository``.

        Args:
            repository: Metadata document store.
            synchronizer: Shortcut creation and cleanup service.
        """
        self._repository = repository
        self._synchronizer = synchronizer
        catalog = repository.load()
        self.categories = CategorySet(catalog.categories)
        self.files = FileCatalog(catalog.entries, self.categories)

    @classmethod
    def from_config(cls, config: FilecatConfig) -> CatalogSession:
        """Build a session from configuration settings."""
        data_dir = Path(config.storage.data_dir) if config.storage.data_dir else None
        repository = MetadataRepository(data_dir, config.storage.filename)
        synchronizer = ShortcutSynchronizer(
            default_provider(config.shortcuts.provider),
            config.shortcuts.scan_locations,
        )
        return cls(repository, synchronizer)

    @property
    def metadata_path(self) -> Path:
        return self._repository.path

    def snapshot(self) -> Catalog:
        """Return the current catalog as a persistable model."""
        return Catalog(categories=self.categories.as_list(), entries=list(self.files.entries))

    def save(self) -> None:
        """Write the catalog to the metadata document.

        Raises:
            StateError: If the document cannot be written.
        """
        self._repository.save(self.snapshot())

    def close(self) -> None:
        self._synchronizer.close()

    def tree(self) -> CategoryNode:
        """Project the categories into a display tree."""
        return build_category_tree(self.categories)

    # Categories -------------------------------------------------------

    def add_category(self, name: str, parent: Optional[str] = None) -> str:
        """Add a category, nested under ``parent`` when given.

        Returns:
            str: Full path of the new category.

        Raises:
            InvalidCategoryError: If ``name`` is blank.
            AlreadyExistsError: If the path exists in any casing.
        """
        return self.categories.add(join_category_path(name, parent))

    def remove_category(
        self, path: Optional[str], confirm: Optional[ConfirmCallback] = None
    ) -> RemovalResult:
        """Remove a category and uncategorize its entries.

        When the category has entries, ``confirm`` is asked first; without a
        callback the removal is cancelled. Shortcuts pointing at the affected
        files are removed on a worker thread before anything is changed, then
        the catalog is saved. Subcategories are kept.

        Args:
            path: Category to remove.
            confirm: Callback receiving the category and affected entries.

        Returns:
            RemovalResult: What was removed and the cleanup reports.

        Raises:
            RootCategoryError: If ``path`` denotes the root.
            NotFoundError: If the category does not exist.
            StateError: If saving fails.
        """
        if not path or not path.strip():
            raise RootCategoryError("The root category cannot be removed.")
        category = self.categories.canonical(path)
        if category is None:
            raise NotFoundError(f"Category {path!r} does not exist.")

        affected = self.files.in_category(category)
        result = RemovalResult(category=category, removed=False, affected=affected)
        if affected:
            if confirm is None or not confirm(category, affected):
                LOGGER.info("Removal of category %r cancelled.", category)
                return result
            pending = self._synchronizer.cleanup_in_background(e.source_path for e in affected)
            result.cleanup = pending.result()
            for report in result.cleanup:
                for message in report.errors:
                    LOGGER.warning("Shortcut cleanup for %s: %s", report.target, message)

        self.categories.remove(category)
        for entry in affected:
            entry.category = None
        self.save()
        result.removed = True
        LOGGER.info("Removed category %r (%d entries uncategorized).", category, len(affected))
        return result

    # Entries ----------------------------------------------------------

    def add_entry(self, source_path: str | Path, category: Optional[str] = None) -> FileEntry:
        return self.files.add_or_update(source_path, category)

    def add_entries(
        self, paths: Iterable[str | Path], category: Optional[str] = None
    ) -> AddResult:
        return self.files.add_many(paths, category)

    def remove_entry(self, entry_id: UUID) -> bool:
        return self.files.remove(entry_id)

    def edit_description(self, entry_id: UUID, text: str) -> FileEntry:
        return self.files.edit_description(entry_id, text)

    def list_entries(self, selector: CategorySelector = ALL) -> list[FileEntry]:
        return self.files.list_by_category(selector)

    def create_shortcuts(
        self, entry_ids: Iterable[UUID], destination: Path
    ) -> ShortcutBatchResult:
        """Create shortcuts for the given entries inside ``destination``.

        Unknown ids are reported as failures alongside shortcut errors.
        """
        entries: list[FileEntry] = []
        missing: dict[UUID, str] = {}
        for entry_id in entry_ids:
            try:
                entries.append(self.files.get(entry_id))
            except NotFoundError as exc:
                missing[entry_id] = str(exc)
        result = self._synchronizer.create_many(entries, destination)
        result.failures.update(missing)
        return result


__all__ = ["CatalogSession", "ConfirmCallback", "RemovalResult"]
