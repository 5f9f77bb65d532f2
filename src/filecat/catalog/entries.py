"""In-memory CRUD over catalog file entries."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional, Union
from uuid import UUID

from filecat.errors import NotAccessibleError, NotFoundError
from filecat.state.models import FileEntry, category_key

from .categories import CategorySet

LOGGER = logging.getLogger(__name__)


class CategoryFilter(Enum):
    """Special selectors accepted by :meth:`FileCatalog.list_by_category`."""

    ALL = "all"
    UNCATEGORIZED = "uncategorized"


ALL = CategoryFilter.ALL
UNCATEGORIZED = CategoryFilter.UNCATEGORIZED

CategorySelector = Union[CategoryFilter, str, None]


@dataclass(slots=True)
class AddResult:
    """Outcome of adding several files in one batch.

    Attributes:
        added: Entries created by the batch.
        updated: Existing entries refreshed by the batch.
        failures: Mapping of path to error message for files that were skipped.
    """

    added: list[FileEntry] = field(default_factory=list)
    updated: list[FileEntry] = field(default_factory=list)
    failures: dict[str, str] = field(default_factory=dict)


def path_key(path: str) -> str:
    """Return the comparison key used for source paths."""
    return path.casefold()


def _created_time(stat: os.stat_result) -> datetime:
    timestamp = getattr(stat, "st_birthtime", None)
    if timestamp is None:
        timestamp = stat.st_ctime if os.name == "nt" else stat.st_mtime
    return datetime.fromtimestamp(timestamp, tz=timezone.utc)


class FileCatalog:
    """File entries keyed by id, deduplicated by source path."""

    def __init__(self, entries: Iterable[FileEntry], categories: CategorySet) -> None:
        """Initialize the catalog.

        Args:
            entries: Entries loaded from storage; the list is kept in order.
            categories: Live category set used to validate assignments.
        """
        self._entries = list(entries)
        self._categories = categories

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> list[FileEntry]:
        """Return the live, ordered list of entries."""
        return self._entries

    def find_by_path(self, source_path: str) -> Optional[FileEntry]:
        key = path_key(source_path)
        return next((e for e in self._entries if path_key(e.source_path) == key), None)

    def get(self, entry_id: UUID) -> FileEntry:
        """Return the entry with ``entry_id``.

        Raises:
            NotFoundError: If no entry has that id.
        """
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        raise NotFoundError(f"No entry with id {entry_id}.")

    def add_or_update(
        self, source_path: str | Path, requested_category: Optional[str]
    ) -> FileEntry:
        """Add a file, or refresh the entry that already tracks it.

        The category is set to ``requested_category`` only when it is a known
        category; otherwise the entry becomes uncategorized. The id and
        description of an existing entry are kept.

        Args:
            source_path: Path of the file to track.
            requested_category: Category to assign, or ``None``.

        Returns:
            FileEntry: The created or refreshed entry.

        Raises:
            NotAccessibleError: If the file cannot be inspected.
        """
        path = Path(os.path.abspath(Path(source_path).expanduser()))
        try:
            stat = path.stat()
        except OSError as exc:
            raise NotAccessibleError(f"Cannot access {path}: {exc}") from exc
        if not path.is_file():
            raise NotAccessibleError(f"{path} is not a regular file.")

        category = self._categories.canonical(requested_category)
        if requested_category and category is None:
            LOGGER.info(
                "Unknown category %r for %s; storing as uncategorized.", requested_category, path
            )

        snapshot = {
            "name": path.name,
            "extension": path.suffix,
            "size_bytes": stat.st_size,
            "created_at": _created_time(stat),
            "category": category,
        }

        existing = self.find_by_path(str(path))
        if existing is not None:
            for attribute, value in snapshot.items():
                setattr(existing, attribute, value)
            LOGGER.debug("Refreshed entry %s for %s", existing.id, path)
            return existing

        entry = FileEntry(source_path=str(path), description="", **snapshot)
        self._entries.append(entry)
        LOGGER.debug("Added entry %s for %s", entry.id, path)
        return entry

    def add_many(
        self, paths: Iterable[str | Path], requested_category: Optional[str]
    ) -> AddResult:
        """Add several files, isolating failures to the offending path."""
        result = AddResult()
        for source_path in paths:
            known = self.find_by_path(os.path.abspath(Path(source_path).expanduser()))
            try:
                entry = self.add_or_update(source_path, requested_category)
            except NotAccessibleError as exc:
                LOGGER.warning("Skipping %s: %s", source_path, exc)
                result.failures[str(source_path)] = str(exc)
                continue
            (result.updated if known is not None else result.added).append(entry)
        return result

    def remove(self, entry_id: UUID) -> bool:
        """Forget the entry with ``entry_id``; the file on disk is untouched.

        Returns:
            bool: True when an entry was removed.
        """
        for index, entry in enumerate(self._entries):
            if entry.id == entry_id:
                del self._entries[index]
                return True
        return False

    def edit_description(self, entry_id: UUID, text: str) -> FileEntry:
        """Replace the description of an entry.

        Raises:
            NotFoundError: If no entry has that id.
        """
        entry = self.get(entry_id)
        entry.description = text
        return entry

    def in_category(self, path: str) -> list[FileEntry]:
        """Return entries assigned exactly to ``path`` (case-insensitive)."""
        key = category_key(path)
        return [e for e in self._entries if e.category and category_key(e.category) == key]

    def list_by_category(self, selector: CategorySelector = ALL) -> list[FileEntry]:
        """Return entries matching a category selector.

        Args:
            selector: ``ALL`` (or ``None``) for every entry, ``UNCATEGORIZED``
                for entries without a category, or a category path.

        Returns:
            list[FileEntry]: Matching entries in catalog order.
        """
        if selector is None or selector is ALL:
            return list(self._entries)
        if selector is UNCATEGORIZED:
            return [e for e in self._entries if not e.category]
        return self.in_category(selector)


__all__ = [
    "ALL",
    "UNCATEGORIZED",
    "AddResult",
    "CategoryFilter",
    "CategorySelector",
    "FileCatalog",
    "path_key",
]
