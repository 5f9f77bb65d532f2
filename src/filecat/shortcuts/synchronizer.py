"""Keep OS shortcuts in step with catalog entries."""

from __future__ import annotations

import logging
import os
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, Optional
from uuid import UUID

from filecat.errors import ShortcutCreateError, ShortcutError
from filecat.state.models import FileEntry

from .locations import default_scan_locations, same_path, unique_locations
from .providers import ShortcutProvider

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class CleanupReport:
    """Result of removing shortcuts that point at one target.

    Attributes:
        target: Path the removed shortcuts pointed at.
        removed: Shortcut files that were deleted.
        errors: Messages for directories or shortcuts that could not be handled.
    """

    target: str
    removed: list[Path] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


@dataclass(slots=True)
class ShortcutBatchResult:
    """Result of creating shortcuts for several entries.

    Attributes:
        created: Shortcut path written for each entry id.
        failures: Error message for each entry id that failed.
    """

    created: dict[UUID, Path] = field(default_factory=dict)
    failures: dict[UUID, str] = field(default_factory=dict)


class ShortcutSynchronizer:
    """Create shortcuts to entries and remove shortcuts to deleted entries."""

    def __init__(
        self,
        provider: ShortcutProvider,
        locations: Optional[Iterable[str | Path]] = None,
    ) -> None:
        """Initialize the synchronizer.

        Args:
            provider: Mechanism used to write and read shortcut files.
            locations: Directories scanned by :meth:`cleanup_referencing`;
                defaults to the platform's desktop and start-menu folders.
        """
        self._provider = provider
        self._locations = unique_locations(
            default_scan_locations() if locations is None else locations
        )
        self._executor: ThreadPoolExecutor | None = None

    @property
    def locations(self) -> list[Path]:
        return list(self._locations)

    def create(self, entry: FileEntry, destination: Path) -> Path:
        """Write a shortcut to ``entry`` inside ``destination``.

        Returns:
            Path: Location of the new shortcut.

        Raises:
            ShortcutCreateError: If the directory is missing or the write fails.
        """
        if not destination.is_dir():
            raise ShortcutCreateError(f"Destination {destination} is not a directory.")
        shortcut = self._provider.shortcut_path(destination, entry.name)
        self._provider.create(shortcut, entry.source_path)
        LOGGER.info("Created shortcut %s -> %s", shortcut, entry.source_path)
        return shortcut

    def create_many(self, entries: Iterable[FileEntry], destination: Path) -> ShortcutBatchResult:
        """Create shortcuts for several entries; one failure does not stop the rest."""
        result = ShortcutBatchResult()
        for entry in entries:
            try:
                result.created[entry.id] = self.create(entry, destination)
            except ShortcutCreateError as exc:
                LOGGER.warning("Shortcut for %s failed: %s", entry.source_path, exc)
                result.failures[entry.id] = str(exc)
        return result

    def resolve_target(self, shortcut: Path) -> Optional[str]:
        """Return the target of a shortcut, or ``None`` when it cannot be read."""
        try:
            return self._provider.resolve(shortcut)
        except (ShortcutError, OSError) as exc:
            LOGGER.debug("Unable to resolve %s: %s", shortcut, exc)
            return None

    def cleanup_referencing(self, target: str) -> CleanupReport:
        """Delete every shortcut in the scan locations that points at ``target``.

        Failures are logged and recorded on the report; the scan always runs
        to completion.
        """
        report = CleanupReport(target=target)
        for location in self._locations:
            try:
                if not location.is_dir():
                    continue
            except OSError as exc:
                self._record(report, location, exc)
                continue
            for shortcut in self._iter_shortcuts(location, report):
                resolved = self.resolve_target(shortcut)
                if not resolved:
                    continue
                try:
                    if not same_path(resolved, target):
                        continue
                    shortcut.unlink()
                except (OSError, ValueError) as exc:
                    self._record(report, shortcut, exc)
                    continue
                LOGGER.info("Removed shortcut %s", shortcut)
                report.removed.append(shortcut)
        return report

    def cleanup_in_background(self, targets: Iterable[str]) -> Future[list[CleanupReport]]:
        """Run :meth:`cleanup_referencing` for each target on a worker thread."""
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=1, thread_name_prefix="filecat-shortcuts"
            )
        return self._executor.submit(self._cleanup_each, list(targets))

    def close(self) -> None:
        """Stop the background worker, waiting for queued scans."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def _cleanup_each(self, targets: list[str]) -> list[CleanupReport]:
        reports = []
        for target in targets:
            try:
                reports.append(self.cleanup_referencing(target))
            except OSError as exc:
                report = CleanupReport(target=target)
                self._record(report, Path(target), exc)
                reports.append(report)
        return reports

    def _iter_shortcuts(self, location: Path, report: CleanupReport) -> Iterator[Path]:
        def _on_walk_error(exc: OSError) -> None:
            self._record(report, exc.filename, exc)

        for directory, _, filenames in os.walk(location, onerror=_on_walk_error):
            for filename in filenames:
                candidate = Path(directory) / filename
                try:
                    if not self._provider.is_shortcut(candidate):
                        continue
                except OSError as exc:
                    self._record(report, candidate, exc)
                    continue
                yield candidate

    @staticmethod
    def _record(report: CleanupReport, path: object, exc: Exception) -> None:
        LOGGER.warning("Shortcut cleanup skipped %s: %s", path, exc)
        report.errors.append(f"{path}: {exc}")


__all__ = ["CleanupReport", "ShortcutBatchResult", "ShortcutSynchronizer"]
