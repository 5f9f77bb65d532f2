"""Metadata document persistence for the filecat catalog."""

from __future__ import annotations

import contextlib
import json
import logging
import os
import sys
from pathlib import Path
from typing import List, Mapping

from pydantic import TypeAdapter

from .document import extract_payload, render_document
from .errors import StateError, StateParseError
from .models import Catalog, FileEntry, canonical_categories, category_key

LOGGER = logging.getLogger(__name__)

APP_DIRNAME = "filecat"
DEFAULT_FILENAME = "metadata.md"

_ENTRY_LIST = TypeAdapter(List[FileEntry])


def default_data_dir(env: Mapping[str, str] | None = None) -> Path:
    """Return the per-user application-data directory for filecat.

    Args:
        env: Environment mapping to consult; defaults to ``os.environ``.

    Returns:
        Path: ``%APPDATA%/filecat`` on Windows, otherwise
        ``$XDG_DATA_HOME/filecat`` or ``~/.local/share/filecat``.
    """
    env = os.environ if env is None else env
    if sys.platform == "win32" and env.get("APPDATA"):
        base = Path(env["APPDATA"])
    elif env.get("XDG_DATA_HOME"):
        base = Path(env["XDG_DATA_HOME"])
    else:
        base = Path("~/.local/share").expanduser()
    return base / APP_DIRNAME


class MetadataRepository:
    """Load and save the catalog as a Markdown document with a JSON block."""

    def __init__(self, data_dir: Path | None = None, filename: str = DEFAULT_FILENAME) -> None:
        """Initialize the repository and create its directory if absent.

        Args:
            data_dir: Directory that holds the metadata document.
            filename: Name of the metadata document.
        """
        directory = (data_dir or default_data_dir()).expanduser()
        directory.mkdir(parents=True, exist_ok=True)
        self._path = directory / filename

    @property
    def path(self) -> Path:
        """Return the location of the metadata document."""
        return self._path

    def load(self) -> Catalog:
        """Load the catalog, degrading to an empty one on any failure.

        Returns:
            Catalog: Stored catalog, or an empty catalog when the document is
            missing, has no JSON block, or cannot be parsed.
        """
        if not self._path.exists():
            LOGGER.debug("No metadata document at %s; starting empty.", self._path)
            return Catalog()

        try:
            text = self._path.read_text(encoding="utf-8-sig")
            return self._parse(extract_payload(text))
        except (OSError, UnicodeDecodeError, StateParseError) as exc:
            LOGGER.warning("Ignoring unreadable metadata document %s: %s", self._path, exc)
            return Catalog()

    def save(self, catalog: Catalog) -> None:
        """Overwrite the metadata document with the given catalog.

        Args:
            catalog: Catalog to persist. Categories are deduplicated and sorted.

        Raises:
            StateError: If the document cannot be written.
        """
        payload = {
            "categories": canonical_categories(catalog.categories),
            "entries": [
                entry.model_dump(mode="json", by_alias=True) for entry in catalog.entries
            ],
        }
        document = render_document(json.dumps(payload, indent=2, ensure_ascii=False))

        staging = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            staging.write_text(document, encoding="utf-8")
            os.replace(staging, self._path)
        except OSError as exc:
            with contextlib.suppress(OSError):
                staging.unlink(missing_ok=True)
            raise StateError(f"Unable to write metadata to {self._path}: {exc}") from exc
        LOGGER.debug(
            "Saved %d categories and %d entries to %s",
            len(payload["categories"]),
            len(payload["entries"]),
            self._path,
        )

    def _parse(self, payload: str) -> Catalog:
        try:
            if payload.lstrip().startswith("["):
                entries = _ENTRY_LIST.validate_json(payload)
                LOGGER.info("Migrating legacy metadata payload with %d entries.", len(entries))
                return Catalog(
                    categories=canonical_categories(entry.category for entry in entries),
                    entries=entries,
                )
            return Catalog.model_validate_json(payload)
        except (ValueError, OverflowError) as exc:
            raise StateParseError(f"Invalid metadata payload: {exc}") from exc


__all__ = [
    "MetadataRepository",
    "default_data_dir",
    "APP_DIRNAME",
    "DEFAULT_FILENAME",
    "Catalog",
    "FileEntry",
    "StateError",
    "StateParseError",
    "canonical_categories",
    "category_key",
]
