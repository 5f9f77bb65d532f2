"""Persisted catalog models."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, List, Optional
from uuid import UUID, uuid4

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

# Legacy .NET JSON dates: /Date(1700000000000)/ or /Date(1700000000000+0800)/
_DOTNET_DATE = re.compile(r"^/Date\((-?\d+)([+-]\d{4})?\)/$")
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _alias(name: str) -> AliasChoices:
    return AliasChoices(name, name[:1].upper() + name[1:])


class FileEntry(BaseModel):
    """A file tracked by the catalog.

    Attributes:
        id: Identity assigned at creation; never reassigned.
        category: Category path, or ``None`` when uncategorized.
        name: File name including extension.
        source_path: Absolute path of the referenced file.
        extension: File suffix including the leading dot.
        size_bytes: File size at the last add or update.
        created_at: File creation time (UTC) at the last add or update.
        description: Free-text note edited by the user.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: UUID = Field(
        default_factory=uuid4,
        frozen=True,
        validation_alias=_alias("id"),
        serialization_alias="id",
    )
    category: Optional[str] = Field(
        default=None, validation_alias=_alias("category"), serialization_alias="category"
    )
    name: str = Field(default="", validation_alias=_alias("name"), serialization_alias="name")
    source_path: str = Field(
        default="", validation_alias=_alias("path"), serialization_alias="path"
    )
    extension: str = Field(
        default="", validation_alias=_alias("extension"), serialization_alias="extension"
    )
    size_bytes: int = Field(default=0, validation_alias=_alias("size"), serialization_alias="size")
    created_at: datetime = Field(
        default=_EPOCH,
        validation_alias=_alias("createdUtc"),
        serialization_alias="createdUtc",
    )
    description: str = Field(
        default="", validation_alias=_alias("description"), serialization_alias="description"
    )

    @field_validator("name", "source_path", "extension", "description", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("created_at", mode="before")
    @classmethod
    def _parse_dotnet_date(cls, value: Any) -> Any:
        if isinstance(value, str):
            match = _DOTNET_DATE.match(value.strip())
            if match:
                try:
                    return _EPOCH + timedelta(milliseconds=int(match.group(1)))
                except OverflowError as exc:
                    raise ValueError(f"Date out of range: {value}") from exc
        return value

    @field_validator("created_at")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class Catalog(BaseModel):
    """Categories and entries persisted together in the metadata document."""

    categories: List[str] = Field(
        default_factory=list,
        validation_alias=_alias("categories"),
        serialization_alias="categories",
    )
    entries: List[FileEntry] = Field(
        default_factory=list, validation_alias=_alias("entries"), serialization_alias="entries"
    )

    @field_validator("categories", mode="before")
    @classmethod
    def _drop_null_categories(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [item for item in value if item is not None]
        return value


def category_key(path: str) -> str:
    """Return the comparison key used for category paths."""
    return path.casefold()


def canonical_categories(paths: Iterable[Optional[str]]) -> list[str]:
    """Deduplicate category paths case-insensitively and sort them.

    The first spelling of each path wins. Empty and ``None`` values are dropped.

    Args:
        paths: Category paths in any order.

    Returns:
        list[str]: Unique category paths sorted case-insensitively.
    """
    seen: dict[str, str] = {}
    for path in paths:
        if not path:
            continue
        seen.setdefault(category_key(path), path)
    return sorted(seen.values(), key=lambda value: (category_key(value), value))


__all__ = ["FileEntry", "Catalog", "category_key", "canonical_categories"]
