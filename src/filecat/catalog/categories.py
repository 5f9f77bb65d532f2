"""Case-insensitive category path set."""

from __future__ import annotations

from typing import Iterable, Iterator, Optional

from filecat.errors import AlreadyExistsError, InvalidCategoryError, NotFoundError
from filecat.state.models import canonical_categories, category_key

SEPARATOR = "/"


def split_category_path(path: str) -> list[str]:
    """Return the non-empty, whitespace-trimmed segments of a category path."""
    return [segment.strip() for segment in path.split(SEPARATOR) if segment.strip()]


def join_category_path(name: str, parent: Optional[str] = None) -> str:
    """Build a normalized category path, optionally nested under ``parent``.

    Args:
        name: New category name; may itself contain separators.
        parent: Existing category path to nest under.

    Returns:
        str: Path with trimmed segments joined by ``/``.

    Raises:
        InvalidCategoryError: If ``name`` has no usable segments.
    """
    segments = split_category_path(name)
    if not segments:
        raise InvalidCategoryError(f"Category name {name!r} is empty.")
    prefix = split_category_path(parent) if parent else []
    return SEPARATOR.join(prefix + segments)


class CategorySet:
    """Unique category paths compared case-insensitively.

    The first spelling of a path is kept as its canonical form.
    """

    def __init__(self, paths: Iterable[Optional[str]] = ()) -> None:
        self._paths: dict[str, str] = {
            category_key(path): path for path in canonical_categories(paths)
        }

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and category_key(path) in self._paths

    def __iter__(self) -> Iterator[str]:
        return iter(self.as_list())

    def __len__(self) -> int:
        return len(self._paths)

    def canonical(self, path: Optional[str]) -> Optional[str]:
        """Return the stored spelling of ``path``, or ``None`` when it is not a member."""
        if not path:
            return None
        return self._paths.get(category_key(path))

    def add(self, path: str) -> str:
        """Add a category path.

        Raises:
            AlreadyExistsError: If the path is already present in any casing.
        """
        key = category_key(path)
        if key in self._paths:
            raise AlreadyExistsError(f"Category {self._paths[key]!r} already exists.")
        self._paths[key] = path
        return path

    def remove(self, path: str) -> str:
        """Remove a category path and return its stored spelling.

        Descendant categories are left in place.

        Raises:
            NotFoundError: If the path is not present.
        """
        try:
            return self._paths.pop(category_key(path))
        except KeyError:
            raise NotFoundError(f"Category {path!r} does not exist.") from None

    def as_list(self) -> list[str]:
        """Return the categories deduplicated and sorted."""
        return canonical_categories(self._paths.values())


__all__ = ["SEPARATOR", "CategorySet", "split_category_path", "join_category_path"]
