"""Catalog and shortcut errors."""


class CatalogError(Exception):
    """Base exception for catalog operations."""


class NotFoundError(CatalogError):
    """Raised when an entry or category is not present in the catalog."""


class AlreadyExistsError(CatalogError):
    """Raised when adding a category that already exists."""


class InvalidCategoryError(CatalogError):
    """Raised when a category path has no usable segments."""


class RootCategoryError(CatalogError):
    """Raised when an operation targets the synthetic root category."""


class NotAccessibleError(CatalogError):
    """Raised when a file cannot be inspected on disk."""


class ShortcutError(CatalogError):
    """Base exception for shortcut operations."""


class ShortcutCreateError(ShortcutError):
    """Raised when a shortcut file cannot be written."""


class ShortcutResolveError(ShortcutError):
    """Raised by providers when a shortcut target cannot be read."""
