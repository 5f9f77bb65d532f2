"""Category and file-entry model for the catalog."""

from .categories import CategorySet, join_category_path, split_category_path
from .entries import ALL, UNCATEGORIZED, AddResult, CategoryFilter, FileCatalog
from .session import CatalogSession, RemovalResult
from .tree import ROOT_LABEL, CategoryNode, build_category_tree

__all__ = [
    "ALL",
    "UNCATEGORIZED",
    "AddResult",
    "CatalogSession",
    "CategoryFilter",
    "CategoryNode",
    "CategorySet",
    "FileCatalog",
    "ROOT_LABEL",
    "RemovalResult",
    "build_category_tree",
    "join_category_path",
    "split_category_path",
]
