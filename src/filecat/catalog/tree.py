"""Projection of the flat category list into a display hierarchy."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional

from filecat.state.models import canonical_categories, category_key

from .categories import SEPARATOR, split_category_path

ROOT_LABEL = "All categories"


@dataclass(slots=True)
class CategoryNode:
    """A node in the category tree.

    Attributes:
        label: Last path segment, or ``ROOT_LABEL`` for the root.
        path: Accumulated path from the root; ``None`` for the root.
        category: Stored category this node stands for, ``None`` for the root
            and for structural nodes that only group children.
        children: Child nodes in sorted order.
    """

    label: str
    path: Optional[str] = None
    category: Optional[str] = None
    children: list[CategoryNode] = field(default_factory=list)

    @property
    def is_root(self) -> bool:
        return self.path is None

    @property
    def is_category(self) -> bool:
        return self.category is not None

    @property
    def filter_path(self) -> Optional[str]:
        """Category to filter by when this node is selected, ``None`` for no filter."""
        return self.category

    def find(self, path: str) -> Optional[CategoryNode]:
        """Return the node whose accumulated path equals ``path`` (case-insensitive)."""
        key = category_key(SEPARATOR.join(split_category_path(path)))
        for node, _ in self.walk():
            if node.path is not None and category_key(node.path) == key:
                return node
        return None

    def walk(self, depth: int = 0) -> Iterator[tuple[CategoryNode, int]]:
        """Yield ``(node, depth)`` pairs depth-first, starting with this node."""
        yield self, depth
        for child in self.children:
            yield from child.walk(depth + 1)


def build_category_tree(categories: Iterable[Optional[str]]) -> CategoryNode:
    """Build the category tree under a synthetic root.

    Intermediate nodes are keyed by their accumulated prefix so categories
    sharing a prefix share the node. Prefixes that are not stored categories
    become structural nodes.

    Args:
        categories: Flat category paths.

    Returns:
        CategoryNode: Root node; the same input always yields the same tree.
    """
    ordered = canonical_categories(categories)
    members = {
        category_key(SEPARATOR.join(split_category_path(path))): path for path in ordered
    }
    root = CategoryNode(label=ROOT_LABEL)
    nodes: dict[str, CategoryNode] = {}

    for full_path in ordered:
        parent = root
        accumulated = ""
        for segment in split_category_path(full_path):
            accumulated = segment if not accumulated else f"{accumulated}{SEPARATOR}{segment}"
            key = category_key(accumulated)
            node = nodes.get(key)
            if node is None:
                node = CategoryNode(label=segment, path=accumulated, category=members.get(key))
                parent.children.append(node)
                nodes[key] = node
            parent = node

    return root


__all__ = ["ROOT_LABEL", "CategoryNode", "build_category_tree"]
