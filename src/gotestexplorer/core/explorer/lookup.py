from __future__ import annotations

"""
Tree Lookup.

Depth-first queries over the item tree, independent of item depth.
"""

from typing import Iterator, List

from gotestexplorer.domain.identity import canonical_path
from gotestexplorer.domain.tree_models import ItemCollection, TreeItem


def walk_items(collection: ItemCollection) -> Iterator[TreeItem]:
    """Yield every item below *collection* in depth-first, pre-order."""
    stack: List[TreeItem] = list(reversed(list(collection)))
    while stack:
        item = stack.pop()
        yield item
        stack.extend(reversed(list(item.children)))


def find_items(collection: ItemCollection, location: str) -> List[TreeItem]:
    """
    Collect the items located at *location*.

    For a test file this is the file item followed by all of its test,
    benchmark and example leaves.
    """
    target = canonical_path(location)
    return [item for item in walk_items(collection) if item.location == target]
