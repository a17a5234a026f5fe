from __future__ import annotations

"""
Item Registry.

Default implementation of the host-side test registry: it creates items,
holds the root collection and exposes the resolve hook the host calls to
populate the tree lazily.
"""

from typing import Awaitable, Callable, Optional

from gotestexplorer.domain.identity import parse_test_id
from gotestexplorer.domain.tree_models import ItemCollection, TreeItem

ResolveHandler = Callable[[Optional[TreeItem]], Awaitable[None]]


class ItemRegistry:
    """
    Root of the test tree.

    Attributes:
        items: Top-level module/workspace items.
        resolve_handler: Hook called with ``None`` to resolve the roots or
                         with an item to resolve its children. Installed by
                         the explorer.
    """

    def __init__(self) -> None:
        self.items = ItemCollection()
        self.resolve_handler: Optional[ResolveHandler] = None

    def create_node(self, item_id: str, label: str, location: str) -> TreeItem:
        """
        Create a detached item. Kind and name are derived from the id.

        Raises:
            InvalidItemIdError: *item_id* is not an explorer identifier.
        """
        _, kind, name = parse_test_id(item_id)
        return TreeItem(item_id, label, location, kind, name)

    def is_attached(self, item: TreeItem) -> bool:
        """True if *item* is reachable from :attr:`items`."""
        collection = item.collection
        while collection is not None:
            if collection is self.items:
                return True
            owner = collection.owner
            if owner is None:
                return False
            collection = owner.collection
        return False
