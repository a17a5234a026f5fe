from __future__ import annotations

"""
Leaf Reconciliation.

Applies a freshly mapped leaf set to a file item with the minimal edits:
leaves that disappeared are removed, new leaves are created, leaves present
on both sides keep their item instance untouched.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from gotestexplorer.core.explorer.registry import ItemRegistry
from gotestexplorer.domain.identity import test_id
from gotestexplorer.domain.tree_models import LeafDescriptor, TreeItem

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReconcileResult:
    """Identifiers added to and removed from a file item."""
    added: Tuple[str, ...] = ()
    removed: Tuple[str, ...] = ()

    @property
    def changed(self) -> bool:
        return bool(self.added or self.removed)


def reconcile_leaves(
        registry: ItemRegistry,
        file_item: TreeItem,
        leaves: Sequence[LeafDescriptor],
) -> ReconcileResult:
    """
    Make the children of *file_item* match *leaves*.

    Args:
        registry: Registry used to create new leaf items.
        file_item: The file item to update.
        leaves: Desired leaves, in display order.

    Returns:
        ReconcileResult: What was added and removed.
    """
    desired: Dict[str, LeafDescriptor] = {}
    for leaf in leaves:
        desired.setdefault(test_id(file_item.location, leaf.kind, leaf.name), leaf)

    removed: List[str] = [child.id for child in file_item.children if child.id not in desired]
    for item_id in removed:
        file_item.children.delete(item_id)

    added: List[str] = []
    for item_id, leaf in desired.items():
        if item_id in file_item.children:
            continue
        item = registry.create_node(item_id, _leaf_label(leaf.name), file_item.location)
        item.range = leaf.range
        file_item.children.add(item)
        added.append(item_id)

    result = ReconcileResult(tuple(added), tuple(removed))
    if result.changed:
        logger.debug(
            f"Reconciled {file_item.location}: +{len(added)} -{len(removed)}"
        )
    return result


def _leaf_label(name: str) -> str:
    # Suite methods are labeled by their method name
    if name.startswith("("):
        return name.rsplit(".", 1)[-1]
    return name
