from __future__ import annotations

"""
Explorer Error Taxonomy.

Recoverable conditions (unreadable directories, unparsable files) never
surface as exceptions to the host; they degrade to fewer items. The classes
below cover programming errors and malformed input.
"""


class ExplorerError(Exception):
    """Base class for all explorer errors."""


class TreeConsistencyError(ExplorerError):
    """The item tree would end up in an inconsistent state (e.g. re-parenting)."""


class UnknownItemError(TreeConsistencyError):
    """A resolve was requested for an item that is not part of the tree."""

    def __init__(self, item_id: str) -> None:
        super().__init__(f"Item is not attached to the test tree: {item_id}")
        self.item_id = item_id


class InvalidItemIdError(ExplorerError, ValueError):
    """A string could not be parsed as an explorer item identifier."""


class SymbolParseError(ExplorerError):
    """A document could not be turned into a symbol listing."""
