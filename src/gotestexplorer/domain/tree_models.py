from __future__ import annotations

"""
Test Tree Data Models.

Provides the mutable tree items handed to the host UI, the id-keyed ordered
collection that owns them, and the immutable value objects exchanged with
the symbol provider (documents, symbols, source ranges, leaf descriptors).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

from gotestexplorer.domain.constants import LEAF_KINDS
from gotestexplorer.domain.errors import TreeConsistencyError

# -----------------------------------------------------------------------------
# SOURCE-LEVEL VALUE OBJECTS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class SourceRange:
    """
    Zero-based line/column span inside a document.

    Attributes:
        start_line: First line of the span.
        start_col: Column on the first line.
        end_line: Last line of the span.
        end_col: Column on the last line (exclusive).
    """
    start_line: int = 0
    start_col: int = 0
    end_line: int = 0
    end_col: int = 0


class SymbolKind(str, Enum):
    """Symbol categories reported by a symbol provider."""
    FUNCTION = "function"
    METHOD = "method"
    STRUCT = "struct"
    INTERFACE = "interface"
    CLASS = "class"
    NAMESPACE = "namespace"
    VARIABLE = "variable"
    CONSTANT = "constant"
    FIELD = "field"


@dataclass(frozen=True)
class Symbol:
    """
    One entry of a hierarchical document symbol listing.

    Attributes:
        name: Symbol name. Methods may use the ``(*Recv).Name`` form.
        kind: Symbol category.
        range: Span of the whole declaration.
        detail: Free-form extra text (e.g. the parameter list).
        children: Nested symbols (methods of a type, closures, ...).
    """
    name: str
    kind: SymbolKind
    range: SourceRange = field(default_factory=SourceRange)
    detail: str = ""
    children: Tuple["Symbol", ...] = ()


@dataclass(frozen=True)
class Document:
    """
    A text document as delivered by open/change notifications.

    Attributes:
        path: Location of the document.
        text: Full current content.
        version: Monotonic version counter maintained by the host.
    """
    path: str
    text: str
    version: int = 0


@dataclass(frozen=True)
class LeafDescriptor:
    """
    A test, benchmark or example found in a file.

    Attributes:
        name: Identity name (function name or ``(*Recv).Method``).
        kind: Mapped item kind (test/benchmark/example).
        range: Source span of the declaration.
    """
    name: str
    kind: str
    range: SourceRange = field(default_factory=SourceRange)


# -----------------------------------------------------------------------------
# TREE ITEMS
# -----------------------------------------------------------------------------

class TreeItem:
    """
    A node of the test tree.

    Items are created by the registry, owned by exactly one collection and
    never moved: a new location yields a new identifier and a new item.
    """

    def __init__(
            self,
            item_id: str,
            label: str,
            location: str,
            kind: str,
            name: Optional[str] = None,
            source_range: Optional[SourceRange] = None,
    ) -> None:
        self.id = item_id
        self.label = label
        self.location = location
        self.kind = kind
        self.name = name
        self.range = source_range
        self.parent: Optional[TreeItem] = None
        self.collection: Optional[ItemCollection] = None
        self.children = ItemCollection(owner=self)
        self.can_resolve_children = kind not in LEAF_KINDS

    @property
    def is_leaf(self) -> bool:
        return self.kind in LEAF_KINDS

    def __repr__(self) -> str:
        return f"TreeItem({self.id!r})"


class ItemCollection:
    """
    Ordered, id-keyed set of child items.

    Iteration follows insertion order. ``owner`` is the parent item, or
    ``None`` for the registry's root collection.
    """

    def __init__(self, owner: Optional[TreeItem] = None) -> None:
        self.owner = owner
        self._items: Dict[str, TreeItem] = {}

    def add(self, item: TreeItem) -> TreeItem:
        """
        Attach *item* to this collection.

        Raises:
            TreeConsistencyError: The item already belongs to another parent,
                                  or another instance holds the same id here.
        """
        existing = self._items.get(item.id)
        if existing is item:
            return item
        if existing is not None:
            raise TreeConsistencyError(f"Duplicate item id in collection: {item.id}")
        if item.collection is not None:
            raise TreeConsistencyError(f"Item already has an owner: {item.id}")

        self._items[item.id] = item
        item.parent = self.owner
        item.collection = self
        return item

    def get(self, item_id: str) -> Optional[TreeItem]:
        return self._items.get(item_id)

    def delete(self, item_id: str) -> Optional[TreeItem]:
        """Detach and return the item with *item_id*, if present."""
        item = self._items.pop(item_id, None)
        if item is not None:
            item.parent = None
            item.collection = None
        return item

    def ids(self) -> List[str]:
        return list(self._items)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._items

    def __iter__(self) -> Iterator[TreeItem]:
        # Snapshot so callers may delete while iterating
        return iter(list(self._items.values()))

    def __len__(self) -> int:
        return len(self._items)
