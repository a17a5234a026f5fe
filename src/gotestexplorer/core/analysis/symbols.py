from __future__ import annotations

"""
Test Symbol Mapping.

Turns the hierarchical symbol listing of a document into the flat list of
test, benchmark and example leaves shown under its file item. The symbol
provider is injected, so any language backend (gopls, a regex scanner, a
test double) can feed the mapper.
"""

import inspect
import logging
from typing import Awaitable, Callable, List, Optional, Sequence, Set, Tuple, Union

from gotestexplorer.domain.constants import (
    KIND_TEST,
    SUITE_IMPORT_RX,
    SUITE_METHOD_NAME_RX,
    TEST_FUNC_RX,
    TEST_METHOD_RX,
)
from gotestexplorer.domain.tree_models import Document, LeafDescriptor, Symbol, SymbolKind

logger = logging.getLogger(__name__)

SymbolProvider = Callable[
    [Document],
    Union[Sequence[Symbol], Awaitable[Sequence[Symbol]]],
]

_TYPE_KINDS = (SymbolKind.STRUCT, SymbolKind.CLASS, SymbolKind.INTERFACE)


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

async def load_symbols(provider: SymbolProvider, document: Document) -> List[Symbol]:
    """
    Ask *provider* for the symbols of *document*.

    Any failure of the provider counts as a document without symbols: the
    caller then removes every leaf of the file instead of failing.

    Args:
        provider: Sync or async symbol provider.
        document: Document to analyze.

    Returns:
        List[Symbol]: The symbol listing, empty on failure.
    """
    try:
        result = provider(document)
        if inspect.isawaitable(result):
            result = await result
        return list(result or [])
    except Exception as e:
        logger.warning(f"Symbol extraction failed for {document.path}: {e}")
        return []


def imports_suite_package(text: str) -> bool:
    """True if a Go source imports the testify ``suite`` package."""
    return bool(SUITE_IMPORT_RX.search(text or ""))


def map_symbols(symbols: Sequence[Symbol], suite_methods: bool = False) -> List[LeafDescriptor]:
    """
    Extract test leaves from a symbol listing.

    Top-level functions named ``Test*``, ``Benchmark*`` or ``Example*``
    (followed by an upper-case letter) map to a leaf of the matching kind.
    Suite methods (``(*Recv).TestX``) nested in such a function are emitted
    as additional ``test`` leaves next to, not under, the function that runs
    them. Methods declared on a receiver type only count when
    *suite_methods* is set and the listing has a top-level ``Test*`` runner.

    Args:
        symbols: Hierarchical symbol listing of one document.
        suite_methods: Whether the document can run suites (see
                       :func:`imports_suite_package`).

    Returns:
        List[LeafDescriptor]: Leaves in symbol order, without duplicates.
    """
    runnable = suite_methods and any(_is_test_runner(sym) for sym in symbols)

    leaves: List[LeafDescriptor] = []
    seen: Set[Tuple[str, str]] = set()
    for sym in symbols:
        _visit(sym, None, nested=False, receiver_methods=runnable, leaves=leaves, seen=seen)
    return leaves


# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _is_test_runner(sym: Symbol) -> bool:
    match = TEST_FUNC_RX.match(sym.name) if sym.kind == SymbolKind.FUNCTION else None
    return bool(match) and match.group("type") == "Test"


def _visit(
        sym: Symbol,
        parent_type: Optional[str],
        nested: bool,
        receiver_methods: bool,
        leaves: List[LeafDescriptor],
        seen: Set[Tuple[str, str]],
) -> None:
    if sym.kind == SymbolKind.FUNCTION:
        # Closures and local functions are never tests
        if nested:
            return
        match = TEST_FUNC_RX.match(sym.name)
        if not match:
            return
        _emit(leaves, seen, LeafDescriptor(sym.name, match.group("type").lower(), sym.range))
        for child in sym.children:
            _visit(child, None, nested=True, receiver_methods=receiver_methods, leaves=leaves, seen=seen)
        return

    if sym.kind == SymbolKind.METHOD:
        # Outside a runner function a method needs a runnable suite
        if not nested and not receiver_methods:
            return
        name = _suite_method_name(sym, parent_type)
        if name:
            _emit(leaves, seen, LeafDescriptor(name, KIND_TEST, sym.range))
        return

    owner = sym.name if sym.kind in _TYPE_KINDS else parent_type
    for child in sym.children:
        _visit(child, owner, nested=nested, receiver_methods=receiver_methods, leaves=leaves, seen=seen)


def _suite_method_name(sym: Symbol, parent_type: Optional[str]) -> Optional[str]:
    """Compound ``(*Recv).Method`` name of a suite method, or None."""
    if TEST_METHOD_RX.match(sym.name):
        return sym.name
    if parent_type and SUITE_METHOD_NAME_RX.match(sym.name):
        return f"(*{parent_type}).{sym.name}"
    return None


def _emit(leaves: List[LeafDescriptor], seen: Set[Tuple[str, str]], leaf: LeafDescriptor) -> None:
    key = (leaf.kind, leaf.name)
    if key in seen:
        return
    seen.add(key)
    leaves.append(leaf)
