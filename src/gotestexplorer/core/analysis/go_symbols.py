from __future__ import annotations

"""
Go Source Symbol Scanner.

A lightweight, dependency-free symbol provider for Go test files. It does
not type-check anything: it recognizes top-level ``func`` and ``type``
declarations line by line, which is all the test tree needs. Methods are
nested under their receiver type when that type is declared in the same
file, mirroring the outline produced by gopls.
"""

import logging
import re
from typing import Dict, List, Tuple

from gotestexplorer.domain.errors import SymbolParseError
from gotestexplorer.domain.tree_models import Document, SourceRange, Symbol, SymbolKind

logger = logging.getLogger(__name__)

_PACKAGE_RX = re.compile(r"^\s*package\s+\w+", re.MULTILINE)
_BLOCK_COMMENT_RX = re.compile(r"/\*.*?\*/", re.DOTALL)

_FUNC_RX = re.compile(
    r"^[ \t]*func\s+(?P<name>\w+)\s*(?:\[[^\]]*\])?\s*\((?P<params>[^)]*)\)"
)
_METHOD_RX = re.compile(
    r"^[ \t]*func\s+\(\s*(?:\w+\s+)?(?P<ptr>\*?)\s*(?P<recv>\w+)(?:\[[^\]]*\])?\s*\)"
    r"\s*(?P<name>\w+)\s*\((?P<params>[^)]*)\)"
)
_TYPE_RX = re.compile(r"^[ \t]*type\s+(?P<name>\w+)(?:\[[^\]]*\])?\s+(?P<kind>struct|interface)\b")

_TYPE_KINDS: Dict[str, SymbolKind] = {
    "struct": SymbolKind.STRUCT,
    "interface": SymbolKind.INTERFACE,
}


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def go_document_symbols(document: Document) -> List[Symbol]:
    """
    Scan a Go document for top-level functions, methods and types.

    Args:
        document: Document to scan.

    Returns:
        List[Symbol]: Symbols in declaration order. Methods appear as
                      children of their receiver type when it is declared
                      in the same file, otherwise at top level.

    Raises:
        SymbolParseError: Unterminated block comment or no package clause.
    """
    source = _strip_block_comments(document.text)
    if not _PACKAGE_RX.search(source):
        raise SymbolParseError(f"No package clause in {document.path}")

    lines = source.splitlines()

    # (line, symbol) for ordering; methods collected per receiver
    top_level: List[Tuple[int, Symbol]] = []
    types: Dict[str, Tuple[int, str, SourceRange, str]] = {}
    methods: Dict[str, List[Symbol]] = {}

    for idx, line in enumerate(lines):
        m = _METHOD_RX.match(line)
        if m:
            recv = m.group("recv")
            prefix = "*" if m.group("ptr") else ""
            sym = Symbol(
                name=f"({prefix}{recv}).{m.group('name')}",
                kind=SymbolKind.METHOD,
                range=_declaration_range(lines, idx),
                detail=f"({m.group('params').strip()})",
            )
            methods.setdefault(recv, []).append(sym)
            continue

        m = _FUNC_RX.match(line)
        if m:
            top_level.append((idx, Symbol(
                name=m.group("name"),
                kind=SymbolKind.FUNCTION,
                range=_declaration_range(lines, idx),
                detail=f"({m.group('params').strip()})",
            )))
            continue

        m = _TYPE_RX.match(line)
        if m:
            types[m.group("name")] = (idx, m.group("kind"), _declaration_range(lines, idx), "")

    for name, (idx, kind, rng, detail) in types.items():
        children = tuple(methods.pop(name, []))
        top_level.append((idx, Symbol(name, _TYPE_KINDS[kind], rng, detail, children)))

    # Methods on types declared elsewhere stay at top level
    for syms in methods.values():
        top_level.extend((s.range.start_line, s) for s in syms)

    top_level.sort(key=lambda pair: pair[0])
    return [sym for _, sym in top_level]


# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _strip_block_comments(text: str) -> str:
    """Blank out /* */ comments, keeping line numbers intact."""
    stripped = _BLOCK_COMMENT_RX.sub(lambda m: "\n" * m.group(0).count("\n"), text)
    if "/*" in _strip_line_comments(stripped):
        raise SymbolParseError("Unterminated block comment")
    return stripped


def _strip_line_comments(text: str) -> str:
    return "\n".join(line.split("//", 1)[0] for line in text.splitlines())


def _declaration_range(lines: List[str], start: int) -> SourceRange:
    """Span from the declaration line to the closing brace at its indentation."""
    first = lines[start]
    indent = len(first) - len(first.lstrip())
    if first.rstrip().endswith("}") or "{" not in first:
        return SourceRange(start, indent, start, len(first))

    for idx in range(start + 1, len(lines)):
        line = lines[idx]
        body = line.lstrip()
        if body.startswith("}") and len(line) - len(body) <= indent:
            return SourceRange(start, indent, idx, len(line))
    return SourceRange(start, indent, start, len(first))
