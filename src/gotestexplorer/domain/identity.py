from __future__ import annotations

"""
Item Identity Scheme.

Every tree item is keyed by a string derived from its location, its kind
and (for tests, benchmarks and examples) its function name:

    file:///src/proj?module
    file:///src/proj/foo_test.go?file
    file:///src/proj/foo_test.go?test#TestFoo
    file:///src/proj/suite_test.go?test#(*ExampleTestSuite).TestExample

Equal arguments always produce equal identifiers, which is what keeps item
identity stable across tree rebuilds and drives reconciliation.
"""

import os
import posixpath
import re
from typing import Optional, Tuple
from urllib.parse import quote, unquote

from gotestexplorer.domain.constants import ALL_KINDS, LEAF_KINDS
from gotestexplorer.domain.errors import InvalidItemIdError

_SCHEME = "file://"
_PATH_SAFE = "/:@-._~!$&'()*+,;="
_NAME_SAFE = "()*."
_DRIVE_RX = re.compile(r"^[A-Za-z]:")


# -----------------------------------------------------------------------------
# PATH CANONICALIZATION
# -----------------------------------------------------------------------------

def canonical_path(path: str) -> str:
    """
    Normalize a filesystem location into the form used inside identifiers.

    Backslashes become forward slashes, redundant separators and dot segments
    are collapsed, Windows drive paths gain a leading slash and relative
    paths are anchored at the current working directory.

    Args:
        path: Raw filesystem path.

    Returns:
        str: Canonical absolute POSIX-style path.
    """
    p = str(path).replace("\\", "/")
    if _DRIVE_RX.match(p):
        p = "/" + p
    elif not p.startswith("/"):
        p = os.path.abspath(p).replace("\\", "/")
        if _DRIVE_RX.match(p):
            p = "/" + p

    p = posixpath.normpath(p)
    # POSIX keeps a double leading slash; identifiers never do
    return "/" + p.lstrip("/")


def parent_dir(path: str) -> str:
    """Return the canonical parent directory of a location."""
    return posixpath.dirname(canonical_path(path))


def base_name(path: str) -> str:
    """Return the last segment of a location."""
    return posixpath.basename(canonical_path(path))


def is_within(path: str, root: str) -> bool:
    """True if *path* is *root* itself or lies anywhere below it."""
    p = canonical_path(path)
    r = canonical_path(root)
    if p == r:
        return True
    return p.startswith(r.rstrip("/") + "/")


# -----------------------------------------------------------------------------
# IDENTIFIERS
# -----------------------------------------------------------------------------

def test_id(location: str, kind: str, name: Optional[str] = None) -> str:
    """
    Build the identifier of a tree item.

    Args:
        location: Directory or file the item represents.
        kind: One of the item kinds in ``ALL_KINDS``.
        name: Function name or compound suite method name. Required for
              leaf kinds and ignored for every other kind.

    Returns:
        str: The item identifier.

    Raises:
        ValueError: Unknown kind, or leaf kind without a name.
    """
    if kind not in ALL_KINDS:
        raise ValueError(f"Unknown item kind: {kind!r}")

    item_id = f"{_SCHEME}{quote(canonical_path(location), safe=_PATH_SAFE)}?{kind}"
    if kind in LEAF_KINDS:
        if not name:
            raise ValueError(f"A {kind} identifier requires a name")
        item_id += "#" + quote(name, safe=_NAME_SAFE)
    return item_id


# Keep pytest from collecting the helper when it is imported into test modules
test_id.__test__ = False  # type: ignore[attr-defined]


def parse_test_id(item_id: str) -> Tuple[str, str, Optional[str]]:
    """
    Split an identifier back into ``(location, kind, name)``.

    Raises:
        InvalidItemIdError: The string was not produced by :func:`test_id`.
    """
    if not item_id.startswith(_SCHEME):
        raise InvalidItemIdError(f"Not an item identifier: {item_id!r}")

    head, has_fragment, fragment = item_id[len(_SCHEME):].partition("#")
    path, has_query, kind = head.rpartition("?")
    if not has_query or not path or kind not in ALL_KINDS:
        raise InvalidItemIdError(f"Not an item identifier: {item_id!r}")

    name = unquote(fragment) if has_fragment else None
    if kind in LEAF_KINDS and not name:
        raise InvalidItemIdError(f"Leaf identifier without a name: {item_id!r}")
    if kind not in LEAF_KINDS:
        name = None

    return unquote(path), kind, name
