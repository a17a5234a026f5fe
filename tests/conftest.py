from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

1. Puts the 'src' directory on sys.path.
2. Provides in-memory Go workspaces and an explorer factory shared by the
   unit and integration suites.
"""

import os
import sys
from typing import Callable, Dict, List, Sequence, Tuple

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

from gotestexplorer.core.explorer.explorer import GoTestExplorer  # noqa: E402
from gotestexplorer.core.explorer.registry import ItemRegistry  # noqa: E402
from gotestexplorer.infra.fs import MemoryFileSystem  # noqa: E402

ExplorerSetup = Tuple[ItemRegistry, GoTestExplorer, MemoryFileSystem]


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def make_explorer() -> Callable[..., ExplorerSetup]:
    """
    Return a factory building an explorer over an in-memory workspace.

    Usage:
        registry, explorer, fs = make_explorer(["/src/proj"], {"/src/proj/go.mod": "module test"})
    """
    def _factory(
            folders: Sequence[str],
            files: Dict[str, str],
            **kwargs,
    ) -> ExplorerSetup:
        fs = MemoryFileSystem.from_files(files)
        registry = ItemRegistry()
        explorer = GoTestExplorer(registry, fs, workspace_folders=folders, **kwargs)
        return registry, explorer, fs

    return _factory


@pytest.fixture
def tree_ids() -> Callable[[object], List[str]]:
    """Return a helper flattening a collection into ids, depth-first."""
    def _walk(collection) -> List[str]:
        out: List[str] = []
        for item in collection:
            out.append(item.id)
            out.extend(_walk(item.children))
        return out

    return _walk
