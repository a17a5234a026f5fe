from __future__ import annotations

"""
Root, Package and File Discovery.

Computes the top-level forest (one item per module, plus a workspace item
for roots holding files outside every module) and the flattened children
of a module/workspace root: every directory that directly contains test
files becomes a package one hop below the root, regardless of depth.
"""

import logging
import posixpath
from dataclasses import dataclass
from typing import Callable, Iterable, List, Set, Tuple

from gotestexplorer.core.analysis.filters import is_source_file
from gotestexplorer.core.analysis.modules import ModuleResolver
from gotestexplorer.domain.constants import KIND_MODULE, KIND_WORKSPACE
from gotestexplorer.domain.identity import canonical_path, is_within
from gotestexplorer.infra.fs import FileType

logger = logging.getLogger(__name__)

TestFilePredicate = Callable[[str], bool]


@dataclass(frozen=True)
class RootDescriptor:
    """
    A top-level item to materialize.

    Attributes:
        kind: ``module`` or ``workspace``.
        path: Module root or workspace folder.
        label: Declared module name or folder name.
    """
    kind: str
    path: str
    label: str


# -----------------------------------------------------------------------------
# ROOT BUILDER
# -----------------------------------------------------------------------------

def build_roots(
        workspace_folders: Iterable[str],
        resolver: ModuleResolver,
        source_extensions: Iterable[str],
) -> List[RootDescriptor]:
    """
    Compute the top-level items for the configured workspace folders.

    Expects ``resolver.build()`` to have run for the same folders.

    Args:
        workspace_folders: Workspace roots in configured order.
        resolver: Module resolver holding the Module Map.
        source_extensions: Extensions of plain source files.

    Returns:
        List[RootDescriptor]: Roots in emission order. Within one folder,
                              module items precede the workspace item.
    """
    exts = list(source_extensions)
    roots: List[RootDescriptor] = []
    seen: Set[Tuple[str, str]] = set()

    def emit(kind: str, path: str) -> None:
        if (kind, path) in seen:
            return
        seen.add((kind, path))
        label = resolver.module_name(path) if kind == KIND_MODULE else posixpath.basename(path)
        roots.append(RootDescriptor(kind, path, label))

    for folder in workspace_folders:
        root = canonical_path(folder)
        owner = resolver.owner_of(root)
        nested = [m for m in resolver.module_roots(under=root) if m != root]

        if owner:
            emit(KIND_MODULE, owner)
            for module_root in nested:
                emit(KIND_MODULE, module_root)
            continue

        for module_root in nested:
            emit(KIND_MODULE, module_root)
        if not nested or _has_unowned_sources(root, resolver, exts):
            emit(KIND_WORKSPACE, root)

    logger.info(f"Discovered {len(roots)} root item(s)")
    return roots


def _has_unowned_sources(root: str, resolver: ModuleResolver, exts: List[str]) -> bool:
    """True if some directory under *root* owned by no module holds a source file."""
    for directory, owner in list(resolver.module_map.items()):
        if owner or not is_within(directory, root):
            continue
        for name, ftype in resolver.list_directory(directory):
            if ftype == FileType.FILE and is_source_file(name, exts):
                return True
    return False


# -----------------------------------------------------------------------------
# PACKAGE / FILE DISCOVERY
# -----------------------------------------------------------------------------

def discover_root_children(
        root: str,
        owner: str,
        resolver: ModuleResolver,
        is_test_file: TestFilePredicate,
) -> Tuple[List[str], List[str]]:
    """
    Flatly enumerate the packages and root-level test files of a root.

    Directories owned by a different module (nested module subtrees) are
    not entered. A directory with test files becomes a package; the walk
    still continues below it so deeper packages surface as siblings.

    Args:
        root: Module root or workspace folder.
        owner: Owner value the walked directories must have (the module
               root for modules, '' for workspaces).
        resolver: Module resolver.
        is_test_file: Predicate on file base names.

    Returns:
        Tuple[List[str], List[str]]: (package directories in depth-first
                                      order, test files directly in root).
    """
    root = canonical_path(root)
    packages: List[str] = []
    root_files: List[str] = []

    stack: List[str] = [root]
    while stack:
        directory = stack.pop()
        if directory != root and resolver.owner_of(directory) != owner:
            continue

        entries = resolver.list_directory(directory)
        tests = _test_files(directory, entries, is_test_file)
        if directory == root:
            root_files = tests
        elif tests:
            packages.append(directory)

        stack.extend(reversed(resolver.subdirectories(directory, entries)))

    return packages, root_files


def discover_package_files(
        package_dir: str,
        resolver: ModuleResolver,
        is_test_file: TestFilePredicate,
) -> List[str]:
    """Test files directly inside *package_dir* (subdirectories excluded)."""
    directory = canonical_path(package_dir)
    return _test_files(directory, resolver.list_directory(directory), is_test_file)


def _test_files(directory: str, entries, is_test_file: TestFilePredicate) -> List[str]:
    return [
        posixpath.join(directory, name)
        for name, ftype in entries
        if ftype == FileType.FILE and is_test_file(name)
    ]
