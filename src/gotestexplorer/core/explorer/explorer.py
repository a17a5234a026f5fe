from __future__ import annotations

"""
Go Test Explorer.

Coordinates module resolution, lazy discovery and leaf reconciliation
behind the entry points the host drives: the resolve hook, document
open/change notifications, file watcher events and workspace folder
changes. All entry points are coroutines meant to run on one event loop;
the tree is only mutated in synchronous stretches, so a single update is
never interleaved with another.
"""

import logging
import posixpath
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from gotestexplorer.core.analysis.filters import compile_patterns, is_test_file, matches_any
from gotestexplorer.core.analysis.go_symbols import go_document_symbols
from gotestexplorer.core.analysis.modules import ModuleResolver
from gotestexplorer.core.analysis.symbols import (
    SymbolProvider,
    imports_suite_package,
    load_symbols,
    map_symbols,
)
from gotestexplorer.core.explorer.discovery import (
    build_roots,
    discover_package_files,
    discover_root_children,
)
from gotestexplorer.core.explorer.lookup import find_items, walk_items
from gotestexplorer.core.explorer.reconciler import ReconcileResult, reconcile_leaves
from gotestexplorer.core.explorer.registry import ItemRegistry
from gotestexplorer.domain.config import validate_config
from gotestexplorer.domain.constants import (
    DEFAULT_EXCLUDE_PATTERNS,
    DEFAULT_MANIFEST_NAME,
    DEFAULT_SOURCE_EXTENSIONS,
    DEFAULT_TEST_FILE_SUFFIX,
    KIND_FILE,
    KIND_MODULE,
    KIND_PACKAGE,
    KIND_WORKSPACE,
    ROOT_KINDS,
)
from gotestexplorer.domain.errors import UnknownItemError
from gotestexplorer.domain.identity import base_name, canonical_path, is_within, parent_dir, test_id
from gotestexplorer.domain.tree_models import (
    Document,
    ItemCollection,
    LeafDescriptor,
    TreeItem,
)
from gotestexplorer.infra.fs import WorkspaceFileSystem
from gotestexplorer.infra.logging import configure_logging, logging_config_from_settings

logger = logging.getLogger(__name__)


class GoTestExplorer:
    """
    Maintains the discovery tree of a Go workspace inside an ItemRegistry.

    Args:
        registry: Host registry receiving the items.
        fs: Filesystem collaborator.
        symbol_provider: Document -> symbols capability (sync or async).
        workspace_folders: Workspace roots, in configured order.
        manifest_name: Module manifest file name.
        test_file_suffix: Suffix identifying test files.
        source_extensions: Extensions of plain source files.
        exclude_patterns: Regexes for directory names never walked.
    """

    def __init__(
            self,
            registry: ItemRegistry,
            fs: WorkspaceFileSystem,
            symbol_provider: SymbolProvider = go_document_symbols,
            workspace_folders: Iterable[str] = (),
            manifest_name: str = DEFAULT_MANIFEST_NAME,
            test_file_suffix: str = DEFAULT_TEST_FILE_SUFFIX,
            source_extensions: Sequence[str] = tuple(DEFAULT_SOURCE_EXTENSIONS),
            exclude_patterns: Sequence[str] = tuple(DEFAULT_EXCLUDE_PATTERNS),
    ) -> None:
        self.registry = registry
        self.fs = fs
        self.symbol_provider = symbol_provider
        self.workspace_folders: List[str] = _unique(canonical_path(f) for f in workspace_folders)
        self.test_file_suffix = test_file_suffix
        self.source_extensions = list(source_extensions)
        self.resolver = ModuleResolver(fs, manifest_name, compile_patterns(exclude_patterns))
        self._module_map_ready = False
        # Latest content delivered by document events, keyed by canonical path
        self._documents: Dict[str, str] = {}

        registry.resolve_handler = self.resolve

    @classmethod
    def from_config(
            cls,
            config: Mapping[str, Any],
            registry: ItemRegistry,
            fs: WorkspaceFileSystem,
            symbol_provider: SymbolProvider = go_document_symbols,
            *,
            apply_logging: bool = True,
    ) -> "GoTestExplorer":
        """
        Build an explorer from a configuration dict (validated here).

        Args:
            config: Raw configuration (see ``domain.config``).
            registry: Host registry receiving the items.
            fs: Filesystem collaborator.
            symbol_provider: Document -> symbols capability.
            apply_logging: Configure the root logger from ``log_level`` and
                           ``log_file``. A no-op when logging is already
                           configured.
        """
        settings, warnings = validate_config(dict(config))
        if apply_logging:
            configure_logging(logging_config_from_settings(settings))
        for w in warnings:
            logger.warning(w)
        return cls(
            registry,
            fs,
            symbol_provider,
            workspace_folders=settings["workspace_folders"],
            manifest_name=settings["manifest_name"],
            test_file_suffix=settings["test_file_suffix"],
            source_extensions=settings["source_extensions"],
            exclude_patterns=settings["exclude_patterns"],
        )

    # -------------------------------------------------------------------------
    # Lazy resolution
    # -------------------------------------------------------------------------

    async def resolve(self, item: Optional[TreeItem] = None) -> None:
        """
        Populate the children of *item*, or the roots when *item* is None.

        Idempotent: items that already exist are reused, never duplicated.

        Raises:
            UnknownItemError: *item* is not part of this explorer's tree.
        """
        if item is None:
            self._resolve_roots()
            return

        if not self.registry.is_attached(item):
            raise UnknownItemError(item.id)

        if item.kind in ROOT_KINDS:
            self._resolve_root_children(item)
        elif item.kind == KIND_PACKAGE:
            self._resolve_package(item)
        elif item.kind == KIND_FILE:
            await self._resolve_file(item)

    def _resolve_roots(self) -> None:
        self._ensure_module_map()
        for desc in build_roots(self.workspace_folders, self.resolver, self.source_extensions):
            self._get_or_create(self.registry.items, desc.kind, desc.path, desc.label)

    def _resolve_root_children(self, item: TreeItem) -> None:
        self._ensure_module_map()
        owner = item.location if item.kind == KIND_MODULE else ""
        packages, files = discover_root_children(
            item.location, owner, self.resolver, self.is_test_file
        )
        for package_dir in packages:
            self._get_or_create(item.children, KIND_PACKAGE, package_dir, posixpath.basename(package_dir))
        for path in files:
            self._get_or_create(item.children, KIND_FILE, path, posixpath.basename(path))

    def _resolve_package(self, item: TreeItem) -> None:
        for path in discover_package_files(item.location, self.resolver, self.is_test_file):
            self._get_or_create(item.children, KIND_FILE, path, posixpath.basename(path))

    async def _resolve_file(self, item: TreeItem) -> None:
        # Unsaved editor content wins over the copy on disk
        text = self._documents.get(item.location)
        if text is None:
            try:
                text = self.fs.read_file(item.location)
            except OSError as e:
                logger.warning(f"Cannot read {item.location}: {e}")
                reconcile_leaves(self.registry, item, [])
                return

        leaves = await self._map_document(Document(item.location, text))
        reconcile_leaves(self.registry, item, leaves)

    # -------------------------------------------------------------------------
    # Document and file events
    # -------------------------------------------------------------------------

    async def did_open(self, document: Document) -> Optional[ReconcileResult]:
        """Materialize the item path of an opened test file and refresh its leaves."""
        return await self._document_update(document)

    async def did_change(self, document: Document) -> Optional[ReconcileResult]:
        """Reconcile the leaves of an edited test file against its new content."""
        return await self._document_update(document)

    async def did_create_file(self, path: str) -> Optional[ReconcileResult]:
        """Handle a file created on disk: manifests reset the Module Map, test files are opened."""
        if base_name(path) == self.resolver.manifest_name:
            self._module_map_ready = False
            return None
        if not self.is_test_file(base_name(path)):
            return None
        try:
            text = self.fs.read_file(path)
        except OSError as e:
            logger.warning(f"Cannot read created file {path}: {e}")
            return None
        return await self._document_update(Document(canonical_path(path), text))

    async def did_delete_file(self, path: str) -> List[str]:
        """
        Drop the package/file items at or below a deleted path.

        A package left without files is dropped as well. Deleting a module
        manifest invalidates the Module Map.

        Returns:
            List[str]: Identifiers of the removed items.
        """
        target = canonical_path(path)
        if posixpath.basename(target) == self.resolver.manifest_name:
            self._module_map_ready = False

        for doc_path in [p for p in self._documents if is_within(p, target)]:
            del self._documents[doc_path]

        doomed = [
            item for item in walk_items(self.registry.items)
            if item.kind in (KIND_PACKAGE, KIND_FILE) and is_within(item.location, target)
        ]

        removed: List[str] = []
        for item in doomed:
            # Already gone with a removed package
            if not self.registry.is_attached(item):
                continue
            parent = item.parent
            item.collection.delete(item.id)
            removed.append(item.id)

            if parent is not None and parent.kind == KIND_PACKAGE and len(parent.children) == 0:
                parent.collection.delete(parent.id)
                removed.append(parent.id)

        if removed:
            logger.debug(f"Removed {len(removed)} item(s) for deleted path {target}")
        return removed

    async def did_change_workspace_folders(
            self,
            added: Iterable[str] = (),
            removed: Iterable[str] = (),
    ) -> None:
        """Apply a workspace folder change and rebuild the root items."""
        removed_paths = [canonical_path(p) for p in removed]
        self.workspace_folders = _unique(
            [f for f in self.workspace_folders if f not in removed_paths]
            + [canonical_path(p) for p in added]
        )

        for item in self.registry.items:
            if any(is_within(item.location, r) for r in removed_paths):
                self.registry.items.delete(item.id)
                logger.info(f"Removed root item {item.id}")

        self._module_map_ready = False
        self._resolve_roots()

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def find(self, path: str) -> List[TreeItem]:
        """All items located at *path*: the file item and its leaves, depth-first."""
        return find_items(self.registry.items, path)

    def is_test_file(self, file_name: str) -> bool:
        return is_test_file(file_name, self.test_file_suffix)

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------

    async def _document_update(self, document: Document) -> Optional[ReconcileResult]:
        if not self.is_test_file(base_name(document.path)):
            return None

        # Parse first; the tree edits below run without yielding to the loop
        leaves = await self._map_document(document)

        file_item = self._ensure_file_item(document.path)
        if file_item is None:
            return None
        self._documents[file_item.location] = document.text
        return reconcile_leaves(self.registry, file_item, leaves)

    async def _map_document(self, document: Document) -> List[LeafDescriptor]:
        symbols = await load_symbols(self.symbol_provider, document)
        return map_symbols(symbols, suite_methods=imports_suite_package(document.text))

    def _ensure_file_item(self, path: str) -> Optional[TreeItem]:
        """
        Create the chain root -> [package] -> file for *path* if missing.

        Sibling discovery is never triggered here. Files that discovery
        would never reach (excluded directories) are ignored.
        """
        self._ensure_module_map()
        file_path = canonical_path(path)
        directory = parent_dir(file_path)

        owner = self.resolver.owner_of(directory)
        root_dir = owner or self._workspace_folder_for(directory)
        if not root_dir:
            logger.debug(f"Ignoring {file_path}: outside every workspace folder and module")
            return None
        if self._is_excluded(directory, root_dir):
            logger.debug(f"Ignoring {file_path}: inside an excluded directory")
            return None

        if owner:
            root_item = self._get_or_create(
                self.registry.items, KIND_MODULE, owner, self.resolver.module_name(owner)
            )
        else:
            root_item = self._get_or_create(
                self.registry.items, KIND_WORKSPACE, root_dir, posixpath.basename(root_dir)
            )

        parent = root_item
        if directory != root_dir:
            parent = self._get_or_create(
                root_item.children, KIND_PACKAGE, directory, posixpath.basename(directory)
            )
        return self._get_or_create(parent.children, KIND_FILE, file_path, posixpath.basename(file_path))

    def _is_excluded(self, directory: str, root_dir: str) -> bool:
        """True if a directory segment between *root_dir* and *directory* is excluded."""
        relative = posixpath.relpath(directory, root_dir)
        if relative == ".":
            return False
        return any(matches_any(segment, self.resolver.exclude_rx) for segment in relative.split("/"))

    def _workspace_folder_for(self, directory: str) -> Optional[str]:
        candidates = [f for f in self.workspace_folders if is_within(directory, f)]
        if not candidates:
            return None
        return max(candidates, key=len)

    def _ensure_module_map(self) -> None:
        if not self._module_map_ready:
            self.resolver.build(self.workspace_folders)
            self._module_map_ready = True

    def _get_or_create(
            self,
            collection: ItemCollection,
            kind: str,
            location: str,
            label: str,
    ) -> TreeItem:
        item_id = test_id(location, kind)
        existing = collection.get(item_id)
        if existing is not None:
            return existing

        item = self.registry.create_node(item_id, label, location)
        collection.add(item)
        logger.debug(f"Added {item_id}")
        return item


def _unique(paths: Iterable[str]) -> List[str]:
    seen: List[str] = []
    for p in paths:
        if p not in seen:
            seen.append(p)
    return seen
