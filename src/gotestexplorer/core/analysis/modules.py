from __future__ import annotations

"""
Go Module Resolution.

Walks each workspace root and records, for every directory, the nearest
enclosing directory that holds a module manifest (``go.mod``). Directories
under no manifest map to the empty string. A nested manifest shadows its
ancestors for its whole subtree.
"""

import logging
import posixpath
import re
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from gotestexplorer.core.analysis.filters import matches_any
from gotestexplorer.domain.constants import DEFAULT_MANIFEST_NAME, MODULE_DIRECTIVE_RX
from gotestexplorer.domain.identity import canonical_path
from gotestexplorer.infra.fs import DirEntry, FileType, WorkspaceFileSystem

logger = logging.getLogger(__name__)


class ModuleResolver:
    """
    Owner of the directory -> module-root mapping (the Module Map).

    The map is rebuilt by :meth:`build` whenever the set of workspace roots
    changes. Directories outside every walked root are resolved on demand by
    :meth:`owner_of`, which searches upwards for a manifest.
    """

    def __init__(
            self,
            fs: WorkspaceFileSystem,
            manifest_name: str = DEFAULT_MANIFEST_NAME,
            exclude_rx: Sequence[re.Pattern] = (),
    ) -> None:
        self.fs = fs
        self.manifest_name = manifest_name
        self.exclude_rx = list(exclude_rx)
        self.module_map: Dict[str, str] = {}

    # -------------------------------------------------------------------------
    # Map construction
    # -------------------------------------------------------------------------

    def build(self, roots: Iterable[str]) -> Dict[str, str]:
        """
        Rebuild the Module Map from scratch for the given workspace roots.

        Args:
            roots: Workspace root directories, in configured order.

        Returns:
            Dict[str, str]: directory -> module root ('' for none), in
                            depth-first visit order.
        """
        self.module_map = {}
        for root in roots:
            self._walk(canonical_path(root))
        logger.debug(f"Module map built: {len(self.module_map)} directories")
        return self.module_map

    def _walk(self, root: str) -> None:
        # Explicit stack: (directory, nearest module root inherited from parent)
        stack: List[Tuple[str, str]] = [(root, self._manifest_above(root))]
        while stack:
            directory, nearest = stack.pop()
            entries = self.list_directory(directory)

            if self._has_manifest(entries):
                nearest = directory
            self.module_map[directory] = nearest

            subdirs = self.subdirectories(directory, entries)
            stack.extend((d, nearest) for d in reversed(subdirs))

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def owner_of(self, directory: str) -> str:
        """
        Return the module root owning *directory* ('' if none).

        Unmapped directories are resolved by walking up until a manifest or
        an already-mapped directory is found; the result is cached for every
        directory passed on the way.
        """
        d = canonical_path(directory)
        if d in self.module_map:
            return self.module_map[d]

        visited: List[str] = []
        owner = ""
        while True:
            if d in self.module_map:
                owner = self.module_map[d]
                break
            visited.append(d)
            if self._has_manifest(self.list_directory(d)):
                owner = d
                break
            parent = posixpath.dirname(d)
            if parent == d:
                break
            d = parent

        for v in visited:
            self.module_map[v] = owner
        return owner

    def module_roots(self, under: Optional[str] = None) -> List[str]:
        """List module roots in the map (optionally restricted to a subtree), in walk order."""
        prefix = None
        if under is not None:
            base = canonical_path(under)
            prefix = base.rstrip("/") + "/"
        return [
            d for d, owner in self.module_map.items()
            if owner == d and (prefix is None or d == base or d.startswith(prefix))
        ]

    def module_name(self, module_root: str) -> str:
        """
        Read the module path declared by the manifest in *module_root*.

        Falls back to the directory name when the manifest is unreadable or
        declares nothing.
        """
        manifest = posixpath.join(canonical_path(module_root), self.manifest_name)
        try:
            content = self.fs.read_file(manifest)
        except OSError as e:
            logger.debug(f"Cannot read manifest {manifest}: {e}")
            return posixpath.basename(module_root)

        match = MODULE_DIRECTIVE_RX.search(content)
        if not match:
            return posixpath.basename(module_root)
        return match.group(1).strip("\"'`")

    # -------------------------------------------------------------------------
    # Listing helpers (shared with package discovery)
    # -------------------------------------------------------------------------

    def list_directory(self, directory: str) -> List[DirEntry]:
        """List a directory, treating unreadable ones as empty."""
        try:
            return self.fs.read_directory(directory)
        except OSError as e:
            logger.warning(f"Skipping unreadable directory {directory}: {e}")
            return []

    def subdirectories(self, directory: str, entries: List[DirEntry]) -> List[str]:
        """Child directories of *directory* that are not excluded."""
        return [
            posixpath.join(directory, name)
            for name, ftype in entries
            if ftype == FileType.DIRECTORY and not matches_any(name, self.exclude_rx)
        ]

    def _manifest_above(self, directory: str) -> str:
        """Nearest ancestor of *directory* holding a manifest, without caching."""
        d = posixpath.dirname(directory)
        while True:
            if d in self.module_map:
                return self.module_map[d]
            try:
                if self._has_manifest(self.fs.read_directory(d)):
                    return d
            except OSError as e:
                logger.debug(f"Cannot list {d}: {e}")
            parent = posixpath.dirname(d)
            if parent == d:
                return ""
            d = parent

    def _has_manifest(self, entries: List[DirEntry]) -> bool:
        return any(
            name == self.manifest_name and ftype == FileType.FILE
            for name, ftype in entries
        )
