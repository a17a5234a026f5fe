from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Defines the filesystem collaborator used by module resolution and package
discovery: per-directory listings of (name, type) pairs plus whole-file
reads. Ships a disk-backed implementation and an in-memory one for hosts
that serve virtual workspaces.
"""

import os
import posixpath
from abc import ABC, abstractmethod
from enum import Enum
from typing import Dict, List, Mapping, Tuple

from gotestexplorer.domain.identity import canonical_path

# -----------------------------------------------------------------------------
# GLOBAL CONSTANTS
# -----------------------------------------------------------------------------

APP_DIR_NAME = "GoTestExplorer"
UNIX_APP_DIR_NAME = ".gotestexplorer"


class FileType(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"


DirEntry = Tuple[str, FileType]

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def get_user_data_dir() -> str:
    """
    Resolve the standard OS-specific directory for persistent application data.

    Automatically creates the hierarchy if it does not exist.
    Standards:
    - Windows: %LOCALAPPDATA%/GoTestExplorer
    - Linux/Mac: ~/.gotestexplorer

    Returns:
        str: Absolute path to the application data directory.
    """
    path: str = ""

    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA")
        if base:
            path = os.path.join(base, APP_DIR_NAME)

    if not path:
        path = os.path.join(os.path.expanduser("~"), UNIX_APP_DIR_NAME)

    try:
        os.makedirs(path, exist_ok=True)
    except OSError:
        pass

    return os.path.abspath(path)

# -----------------------------------------------------------------------------
# WORKSPACE FILESYSTEM COLLABORATOR
# -----------------------------------------------------------------------------

class WorkspaceFileSystem(ABC):
    """
    Abstract directory/file access used by the explorer.

    Implementations raise ``OSError`` (or a subclass) for unreadable or
    missing entries; callers decide how to degrade.
    """

    @abstractmethod
    def read_directory(self, path: str) -> List[DirEntry]:
        """
        List the direct entries of a directory.

        Args:
            path: Directory to list.

        Returns:
            List[DirEntry]: ``(name, FileType)`` pairs in listing order.
        """
        pass

    @abstractmethod
    def read_file(self, path: str) -> str:
        """Return the full text content of a file."""
        pass


class LocalFileSystem(WorkspaceFileSystem):
    """Disk-backed filesystem. Listings are sorted by name for stable output."""

    def read_directory(self, path: str) -> List[DirEntry]:
        entries: List[DirEntry] = []
        with os.scandir(path) as it:
            for entry in it:
                # Symlinked directories are not followed to avoid walk cycles
                if entry.is_dir(follow_symlinks=False):
                    entries.append((entry.name, FileType.DIRECTORY))
                elif entry.is_file():
                    entries.append((entry.name, FileType.FILE))
        entries.sort(key=lambda e: e[0])
        return entries

    def read_file(self, path: str) -> str:
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            return f.read()


class MemoryFileSystem(WorkspaceFileSystem):
    """
    In-memory filesystem keyed by canonical paths.

    Listings preserve insertion order, which makes discovery order fully
    deterministic for virtual workspaces.
    """

    def __init__(self) -> None:
        self.dirs: Dict[str, Dict[str, FileType]] = {"/": {}}
        self.files: Dict[str, str] = {}

    @classmethod
    def from_files(cls, files: Mapping[str, str]) -> "MemoryFileSystem":
        """Build a filesystem holding *files* (path -> content)."""
        fs = cls()
        for path, content in files.items():
            fs.write_file(path, content)
        return fs

    def make_dirs(self, path: str) -> None:
        """Create a directory and every missing ancestor."""
        p = canonical_path(path)
        missing: List[str] = []
        while p not in self.dirs:
            missing.append(p)
            p = posixpath.dirname(p)
        for d in reversed(missing):
            parent = posixpath.dirname(d)
            self.dirs[parent][posixpath.basename(d)] = FileType.DIRECTORY
            self.dirs[d] = {}

    def write_file(self, path: str, content: str) -> None:
        p = canonical_path(path)
        parent = posixpath.dirname(p)
        self.make_dirs(parent)
        self.dirs[parent][posixpath.basename(p)] = FileType.FILE
        self.files[p] = content

    def remove(self, path: str) -> None:
        """Delete a file or a whole directory subtree."""
        p = canonical_path(path)
        if p in self.files:
            del self.files[p]
        elif p in self.dirs and p != "/":
            prefix = p + "/"
            for d in [d for d in self.dirs if d == p or d.startswith(prefix)]:
                del self.dirs[d]
            for f in [f for f in self.files if f.startswith(prefix)]:
                del self.files[f]
        else:
            raise FileNotFoundError(path)
        self.dirs[posixpath.dirname(p)].pop(posixpath.basename(p), None)

    def read_directory(self, path: str) -> List[DirEntry]:
        p = canonical_path(path)
        if p in self.files:
            raise NotADirectoryError(path)
        if p not in self.dirs:
            raise FileNotFoundError(path)
        return list(self.dirs[p].items())

    def read_file(self, path: str) -> str:
        p = canonical_path(path)
        if p not in self.files:
            raise FileNotFoundError(path)
        return self.files[p]
