"""File operations confined to the workspace root.

Every method resolves its path argument through a ``PathResolver`` before
touching the filesystem. Concurrent writers to the same path are not
serialized; the last write wins.
"""

import logging
import os
import re
import shutil
import time
from pathlib import Path

from workspace_api.errors import BadRequestError, NotFoundError, WorkspaceIOError
from workspace_api.models.workspace import FileNode
from workspace_api.workspace.paths import PathResolver

logger = logging.getLogger(__name__)

_UNSAFE_NAME_CHARS = re.compile(r"[^a-zA-Z0-9_\-.]")


def sanitize_filename(file_name: str | None) -> str:
    """Reduce an uploaded file name to a safe basename."""
    base = re.split(r"[\\/]", file_name or "")[-1]
    safe = _UNSAFE_NAME_CHARS.sub("_", base)
    if not safe.strip("."):
        safe = f"upload_{int(time.time() * 1000)}"
    return safe


def _sort_key(node: FileNode) -> tuple[bool, str]:
    return node.kind != "directory", node.name


class WorkspaceStore:
    def __init__(self, resolver: PathResolver) -> None:
        self._resolver = resolver

    @property
    def resolver(self) -> PathResolver:
        return self._resolver

    @property
    def root(self) -> Path:
        return self._resolver.root

    def ensure_root(self) -> Path:
        """Create the workspace root if it does not exist yet."""
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise WorkspaceIOError(detail=f"Cannot create workspace root: {e}") from e
        return self.root

    def list_tree(self, path: str = "") -> FileNode:
        """Recursively list a directory, directories first then by name."""
        self.ensure_root()
        target = self._resolver.resolve(path)
        if not target.exists():
            raise NotFoundError(detail=f"Directory not found: {path or '/'}", path=path)
        if not target.is_dir():
            raise BadRequestError(detail=f"Not a directory: {path}", path=path)

        try:
            children = self._scan(target)
        except OSError as e:
            raise WorkspaceIOError(detail=f"Failed to list {path or '/'}: {e}", path=path) from e

        return FileNode(
            name="" if target == self.root else target.name,
            kind="directory",
            path=self._resolver.to_virtual(target),
            children=children,
        )

    def _scan(self, directory: Path) -> list[FileNode]:
        nodes: list[FileNode] = []
        with os.scandir(directory) as entries:
            for entry in entries:
                entry_path = directory / entry.name
                virtual = self._resolver.to_virtual(entry_path)
                # Links are listed, never descended into.
                if entry.is_dir(follow_symlinks=False):
                    nodes.append(
                        FileNode(
                            name=entry.name,
                            kind="directory",
                            path=virtual,
                            children=self._scan(entry_path),
                        )
                    )
                else:
                    nodes.append(FileNode(name=entry.name, kind="file", path=virtual))
        nodes.sort(key=_sort_key)
        return nodes

    def read_file(self, path: str) -> bytes:
        target = self._resolver.resolve(path)
        if target.is_dir():
            raise BadRequestError(detail=f"Not a file: {path}", path=path)
        try:
            return target.read_bytes()
        except FileNotFoundError:
            raise NotFoundError(detail=f"File not found: {path}", path=path) from None
        except IsADirectoryError:
            raise BadRequestError(detail=f"Not a file: {path}", path=path) from None
        except OSError as e:
            raise WorkspaceIOError(detail=f"Failed to read {path}: {e}", path=path) from e

    def write_file(self, path: str, content: bytes | str) -> Path:
        """Write ``content`` to ``path``, replacing any existing file."""
        target = self._resolver.resolve(path)
        data = content.encode("utf-8") if isinstance(content, str) else content
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as e:
            raise WorkspaceIOError(detail=f"Failed to write {path}: {e}", path=path) from e
        logger.debug("Wrote %d bytes to %s", len(data), target)
        return target

    def delete_file(self, path: str) -> None:
        """Delete a file, or a directory and everything below it.

        A symlink is removed as a single entry; its target is left alone.
        """
        entry = self._resolver.resolve_entry(path)
        if entry.is_symlink():
            try:
                entry.unlink()
            except FileNotFoundError:
                raise NotFoundError(detail=f"File not found: {path}", path=path) from None
            except OSError as e:
                raise WorkspaceIOError(detail=f"Failed to delete {path}: {e}", path=path) from e
            logger.debug("Deleted link %s", entry)
            return

        target = self._resolver.resolve(path)
        if target == self.root:
            raise BadRequestError(detail="Refusing to delete the workspace root", path=path)
        if not target.exists():
            raise NotFoundError(detail=f"File not found: {path}", path=path)

        try:
            if target.is_dir():
                shutil.rmtree(target)
            else:
                target.unlink()
        except FileNotFoundError:
            raise NotFoundError(detail=f"File not found: {path}", path=path) from None
        except OSError as e:
            raise WorkspaceIOError(detail=f"Failed to delete {path}: {e}", path=path) from e
        logger.debug("Deleted %s", target)

    def make_directory(self, path: str) -> Path:
        target = self._resolver.resolve(path)
        try:
            target.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise WorkspaceIOError(
                detail=f"Failed to create directory {path}: {e}", path=path
            ) from e
        return target

    def store_uploaded(self, file_name: str | None, content: bytes) -> str:
        """Store an uploaded file directly under the root and return its name."""
        safe_name = sanitize_filename(file_name)
        self.ensure_root()
        target = self._resolver.resolve(safe_name)
        try:
            target.write_bytes(content)
        except OSError as e:
            raise WorkspaceIOError(
                detail=f"Failed to store upload {safe_name}: {e}", path=safe_name
            ) from e
        logger.info("Stored upload %r as %s (%d bytes)", file_name, safe_name, len(content))
        return safe_name
