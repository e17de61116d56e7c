"""Confinement of caller-supplied paths to the workspace root."""

import posixpath
from pathlib import Path, PurePosixPath, PureWindowsPath

from workspace_api.errors import PathEscapeError


def _is_absolute(virtual_path: str) -> bool:
    return (
        PurePosixPath(virtual_path).is_absolute()
        or PureWindowsPath(virtual_path).is_absolute()
        or virtual_path.startswith("\\")
    )


class PathResolver:
    """Resolve virtual paths against a fixed workspace root.

    A resolved path is always the root itself or one of its descendants. The
    check compares path segments, so a sibling such as ``/ws-other`` is never
    mistaken for a child of ``/ws``. Symlinks are followed before the check,
    which means a link pointing outside the root is rejected too.
    """

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root).expanduser().resolve()

    @property
    def root(self) -> Path:
        return self._root

    def resolve(self, virtual_path: str) -> Path:
        """Return the canonical absolute path for ``virtual_path``.

        Raises:
            PathEscapeError: If the path is absolute, contains a NUL byte, or
                would resolve outside the workspace root.
        """
        normalized = self._normalize(virtual_path)
        candidate = (self._root / normalized).resolve()
        if not self.contains(candidate):
            raise PathEscapeError(path=virtual_path)
        return candidate

    def resolve_entry(self, virtual_path: str) -> Path:
        """Return the directory entry ``virtual_path`` names, without following it.

        Only the parent directory is canonicalized, so a final symlink
        component is returned as the link itself, dangling or not.

        Raises:
            PathEscapeError: If the entry's directory lies outside the root.
        """
        normalized = self._normalize(virtual_path)
        if normalized == ".":
            return self._root
        lexical = self._root / normalized
        parent = lexical.parent.resolve()
        if not self.contains(parent):
            raise PathEscapeError(path=virtual_path)
        return parent / lexical.name

    def _normalize(self, virtual_path: str) -> str:
        if "\x00" in virtual_path or _is_absolute(virtual_path):
            raise PathEscapeError(path=virtual_path)

        normalized = posixpath.normpath(virtual_path) if virtual_path else "."
        if normalized == ".." or normalized.startswith("../"):
            raise PathEscapeError(path=virtual_path)
        return normalized

    def contains(self, path: str | Path) -> bool:
        """Check whether an absolute path lies within the workspace root."""
        resolved = Path(path).resolve()
        return resolved == self._root or self._root in resolved.parents

    def to_virtual(self, path: str | Path) -> str:
        """Express an absolute path inside the root as a POSIX virtual path."""
        relative = Path(path).relative_to(self._root)
        return "" if relative == Path(".") else relative.as_posix()
