"""Paths proven to stay inside a root directory."""
import os
from pathlib import Path, PurePath
from typing import Optional, Union

from plm.core.errors import PathEscapeError

PathLike = Union[str, "os.PathLike[str]"]


def normalize(path: PurePath) -> Path:
    """
    Lexically normalize a path without touching the filesystem.

    ``.`` components are dropped and ``..`` pops the previous normal
    component. At the anchor of an absolute path ``..`` is clamped; for a
    relative path leading ``..`` components are kept.

    Args:
        path: Path to normalize

    Returns:
        Normalized path
    """
    parts = []
    anchor = path.anchor
    for part in path.parts[1:] if anchor else path.parts:
        if part in ("", "."):
            continue
        if part == "..":
            if parts and parts[-1] != "..":
                parts.pop()
            elif not anchor:
                parts.append(part)
            continue
        parts.append(part)
    return Path(anchor, *parts) if anchor or parts else Path(".")


def _is_under(path: Path, root: Path) -> bool:
    return path == root or root in path.parents


class ScopedPath:
    """
    An absolute path that is guaranteed to live under ``root``.

    Construction normalizes the candidate, rejects it if it steps outside
    the root, and, if the candidate or one of its ancestors below the root
    exists, resolves symbolic links and rechecks the resolved path against
    the resolved root.
    """

    __slots__ = ("_path", "_root")

    def __init__(self, candidate: PathLike, root: PathLike):
        """
        Args:
            candidate: Absolute path, or path relative to ``root``
            root: Directory the path must stay under

        Raises:
            PathEscapeError: If the path escapes ``root``
        """
        root_path = normalize(Path(os.path.abspath(root)))
        candidate_path = Path(candidate)
        if not candidate_path.is_absolute():
            candidate_path = root_path / candidate_path
        normalized = normalize(candidate_path)

        if not _is_under(normalized, root_path):
            raise PathEscapeError(candidate, root_path)

        existing = self._nearest_existing(normalized, root_path)
        if existing is not None:
            real_root = Path(os.path.realpath(root_path))
            real = Path(os.path.realpath(existing))
            if not _is_under(real, real_root):
                raise PathEscapeError(
                    candidate, root_path, reason="resolves through a link outside"
                )

        self._path = normalized
        self._root = root_path

    @staticmethod
    def _nearest_existing(path: Path, root: Path) -> Optional[Path]:
        current = path
        while True:
            if os.path.lexists(current):
                return current
            if current == root:
                return None
            current = current.parent

    @property
    def root(self) -> Path:
        return self._root

    def as_path(self) -> Path:
        return self._path

    def __fspath__(self) -> str:
        return str(self._path)

    def __str__(self) -> str:
        return str(self._path)

    def __repr__(self) -> str:
        return f"ScopedPath({str(self._path)!r}, root={str(self._root)!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ScopedPath):
            return NotImplemented
        return self._path == other._path and self._root == other._root

    def __hash__(self) -> int:
        return hash((self._path, self._root))
