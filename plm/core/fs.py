"""Filesystem capability used by the engine.

Everything that touches disk goes through a :class:`FileSystem` so that
expansion, planning and execution can run against an in-memory tree in
tests.
"""
from abc import ABC, abstractmethod
import hashlib
import os
from pathlib import Path
import shutil
from typing import Dict, List, Optional, Set, Union

PathArg = Union[str, "os.PathLike[str]"]


def _p(path: PathArg) -> Path:
    return Path(os.fspath(path))


class FileSystem(ABC):
    """Narrow set of filesystem operations used by plm."""

    @abstractmethod
    def exists(self, path: PathArg) -> bool:
        pass

    @abstractmethod
    def is_dir(self, path: PathArg) -> bool:
        pass

    @abstractmethod
    def is_file(self, path: PathArg) -> bool:
        pass

    @abstractmethod
    def read_dir(self, path: PathArg) -> List[Path]:
        """
        List direct children of a directory, sorted by name.

        Raises:
            FileNotFoundError: If the directory doesn't exist
            NotADirectoryError: If the path is not a directory
        """
        pass

    @abstractmethod
    def read_bytes(self, path: PathArg) -> bytes:
        pass

    def read_text(self, path: PathArg) -> str:
        return self.read_bytes(path).decode("utf-8")

    @abstractmethod
    def write_bytes(self, path: PathArg, data: bytes) -> None:
        """Write a file, creating parent directories and overwriting."""
        pass

    @abstractmethod
    def create_dir_all(self, path: PathArg) -> None:
        pass

    def copy_file(self, source: PathArg, target: PathArg) -> None:
        """Copy a file, creating parent directories and overwriting."""
        self.write_bytes(target, self.read_bytes(source))

    def copy_dir(self, source: PathArg, target: PathArg) -> None:
        """Recursively copy a directory, merging into an existing target."""
        source, target = _p(source), _p(target)
        self.create_dir_all(target)
        for child in self.read_dir(source):
            if self.is_dir(child):
                self.copy_dir(child, target / child.name)
            else:
                self.copy_file(child, target / child.name)

    @abstractmethod
    def remove_file(self, path: PathArg) -> None:
        """Remove a file. Missing files are ignored."""
        pass

    @abstractmethod
    def remove_dir_all(self, path: PathArg) -> None:
        """Remove a directory tree. Missing directories are ignored."""
        pass

    @abstractmethod
    def remove_empty_dir(self, path: PathArg) -> bool:
        """Remove a directory only if it is empty; returns True if removed."""
        pass

    def content_hash(self, path: PathArg) -> str:
        """
        Hash a file or directory tree.

        Files hash their bytes. Directories hash the sorted list of
        ``relative_path\\0file_hash`` lines of every file below them, so two
        trees with the same files and contents hash equal.

        Returns:
            Checksum string in format "sha256:hexdigest"

        Raises:
            FileNotFoundError: If the path doesn't exist
        """
        path = _p(path)
        if not self.is_dir(path):
            return f"sha256:{hashlib.sha256(self.read_bytes(path)).hexdigest()}"

        lines = []
        for file_path in self.walk_files(path):
            relative = file_path.relative_to(path).as_posix()
            digest = hashlib.sha256(self.read_bytes(file_path)).hexdigest()
            lines.append(f"{relative}\0{digest}\n")
        lines.sort()
        digest = hashlib.sha256("".join(lines).encode("utf-8")).hexdigest()
        return f"sha256:{digest}"

    def walk_files(self, directory: PathArg) -> List[Path]:
        """Every file below ``directory``, depth first in name order."""
        files = []
        for child in self.read_dir(directory):
            if self.is_dir(child):
                files.extend(self.walk_files(child))
            else:
                files.append(child)
        return files


class LocalFileSystem(FileSystem):
    """FileSystem backed by the real disk."""

    def exists(self, path: PathArg) -> bool:
        return _p(path).exists()

    def is_dir(self, path: PathArg) -> bool:
        return _p(path).is_dir()

    def is_file(self, path: PathArg) -> bool:
        return _p(path).is_file()

    def read_dir(self, path: PathArg) -> List[Path]:
        return sorted(_p(path).iterdir(), key=lambda child: child.name)

    def read_bytes(self, path: PathArg) -> bytes:
        return _p(path).read_bytes()

    def write_bytes(self, path: PathArg, data: bytes) -> None:
        path = _p(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)

    def create_dir_all(self, path: PathArg) -> None:
        _p(path).mkdir(parents=True, exist_ok=True)

    def copy_file(self, source: PathArg, target: PathArg) -> None:
        target = _p(target)
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(_p(source), target)

    def copy_dir(self, source: PathArg, target: PathArg) -> None:
        shutil.copytree(_p(source), _p(target), dirs_exist_ok=True)

    def remove_file(self, path: PathArg) -> None:
        path = _p(path)
        if path.is_file() or path.is_symlink():
            path.unlink()

    def remove_dir_all(self, path: PathArg) -> None:
        path = _p(path)
        if path.is_symlink():
            path.unlink()
        elif path.is_dir():
            shutil.rmtree(path)

    def remove_empty_dir(self, path: PathArg) -> bool:
        path = _p(path)
        if not path.is_dir() or any(path.iterdir()):
            return False
        path.rmdir()
        return True


class MemoryFileSystem(FileSystem):
    """
    In-memory FileSystem for tests.

    Paths are kept as absolute ``Path`` keys. Writes and removals touching a
    path registered with :meth:`fail_on` raise ``PermissionError``.
    """

    def __init__(self, files: Optional[Dict[PathArg, Union[bytes, str]]] = None):
        self._files: Dict[Path, bytes] = {}
        self._dirs: Set[Path] = set()
        self._failures: Dict[Path, str] = {}
        for path, content in (files or {}).items():
            if isinstance(content, str):
                content = content.encode("utf-8")
            self.write_bytes(path, content)

    def fail_on(self, path: PathArg, message: str = "Permission denied") -> None:
        """Make every write or removal of ``path`` raise PermissionError."""
        self._failures[_p(path)] = message

    def _check_writable(self, path: Path) -> None:
        if path in self._failures:
            raise PermissionError(f"{self._failures[path]}: '{path}'")

    def _add_parents(self, path: Path) -> None:
        for parent in path.parents:
            self._dirs.add(parent)

    def exists(self, path: PathArg) -> bool:
        path = _p(path)
        return path in self._files or path in self._dirs

    def is_dir(self, path: PathArg) -> bool:
        return _p(path) in self._dirs

    def is_file(self, path: PathArg) -> bool:
        return _p(path) in self._files

    def read_dir(self, path: PathArg) -> List[Path]:
        path = _p(path)
        if path in self._files:
            raise NotADirectoryError(f"Not a directory: '{path}'")
        if path not in self._dirs:
            raise FileNotFoundError(f"No such directory: '{path}'")
        children = {
            entry for entry in list(self._files) + list(self._dirs)
            if entry.parent == path and entry != path
        }
        return sorted(children, key=lambda child: child.name)

    def read_bytes(self, path: PathArg) -> bytes:
        path = _p(path)
        if path not in self._files:
            if path in self._dirs:
                raise IsADirectoryError(f"Is a directory: '{path}'")
            raise FileNotFoundError(f"No such file: '{path}'")
        return self._files[path]

    def write_bytes(self, path: PathArg, data: bytes) -> None:
        path = _p(path)
        self._check_writable(path)
        if path in self._dirs:
            raise IsADirectoryError(f"Is a directory: '{path}'")
        self._add_parents(path)
        self._files[path] = bytes(data)

    def create_dir_all(self, path: PathArg) -> None:
        path = _p(path)
        if path in self._files:
            raise FileExistsError(f"File exists: '{path}'")
        self._add_parents(path)
        self._dirs.add(path)

    def remove_file(self, path: PathArg) -> None:
        path = _p(path)
        self._check_writable(path)
        self._files.pop(path, None)

    def remove_dir_all(self, path: PathArg) -> None:
        path = _p(path)
        self._check_writable(path)
        if path not in self._dirs:
            return
        self._files = {
            entry: data for entry, data in self._files.items()
            if path not in entry.parents
        }
        self._dirs = {
            entry for entry in self._dirs
            if entry != path and path not in entry.parents
        }

    def remove_empty_dir(self, path: PathArg) -> bool:
        path = _p(path)
        if path not in self._dirs or self.read_dir(path):
            return False
        self._check_writable(path)
        self._dirs.discard(path)
        return True
