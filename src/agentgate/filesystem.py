"""
File system access for the native tools.

Providers raise OSError (FileNotFoundError, PermissionError, ...) on
failure; the tools turn those into textual results for the model.
"""

import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path

logger = logging.getLogger(__name__)

READ_ONLY_MESSAGE = "Write operations not allowed (read-only file system)"


class FileSystemProvider(ABC):
    """Platform-agnostic file access. can_write gates every mutation."""

    can_write: bool

    @abstractmethod
    def list_directory(self, path: str) -> list[str]:
        """Full paths of the directory's entries, sorted by name."""

    @abstractmethod
    def read_file(self, path: str) -> str:
        ...

    @abstractmethod
    def write_file(self, path: str, content: str) -> None:
        ...

    @abstractmethod
    def file_exists(self, path: str) -> bool:
        ...

    @abstractmethod
    def directory_exists(self, path: str) -> bool:
        ...


class LocalFileSystem(FileSystemProvider):
    """
    The local disk.

    Relative paths resolve against root (the working directory when root
    is None). Writes create missing parent directories.
    """

    def __init__(self, can_write: bool = True, root: str | os.PathLike[str] | None = None) -> None:
        self.can_write = can_write
        self.root = Path(root) if root is not None else None

    @classmethod
    def read_only(cls, root: str | os.PathLike[str] | None = None) -> "LocalFileSystem":
        return cls(can_write=False, root=root)

    @classmethod
    def read_write(cls, root: str | os.PathLike[str] | None = None) -> "LocalFileSystem":
        return cls(can_write=True, root=root)

    def resolve(self, path: str) -> Path:
        p = Path(path).expanduser()
        if not p.is_absolute() and self.root is not None:
            p = self.root / p
        return p

    def list_directory(self, path: str) -> list[str]:
        directory = self.resolve(path)
        if not directory.exists():
            raise FileNotFoundError(f"Directory not found: {path}")
        return [str(entry) for entry in sorted(directory.iterdir(), key=lambda e: e.name)]

    def read_file(self, path: str) -> str:
        file_path = self.resolve(path)
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {path}")
        return file_path.read_text(encoding="utf-8")

    def write_file(self, path: str, content: str) -> None:
        if not self.can_write:
            raise PermissionError(READ_ONLY_MESSAGE)
        file_path = self.resolve(path)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content, encoding="utf-8")
        logger.debug(f"Wrote {len(content)} characters to {file_path}")

    def file_exists(self, path: str) -> bool:
        return self.resolve(path).is_file()

    def directory_exists(self, path: str) -> bool:
        return self.resolve(path).is_dir()
