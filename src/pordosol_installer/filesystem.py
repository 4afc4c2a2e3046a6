"""Filesystem abstraction for testability.

This module provides a filesystem abstraction that enables testing
without real I/O operations. The RealFileSystem implementation
wraps standard library operations.
"""

from __future__ import annotations

import os
import shutil
import stat
from pathlib import Path


class RealFileSystem:
    """Production filesystem implementation.

    Wraps standard library Path and shutil operations.
    Satisfies the FileSystem protocol structurally.
    """

    def read_text(self, path: Path) -> str:
        """Read text content from a file."""
        return path.read_text(encoding="utf-8")

    def write_text(self, path: Path, content: str) -> None:
        """Write text content to a file."""
        path.write_text(content, encoding="utf-8")

    def exists(self, path: Path) -> bool:
        """Check if a path exists."""
        return path.exists()

    def is_dir(self, path: Path) -> bool:
        """Check if a path is a directory."""
        return path.is_dir()

    def is_file(self, path: Path) -> bool:
        """Check if a path is a regular, readable file."""
        return path.is_file() and os.access(path, os.R_OK)

    def mkdir(self, path: Path, parents: bool = False, exist_ok: bool = False) -> None:
        """Create a directory."""
        path.mkdir(parents=parents, exist_ok=exist_ok)

    def unlink(self, path: Path) -> None:
        """Remove a file."""
        path.unlink()

    def rmtree(self, path: Path) -> None:
        """Remove a directory tree."""
        shutil.rmtree(path)

    def copytree(self, src: Path, dst: Path) -> None:
        """Copy a directory tree."""
        shutil.copytree(src, dst)

    def copy_file(self, src: Path, dst: Path) -> None:
        """Copy a file, clobbering the destination."""
        shutil.copy2(src, dst)

    def make_executable(self, path: Path) -> None:
        """Set the execute bits for everyone who can read the file."""
        if os.name == "nt":
            return
        mode = path.stat().st_mode
        path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
