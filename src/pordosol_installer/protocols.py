"""Protocol definitions for core abstractions.

This module defines abstract interfaces (Protocols) for the collaborators
the orchestration core talks to. Designing to interfaces enables:
- Loose coupling between components
- Easy substitution of test doubles (fake builds, in-memory env stores)
- Clear contracts for implementations

All concrete implementations satisfy these protocols structurally (duck typing).
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class BuildTool(Protocol):
    """Protocol for the external build tool.

    Implementations compile named binary targets inside a project directory.
    """

    command: str

    def ensure_available(self) -> None:
        """Check the build tool can be launched.

        Raises:
            PrerequisiteMissing: If the tool is not installed.
        """
        ...

    def run(self, workdir: Path, targets: Sequence[str]) -> None:
        """Build targets in release mode.

        Args:
            workdir: Project directory to build in.
            targets: Binary target names.

        Raises:
            BuildFailed: If the build exits non-zero.
        """
        ...


@runtime_checkable
class UserEnvironmentStore(Protocol):
    """Protocol for a persistent per-user environment variable store.

    Reads always go to the persisted value, never a cached copy.
    """

    def get(self, name: str) -> str | None:
        """Read a persisted variable.

        Args:
            name: Variable name.

        Returns:
            Value, or None if unset.
        """
        ...

    def set(self, name: str, value: str) -> None:
        """Persist a variable.

        Args:
            name: Variable name.
            value: New value.
        """
        ...


@runtime_checkable
class EnvironmentTarget(Protocol):
    """Protocol for one place environment wiring is persisted to."""

    description: str

    def apply(self, install_root: Path, update_path: bool) -> list[str]:
        """Persist the home variable and optionally the PATH entry.

        Args:
            install_root: Absolute installation root.
            update_path: Whether the ``bin`` directory should be put on PATH.

        Returns:
            Human-readable names of what was updated.

        Raises:
            EnvironmentUpdateFailed: If the target cannot be written.
        """
        ...


@runtime_checkable
class FileSystem(Protocol):
    """Protocol for filesystem operations.

    Abstracts filesystem access to enable testing without real I/O.
    Implementations handle reading, writing, and directory operations.
    """

    def read_text(self, path: Path) -> str:
        """Read text content from a file.

        Raises:
            FileNotFoundError: If file does not exist.
        """
        ...

    def write_text(self, path: Path, content: str) -> None:
        """Write text content to a file."""
        ...

    def exists(self, path: Path) -> bool:
        """Check if a path exists."""
        ...

    def is_dir(self, path: Path) -> bool:
        """Check if a path is a directory."""
        ...

    def is_file(self, path: Path) -> bool:
        """Check if a path is a regular file."""
        ...

    def mkdir(self, path: Path, parents: bool = False, exist_ok: bool = False) -> None:
        """Create a directory."""
        ...

    def unlink(self, path: Path) -> None:
        """Remove a file."""
        ...

    def rmtree(self, path: Path) -> None:
        """Remove a directory tree."""
        ...

    def copytree(self, src: Path, dst: Path) -> None:
        """Copy a directory tree."""
        ...

    def copy_file(self, src: Path, dst: Path) -> None:
        """Copy a file over any existing destination, keeping permission bits."""
        ...

    def make_executable(self, path: Path) -> None:
        """Add execute permission where the platform has such a concept."""
        ...
