"""Base platform implementation with shared behavior.

Platforms differ in three things only: the executable suffix, how user
environment wiring is persisted, and the conventional release archive
format. Everything else (naming, layout) is computed here from those.

Pattern: Template Method - base class defines naming in terms of the
attributes subclasses set.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path

from pordosol_installer.protocols import EnvironmentTarget, FileSystem


class ArchiveFormat(str, Enum):
    """Release archive formats and their file extensions."""

    ZIP = ".zip"
    TAR_GZ = ".tar.gz"

    @property
    def extension(self) -> str:
        return self.value


class BasePlatform(ABC):
    """Base class for platform implementations."""

    name: str
    exe_suffix: str
    archive_format: ArchiveFormat
    path_separator: str

    def executable_name(self, base: str) -> str:
        """Binary file name with this platform's suffix.

        Args:
            base: Name without suffix.

        Returns:
            e.g. ``pordosol.exe`` on Windows, ``pordosol`` elsewhere.
        """
        return f"{base}{self.exe_suffix}"

    def archive_name(self, stem: str) -> str:
        """Archive file name for a package stem."""
        return f"{stem}{self.archive_format.extension}"

    @abstractmethod
    def environment_targets(
        self, home: Path, fs: FileSystem, shell: str | None = None
    ) -> list[EnvironmentTarget]:
        """Build the environment persistence targets for this platform.

        Args:
            home: User home directory.
            fs: Filesystem abstraction.
            shell: Login shell (``$SHELL``), if known.

        Returns:
            Targets to apply, in order.
        """
        ...
