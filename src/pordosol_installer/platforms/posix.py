"""POSIX (Linux, macOS) platform implementation."""

from __future__ import annotations

from pathlib import Path

from pordosol_installer.environment import ProfileFileTarget, candidate_profiles
from pordosol_installer.protocols import EnvironmentTarget, FileSystem

from .base import ArchiveFormat, BasePlatform


class PosixPlatform(BasePlatform):
    """Unix-like systems: no suffix, profile blocks, tar+gzip."""

    name = "posix"
    exe_suffix = ""
    archive_format = ArchiveFormat.TAR_GZ
    path_separator = ":"

    def environment_targets(
        self, home: Path, fs: FileSystem, shell: str | None = None
    ) -> list[EnvironmentTarget]:
        """One target per candidate shell startup file."""
        return [ProfileFileTarget(path, fs) for path in candidate_profiles(home, shell, fs)]
