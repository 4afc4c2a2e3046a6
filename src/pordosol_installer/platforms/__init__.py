"""Platform-specific implementations."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Protocol, runtime_checkable

from pordosol_installer.protocols import EnvironmentTarget, FileSystem

from .base import ArchiveFormat, BasePlatform
from .posix import PosixPlatform
from .windows import WindowsPlatform, WindowsRegistryStore


@runtime_checkable
class Platform(Protocol):
    """Protocol defining the capabilities the orchestration core needs.

    New platforms can be added without touching the installer or packager.
    """

    name: str
    exe_suffix: str
    archive_format: ArchiveFormat
    path_separator: str

    def executable_name(self, base: str) -> str:
        """Binary file name with the platform suffix."""
        raise NotImplementedError

    def archive_name(self, stem: str) -> str:
        """Archive file name for a package stem."""
        raise NotImplementedError

    def environment_targets(
        self, home: Path, fs: FileSystem, shell: str | None = None
    ) -> list[EnvironmentTarget]:
        """Environment persistence targets for this platform."""
        raise NotImplementedError


__all__ = [
    "ArchiveFormat",
    "BasePlatform",
    "Platform",
    "PosixPlatform",
    "WindowsPlatform",
    "WindowsRegistryStore",
    "current_platform",
    "get_platform",
    "platform_for_tag",
]


PLATFORMS: dict[str, type[BasePlatform]] = {
    "posix": PosixPlatform,
    "windows": WindowsPlatform,
}

# Release tag prefixes that use Windows conventions
WINDOWS_TAG_PREFIXES = ("windows", "win")


def get_platform(name: str) -> Platform:
    """Get a platform instance by name.

    Args:
        name: Platform name (posix, windows).

    Returns:
        Platform instance.

    Raises:
        ValueError: If platform is not supported.
    """
    if name not in PLATFORMS:
        raise ValueError(f"Unknown platform: {name}. Supported: {list(PLATFORMS.keys())}")
    return PLATFORMS[name]()


def current_platform() -> Platform:
    """Platform of the running interpreter."""
    return get_platform("windows" if sys.platform == "win32" else "posix")


def platform_for_tag(tag: str) -> Platform:
    """Platform whose conventions a release tag follows.

    ``windows-x64`` and ``win-arm64`` map to Windows; every other tag
    (``linux-x64``, ``macos-arm64``, ...) maps to POSIX.

    Args:
        tag: Release platform tag.

    Returns:
        Platform instance.
    """
    family = tag.lower().split("-", 1)[0]
    return get_platform("windows" if family in WINDOWS_TAG_PREFIXES else "posix")
