"""Application context for dependency injection.

This module separates object creation from object use, enabling testability
and reducing coupling in CLI commands.

Dependencies are typed using Protocols (abstract interfaces) where the core
talks to the outside world (build tool, filesystem, environment stores).
"""

from __future__ import annotations

from dataclasses import dataclass, field

from pordosol_installer.diagnostics import Doctor
from pordosol_installer.install import Installer
from pordosol_installer.packaging import ReleasePackager
from pordosol_installer.platforms import Platform, current_platform
from pordosol_installer.protocols import FileSystem


def _default_filesystem() -> FileSystem:
    """Create the default filesystem implementation."""
    from pordosol_installer.filesystem import RealFileSystem
    return RealFileSystem()


@dataclass
class AppContext:
    """Container for application dependencies.

    Provides a single injection point for all services used by CLI commands.
    For tests, construct AppContext directly with test doubles.
    """

    platform: Platform
    installer: Installer
    packager: ReleasePackager
    doctor: Doctor
    filesystem: FileSystem = field(default_factory=_default_filesystem)


def create_context(platform: Platform | None = None) -> AppContext:
    """Factory for application dependencies.

    Creates all services with proper wiring. Use this in production code.

    Args:
        platform: Override the host platform.

    Returns:
        Configured AppContext with all dependencies.
    """
    from pordosol_installer.filesystem import RealFileSystem

    platform = platform or current_platform()
    filesystem = RealFileSystem()
    return AppContext(
        platform=platform,
        installer=Installer.create(platform=platform, filesystem=filesystem),
        packager=ReleasePackager(filesystem),
        doctor=Doctor(platform),
        filesystem=filesystem,
    )
