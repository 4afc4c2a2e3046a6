"""Installer and release packager for the Por do Sol toolchain."""

__version__ = "0.1.0"

# Export protocol interfaces for type hints and dependency injection
from pordosol_installer.protocols import (  # noqa: E402
    BuildTool,
    EnvironmentTarget,
    FileSystem,
    UserEnvironmentStore,
)

__all__ = [
    "__version__",
    "BuildTool",
    "EnvironmentTarget",
    "FileSystem",
    "UserEnvironmentStore",
]
