"""Artifact discovery and validation.

All checks here are read-only and run before anything under the
installation root is touched.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pordosol_installer.config import (
    CLI_BINARY,
    COMPILER_BINARY,
    INTERPRETER_BINARY,
    InstallConfig,
)
from pordosol_installer.errors import MissingArtifact, MissingResourceTree, SourceOverlapsInstall
from pordosol_installer.layout import InstallLayout
from pordosol_installer.platforms import Platform
from pordosol_installer.protocols import FileSystem
from pordosol_installer.types import ComponentArtifact, ComponentRole, ValidatedArtifacts

logger = logging.getLogger(__name__)

# Where the build tool leaves optimized binaries, relative to the project
RELEASE_OUTPUT_DIR = Path("target") / "release"


class ArtifactLocator:
    """Resolves expected build outputs and checks they exist."""

    def __init__(self, fs: FileSystem, platform: Platform) -> None:
        self.fs = fs
        self.platform = platform

    def binary_path(self, project: Path, name: str) -> Path:
        """Expected output path of a binary target.

        Args:
            project: Project root the target is built in.
            name: Binary target name.

        Returns:
            ``<project>/target/release/<name>[.exe]``.
        """
        return project / RELEASE_OUTPUT_DIR / self.platform.executable_name(name)

    def locate_binary(self, role: ComponentRole, project: Path, name: str) -> ComponentArtifact:
        """Locate one binary and confirm it is a regular readable file.

        Raises:
            MissingArtifact: Naming the exact expected path.
        """
        path = self.binary_path(project, name)
        if not self.fs.is_file(path):
            raise MissingArtifact(path)
        logger.debug("Found %s binary at %s", role.value, path)
        return ComponentArtifact(
            role=role,
            name=name,
            source_path=path,
        )

    def require_tree(self, kind: str, path: Path) -> Path:
        """Confirm a resource tree exists as a directory.

        Raises:
            MissingResourceTree: If ``path`` is not a directory.
        """
        if not self.fs.is_dir(path):
            raise MissingResourceTree(kind, path)
        return path

    def require_outside(self, kind: str, source: Path, destination: Path) -> None:
        """Confirm a resource tree does not overlap the directory it replaces.

        The destination is deleted before copying, so a source inside it
        (or containing it) would be destroyed.

        Raises:
            SourceOverlapsInstall: If either path contains the other.
        """
        src = source.resolve()
        dest = destination.resolve()
        if src == dest or dest in src.parents or src in dest.parents:
            raise SourceOverlapsInstall(kind, source, destination)

    def validate(self, config: InstallConfig) -> ValidatedArtifacts:
        """Validate every input the layout installer will copy.

        Args:
            config: Install configuration.

        Returns:
            ValidatedArtifacts ready for installation.

        Raises:
            MissingArtifact: A binary is absent.
            MissingResourceTree: Templates or stdlib are absent.
            SourceOverlapsInstall: Templates or stdlib overlap their install location.
        """
        cli = self.locate_binary(ComponentRole.CLI, config.cli_path, CLI_BINARY)
        compiler = self.locate_binary(ComponentRole.COMPILER, config.compiler_path, COMPILER_BINARY)
        interpreter = self.locate_binary(
            ComponentRole.INTERPRETER, config.compiler_path, INTERPRETER_BINARY
        )
        templates = self.require_tree("Templates", config.templates_path)
        stdlib = self.require_tree("Standard library", config.stdlib_path)

        layout = InstallLayout(config.install_root, self.platform)
        self.require_outside("Templates", templates, layout.templates_dir)
        self.require_outside("Standard library", stdlib, layout.stdlib_dir)
        return ValidatedArtifacts(
            cli=cli,
            compiler=compiler,
            interpreter=interpreter,
            templates_dir=templates,
            stdlib_dir=stdlib,
        )
