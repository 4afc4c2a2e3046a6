"""Canonical installation layout and the installer that materializes it.

Layout under the installation root::

    bin/pordosol[.exe]
    tools/compilador[.exe]
    tools/interpretador[.exe]
    tools/stdlib/
    templates/
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from pordosol_installer.config import CLI_BINARY, COMPILER_BINARY, INTERPRETER_BINARY
from pordosol_installer.errors import InstallStepFailed
from pordosol_installer.platforms import Platform
from pordosol_installer.protocols import FileSystem
from pordosol_installer.types import ComponentRole, ValidatedArtifacts

logger = logging.getLogger(__name__)

BINARY_NAMES = {
    ComponentRole.CLI: CLI_BINARY,
    ComponentRole.COMPILER: COMPILER_BINARY,
    ComponentRole.INTERPRETER: INTERPRETER_BINARY,
}


@dataclass(frozen=True)
class InstallLayout:
    """Paths of the canonical layout for a root and platform."""

    root: Path
    platform: Platform

    @property
    def bin_dir(self) -> Path:
        return self.root / "bin"

    @property
    def tools_dir(self) -> Path:
        return self.root / "tools"

    @property
    def templates_dir(self) -> Path:
        return self.root / "templates"

    @property
    def stdlib_dir(self) -> Path:
        return self.tools_dir / "stdlib"

    @property
    def receipt_path(self) -> Path:
        return self.root / "install.json"

    def binary_path(self, role: ComponentRole) -> Path:
        """Installed location of a binary.

        The CLI goes to ``bin/``; compiler and interpreter go to ``tools/``.
        """
        directory = self.bin_dir if role is ComponentRole.CLI else self.tools_dir
        return directory / self.platform.executable_name(BINARY_NAMES[role])


@contextmanager
def _step(name: str, path: Path) -> Iterator[None]:
    """Translate filesystem errors into InstallStepFailed."""
    try:
        yield
    except OSError as e:
        raise InstallStepFailed(name, path, e.strerror or str(e)) from e


class LayoutInstaller:
    """Copies validated artifacts into the canonical layout.

    Every step is create-if-missing or overwrite, so a failed run is
    repaired by running again.
    """

    def __init__(self, fs: FileSystem, platform: Platform) -> None:
        self.fs = fs
        self.platform = platform

    def install(self, root: Path, artifacts: ValidatedArtifacts) -> dict[ComponentRole, Path]:
        """Materialize the layout under ``root``.

        Args:
            root: Absolute installation root.
            artifacts: Inputs already checked by the artifact locator.

        Returns:
            Mapping of role to installed binary path.

        Raises:
            InstallStepFailed: On the first filesystem error.
        """
        layout = InstallLayout(root, self.platform)

        for directory in (layout.bin_dir, layout.tools_dir, layout.templates_dir):
            with _step("create directory", directory):
                self.fs.mkdir(directory, parents=True, exist_ok=True)

        installed: dict[ComponentRole, Path] = {}
        for artifact in artifacts.binaries:
            dest = layout.binary_path(artifact.role)
            with _step(f"copy {artifact.role.value}", dest):
                self.fs.copy_file(artifact.source_path, dest)
                self.fs.make_executable(dest)
            logger.debug("Installed %s -> %s", artifact.source_path, dest)
            installed[artifact.role] = dest

        self.replace_tree("templates", artifacts.templates_dir, layout.templates_dir)
        self.replace_tree("stdlib", artifacts.stdlib_dir, layout.stdlib_dir)
        return installed

    def replace_tree(self, step: str, src: Path, dest: Path) -> None:
        """Wholesale-replace ``dest`` with a copy of ``src``.

        The destination is deleted first so files removed upstream do not
        survive an upgrade.
        """
        if self.fs.exists(dest):
            with _step(f"remove {step}", dest):
                self.fs.rmtree(dest)
        with _step(f"copy {step}", dest):
            self.fs.copytree(src, dest)
        logger.debug("Replaced %s with %s", dest, src)
