"""Installation orchestration: build, validate, lay out, wire the environment."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from pordosol_installer.build import CargoBuildTool
from pordosol_installer.config import (
    CLI_BINARY,
    COMPILER_BINARY,
    INTERPRETER_BINARY,
    InstallConfig,
)
from pordosol_installer.environment import EnvironmentConfigurator, EnvironmentReport
from pordosol_installer.errors import InstallStepFailed
from pordosol_installer.filesystem import RealFileSystem
from pordosol_installer.layout import LayoutInstaller
from pordosol_installer.locator import ArtifactLocator
from pordosol_installer.platforms import Platform, current_platform
from pordosol_installer.protocols import BuildTool, FileSystem
from pordosol_installer.receipt import ReceiptManager
from pordosol_installer.types import ComponentRole, InstallSummary

logger = logging.getLogger(__name__)

CLI_TARGETS = (CLI_BINARY,)
COMPILER_TARGETS = (COMPILER_BINARY, INTERPRETER_BINARY)


class Installer:
    """Runs a local installation.

    Follows Separate Use from Creation: constructor requires all dependencies.
    Use factory method `create()` for production instantiation with defaults.

    Validation happens before the first write under the installation root,
    so a missing artifact never leaves a half-populated install. Layout
    failures are fatal; environment failures are only reported.
    """

    def __init__(
        self,
        build_tool: BuildTool,
        locator: ArtifactLocator,
        layout: LayoutInstaller,
        configurator: EnvironmentConfigurator,
    ) -> None:
        """Initialize installer with required dependencies.

        Args:
            build_tool: External build tool.
            locator: Artifact locator for the target platform.
            layout: Layout installer for the target platform.
            configurator: Environment configurator with platform targets.
        """
        self.build_tool = build_tool
        self.locator = locator
        self.layout = layout
        self.configurator = configurator

    @classmethod
    def create(
        cls,
        platform: Platform | None = None,
        filesystem: FileSystem | None = None,
        build_tool: BuildTool | None = None,
        configurator: EnvironmentConfigurator | None = None,
        home: Path | None = None,
        shell: str | None = None,
    ) -> Installer:
        """Factory method for production instantiation.

        Args:
            platform: Target platform (the running one if omitted).
            filesystem: Filesystem abstraction.
            build_tool: Build tool (cargo if omitted).
            configurator: Environment configurator (built from the platform if omitted).
            home: User home for profile files (``Path.home()`` if omitted).
            shell: Login shell (``$SHELL`` if omitted).

        Returns:
            Configured Installer instance.
        """
        platform = platform or current_platform()
        fs = filesystem or RealFileSystem()
        if configurator is None:
            targets = platform.environment_targets(
                home or Path.home(), fs, shell if shell is not None else os.environ.get("SHELL")
            )
            configurator = EnvironmentConfigurator(targets, path_separator=platform.path_separator)
        return cls(
            build_tool=build_tool or CargoBuildTool(),
            locator=ArtifactLocator(fs, platform),
            layout=LayoutInstaller(fs, platform),
            configurator=configurator,
        )

    def build(self, config: InstallConfig) -> None:
        """Build the CLI and the compiler/interpreter in release mode.

        Raises:
            PrerequisiteMissing: The build tool is not installed.
            BuildFailed: Either build exits non-zero.
        """
        self.build_tool.ensure_available()
        logger.debug("Building %s in %s", ", ".join(CLI_TARGETS), config.cli_path)
        self.build_tool.run(config.cli_path, CLI_TARGETS)
        logger.debug("Building %s in %s", ", ".join(COMPILER_TARGETS), config.compiler_path)
        self.build_tool.run(config.compiler_path, COMPILER_TARGETS)

    def install_layout(self, config: InstallConfig) -> dict[ComponentRole, Path]:
        """Validate artifacts, then copy them into the layout and write the receipt.

        Raises:
            MissingArtifact: Before any write, if a binary is absent.
            MissingResourceTree: Before any write, if templates/stdlib are absent.
            SourceOverlapsInstall: Before any write, if templates/stdlib overlap the layout.
            InstallStepFailed: If a copy or mkdir fails.
        """
        artifacts = self.locator.validate(config)
        installed = self.layout.install(config.install_root, artifacts)

        receipts = ReceiptManager(config.install_root)
        try:
            receipts.record(installed, path_configured=not config.no_path)
        except OSError as e:
            raise InstallStepFailed("write receipt", receipts.receipt_file, str(e)) from e
        return installed

    def configure_environment(self, config: InstallConfig) -> EnvironmentReport:
        """Persist ``PORDOSOL_HOME`` and, unless disabled, the PATH entry."""
        return self.configurator.configure(config.install_root, update_path=not config.no_path)

    def run(self, config: InstallConfig) -> InstallSummary:
        """Run the whole installation.

        Args:
            config: Install configuration.

        Returns:
            InstallSummary with installed paths and environment warnings.
        """
        if config.skip_build:
            logger.debug("Skipping build; using existing artifacts")
        else:
            self.build(config)

        installed = self.install_layout(config)
        report = self.configure_environment(config)
        return InstallSummary(
            install_root=config.install_root,
            installed=installed,
            environment_targets=report.updated,
            warnings=[str(f) for f in report.failures],
            path_updated=not config.no_path,
        )
