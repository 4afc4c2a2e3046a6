"""Tests for context module."""

from __future__ import annotations

from unittest.mock import MagicMock

from pordosol_installer.context import AppContext, create_context
from pordosol_installer.diagnostics import Doctor
from pordosol_installer.filesystem import RealFileSystem
from pordosol_installer.install import Installer
from pordosol_installer.packaging import ReleasePackager
from pordosol_installer.platforms import WindowsPlatform


class TestAppContext:
    """Tests for AppContext dataclass."""

    def test_create_with_all_dependencies(self) -> None:
        """Test creating context with all dependencies."""
        platform = MagicMock()
        installer = MagicMock()
        packager = MagicMock()
        doctor = MagicMock()
        filesystem = MagicMock()
        ctx = AppContext(
            platform=platform,
            installer=installer,
            packager=packager,
            doctor=doctor,
            filesystem=filesystem,
        )
        assert ctx.platform is platform
        assert ctx.installer is installer
        assert ctx.packager is packager
        assert ctx.doctor is doctor
        assert ctx.filesystem is filesystem

    def test_default_filesystem(self) -> None:
        """Test context creates default filesystem if not provided."""
        ctx = AppContext(
            platform=MagicMock(),
            installer=MagicMock(),
            packager=MagicMock(),
            doctor=MagicMock(),
        )
        assert isinstance(ctx.filesystem, RealFileSystem)


class TestCreateContext:
    """Tests for create_context factory function."""

    def test_create_context_default(self, temp_home) -> None:
        """Test creating context with default parameters."""
        ctx = create_context()

        assert isinstance(ctx.installer, Installer)
        assert isinstance(ctx.packager, ReleasePackager)
        assert isinstance(ctx.doctor, Doctor)
        assert ctx.packager.fs is ctx.filesystem

    def test_create_context_platform_override(self, temp_home) -> None:
        """Test the platform override flows into the services."""
        platform = WindowsPlatform(store=MagicMock())

        ctx = create_context(platform)

        assert ctx.platform is platform
        assert ctx.doctor.platform is platform
        assert ctx.installer.locator.platform is platform
