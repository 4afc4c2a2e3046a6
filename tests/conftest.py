"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from pordosol_installer.config import InstallConfig
from pordosol_installer.environment import EnvironmentConfigurator
from pordosol_installer.errors import BuildFailed
from pordosol_installer.filesystem import RealFileSystem
from pordosol_installer.install import Installer
from pordosol_installer.platforms import PosixPlatform


@pytest.fixture
def temp_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Override home directory for testing."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setattr(Path, "home", lambda: home)
    monkeypatch.delenv("PORDOSOL_HOME", raising=False)
    return home


# ============================================================================
# Test Doubles
# ============================================================================


class FakeBuildTool:
    """Build tool double that drops fixture binaries instead of compiling."""

    command = "cargo"

    def __init__(self, fail_in: Path | None = None) -> None:
        self.fail_in = fail_in
        self.calls: list[tuple[Path, tuple[str, ...]]] = []

    def ensure_available(self) -> None:
        pass

    def run(self, workdir: Path, targets: Sequence[str]) -> None:
        self.calls.append((workdir, tuple(targets)))
        if self.fail_in == workdir:
            raise BuildFailed(workdir, 101)
        out = workdir / "target" / "release"
        out.mkdir(parents=True, exist_ok=True)
        for target in targets:
            (out / target).write_bytes(f"built {target}".encode())


class InMemoryEnvironmentStore:
    """User environment store double backed by a dict."""

    def __init__(self, values: dict[str, str] | None = None) -> None:
        self.values = dict(values or {})
        self.writes: list[tuple[str, str]] = []

    def get(self, name: str) -> str | None:
        return self.values.get(name)

    def set(self, name: str, value: str) -> None:
        self.values[name] = value
        self.writes.append((name, value))


@pytest.fixture
def fake_build() -> FakeBuildTool:
    """Create a fake build tool."""
    return FakeBuildTool()


@pytest.fixture
def env_store() -> InMemoryEnvironmentStore:
    """Create an empty in-memory environment store."""
    return InMemoryEnvironmentStore()


@pytest.fixture
def mock_filesystem() -> MagicMock:
    """Create a mock FileSystem for testing.

    The mock tracks all filesystem operations without touching real files.
    """
    fs = MagicMock()
    fs.exists.return_value = False
    fs.is_dir.return_value = False
    fs.is_file.return_value = False
    fs.read_text.return_value = ""
    return fs


# ============================================================================
# Source Tree Fixtures
# ============================================================================


def write_binary(path: Path, content: bytes = b"\x7fELF fake") -> Path:
    """Write a fake binary, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    return path


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Create sibling CLI, compiler and stdlib projects with built outputs.

    Layout::

        workspace/ferramentas-cli/target/release/pordosol
        workspace/ferramentas-cli/templates/basico/programa.pr
        workspace/compilador-portugues/target/release/{compilador,interpretador}
        workspace/sistema-padrao/core.std
    """
    root = tmp_path / "workspace"
    cli = root / "ferramentas-cli"
    compiler = root / "compilador-portugues"
    stdlib = root / "sistema-padrao"

    write_binary(cli / "target" / "release" / "pordosol", b"cli")
    write_binary(compiler / "target" / "release" / "compilador", b"compiler")
    write_binary(compiler / "target" / "release" / "interpretador", b"interpreter")

    template = cli / "templates" / "basico"
    template.mkdir(parents=True)
    (template / "programa.pr").write_text("escreva('ola')\n")

    stdlib.mkdir(parents=True)
    (stdlib / "core.std").write_text("core\n")
    return root


@pytest.fixture
def install_config(workspace: Path, tmp_path: Path) -> InstallConfig:
    """Install config pointing at the workspace, skipping the build."""
    return InstallConfig.from_options(
        install_root=tmp_path / "fake-home",
        cli_path=workspace / "ferramentas-cli",
        skip_build=True,
        environ={},
    )


@pytest.fixture
def posix_installer(temp_home: Path, fake_build: FakeBuildTool) -> Installer:
    """Installer for POSIX with a fake build and isolated environment."""
    platform = PosixPlatform()
    fs = RealFileSystem()
    configurator = EnvironmentConfigurator(
        platform.environment_targets(temp_home, fs, "/bin/bash"),
        environ={"PATH": "/usr/bin"},
        path_separator=":",
    )
    return Installer.create(
        platform=platform,
        filesystem=fs,
        build_tool=fake_build,
        configurator=configurator,
        home=temp_home,
    )
