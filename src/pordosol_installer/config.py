"""Configuration models for install and release runs."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

HOME_VAR = "PORDOSOL_HOME"
COMPILER_BIN_VAR = "PORDOSOL_COMPILER_BIN"
INTERPRETER_BIN_VAR = "PORDOSOL_INTERPRETER_BIN"
STDLIB_DIR_VAR = "PORDOSOL_STDLIB_DIR"
SIGNING_KEY_VAR = "PORDOSOL_SIGNING_KEY"

DEFAULT_ROOT_NAME = ".pordosol"
PACKAGE_NAME = "pordosol"

CLI_BINARY = "pordosol"
COMPILER_BINARY = "compilador"
INTERPRETER_BINARY = "interpretador"

COMPILER_PROJECT_DIR = "compilador-portugues"
STDLIB_PROJECT_DIR = "sistema-padrao"

# Copied into release archives when present in the source root
DOC_FILES = ("install.sh", "install.ps1", "INSTALACAO.md", "README.md", "LICENSE")


def _absolute(path: Path) -> Path:
    """Expand ``~`` and make a path absolute without resolving symlinks."""
    return Path(os.path.abspath(path.expanduser()))


def _env_path(environ: Mapping[str, str], name: str) -> Path | None:
    value = environ.get(name, "").strip()
    return Path(value) if value else None


def resolve_install_root(
    explicit: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Path:
    """Resolve the installation root.

    Order: explicit value, then ``PORDOSOL_HOME``, then ``~/.pordosol``.

    Args:
        explicit: Root passed on the command line.
        environ: Environment to read (defaults to ``os.environ``).

    Returns:
        Absolute installation root.
    """
    environ = os.environ if environ is None else environ
    if explicit is not None:
        return _absolute(explicit)
    from_env = _env_path(environ, HOME_VAR)
    if from_env is not None:
        return _absolute(from_env)
    return _absolute(Path.home() / DEFAULT_ROOT_NAME)


class InstallConfig(BaseModel):
    """Inputs for a local installation run."""

    model_config = ConfigDict(frozen=True)

    install_root: Path
    cli_path: Path
    compiler_path: Path
    stdlib_path: Path
    skip_build: bool = False
    no_path: bool = False

    @field_validator("install_root", "cli_path", "compiler_path", "stdlib_path")
    @classmethod
    def _make_absolute(cls, value: Path) -> Path:
        return _absolute(value)

    @property
    def templates_path(self) -> Path:
        """Template tree shipped with the CLI project."""
        return self.cli_path / "templates"

    @classmethod
    def from_options(
        cls,
        install_root: Path | None = None,
        cli_path: Path | None = None,
        compiler_path: Path | None = None,
        stdlib_path: Path | None = None,
        skip_build: bool = False,
        no_path: bool = False,
        environ: Mapping[str, str] | None = None,
    ) -> InstallConfig:
        """Build a config from CLI options, filling in defaults.

        The CLI project defaults to the current directory; the compiler
        project and stdlib default to siblings of it.
        """
        cli = _absolute(cli_path or Path.cwd())
        return cls(
            install_root=resolve_install_root(install_root, environ),
            cli_path=cli,
            compiler_path=compiler_path or cli.parent / COMPILER_PROJECT_DIR,
            stdlib_path=stdlib_path or cli.parent / STDLIB_PROJECT_DIR,
            skip_build=skip_build,
            no_path=no_path,
        )


class ReleaseConfig(BaseModel):
    """Inputs for a release packaging run."""

    model_config = ConfigDict(frozen=True)

    version: str = Field(min_length=1)
    platform_tag: str = Field(min_length=1)
    binary: Path
    output_dir: Path = Path("dist")
    source_root: Path = Field(default_factory=Path.cwd)
    compiler_bin: Path | None = None
    interpreter_bin: Path | None = None
    stdlib_dir: Path | None = None
    signing_key: Path | None = None

    @field_validator("version", "platform_tag")
    @classmethod
    def _no_separators(cls, value: str) -> str:
        value = value.strip()
        if not value or "/" in value or "\\" in value:
            raise ValueError(f"invalid value: {value!r}")
        return value

    @field_validator("binary", "output_dir", "source_root")
    @classmethod
    def _make_absolute(cls, value: Path) -> Path:
        return _absolute(value)

    @property
    def package_stem(self) -> str:
        """``pordosol-<version>-<platform>``."""
        return f"{PACKAGE_NAME}-{self.version}-{self.platform_tag}"

    @classmethod
    def from_environment(
        cls,
        version: str,
        platform_tag: str,
        binary: Path,
        output_dir: Path = Path("dist"),
        source_root: Path | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> ReleaseConfig:
        """Build a config, reading companion artifacts and signing key from env."""
        environ = os.environ if environ is None else environ
        return cls(
            version=version,
            platform_tag=platform_tag,
            binary=binary,
            output_dir=output_dir,
            source_root=source_root or Path.cwd(),
            compiler_bin=_env_path(environ, COMPILER_BIN_VAR),
            interpreter_bin=_env_path(environ, INTERPRETER_BIN_VAR),
            stdlib_dir=_env_path(environ, STDLIB_DIR_VAR),
            signing_key=_env_path(environ, SIGNING_KEY_VAR),
        )
