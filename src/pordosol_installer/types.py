"""Shared data types for the installer."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

__all__ = [
    "ComponentArtifact",
    "ComponentRole",
    "InstallSummary",
    "ReleasePackage",
    "ValidatedArtifacts",
]


class ComponentRole(str, Enum):
    """Role of a toolchain binary inside the layout."""

    CLI = "cli"
    COMPILER = "compiler"
    INTERPRETER = "interpreter"


@dataclass(frozen=True)
class ComponentArtifact:
    """A built binary located on disk.

    Attributes:
        role: Which toolchain component this is.
        name: Binary base name without suffix (e.g. ``compilador``).
        source_path: Absolute path of the build output.
    """

    role: ComponentRole
    name: str
    source_path: Path


@dataclass(frozen=True)
class ValidatedArtifacts:
    """Everything the layout installer needs, already checked to exist."""

    cli: ComponentArtifact
    compiler: ComponentArtifact
    interpreter: ComponentArtifact
    templates_dir: Path
    stdlib_dir: Path

    @property
    def binaries(self) -> list[ComponentArtifact]:
        """All binaries in install order."""
        return [self.cli, self.compiler, self.interpreter]


@dataclass
class InstallSummary:
    """Outcome of an install run.

    Attributes:
        install_root: Absolute installation root.
        installed: Role to installed path for each binary.
        environment_targets: Targets that were updated (profile paths, store names).
        warnings: Non-fatal environment failures.
    """

    install_root: Path
    installed: dict[ComponentRole, Path] = field(default_factory=dict)
    environment_targets: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    path_updated: bool = True

    @property
    def bin_dir(self) -> Path:
        return self.install_root / "bin"


@dataclass
class ReleasePackage:
    """A packaged release and its side files."""

    name: str
    platform_tag: str
    version: str
    directory_tree: Path
    archive_path: Path
    checksum_file: Path
    digest: str
    signature_file: Path | None = None
    bundled: list[str] = field(default_factory=list)
