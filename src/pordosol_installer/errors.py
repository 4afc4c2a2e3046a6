"""Error taxonomy for installation and packaging.

Every fatal condition is a subclass of InstallerError and names the
offending path so the CLI can print a single actionable line.
"""

from __future__ import annotations

from pathlib import Path


class InstallerError(Exception):
    """Base class for installer and packager failures.

    Attributes:
        path: Path, command or directory the failure refers to.
    """

    def __init__(self, message: str, path: Path | str | None = None) -> None:
        super().__init__(message)
        self.path = path


class PrerequisiteMissing(InstallerError):
    """A required external tool is not on PATH."""

    def __init__(self, command: str) -> None:
        super().__init__(f"Command '{command}' not found on PATH", command)
        self.command = command


class BuildFailed(InstallerError):
    """The external build exited with a non-zero status."""

    def __init__(self, workdir: Path, returncode: int) -> None:
        super().__init__(f"Build failed in {workdir} (exit code {returncode})", workdir)
        self.workdir = workdir
        self.returncode = returncode


class MissingArtifact(InstallerError):
    """An expected build output is absent."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"Artifact not found: {path}", path)


class MissingResourceTree(InstallerError):
    """A bundled resource directory (templates, stdlib) is absent."""

    def __init__(self, kind: str, path: Path) -> None:
        super().__init__(f"{kind} directory not found: {path}", path)
        self.kind = kind


class SourceOverlapsInstall(InstallerError):
    """A resource tree to copy overlaps the directory it would replace."""

    def __init__(self, kind: str, source: Path, destination: Path) -> None:
        super().__init__(
            f"{kind} directory {source} overlaps its install location {destination}",
            source,
        )
        self.kind = kind
        self.destination = destination


class InstallStepFailed(InstallerError):
    """A filesystem step failed while materializing the layout."""

    def __init__(self, step: str, path: Path, reason: str) -> None:
        super().__init__(f"Install step '{step}' failed at {path}: {reason}", path)
        self.step = step


class EnvironmentUpdateFailed(InstallerError):
    """PATH or profile wiring could not be persisted."""

    def __init__(self, target: str, reason: str, path: Path | str | None = None) -> None:
        location = f" ({path})" if path else ""
        super().__init__(f"Could not update {target}{location}: {reason}", path)
        self.target = target


class MissingBinary(InstallerError):
    """The binary to package does not exist."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"Binary not found: {path}", path)


class ArchiveWriteFailed(InstallerError):
    """Staging, compression or checksum output failed."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Could not write {path}: {reason}", path)


class SigningFailed(InstallerError):
    """A signing key was configured but could not be used."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Signing with {path} failed: {reason}", path)


class ChecksumMismatch(InstallerError):
    """An archive does not match its checksum sidecar."""

    def __init__(self, path: Path, expected: str, actual: str) -> None:
        super().__init__(
            f"Checksum mismatch for {path}: expected {expected or '<empty>'}, got {actual}",
            path,
        )
        self.expected = expected
        self.actual = actual
