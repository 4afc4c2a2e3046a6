"""Release packaging: staging tree, archive, checksum sidecar, signature."""

from __future__ import annotations

import logging
import tarfile
import zipfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from pordosol_installer.config import (
    CLI_BINARY,
    COMPILER_BINARY,
    DOC_FILES,
    INTERPRETER_BINARY,
    PACKAGE_NAME,
    ReleaseConfig,
)
from pordosol_installer.errors import (
    ArchiveWriteFailed,
    ChecksumMismatch,
    InstallerError,
    MissingArtifact,
    MissingBinary,
)
from pordosol_installer.filesystem import RealFileSystem
from pordosol_installer.hashing import checksum_line, parse_checksum_line, sha256_file
from pordosol_installer.platforms import ArchiveFormat, Platform, platform_for_tag
from pordosol_installer.protocols import FileSystem
from pordosol_installer.signing import SIGNATURE_SUFFIX, sign_file
from pordosol_installer.types import ReleasePackage

logger = logging.getLogger(__name__)

CHECKSUM_SUFFIX = ".sha256"


@contextmanager
def _writing(path: Path) -> Iterator[None]:
    """Translate archive and filesystem errors into ArchiveWriteFailed."""
    try:
        yield
    except (OSError, tarfile.TarError, zipfile.BadZipFile, zipfile.LargeZipFile) as e:
        reason = getattr(e, "strerror", None) or str(e)
        raise ArchiveWriteFailed(path, reason) from e


def checksum_path_for(archive: Path) -> Path:
    """Sidecar path for an archive (``<archive>.sha256``)."""
    return archive.with_name(archive.name + CHECKSUM_SUFFIX)


class ReleasePackager:
    """Builds ``pordosol-<version>-<platform>`` archives.

    Every run starts from scratch: the staging directory, archive,
    checksum and signature from a previous run are removed first.
    """

    def __init__(self, fs: FileSystem | None = None) -> None:
        self.fs = fs or RealFileSystem()

    def package(self, config: ReleaseConfig) -> ReleasePackage:
        """Package a release.

        Args:
            config: Release configuration.

        Returns:
            ReleasePackage describing what was written.

        Raises:
            MissingBinary: If the binary does not exist.
            ArchiveWriteFailed: If staging or compression fails.
            SigningFailed: If a signing key is configured but unusable.
        """
        if not self.fs.is_file(config.binary):
            raise MissingBinary(config.binary)

        platform = platform_for_tag(config.platform_tag)
        stem = config.package_stem
        staging = config.output_dir / stem
        archive = config.output_dir / platform.archive_name(stem)
        checksum = checksum_path_for(archive)
        signature = archive.with_name(archive.name + SIGNATURE_SUFFIX)

        for stale in (archive, checksum, signature):
            if self.fs.exists(stale):
                with _writing(stale):
                    self.fs.unlink(stale)

        bundled = self.stage(config, platform, staging)
        self.write_archive(platform.archive_format, staging, archive)
        with _writing(archive):
            digest = sha256_file(archive)
        with _writing(checksum):
            self.fs.write_text(checksum, checksum_line(digest, archive.name))
        logger.debug("Wrote %s (%s)", checksum, digest)

        signature_file = None
        if config.signing_key is not None:
            signature_file = sign_file(archive, config.signing_key)
        else:
            logger.debug("No signing key configured; skipping signature")

        return ReleasePackage(
            name=PACKAGE_NAME,
            platform_tag=config.platform_tag,
            version=config.version,
            directory_tree=staging,
            archive_path=archive,
            checksum_file=checksum,
            digest=digest,
            signature_file=signature_file,
            bundled=bundled,
        )

    def stage(self, config: ReleaseConfig, platform: Platform, staging: Path) -> list[str]:
        """Build the staging tree mirroring the install layout.

        Docs and companion artifacts are optional; absent ones are skipped.

        Returns:
            Relative paths of everything placed in the tree.
        """
        bin_dir = staging / "bin"
        tools_dir = staging / "tools"
        bundled: list[str] = []

        with _writing(staging):
            self.fs.mkdir(config.output_dir, parents=True, exist_ok=True)
            if self.fs.exists(staging):
                self.fs.rmtree(staging)
            self.fs.mkdir(bin_dir, parents=True)
            self.fs.mkdir(tools_dir)

        cli_name = platform.executable_name(CLI_BINARY)
        if not platform.exe_suffix and config.binary.suffix.lower() == ".exe":
            cli_name = f"{CLI_BINARY}.exe"
        self._copy_binary(config.binary, bin_dir / cli_name)
        bundled.append(f"bin/{cli_name}")

        templates_src = config.source_root / "templates"
        templates_dest = staging / "templates"
        with _writing(templates_dest):
            if self.fs.is_dir(templates_src):
                self.fs.copytree(templates_src, templates_dest)
            else:
                self.fs.mkdir(templates_dest)
        bundled.append("templates/")

        for doc in DOC_FILES:
            src = config.source_root / doc
            if self.fs.is_file(src):
                with _writing(staging / doc):
                    self.fs.copy_file(src, staging / doc)
                bundled.append(doc)

        companions = (
            (config.compiler_bin, COMPILER_BINARY),
            (config.interpreter_bin, INTERPRETER_BINARY),
        )
        for src, name in companions:
            if src is not None and self.fs.is_file(src):
                dest_name = platform.executable_name(name)
                self._copy_binary(src, tools_dir / dest_name)
                bundled.append(f"tools/{dest_name}")
            elif src is not None:
                logger.debug("Companion %s not found at %s; skipping", name, src)

        if config.stdlib_dir is not None and self.fs.is_dir(config.stdlib_dir):
            with _writing(tools_dir / "stdlib"):
                self.fs.copytree(config.stdlib_dir, tools_dir / "stdlib")
            bundled.append("tools/stdlib/")

        return bundled

    def _copy_binary(self, src: Path, dest: Path) -> None:
        with _writing(dest):
            self.fs.copy_file(src, dest)
            self.fs.make_executable(dest)

    def write_archive(self, fmt: ArchiveFormat, staging: Path, archive: Path) -> None:
        """Compress the staging tree; the archive root is the staging dir name.

        A partially written archive is removed on failure.
        """
        root = staging.name
        try:
            with _writing(archive):
                if fmt is ArchiveFormat.ZIP:
                    with zipfile.ZipFile(archive, "w", compression=zipfile.ZIP_DEFLATED) as zf:
                        zf.write(staging, root)
                        for path in sorted(staging.rglob("*")):
                            zf.write(path, f"{root}/{path.relative_to(staging).as_posix()}")
                else:
                    with tarfile.open(archive, "w:gz") as tar:
                        tar.add(staging, arcname=root)
        except ArchiveWriteFailed:
            archive.unlink(missing_ok=True)
            raise
        logger.debug("Wrote archive %s", archive)


def list_archive_members(archive: Path) -> list[str]:
    """Member names of a ``.zip`` or ``.tar.gz`` archive."""
    with _writing(archive):
        if archive.name.endswith(ArchiveFormat.ZIP.extension):
            with zipfile.ZipFile(archive) as zf:
                return zf.namelist()
        with tarfile.open(archive, "r:gz") as tar:
            return tar.getnames()


def verify_archive(archive: Path, checksum: Path | None = None) -> str:
    """Verify an archive against its sidecar and check it holds the CLI.

    Args:
        archive: Archive to check.
        checksum: Sidecar path; ``<archive>.sha256`` when omitted.

    Returns:
        The verified hex digest.

    Raises:
        MissingArtifact: Archive or sidecar absent.
        ChecksumMismatch: Digest differs from the sidecar.
        InstallerError: The sidecar names a different file.
        InstallerError: The archive does not contain ``bin/pordosol[.exe]``.
    """
    checksum = checksum or checksum_path_for(archive)
    for path in (archive, checksum):
        if not path.is_file():
            raise MissingArtifact(path)

    expected, name = parse_checksum_line(checksum.read_text(encoding="utf-8"))
    if name and name != archive.name:
        raise InstallerError(f"Checksum file {checksum} is for {name}, not {archive.name}", checksum)
    actual = sha256_file(archive)
    if expected != actual:
        raise ChecksumMismatch(archive, expected, actual)

    names = [n.rstrip("/") for n in list_archive_members(archive)]
    if not names:
        raise InstallerError(f"Archive is empty: {archive}", archive)
    root = names[0].split("/")[0]
    wanted = {f"{root}/bin/{CLI_BINARY}", f"{root}/bin/{CLI_BINARY}.exe"}
    if not wanted.intersection(names):
        raise InstallerError(f"Archive {archive} does not contain {root}/bin/{CLI_BINARY}", archive)
    return actual
