"""CLI commands using Typer."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

if TYPE_CHECKING:
    from pordosol_installer.context import AppContext

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from pordosol_installer import __version__
from pordosol_installer.config import InstallConfig, ReleaseConfig, resolve_install_root
from pordosol_installer.context import create_context
from pordosol_installer.diagnostics import is_healthy
from pordosol_installer.errors import InstallerError, MissingArtifact
from pordosol_installer.packaging import verify_archive
from pordosol_installer.signing import SIGNATURE_SUFFIX, load_public_key, verify_signature
from pordosol_installer.tui import TUI

app = typer.Typer(
    name="pordosol-installer",
    help="Install the Por do Sol toolchain and package releases",
    no_args_is_help=True,
)

console = Console()
tui = TUI(console)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"pordosol-installer v{__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    """Route log records through rich; debug detail only with --verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.ERROR,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
    verbose: Annotated[
        bool, typer.Option("--verbose", help="Log every step")
    ] = False,
) -> None:
    """Install the Por do Sol toolchain and package releases."""
    _configure_logging(verbose)


def _fail(error: Exception) -> typer.Exit:
    """Report a fatal error and build the exit to raise."""
    tui.show_error(str(error))
    return typer.Exit(1)


# ============================================================================
# Install
# ============================================================================


@app.command()
def install(
    install_root: Annotated[
        Path | None,
        typer.Option("--install-root", help="Installation directory (default: $PORDOSOL_HOME or ~/.pordosol)"),
    ] = None,
    cli_path: Annotated[
        Path | None, typer.Option("--cli-path", help="CLI project directory (default: current directory)")
    ] = None,
    compiler_path: Annotated[
        Path | None, typer.Option("--compiler-path", help="Compiler project directory")
    ] = None,
    stdlib_path: Annotated[
        Path | None, typer.Option("--stdlib-path", help="Standard library directory")
    ] = None,
    skip_build: Annotated[
        bool, typer.Option("--skip-build", help="Use existing build outputs")
    ] = False,
    no_path: Annotated[
        bool, typer.Option("--no-path", help="Do not add the install to PATH")
    ] = False,
    _context=None,
) -> None:
    """Build and install the toolchain into a local SDK layout."""
    ctx = _context or create_context()
    config = InstallConfig.from_options(
        install_root=install_root,
        cli_path=cli_path,
        compiler_path=compiler_path,
        stdlib_path=stdlib_path,
        skip_build=skip_build,
        no_path=no_path,
    )
    tui.show_plan(config)

    if config.skip_build:
        tui.show_info("Skipping build: using existing artifacts")
    else:
        tui.show_info("Building release binaries...")

    try:
        summary = ctx.installer.run(config)
    except InstallerError as e:
        raise _fail(e) from e

    tui.show_success(f"Installed into {summary.install_root}")
    tui.show_install_summary(summary)


# ============================================================================
# Release packaging
# ============================================================================


@app.command()
def package(
    version: Annotated[str, typer.Option("--version", help="Release version, e.g. 0.1.0")],
    platform: Annotated[str, typer.Option("--platform", help="Platform tag, e.g. linux-x64")],
    binary: Annotated[Path, typer.Option("--binary", help="Pre-built CLI binary")],
    output: Annotated[Path, typer.Option("--output", help="Output directory")] = Path("dist"),
    source_root: Annotated[
        Path | None,
        typer.Option("--source-root", help="Directory holding templates/ and docs (default: cwd)"),
    ] = None,
    _context=None,
) -> None:
    """Create a release archive with a SHA-256 sidecar.

    Companion artifacts are bundled from PORDOSOL_COMPILER_BIN,
    PORDOSOL_INTERPRETER_BIN and PORDOSOL_STDLIB_DIR when set. The archive
    is signed when PORDOSOL_SIGNING_KEY points at an Ed25519 key.
    """
    ctx = _context or create_context()
    try:
        config = ReleaseConfig.from_environment(
            version=version,
            platform_tag=platform,
            binary=binary,
            output_dir=output,
            source_root=source_root,
        )
        result = ctx.packager.package(config)
    except ValidationError as e:
        tui.show_error(f"Invalid release parameters: {e.errors()[0]['msg']}")
        raise typer.Exit(1) from e
    except InstallerError as e:
        raise _fail(e) from e

    tui.show_success(f"Package created: {result.archive_path}")
    tui.show_package(result)


@app.command()
def verify(
    archive: Annotated[Path, typer.Argument(help="Archive to verify")],
    checksum: Annotated[
        Path | None, typer.Option("--checksum", help="Checksum file (default: <archive>.sha256)")
    ] = None,
    public_key: Annotated[
        Path | None, typer.Option("--public-key", help="Ed25519 public key to check <archive>.sig")
    ] = None,
) -> None:
    """Verify a release archive against its checksum (and signature)."""
    try:
        digest = verify_archive(archive, checksum)
        if public_key is not None:
            signature = archive.with_name(archive.name + SIGNATURE_SUFFIX)
            if not signature.is_file():
                raise MissingArtifact(signature)
            if not verify_signature(archive, signature, load_public_key(public_key)):
                tui.show_error(f"Signature does not verify: {signature}")
                raise typer.Exit(1)
    except InstallerError as e:
        raise _fail(e) from e

    tui.show_success(f"Verified {archive.name} ({digest})")


# ============================================================================
# Diagnostics
# ============================================================================


@app.command()
def doctor(
    install_root: Annotated[
        Path | None,
        typer.Option("--install-root", help="Installation directory (default: $PORDOSOL_HOME or ~/.pordosol)"),
    ] = None,
    _context=None,
) -> None:
    """Check an installation against the expected layout."""
    ctx = _context or create_context()
    root = resolve_install_root(install_root)
    results = ctx.doctor.diagnose(root)
    tui.show_diagnostics(results)

    if not is_healthy(results):
        tui.show_error(f"Installation at {root} is incomplete; re-run the installer")
        raise typer.Exit(1)
    tui.show_success("Toolchain ready")


if __name__ == "__main__":
    app()
