"""Rich console output for installer commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

if TYPE_CHECKING:
    from pordosol_installer.config import InstallConfig
    from pordosol_installer.diagnostics import CheckResult
    from pordosol_installer.types import InstallSummary, ReleasePackage


class TUI:
    """Text User Interface for the installer (non-interactive)."""

    def __init__(self, console: Console | None = None) -> None:
        """Initialize TUI.

        Args:
            console: Console to print to (a new one if omitted).
        """
        self.console = console or Console()

    def show_plan(self, config: InstallConfig) -> None:
        """Display the inputs of an install run."""
        self.console.print(
            Panel(
                f"CLI:         {config.cli_path}\n"
                f"Compiler:    {config.compiler_path}\n"
                f"Stdlib:      {config.stdlib_path}\n"
                f"Destination: {config.install_root}",
                title="Por do Sol installer",
                border_style="blue",
            )
        )

    def show_install_summary(self, summary: InstallSummary) -> None:
        """Display installed files and environment changes.

        Args:
            summary: Result of the install run.
        """
        table = Table(title="Installed")
        table.add_column("Component", style="cyan")
        table.add_column("Path")
        for role, path in summary.installed.items():
            table.add_row(role.value, str(path))
        self.console.print(table)

        self.console.print(f"PORDOSOL_HOME = {summary.install_root}")
        if summary.path_updated:
            targets = ", ".join(summary.environment_targets) or "none"
            self.console.print(f"PATH updated in: {targets}")
        else:
            self.console.print(
                f"PATH was not changed (--no-path); binaries are in {escape(str(summary.bin_dir))}"
            )
        for warning in summary.warnings:
            self.show_warning(warning)
        self.console.print("\nOpen a new terminal and run:\n  pordosol doctor")

    def show_package(self, package: ReleasePackage) -> None:
        """Display the files produced by a packaging run."""
        self.console.print(f"  Archive:   {package.archive_path}")
        self.console.print(f"  Checksum:  {package.checksum_file}")
        self.console.print(f"  SHA-256:   {package.digest}")
        if package.signature_file:
            self.console.print(f"  Signature: {package.signature_file}")
        self.console.print(f"  Contents:  {', '.join(package.bundled)}")

    def show_diagnostics(self, results: list[CheckResult]) -> None:
        """Display doctor results as a table."""
        table = Table(title="Installation")
        table.add_column("Check", style="cyan")
        table.add_column("Status")
        table.add_column("Path")
        table.add_column("Detail")
        for result in results:
            if result.ok:
                status = "[green]ok[/green]"
            elif result.required:
                status = "[red]missing[/red]"
            else:
                status = "[yellow]warn[/yellow]"
            table.add_row(result.name, status, result.path, result.detail)
        self.console.print(table)

    def show_success(self, message: str) -> None:
        """Show success message.

        Args:
            message: Success message.
        """
        self.console.print(f"[green]✓[/green] {escape(message)}")

    def show_error(self, message: str) -> None:
        """Show error message.

        Args:
            message: Error message.
        """
        self.console.print(f"[red]✗[/red] {escape(message)}")

    def show_warning(self, message: str) -> None:
        """Show warning message.

        Args:
            message: Warning message.
        """
        self.console.print(f"[yellow]![/yellow] {escape(message)}")

    def show_info(self, message: str) -> None:
        """Show info message.

        Args:
            message: Info message.
        """
        self.console.print(f"[blue]i[/blue] {escape(message)}")
