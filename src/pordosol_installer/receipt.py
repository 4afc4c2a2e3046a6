"""Installation receipt stored at ``<root>/install.json``."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from pordosol_installer import __version__
from pordosol_installer.hashing import sha256_file
from pordosol_installer.types import ComponentRole


class InstalledComponent(BaseModel):
    """A binary copied into the layout."""

    model_config = ConfigDict(populate_by_name=True)

    role: ComponentRole
    path: str
    sha256: str


class InstallReceipt(BaseModel):
    """Record of the last successful install into a root."""

    model_config = ConfigDict(populate_by_name=True)

    version: str = "1.0"
    installer_version: str = Field(default=__version__, alias="installerVersion")
    install_root: str = Field(alias="installRoot")
    installed_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), alias="installedAt"
    )
    path_configured: bool = Field(default=True, alias="pathConfigured")
    components: list[InstalledComponent] = Field(default_factory=list)

    def component(self, role: ComponentRole) -> InstalledComponent | None:
        """Find the entry for a role."""
        return next((c for c in self.components if c.role == role), None)


class ReceiptManager:
    """Reads and writes the receipt for one installation root."""

    def __init__(self, install_root: Path) -> None:
        self.install_root = install_root
        self.receipt_file = install_root / "install.json"

    def record(
        self, installed: dict[ComponentRole, Path], path_configured: bool
    ) -> InstallReceipt:
        """Hash installed binaries and write a fresh receipt.

        Args:
            installed: Role to installed binary path.
            path_configured: Whether PATH wiring was requested.

        Returns:
            The saved receipt.
        """
        components = [
            InstalledComponent(
                role=role,
                path=path.relative_to(self.install_root).as_posix(),
                sha256=sha256_file(path),
            )
            for role, path in installed.items()
        ]
        receipt = InstallReceipt(
            install_root=str(self.install_root),
            path_configured=path_configured,
            components=components,
        )
        self.save(receipt)
        return receipt

    def save(self, receipt: InstallReceipt) -> None:
        """Save receipt to disk."""
        data = receipt.model_dump(mode="json", by_alias=True)
        self.receipt_file.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")

    def load(self) -> InstallReceipt | None:
        """Load receipt from disk.

        Returns:
            The receipt, or None if absent or unreadable.
        """
        if not self.receipt_file.exists():
            return None
        try:
            data = json.loads(self.receipt_file.read_text(encoding="utf-8"))
            return InstallReceipt.model_validate(data)
        except (OSError, ValueError, ValidationError):
            return None
