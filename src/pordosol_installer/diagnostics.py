"""Installation diagnostics for the ``doctor`` command."""

from __future__ import annotations

import logging
import os
import re
import subprocess
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from pordosol_installer.config import HOME_VAR
from pordosol_installer.environment import normalize_path_entry
from pordosol_installer.hashing import sha256_file
from pordosol_installer.layout import InstallLayout
from pordosol_installer.platforms import Platform
from pordosol_installer.receipt import InstallReceipt, ReceiptManager
from pordosol_installer.types import ComponentRole

logger = logging.getLogger(__name__)

VERSION_FLAGS = ("--versao", "--version", "-V")
VERSION_PROBE_TIMEOUT = 5

_PAREN_VERSION = re.compile(r"\((v[^)]*)\)")
_BARE_VERSION = re.compile(r"[vV]\d[\d.\-]*")


@dataclass
class CheckResult:
    """One diagnostic line.

    Attributes:
        name: What was checked.
        path: Path or value inspected.
        ok: Whether the check passed.
        detail: Extra information (version, hint, mismatch).
        required: Failures of required checks make the install unusable.
    """

    name: str
    path: str
    ok: bool
    detail: str = ""
    required: bool = True


def extract_version(text: str) -> str | None:
    """Pull a version token such as ``v0.1.0`` out of ``--version`` output.

    A parenthesised ``(v...)`` form wins over a bare ``v1.2.3`` token.
    """
    match = _PAREN_VERSION.search(text)
    if match:
        return match.group(1)
    match = _BARE_VERSION.search(text)
    return match.group(0) if match else None


def detect_binary_version(path: Path) -> str | None:
    """Run a binary with common version flags and parse its output."""
    if not path.is_file():
        return None
    for flag in VERSION_FLAGS:
        try:
            result = subprocess.run(
                [str(path), flag],
                capture_output=True,
                text=True,
                timeout=VERSION_PROBE_TIMEOUT,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.debug("Version probe %s %s failed: %s", path, flag, e)
            continue
        version = extract_version(f"{result.stdout}\n{result.stderr}")
        if version:
            return version
    return None


class Doctor:
    """Checks an installation root against the layout contract."""

    def __init__(
        self,
        platform: Platform,
        environ: Mapping[str, str] | None = None,
        probe_versions: bool = True,
    ) -> None:
        self.platform = platform
        self.environ = os.environ if environ is None else environ
        self.probe_versions = probe_versions

    def diagnose(self, install_root: Path) -> list[CheckResult]:
        """Run every check.

        Args:
            install_root: Absolute installation root.

        Returns:
            Results in display order.
        """
        layout = InstallLayout(install_root, self.platform)
        receipt = ReceiptManager(install_root).load()

        results = [self._check_binary(layout, role, receipt) for role in ComponentRole]
        results.append(self._check_stdlib(layout))
        results.append(self._check_templates(layout))
        results.append(
            CheckResult(
                name="receipt",
                path=str(layout.receipt_path),
                ok=receipt is not None,
                detail=receipt.installed_at.isoformat() if receipt else "not found",
                required=False,
            )
        )
        results.extend(self._check_environment(layout))
        return results

    def _check_binary(
        self, layout: InstallLayout, role: ComponentRole, receipt: InstallReceipt | None
    ) -> CheckResult:
        path = layout.binary_path(role)
        if not path.is_file():
            return CheckResult(role.value, str(path), ok=False, detail="missing")

        details = []
        if self.probe_versions:
            version = detect_binary_version(path)
            if version:
                details.append(version)

        recorded = receipt.component(role) if receipt else None
        if recorded and recorded.sha256 != sha256_file(path):
            details.append("modified since install")
        return CheckResult(role.value, str(path), ok=True, detail=", ".join(details))

    def _check_stdlib(self, layout: InstallLayout) -> CheckResult:
        path = layout.stdlib_dir
        if not path.is_dir():
            return CheckResult("stdlib", str(path), ok=False, detail="missing")
        count = sum(1 for p in path.rglob("*") if p.is_file())
        return CheckResult("stdlib", str(path), ok=True, detail=f"{count} files")

    def _check_templates(self, layout: InstallLayout) -> CheckResult:
        path = layout.templates_dir
        if not path.is_dir():
            return CheckResult("templates", str(path), ok=False, detail="missing")
        names = sorted(p.name for p in path.iterdir() if p.is_dir())
        return CheckResult("templates", str(path), ok=True, detail=", ".join(names) or "empty")

    def _check_environment(self, layout: InstallLayout) -> list[CheckResult]:
        home = self.environ.get(HOME_VAR, "")
        home_ok = bool(home) and normalize_path_entry(home) == normalize_path_entry(
            str(layout.root)
        )
        bin_key = normalize_path_entry(str(layout.bin_dir))
        on_path = any(
            normalize_path_entry(entry) == bin_key
            for entry in self.environ.get("PATH", "").split(os.pathsep)
            if entry.strip()
        )
        return [
            CheckResult(
                name=HOME_VAR,
                path=home or "<unset>",
                ok=home_ok,
                detail="" if home_ok else f"expected {layout.root}",
                required=False,
            ),
            CheckResult(
                name="PATH",
                path=str(layout.bin_dir),
                ok=on_path,
                detail="" if on_path else "not on PATH (open a new terminal)",
                required=False,
            ),
        ]


def is_healthy(results: list[CheckResult]) -> bool:
    """True when every required check passed."""
    return all(r.ok for r in results if r.required)
