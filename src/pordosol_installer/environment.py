"""Environment wiring: PATH entries, home variable and shell profile blocks.

Two persistence mechanisms exist. A structured per-user store (the Windows
user environment) gets a read-modify-write of its PATH list. POSIX shells get
an installer-owned block appended to their startup files. Both are
idempotent: re-running never duplicates a PATH entry or a block.

Neither mechanism locks. Another process writing between our read and our
write loses, which is acceptable for an interactive single-user tool.
"""

from __future__ import annotations

import logging
import os
from collections.abc import MutableMapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from types import ModuleType

from pordosol_installer.config import HOME_VAR
from pordosol_installer.errors import EnvironmentUpdateFailed
from pordosol_installer.protocols import EnvironmentTarget, FileSystem, UserEnvironmentStore

logger = logging.getLogger(__name__)

BEGIN_MARKER = "# >>> pordosol cli >>>"
END_MARKER = "# <<< pordosol cli <<<"

# Startup files considered besides the one matching $SHELL
COMMON_PROFILES = (".bashrc", ".zshrc", ".zprofile")
SHELL_PROFILES = {"zsh": ".zshrc", "bash": ".bashrc"}
FALLBACK_PROFILE = ".bashrc"

STORE_PATH_VAR = "Path"


# ============================================================================
# PATH list handling
# ============================================================================


def normalize_path_entry(entry: str, pathmod: ModuleType = os.path) -> str:
    """Normalize a PATH entry for comparison.

    Expands ``~`` and environment references, makes the path absolute,
    strips trailing separators and folds case.

    Args:
        entry: Raw PATH entry.
        pathmod: ``posixpath`` or ``ntpath``; defaults to the host flavour.

    Returns:
        Comparison key for the entry.
    """
    expanded = pathmod.expandvars(pathmod.expanduser(entry.strip()))
    if not expanded:
        return ""
    absolute = pathmod.normpath(pathmod.abspath(expanded))
    stripped = absolute.rstrip("/\\") or absolute
    return stripped.casefold()


def add_path_entry(
    current: str | None,
    entry: str,
    separator: str,
    pathmod: ModuleType = os.path,
    prepend: bool = False,
) -> tuple[str, bool]:
    """Add an entry to a delimited PATH value as a set-add.

    Existing entries keep their order and spelling. If the entry is already
    present (after normalization) nothing is added, and any extra copies of
    it are dropped so it ends up exactly once.

    Args:
        current: Current value, or None if unset.
        entry: Directory to add.
        separator: List delimiter (``;`` or ``:``).
        pathmod: Path flavour used for normalization.
        prepend: Put a new entry first instead of last.

    Returns:
        Tuple of (new value, whether it differs from ``current``).
    """
    key = normalize_path_entry(entry, pathmod)
    # Empty segments mean the current directory on POSIX; keep them
    parts = current.split(separator) if current else []

    kept: list[str] = []
    seen = False
    for part in parts:
        if part.strip() and normalize_path_entry(part, pathmod) == key:
            if seen:
                continue
            seen = True
        kept.append(part)

    if not seen:
        kept = [entry, *kept] if prepend else [*kept, entry]

    value = separator.join(kept)
    return value, value != (current or "")


# ============================================================================
# Profile blocks
# ============================================================================


def _double_quote(value: str) -> str:
    """Quote a value for a POSIX shell double-quoted string."""
    escaped = value
    for char in ("\\", '"', "$", "`"):
        escaped = escaped.replace(char, "\\" + char)
    return f'"{escaped}"'


def render_profile_block(install_root: Path, update_path: bool) -> str:
    """Render the installer-owned profile block.

    Args:
        install_root: Absolute installation root.
        update_path: Include the PATH prepend line.

    Returns:
        Block text, newline-terminated.
    """
    lines = [BEGIN_MARKER, f"export {HOME_VAR}={_double_quote(str(install_root))}"]
    if update_path:
        lines.append(f'export PATH="${HOME_VAR}/bin:$PATH"')
    lines.append(END_MARKER)
    return "\n".join(lines) + "\n"


def strip_profile_block(text: str) -> str:
    """Remove every installer-owned block from profile text.

    A begin marker with no matching end marker is dropped on its own;
    the lines after it are user content and are kept.

    Args:
        text: Profile file content.

    Returns:
        Content with the blocks excised.
    """
    lines = text.splitlines(keepends=True)
    out: list[str] = []
    i = 0
    while i < len(lines):
        if lines[i].rstrip("\r\n") == BEGIN_MARKER:
            end = next(
                (j for j in range(i + 1, len(lines)) if lines[j].rstrip("\r\n") == END_MARKER),
                None,
            )
            i = (end + 1) if end is not None else (i + 1)
            continue
        out.append(lines[i])
        i += 1
    return "".join(out)


def upsert_profile_block(text: str, block: str) -> str:
    """Replace any existing block and append ``block`` at the end."""
    stripped = strip_profile_block(text)
    if stripped and not stripped.endswith("\n"):
        stripped += "\n"
    return stripped + block


def candidate_profiles(home: Path, shell: str | None, fs: FileSystem) -> list[Path]:
    """Select the shell startup files to update.

    The rc file of the login shell comes first, then every common rc file
    that already exists. If nothing qualifies, ``~/.bashrc`` is used.

    Args:
        home: User home directory.
        shell: Value of ``$SHELL`` (may be None).
        fs: Filesystem abstraction.

    Returns:
        Deduplicated list of profile paths.
    """
    profiles: list[Path] = []
    if shell:
        rc = SHELL_PROFILES.get(Path(shell).name)
        if rc:
            profiles.append(home / rc)
    for name in COMMON_PROFILES:
        path = home / name
        if fs.is_file(path):
            profiles.append(path)
    if not profiles:
        profiles.append(home / FALLBACK_PROFILE)
    return list(dict.fromkeys(profiles))


class ProfileFileTarget:
    """One shell startup file holding an installer-owned block."""

    def __init__(self, path: Path, fs: FileSystem) -> None:
        self.path = path
        self.fs = fs
        self.description = str(path)

    def apply(self, install_root: Path, update_path: bool) -> list[str]:
        """Rewrite the block in this file, creating the file if needed."""
        try:
            current = self.fs.read_text(self.path) if self.fs.exists(self.path) else ""
            updated = upsert_profile_block(current, render_profile_block(install_root, update_path))
            if updated != current:
                self.fs.write_text(self.path, updated)
                logger.debug("Updated profile block in %s", self.path)
            else:
                logger.debug("Profile block in %s already current", self.path)
        except (OSError, UnicodeDecodeError) as e:
            raise EnvironmentUpdateFailed("shell profile", str(e), self.path) from e
        return [str(self.path)]


class UserStoreTarget:
    """Per-user structured environment store (read-modify-write)."""

    def __init__(
        self,
        store: UserEnvironmentStore,
        pathmod: ModuleType,
        separator: str = ";",
        description: str = "user environment",
    ) -> None:
        self.store = store
        self.pathmod = pathmod
        self.separator = separator
        self.description = description

    def apply(self, install_root: Path, update_path: bool) -> list[str]:
        """Persist the home variable and add ``bin`` to the user PATH."""
        updated = []
        try:
            if self.store.get(HOME_VAR) != str(install_root):
                self.store.set(HOME_VAR, str(install_root))
            updated.append(f"{self.description}:{HOME_VAR}")

            if update_path:
                bin_dir = str(install_root / "bin")
                current = self.store.get(STORE_PATH_VAR)
                value, changed = add_path_entry(current, bin_dir, self.separator, self.pathmod)
                if changed:
                    self.store.set(STORE_PATH_VAR, value)
                    logger.debug("Added %s to user %s", bin_dir, STORE_PATH_VAR)
                else:
                    logger.debug("%s already on user %s", bin_dir, STORE_PATH_VAR)
                updated.append(f"{self.description}:{STORE_PATH_VAR}")
        except OSError as e:
            raise EnvironmentUpdateFailed(self.description, str(e)) from e
        return updated


# ============================================================================
# Configurator
# ============================================================================


@dataclass
class EnvironmentReport:
    """Result of environment configuration."""

    updated: list[str] = field(default_factory=list)
    failures: list[EnvironmentUpdateFailed] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


class EnvironmentConfigurator:
    """Applies environment wiring to every target of the current platform.

    Failures are collected, not raised: the layout on disk is already
    correct by the time this runs.
    """

    def __init__(
        self,
        targets: Sequence[EnvironmentTarget],
        environ: MutableMapping[str, str] | None = None,
        path_separator: str = os.pathsep,
    ) -> None:
        self.targets = list(targets)
        self.environ = os.environ if environ is None else environ
        self.path_separator = path_separator

    def configure(self, install_root: Path, update_path: bool = True) -> EnvironmentReport:
        """Persist the home variable and PATH entry.

        Args:
            install_root: Absolute installation root.
            update_path: False for ``--no-path``; the home variable is still set.

        Returns:
            EnvironmentReport listing updated targets and collected failures.
        """
        report = EnvironmentReport()
        for target in self.targets:
            try:
                report.updated.extend(target.apply(install_root, update_path))
            except EnvironmentUpdateFailed as e:
                logger.warning("%s", e)
                report.failures.append(e)

        self.export_to_process(install_root, update_path)
        return report

    def export_to_process(self, install_root: Path, update_path: bool) -> None:
        """Mirror the wiring into the running process environment."""
        self.environ[HOME_VAR] = str(install_root)
        if update_path:
            value, changed = add_path_entry(
                self.environ.get("PATH"),
                str(install_root / "bin"),
                self.path_separator,
                prepend=True,
            )
            if changed:
                self.environ["PATH"] = value
