"""Windows platform implementation."""

from __future__ import annotations

import logging
import ntpath
from pathlib import Path

from pordosol_installer.environment import UserStoreTarget
from pordosol_installer.protocols import EnvironmentTarget, FileSystem, UserEnvironmentStore

from .base import ArchiveFormat, BasePlatform

logger = logging.getLogger(__name__)

USER_ENVIRONMENT_KEY = "Environment"

# SendMessageTimeout arguments for broadcasting WM_SETTINGCHANGE
HWND_BROADCAST = 0xFFFF
WM_SETTINGCHANGE = 0x001A
SMTO_ABORTIFHUNG = 0x0002


class WindowsRegistryStore:
    """User environment variables under ``HKEY_CURRENT_USER\\Environment``.

    Every call goes to the registry; nothing is cached between calls.
    """

    def __init__(self, key_path: str = USER_ENVIRONMENT_KEY) -> None:
        self.key_path = key_path

    def get(self, name: str) -> str | None:
        """Read a persisted user variable."""
        import winreg

        try:
            with winreg.OpenKey(winreg.HKEY_CURRENT_USER, self.key_path, 0, winreg.KEY_READ) as key:
                value, _ = winreg.QueryValueEx(key, name)
        except FileNotFoundError:
            return None
        return str(value)

    def set(self, name: str, value: str) -> None:
        """Persist a user variable and notify running shells."""
        import winreg

        kind = winreg.REG_EXPAND_SZ if "%" in value else winreg.REG_SZ
        with winreg.CreateKeyEx(
            winreg.HKEY_CURRENT_USER, self.key_path, 0, winreg.KEY_SET_VALUE
        ) as key:
            winreg.SetValueEx(key, name, 0, kind, value)
        self._broadcast_change()

    def _broadcast_change(self) -> None:
        """Tell Explorer the environment changed so new consoles see it."""
        import ctypes
        from ctypes import wintypes

        result = wintypes.DWORD()
        sent = ctypes.windll.user32.SendMessageTimeoutW(
            HWND_BROADCAST,
            WM_SETTINGCHANGE,
            0,
            USER_ENVIRONMENT_KEY,
            SMTO_ABORTIFHUNG,
            5000,
            ctypes.byref(result),
        )
        if not sent:
            logger.debug("WM_SETTINGCHANGE broadcast was not acknowledged")


class WindowsPlatform(BasePlatform):
    """Windows: ``.exe`` suffix, user registry store, zip archives."""

    name = "windows"
    exe_suffix = ".exe"
    archive_format = ArchiveFormat.ZIP
    path_separator = ";"

    def __init__(self, store: UserEnvironmentStore | None = None) -> None:
        """Initialize Windows platform.

        Args:
            store: User environment store; the registry store by default.
        """
        self._store = store

    @property
    def store(self) -> UserEnvironmentStore:
        if self._store is None:
            self._store = WindowsRegistryStore()
        return self._store

    def environment_targets(
        self, home: Path, fs: FileSystem, shell: str | None = None
    ) -> list[EnvironmentTarget]:
        """The user environment store is the only target."""
        return [UserStoreTarget(self.store, ntpath, self.path_separator)]
