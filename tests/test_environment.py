"""Tests for environment wiring."""

from __future__ import annotations

import ntpath
import posixpath
from pathlib import Path

import pytest
from conftest import InMemoryEnvironmentStore

from pordosol_installer.environment import (
    BEGIN_MARKER,
    END_MARKER,
    EnvironmentConfigurator,
    ProfileFileTarget,
    UserStoreTarget,
    add_path_entry,
    candidate_profiles,
    normalize_path_entry,
    render_profile_block,
    strip_profile_block,
    upsert_profile_block,
)
from pordosol_installer.errors import EnvironmentUpdateFailed
from pordosol_installer.filesystem import RealFileSystem


class TestNormalizePathEntry:
    """Tests for PATH entry normalization."""

    def test_trailing_separator_and_case(self) -> None:
        """Test trailing separators and case do not affect the key."""
        a = normalize_path_entry(r"C:\Users\Ana\.pordosol\bin", ntpath)
        b = normalize_path_entry("c:\\users\\ana\\.pordosol\\BIN\\", ntpath)

        assert a == b

    def test_posix_trailing_slash(self) -> None:
        """Test POSIX entries compare equal with a trailing slash."""
        assert normalize_path_entry("/opt/sdk/bin/", posixpath) == normalize_path_entry(
            "/opt/sdk/bin", posixpath
        )

    def test_blank(self) -> None:
        """Test blank entries normalize to an empty key."""
        assert normalize_path_entry("   ", posixpath) == ""


class TestAddPathEntry:
    """Tests for set-add semantics on delimited PATH values."""

    def test_append_to_unset(self) -> None:
        """Test adding to an unset PATH yields just the entry."""
        value, changed = add_path_entry(None, r"C:\sdk\bin", ";", ntpath)

        assert value == r"C:\sdk\bin"
        assert changed is True

    def test_append_keeps_existing_order(self) -> None:
        """Test existing entries keep their order and spelling."""
        value, changed = add_path_entry(r"C:\Windows;D:\Tools", r"C:\sdk\bin", ";", ntpath)

        assert value == r"C:\Windows;D:\Tools;C:\sdk\bin"
        assert changed is True

    def test_prepend(self) -> None:
        """Test prepend puts a new entry first."""
        value, _ = add_path_entry("/usr/bin:/bin", "/opt/sdk/bin", ":", posixpath, prepend=True)

        assert value == "/opt/sdk/bin:/usr/bin:/bin"

    def test_already_present_variant_spelling(self) -> None:
        """Test an entry present with other casing and a trailing slash is not re-added."""
        current = r"C:\Windows;c:\SDK\bin\;D:\Tools"

        value, changed = add_path_entry(current, r"C:\sdk\bin", ";", ntpath)

        assert value == current
        assert changed is False

    def test_duplicates_collapsed(self) -> None:
        """Test extra copies of the entry are collapsed to one."""
        current = r"C:\sdk\bin;C:\Windows;C:\SDK\BIN\\"

        value, changed = add_path_entry(current, r"C:\sdk\bin", ";", ntpath)

        assert value == r"C:\sdk\bin;C:\Windows"
        assert changed is True

    def test_empty_segments_kept(self) -> None:
        """Test empty segments (current directory on POSIX) survive the add."""
        value, _ = add_path_entry("/usr/bin::/bin:", "/opt/sdk/bin", ":", posixpath)

        assert value == "/usr/bin::/bin::/opt/sdk/bin"

    def test_empty_segments_kept_when_present(self) -> None:
        """Test a PATH that already has the entry is returned unchanged."""
        current = ":/opt/sdk/bin:/usr/bin:"

        value, changed = add_path_entry(current, "/opt/sdk/bin", ":", posixpath)

        assert value == current
        assert changed is False

    def test_idempotent_over_many_runs(self) -> None:
        """Test repeated adds leave exactly one occurrence."""
        value = r"C:\Windows"
        for _ in range(5):
            value, _ = add_path_entry(value, r"C:\sdk\bin", ";", ntpath)

        keys = [normalize_path_entry(p, ntpath) for p in value.split(";")]
        assert keys.count(normalize_path_entry(r"C:\sdk\bin", ntpath)) == 1


class TestProfileBlock:
    """Tests for the installer-owned shell profile block."""

    def test_render_with_path(self) -> None:
        """Test block exports the home variable and prepends bin to PATH."""
        block = render_profile_block(Path("/home/ana/.pordosol"), update_path=True)

        assert block == (
            f"{BEGIN_MARKER}\n"
            'export PORDOSOL_HOME="/home/ana/.pordosol"\n'
            'export PATH="$PORDOSOL_HOME/bin:$PATH"\n'
            f"{END_MARKER}\n"
        )

    def test_render_without_path(self) -> None:
        """Test --no-path omits the PATH line but keeps the home variable."""
        block = render_profile_block(Path("/sdk"), update_path=False)

        assert "PORDOSOL_HOME" in block
        assert "export PATH" not in block

    def test_render_escapes_shell_characters(self) -> None:
        """Test double quotes and dollar signs in the root are escaped."""
        block = render_profile_block(Path('/tmp/a"$b'), update_path=False)

        assert 'export PORDOSOL_HOME="/tmp/a\\"\\$b"' in block

    def test_strip_removes_block(self) -> None:
        """Test strip removes the block and keeps surrounding content."""
        text = "alias ll='ls -l'\n" + render_profile_block(Path("/sdk"), True) + "export EDITOR=vi\n"

        assert strip_profile_block(text) == "alias ll='ls -l'\nexport EDITOR=vi\n"

    def test_strip_dangling_begin_marker(self) -> None:
        """Test a begin marker without an end marker is removed on its own."""
        text = f"one\n{BEGIN_MARKER}\nexport FOO=1\n"

        assert strip_profile_block(text) == "one\nexport FOO=1\n"

    def test_upsert_is_idempotent(self) -> None:
        """Test applying the same block twice leaves one block."""
        block = render_profile_block(Path("/sdk"), True)
        once = upsert_profile_block("export A=1\n", block)
        twice = upsert_profile_block(once, block)

        assert once == twice
        assert twice.count(BEGIN_MARKER) == 1

    def test_upsert_adds_missing_newline(self) -> None:
        """Test content without a final newline is terminated before the block."""
        block = render_profile_block(Path("/sdk"), True)

        assert upsert_profile_block("export A=1", block) == "export A=1\n" + block

    def test_upsert_replaces_toggled_block(self) -> None:
        """Test switching to --no-path replaces the block instead of adding one."""
        with_path = upsert_profile_block("", render_profile_block(Path("/sdk"), True))
        without = upsert_profile_block(with_path, render_profile_block(Path("/sdk"), False))

        assert without.count(BEGIN_MARKER) == 1
        assert "export PATH" not in without


class TestCandidateProfiles:
    """Tests for shell startup file selection."""

    def test_shell_rc_first(self, tmp_path: Path) -> None:
        """Test the login shell's rc file comes first even if absent."""
        fs = RealFileSystem()
        (tmp_path / ".bashrc").touch()

        profiles = candidate_profiles(tmp_path, "/usr/bin/zsh", fs)

        assert profiles == [tmp_path / ".zshrc", tmp_path / ".bashrc"]

    def test_existing_common_profiles(self, tmp_path: Path) -> None:
        """Test existing common profiles are included without duplicates."""
        fs = RealFileSystem()
        for name in (".bashrc", ".zprofile"):
            (tmp_path / name).touch()

        profiles = candidate_profiles(tmp_path, "/bin/bash", fs)

        assert profiles == [tmp_path / ".bashrc", tmp_path / ".zprofile"]

    def test_fallback_bashrc(self, tmp_path: Path) -> None:
        """Test ~/.bashrc is used when nothing else qualifies."""
        profiles = candidate_profiles(tmp_path, "/usr/bin/fish", RealFileSystem())

        assert profiles == [tmp_path / ".bashrc"]


class TestProfileFileTarget:
    """Tests for ProfileFileTarget."""

    def test_creates_missing_file(self, tmp_path: Path) -> None:
        """Test a missing profile is created with the block."""
        profile = tmp_path / ".bashrc"
        target = ProfileFileTarget(profile, RealFileSystem())

        updated = target.apply(Path("/sdk"), update_path=True)

        assert updated == [str(profile)]
        assert profile.read_text().startswith(BEGIN_MARKER)

    def test_rerun_does_not_rewrite(self, tmp_path: Path) -> None:
        """Test an unchanged block does not trigger a write."""
        profile = tmp_path / ".bashrc"
        ProfileFileTarget(profile, RealFileSystem()).apply(Path("/sdk"), True)
        first = profile.read_text()

        ProfileFileTarget(profile, RealFileSystem()).apply(Path("/sdk"), True)

        assert profile.read_text() == first

    def test_write_error_raises(self, tmp_path: Path, mock_filesystem) -> None:
        """Test OS errors are reported as EnvironmentUpdateFailed."""
        mock_filesystem.write_text.side_effect = PermissionError(13, "Permission denied")
        target = ProfileFileTarget(tmp_path / ".bashrc", mock_filesystem)

        with pytest.raises(EnvironmentUpdateFailed) as exc_info:
            target.apply(Path("/sdk"), True)
        assert exc_info.value.path == tmp_path / ".bashrc"


class TestUserStoreTarget:
    """Tests for the structured user environment store target."""

    def test_sets_home_and_path(self, env_store: InMemoryEnvironmentStore) -> None:
        """Test home variable and bin entry are persisted."""
        env_store.values["Path"] = r"C:\Windows"
        target = UserStoreTarget(env_store, ntpath)
        root = Path("C:/Users/ana/.pordosol")

        updated = target.apply(root, update_path=True)

        assert env_store.values["PORDOSOL_HOME"] == str(root)
        assert env_store.values["Path"] == rf"C:\Windows;{root / 'bin'}"
        assert updated == ["user environment:PORDOSOL_HOME", "user environment:Path"]

    def test_rerun_writes_nothing(self, env_store: InMemoryEnvironmentStore) -> None:
        """Test a second run finds everything in place and does not write."""
        target = UserStoreTarget(env_store, ntpath)
        root = Path("C:/sdk")
        target.apply(root, True)
        env_store.writes.clear()

        target.apply(root, True)

        assert env_store.writes == []

    def test_no_path_leaves_path_alone(self, env_store: InMemoryEnvironmentStore) -> None:
        """Test --no-path still sets the home variable but not PATH."""
        env_store.values["Path"] = r"C:\Windows"
        target = UserStoreTarget(env_store, ntpath)

        target.apply(Path("C:/sdk"), update_path=False)

        assert env_store.values["Path"] == r"C:\Windows"
        assert "PORDOSOL_HOME" in env_store.values

    def test_store_error_raises(self) -> None:
        """Test store errors are reported as EnvironmentUpdateFailed."""

        class BrokenStore(InMemoryEnvironmentStore):
            def set(self, name: str, value: str) -> None:
                raise PermissionError(5, "Access is denied")

        target = UserStoreTarget(BrokenStore(), ntpath)

        with pytest.raises(EnvironmentUpdateFailed):
            target.apply(Path("C:/sdk"), True)


class TestEnvironmentConfigurator:
    """Tests for EnvironmentConfigurator."""

    def test_collects_failures(self, tmp_path: Path, env_store: InMemoryEnvironmentStore) -> None:
        """Test a failing target does not stop the others."""

        class FailingTarget:
            description = "broken"

            def apply(self, install_root: Path, update_path: bool) -> list[str]:
                raise EnvironmentUpdateFailed("broken", "nope")

        environ: dict[str, str] = {}
        configurator = EnvironmentConfigurator(
            [FailingTarget(), UserStoreTarget(env_store, posixpath, ":")],
            environ=environ,
            path_separator=":",
        )

        report = configurator.configure(tmp_path / "sdk")

        assert not report.ok
        assert len(report.failures) == 1
        assert "user environment:PORDOSOL_HOME" in report.updated

    def test_exports_to_process(self, tmp_path: Path) -> None:
        """Test the running process sees the home variable and bin first on PATH."""
        environ = {"PATH": "/usr/bin:/bin"}
        configurator = EnvironmentConfigurator([], environ=environ, path_separator=":")

        configurator.configure(tmp_path / "sdk")

        assert environ["PORDOSOL_HOME"] == str(tmp_path / "sdk")
        assert environ["PATH"] == f"{tmp_path / 'sdk' / 'bin'}:/usr/bin:/bin"

    def test_export_keeps_current_directory_segment(self, tmp_path: Path) -> None:
        """Test a trailing empty PATH segment is preserved in the process."""
        environ = {"PATH": "/usr/bin:"}
        configurator = EnvironmentConfigurator([], environ=environ, path_separator=":")

        configurator.configure(tmp_path / "sdk")

        assert environ["PATH"] == f"{tmp_path / 'sdk' / 'bin'}:/usr/bin:"

    def test_no_path_keeps_process_path(self, tmp_path: Path) -> None:
        """Test --no-path does not touch the process PATH."""
        environ = {"PATH": "/usr/bin"}
        configurator = EnvironmentConfigurator([], environ=environ, path_separator=":")

        configurator.configure(tmp_path / "sdk", update_path=False)

        assert environ["PATH"] == "/usr/bin"
        assert environ["PORDOSOL_HOME"] == str(tmp_path / "sdk")
