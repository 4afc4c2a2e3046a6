"""External build tool invocation."""

from __future__ import annotations

import logging
import shutil
import subprocess
from collections.abc import Sequence
from pathlib import Path

from pordosol_installer.errors import BuildFailed, PrerequisiteMissing

logger = logging.getLogger(__name__)


class CargoBuildTool:
    """Builds release binaries with ``cargo``.

    Output is streamed to the terminal. There is no timeout and no retry:
    a failed build fails the run, and Ctrl-C reaches the child process.
    """

    command = "cargo"

    def __init__(self, executable: str | None = None) -> None:
        """Initialize the build tool.

        Args:
            executable: Explicit path to cargo; looked up on PATH when omitted.
        """
        self.executable = executable

    def ensure_available(self) -> None:
        """Resolve cargo on PATH.

        Raises:
            PrerequisiteMissing: If cargo cannot be found.
        """
        if self.executable is None:
            found = shutil.which(self.command)
            if found is None:
                raise PrerequisiteMissing(self.command)
            self.executable = found
        logger.debug("Using build tool at %s", self.executable)

    def build_command(self, targets: Sequence[str]) -> list[str]:
        """Command line for building the given targets."""
        cmd = [self.executable or self.command, "build", "--release"]
        for target in targets:
            cmd.extend(["--bin", target])
        return cmd

    def run(self, workdir: Path, targets: Sequence[str]) -> None:
        """Build targets in ``workdir``.

        Raises:
            BuildFailed: If cargo exits non-zero or cannot be started.
        """
        self.ensure_available()
        cmd = self.build_command(targets)
        logger.debug("Running %s in %s", " ".join(cmd), workdir)
        try:
            result = subprocess.run(cmd, cwd=workdir, check=False)
        except OSError as e:
            logger.debug("Could not start build: %s", e)
            raise BuildFailed(workdir, -1) from e
        if result.returncode != 0:
            raise BuildFailed(workdir, result.returncode)
