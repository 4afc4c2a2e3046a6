"""SHA-256 helpers shared by the receipt, packager and verifier."""

from __future__ import annotations

import hashlib
from pathlib import Path

CHUNK_SIZE = 65536


def sha256_file(path: Path) -> str:
    """Get SHA256 hex digest of a file, read in chunks.

    Args:
        path: Path to the file.

    Returns:
        64-character lowercase hex digest.
    """
    digest = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()


def checksum_line(digest: str, file_name: str) -> str:
    """Format a ``sha256sum``-compatible line (two spaces, newline)."""
    return f"{digest}  {file_name}\n"


def parse_checksum_line(text: str) -> tuple[str, str]:
    """Split a checksum sidecar into (digest, file name).

    Accepts the binary-mode ``*name`` marker written by some tools.
    Missing parts come back as empty strings.
    """
    parts = text.strip().split(maxsplit=1)
    digest = parts[0].lower() if parts else ""
    name = parts[1].lstrip("*") if len(parts) > 1 else ""
    return digest, name
