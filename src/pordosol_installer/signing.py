"""Detached Ed25519 signatures for release archives."""

from __future__ import annotations

import base64
import binascii
import logging
from pathlib import Path

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)

from pordosol_installer.errors import SigningFailed

logger = logging.getLogger(__name__)

SIGNATURE_SUFFIX = ".sig"


def _is_hex_seed(text: str) -> bool:
    return len(text) == 64 and all(c in "0123456789abcdefABCDEF" for c in text)


def load_private_key(path: Path) -> Ed25519PrivateKey:
    """Load an Ed25519 private key.

    Accepts a PEM-encoded key or a 64-character hex seed.

    Raises:
        SigningFailed: If the file is unreadable or not an Ed25519 key.
    """
    try:
        blob = path.read_bytes().strip()
    except OSError as e:
        raise SigningFailed(path, e.strerror or str(e)) from e

    text = blob.decode("ascii", errors="replace")
    if _is_hex_seed(text):
        return Ed25519PrivateKey.from_private_bytes(bytes.fromhex(text))

    try:
        key = serialization.load_pem_private_key(blob, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise SigningFailed(path, "not a PEM private key or hex seed") from e
    if not isinstance(key, Ed25519PrivateKey):
        raise SigningFailed(path, "private key is not Ed25519")
    return key


def sign_file(path: Path, key_path: Path) -> Path:
    """Write ``<path>.sig`` holding the base64 signature of the file bytes.

    Args:
        path: File to sign.
        key_path: Ed25519 private key.

    Returns:
        Path of the signature file.

    Raises:
        SigningFailed: If the key is invalid or the signature cannot be written.
    """
    key = load_private_key(key_path)
    signature_path = path.with_name(path.name + SIGNATURE_SUFFIX)
    try:
        signature = key.sign(path.read_bytes())
        signature_path.write_text(base64.b64encode(signature).decode("ascii") + "\n")
    except OSError as e:
        raise SigningFailed(key_path, e.strerror or str(e)) from e
    logger.debug("Signed %s -> %s", path, signature_path)
    return signature_path


def load_public_key(path: Path) -> Ed25519PublicKey:
    """Load an Ed25519 public key (PEM or 64-character hex).

    Raises:
        SigningFailed: If the file is unreadable or not an Ed25519 key.
    """
    try:
        blob = path.read_bytes().strip()
    except OSError as e:
        raise SigningFailed(path, e.strerror or str(e)) from e

    text = blob.decode("ascii", errors="replace")
    if _is_hex_seed(text):
        return Ed25519PublicKey.from_public_bytes(bytes.fromhex(text))

    try:
        key = serialization.load_pem_public_key(blob)
    except (ValueError, UnsupportedAlgorithm) as e:
        raise SigningFailed(path, "not a PEM public key or hex key") from e
    if not isinstance(key, Ed25519PublicKey):
        raise SigningFailed(path, "public key is not Ed25519")
    return key


def verify_signature(path: Path, signature_path: Path, public_key: Ed25519PublicKey) -> bool:
    """Check a detached signature produced by :func:`sign_file`."""
    try:
        signature = base64.b64decode(signature_path.read_text().strip(), validate=True)
        public_key.verify(signature, path.read_bytes())
    except (InvalidSignature, binascii.Error, ValueError):
        return False
    return True
