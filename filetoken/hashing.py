# filetoken/hashing.py
"""
Content signatures for files.

A signature is the full hex digest of a 256-bit hash over the file's bytes,
which is always 64 characters long.
"""

import hashlib
from pathlib import Path

SIGNATURE_LENGTH = 64

# Algorithms whose hex digest is exactly SIGNATURE_LENGTH characters
SUPPORTED_ALGORITHMS = ("sha3_256", "sha256", "blake2s")

DEFAULT_ALGORITHM = "sha3_256"


def _hasher(algorithm: str):
    if algorithm not in SUPPORTED_ALGORITHMS:
        raise ValueError(
            f"Unsupported hash algorithm: {algorithm}. "
            f"Expected one of {', '.join(SUPPORTED_ALGORITHMS)}"
        )
    return hashlib.new(algorithm)


def file_signature(path: Path | str, algorithm: str = DEFAULT_ALGORITHM) -> str:
    """
    Compute the content signature of a file.

    Uses SHA-3 (Keccak) by default.

    Args:
        path: File to hash
        algorithm: Hash algorithm (sha3_256, sha256, blake2s)

    Returns:
        Full hex digest (64 characters, no truncation)
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"File not found: {path}")

    hasher = _hasher(algorithm)
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            hasher.update(chunk)
    return hasher.hexdigest()


def bytes_signature(data: bytes, algorithm: str = DEFAULT_ALGORITHM) -> str:
    """Compute the content signature of an in-memory byte string."""
    hasher = _hasher(algorithm)
    hasher.update(data)
    return hasher.hexdigest()
