"""Fast hashing for non-cryptographic use cases.

xxhash backs deterministic node ids in generated plans; SHA256 is kept for
content fingerprints that leave the process.
"""

from enum import Enum
import hashlib

import xxhash


class Algorithm(str, Enum):
    """Supported hash algorithms."""

    XXHASH64 = "xxhash64"  # Fast, non-cryptographic (node ids)
    SHA256 = "sha256"      # Stable content fingerprints


def hash_bytes(
    data: bytes,
    algorithm: Algorithm = Algorithm.XXHASH64,
    truncate: int | None = None
) -> str:
    """
    Hash bytes to hex digest.

    Args:
        data: Bytes to hash
        algorithm: Hash algorithm
        truncate: Optional length to truncate digest

    Returns:
        Hex digest string
    """
    if algorithm == Algorithm.XXHASH64:
        digest = xxhash.xxh64(data).hexdigest()
    elif algorithm == Algorithm.SHA256:
        digest = hashlib.sha256(data).hexdigest()
    else:
        raise ValueError(f"Unknown algorithm: {algorithm}")

    if truncate:
        return digest[:truncate]
    return digest


def hash_string(
    text: str,
    algorithm: Algorithm = Algorithm.XXHASH64,
    truncate: int | None = None
) -> str:
    """
    Hash string to hex digest.

    Examples:
        >>> len(hash_string("login form", truncate=8))
        8
    """
    return hash_bytes(text.encode("utf-8"), algorithm, truncate)


def hash_fields(*fields: str, algorithm: Algorithm = Algorithm.XXHASH64, truncate: int | None = None) -> str:
    """Hash multiple fields together (deterministic, null-separated)."""
    combined = "\x00".join(fields)
    return hash_string(combined, algorithm, truncate)


__all__ = [
    "Algorithm",
    "hash_string",
    "hash_bytes",
    "hash_fields",
]
