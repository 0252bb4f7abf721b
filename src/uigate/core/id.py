"""ID Generation.

ULID-based identifiers for stored versions.

- Lexicographically sortable and timestamp-based
- Prefixed (``ver_*``) so ids are recognisable in logs
- Opaque to callers: only ``is_valid`` and ``extract_timestamp`` look inside
"""

from datetime import datetime, timezone
from typing import NewType

from ulid import ULID

VersionID = NewType("VersionID", str)
"""Stored version identifier"""


class Prefix:
    """ID prefix constants."""

    VERSION = "ver"


class Generator:
    """ULID generator."""

    def generate(self) -> str:
        """Generate a new ULID."""
        return str(ULID())

    def generate_with_prefix(self, prefix: str) -> str:
        """Generate ULID with type prefix."""
        return f"{prefix}_{self.generate()}"

    def timestamp(self, id_str: str) -> int:
        """Extract timestamp (milliseconds) from ULID."""
        try:
            ulid_str = id_str.split("_")[1] if "_" in id_str else id_str
            ulid = ULID.from_str(ulid_str)
            return int(ulid.timestamp * 1000)
        except (ValueError, IndexError):
            return 0


_generator = Generator()


def new_version_id() -> VersionID:
    """Generate new version ID."""
    return VersionID(_generator.generate_with_prefix(Prefix.VERSION))


def is_valid(id_str: str) -> bool:
    """Check if string is a valid (optionally prefixed) ULID."""
    try:
        ulid_part = id_str.split("_")[1] if "_" in id_str else id_str
        if len(ulid_part) != 26:
            return False
        ULID.from_str(ulid_part)
        return True
    except (ValueError, IndexError):
        return False


def is_version_id(id_str: str) -> bool:
    """Check if ID is a version ID."""
    return id_str.startswith(f"{Prefix.VERSION}_") and is_valid(id_str)


def extract_timestamp(id_str: str) -> datetime | None:
    """Extract creation time from an ID, or None if it is not a ULID."""
    timestamp_ms = _generator.timestamp(id_str)
    if timestamp_ms <= 0:
        return None
    return datetime.fromtimestamp(timestamp_ms / 1000.0, tz=timezone.utc)


__all__ = [
    "VersionID",
    "Prefix",
    "new_version_id",
    "is_valid",
    "is_version_id",
    "extract_timestamp",
]
