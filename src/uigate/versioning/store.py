"""
Version Store
Bounded in-memory history of generated versions.
"""

import threading
from collections import deque
from typing import Literal, Optional

from ..core.id import new_version_id
from ..core.logging_config import get_logger
from ..models.version import Version, VersionDraft

logger = get_logger(__name__)

DEFAULT_CAPACITY = 50


def _snapshot(version: Optional[Version]) -> Optional[Version]:
    return version.model_copy(deep=True) if version is not None else None


class VersionStore:
    """
    Insertion-ordered, FIFO-evicting version history.

    The id deque and the id -> version map change together under one lock,
    so readers never see an id without its version or the reverse. Versions
    are deep-copied on the way in and out, so stored entries never share
    nested props or children with anything a caller holds.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self._order: deque[str] = deque()
        self._versions: dict[str, Version] = {}
        self._lock = threading.Lock()

    def append(self, draft: VersionDraft) -> Version:
        """
        Assign an id and store a draft, evicting the oldest entry when full.

        Args:
            draft: Complete version without id

        Returns:
            The stored Version
        """
        draft = draft.model_copy(deep=True)
        version = Version(id=new_version_id(), **{name: getattr(draft, name) for name in VersionDraft.model_fields})

        with self._lock:
            self._versions[version.id] = version
            self._order.append(version.id)
            evicted = None
            if len(self._order) > self.capacity:
                evicted = self._order.popleft()
                del self._versions[evicted]
            size = len(self._order)

        logger.info("version_stored", version_id=version.id, size=size, evicted=evicted)
        return _snapshot(version)

    def get(self, version_id: str) -> Optional[Version]:
        with self._lock:
            return _snapshot(self._versions.get(version_id))

    def exists(self, version_id: str) -> bool:
        with self._lock:
            return version_id in self._versions

    def list(self, limit: Optional[int] = None) -> list[Version]:
        """Most recent ``limit`` versions (all when None), oldest first."""
        with self._lock:
            ids = list(self._order)
            if limit is not None:
                ids = ids[-limit:] if limit > 0 else []
            return [_snapshot(self._versions[vid]) for vid in ids]

    def latest(self) -> Optional[Version]:
        with self._lock:
            return _snapshot(self._versions[self._order[-1]]) if self._order else None

    def adjacent(self, version_id: str, direction: Literal["next", "previous"]) -> Optional[Version]:
        """Neighbour of a version in insertion order, or None at either end."""
        with self._lock:
            try:
                index = self._order.index(version_id)
            except ValueError:
                return None
            target = index + 1 if direction == "next" else index - 1
            if target < 0 or target >= len(self._order):
                return None
            return _snapshot(self._versions[self._order[target]])

    def delete(self, version_id: str) -> bool:
        with self._lock:
            if version_id not in self._versions:
                return False
            del self._versions[version_id]
            self._order.remove(version_id)
        logger.info("version_deleted", version_id=version_id)
        return True

    def clear(self) -> None:
        with self._lock:
            self._order.clear()
            self._versions.clear()
        logger.info("version_store_cleared")

    def count(self) -> int:
        with self._lock:
            return len(self._order)

    def __len__(self) -> int:
        return self.count()

    def __contains__(self, version_id: object) -> bool:
        return isinstance(version_id, str) and self.exists(version_id)
