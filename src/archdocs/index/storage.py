"""In-memory document index keyed by canonical URI."""

from __future__ import annotations

import bisect
from typing import Dict, Iterator, List, Optional

from archdocs.models import ResourceInfo


class DocumentIndex:
    """Ordered mapping from URI to :class:`ResourceInfo`.

    Writes are last-write-wins. Once :meth:`freeze` is called the index is
    read-only and may be shared between readers without locking.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, ResourceInfo] = {}
        self._keys: List[str] = []
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> "DocumentIndex":
        self._frozen = True
        return self

    def insert(self, key: str, value: ResourceInfo) -> Optional[ResourceInfo]:
        """Store ``value`` under ``key`` and return the entry it replaced."""
        if self._frozen:
            raise RuntimeError("Document index is frozen")
        previous = self._entries.get(key)
        if previous is None:
            bisect.insort(self._keys, key)
        self._entries[key] = value
        return previous

    def get(self, key: str) -> Optional[ResourceInfo]:
        return self._entries.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._keys)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._keys))

    def keys(self) -> List[str]:
        return list(self._keys)

    def values(self) -> List[ResourceInfo]:
        return [self._entries[key] for key in self._keys]

    def items(self) -> List[tuple[str, ResourceInfo]]:
        return [(key, self._entries[key]) for key in self._keys]

    def get_stats(self) -> dict[str, int]:
        return {
            "document_count": len(self._keys),
            "total_size_bytes": sum(info.size for info in self._entries.values()),
        }
