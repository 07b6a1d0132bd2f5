"""LRU cache with pinned entries, used as the variable store.

Hot variables such as ``_output`` and ``_status`` are pinned: they are never
evicted and never reordered on access.  Everything else is evicted from the
least-recently-used end once the cache grows past its capacity.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

log = logging.getLogger(__name__)

DEFAULT_CACHE_SIZE = 10000

DEFAULT_PINNED_VARIABLES: tuple[str, ...] = (
    "_output",
    "_error",
    "_status",
    "_elapsed",
    "_style",
    "_default_command",
    "_completion_mode",
)


@dataclass(frozen=True)
class CacheStats:
    """Snapshot of cache occupancy."""

    size: int
    max_size: int
    pinned_count: int


class _Node:
    __slots__ = ("key", "value", "pinned", "prev", "next")

    def __init__(self, key: str = "", value: str = "", pinned: bool = False):
        self.key = key
        self.value = value
        self.pinned = pinned
        self.prev: _Node | None = None
        self.next: _Node | None = None


class VariableLRUCache:
    """Thread-safe string cache with LRU eviction that skips pinned keys."""

    def __init__(self, max_size: int = DEFAULT_CACHE_SIZE):
        if max_size <= 0:
            max_size = DEFAULT_CACHE_SIZE
        self._max_size = max_size
        self._nodes: dict[str, _Node] = {}
        self._pinned: set[str] = set(DEFAULT_PINNED_VARIABLES)
        self._lock = threading.Lock()
        # Sentinels: head.next is most recent, tail.prev is least recent.
        self._head = _Node()
        self._tail = _Node()
        self._head.next = self._tail
        self._tail.prev = self._head

    @property
    def max_size(self) -> int:
        return self._max_size

    def get(self, key: str) -> str | None:
        """Return the value for *key* and mark it recently used, or ``None``."""
        with self._lock:
            node = self._nodes.get(key)
            if node is None:
                return None
            if not node.pinned:
                self._move_to_head(node)
            return node.value

    def set(self, key: str, value: str) -> None:
        """Insert or update *key*, evicting one unpinned entry when over capacity."""
        with self._lock:
            node = self._nodes.get(key)
            if node is not None:
                node.value = value
                if not node.pinned:
                    self._move_to_head(node)
                return

            node = _Node(key, value, key in self._pinned)
            self._nodes[key] = node
            self._add_to_head(node)

            if len(self._nodes) > self._max_size:
                self._evict_lru()

    def delete(self, key: str) -> None:
        with self._lock:
            node = self._nodes.pop(key, None)
            if node is not None:
                self._unlink(node)

    def get_all(self) -> dict[str, str]:
        """Return a copy of every key/value pair without touching recency."""
        with self._lock:
            return {key: node.value for key, node in self._nodes.items()}

    def clear(self) -> None:
        with self._lock:
            self._nodes = {}
            self._head.next = self._tail
            self._tail.prev = self._head

    def set_pinned(self, key: str, pinned: bool) -> None:
        """Pin or unpin *key*, including an entry that is already cached."""
        with self._lock:
            if pinned:
                self._pinned.add(key)
            else:
                self._pinned.discard(key)
            node = self._nodes.get(key)
            if node is not None:
                node.pinned = pinned

    def is_pinned(self, key: str) -> bool:
        with self._lock:
            return key in self._pinned

    def stats(self) -> CacheStats:
        with self._lock:
            pinned_count = sum(1 for node in self._nodes.values() if node.pinned)
            return CacheStats(
                size=len(self._nodes),
                max_size=self._max_size,
                pinned_count=pinned_count,
            )

    def __len__(self) -> int:
        with self._lock:
            return len(self._nodes)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._nodes

    # Linked-list helpers; callers hold self._lock.

    def _add_to_head(self, node: _Node) -> None:
        first = self._head.next
        node.prev = self._head
        node.next = first
        first.prev = node
        self._head.next = node

    def _unlink(self, node: _Node) -> None:
        node.prev.next = node.next
        node.next.prev = node.prev
        node.prev = node.next = None

    def _move_to_head(self, node: _Node) -> None:
        self._unlink(node)
        self._add_to_head(node)

    def _evict_lru(self) -> None:
        current = self._tail.prev
        while current is not self._head:
            if not current.pinned:
                self._unlink(current)
                del self._nodes[current.key]
                log.debug("evicted variable %s (capacity %d)", current.key, self._max_size)
                return
            current = current.prev
        # Every entry is pinned; the cache stays over capacity.
        log.debug("cache over capacity with %d pinned entries", len(self._nodes))
