"""ProjectionCache: LRU memo of full-flatten results.

A full flatten is a pure function of (root, expansion snapshot) under fixed
limits. A session identifies roots by a generation counter rather than by
value (live values are usually unhashable and may be mutated in place by
their owner), so the cache key is ``(generation, snapshot)``.

Each ``ProjectionCache`` instance owns its own ``LRUCache``; eviction of the
least-recently-used projection is silent.

Example::

    cache = ProjectionCache(max_size=8)
    nodes = cache.get(generation, snapshot)
    if nodes is None:
        nodes = flattener.flatten(root, snapshot)
        cache.put(generation, snapshot, nodes)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from cachetools import LRUCache

if TYPE_CHECKING:
    from live_inspector.tree.nodes import NodeDescriptor

__all__ = ["ProjectionCache"]

_Key = tuple[int, frozenset[str]]


class ProjectionCache:
    """LRU cache of flat sequences keyed by (root generation, snapshot).

    Args:
        max_size: Maximum number of projections held. Defaults to 8.
    """

    def __init__(self, max_size: int = 8) -> None:
        self._cache: LRUCache[_Key, tuple[NodeDescriptor, ...]] = LRUCache(
            maxsize=max_size
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def max_size(self) -> int:
        return int(self._cache.maxsize)

    @property
    def curr_size(self) -> int:
        return int(self._cache.currsize)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(
        self, generation: int, snapshot: frozenset[str]
    ) -> list[NodeDescriptor] | None:
        """Return a fresh list copy of the cached sequence, or None on a miss."""
        nodes = self._cache.get((generation, snapshot))
        if nodes is None:
            return None
        return list(nodes)

    def put(
        self, generation: int, snapshot: frozenset[str], nodes: list[NodeDescriptor]
    ) -> None:
        self._cache[(generation, snapshot)] = tuple(nodes)

    def invalidate(self, generation: int | None = None) -> None:
        """Drop every entry, or only the entries of one root generation."""
        if generation is None:
            self._cache.clear()
            return
        for key in [k for k in self._cache if k[0] == generation]:
            del self._cache[key]

    def __len__(self) -> int:
        return len(self._cache)
