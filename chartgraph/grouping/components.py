"""Connected components over resource keys (union-find)."""

from __future__ import annotations

from collections.abc import Hashable, Iterable
from typing import Generic, TypeVar

T = TypeVar("T", bound=Hashable)


class DisjointSet(Generic[T]):
    """Union-find with path halving and union by size."""

    def __init__(self, items: Iterable[T]) -> None:
        self._parent: dict[T, T] = {}
        self._size: dict[T, int] = {}
        for item in items:
            self._parent[item] = item
            self._size[item] = 1

    def __contains__(self, item: object) -> bool:
        return item in self._parent

    def find(self, item: T) -> T:
        parent = self._parent
        while parent[item] != item:
            parent[item] = parent[parent[item]]
            item = parent[item]
        return item

    def union(self, a: T, b: T) -> bool:
        """Merge the sets holding ``a`` and ``b``. Returns False if already merged."""
        root_a, root_b = self.find(a), self.find(b)
        if root_a == root_b:
            return False
        if self._size[root_a] < self._size[root_b]:
            root_a, root_b = root_b, root_a
        self._parent[root_b] = root_a
        self._size[root_a] += self._size[root_b]
        return True


def connected_components(nodes: Iterable[T], edges: Iterable[tuple[T, T]]) -> list[list[T]]:
    """Return the components of ``nodes`` that contain at least one edge.

    Edges are treated as undirected. Edges with an endpoint outside
    ``nodes`` and self-loops are ignored. Members keep the order in which
    ``nodes`` yielded them; components are ordered by their first member.
    """
    ordered = list(nodes)
    ds: DisjointSet[T] = DisjointSet(ordered)
    linked: set[T] = set()
    for a, b in edges:
        if a == b or a not in ds or b not in ds:
            continue
        ds.union(a, b)
        linked.add(a)
        linked.add(b)

    buckets: dict[T, list[T]] = {}
    for node in ordered:
        if node in linked:
            buckets.setdefault(ds.find(node), []).append(node)
    return list(buckets.values())
