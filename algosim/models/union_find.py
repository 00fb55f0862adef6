"""Disjoint-set forest used by Kruskal for cycle detection."""

from __future__ import annotations

from collections.abc import Hashable, Iterable


class DisjointSet:
    """Union-find with path compression and union by rank.

    Args:
        items: Initial singleton sets.
    """

    def __init__(self, items: Iterable[Hashable] = ()) -> None:
        self._parent: dict[Hashable, Hashable] = {}
        self._rank: dict[Hashable, int] = {}
        for item in items:
            self.add(item)

    def add(self, item: Hashable) -> None:
        """Add ``item`` as its own set. No-op if already present."""
        if item not in self._parent:
            self._parent[item] = item
            self._rank[item] = 0

    def find(self, item: Hashable) -> Hashable:
        """Return the representative of ``item``'s set.

        Raises:
            KeyError: If ``item`` was never added.
        """
        root = item
        while self._parent[root] != root:
            root = self._parent[root]
        # Path compression: point every node on the walk at the root.
        while self._parent[item] != root:
            self._parent[item], item = root, self._parent[item]
        return root

    def union(self, a: Hashable, b: Hashable) -> bool:
        """Merge the sets of ``a`` and ``b``.

        Returns:
            False if they were already in the same set.
        """
        root_a = self.find(a)
        root_b = self.find(b)
        if root_a == root_b:
            return False

        if self._rank[root_a] < self._rank[root_b]:
            self._parent[root_a] = root_b
        elif self._rank[root_a] > self._rank[root_b]:
            self._parent[root_b] = root_a
        else:
            self._parent[root_b] = root_a
            self._rank[root_a] += 1
        return True

    def connected(self, a: Hashable, b: Hashable) -> bool:
        return self.find(a) == self.find(b)

    @property
    def set_count(self) -> int:
        return sum(1 for item, parent in self._parent.items() if item == parent)

    def rank(self, item: Hashable) -> int:
        return self._rank[item]

    def __contains__(self, item: object) -> bool:
        return item in self._parent

    def __len__(self) -> int:
        return len(self._parent)
