# unionfind.py - disjoint sets over dense e-class ids

from __future__ import annotations

from typing import List, Tuple

EClassId = int


class UnionFind:
    def __init__(self):
        self.parent: List[EClassId] = []
        self.size: List[int] = []

    def __len__(self) -> int:
        return len(self.parent)

    def make_set(self, weight: int = 1) -> EClassId:
        x = len(self.parent)
        self.parent.append(x)
        self.size.append(weight)
        return x

    def find(self, x: EClassId) -> EClassId:
        parent = self.parent
        while parent[x] != x:
            # path halving
            parent[x] = parent[parent[x]]
            x = parent[x]
        return x

    def in_same_set(self, a: EClassId, b: EClassId) -> bool:
        return self.find(a) == self.find(b)

    def union(self, a: EClassId, b: EClassId) -> Tuple[EClassId, bool]:
        """Attach the lighter root under the heavier one.

        Returns ``(root, changed)``; ``changed`` is False when ``a`` and
        ``b`` were already in the same set.
        """
        ra, rb = self.find(a), self.find(b)
        if ra == rb:
            return ra, False
        if self.size[ra] < self.size[rb]:
            ra, rb = rb, ra
        self.parent[rb] = ra
        self.size[ra] += self.size[rb]
        return ra, True
