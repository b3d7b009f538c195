# egraph.py - hash-consed e-graph with deferred rebuilding

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Optional, Set, Tuple, Union

import structlog

from kategg.language import Language, Symbol, Term, intern
from kategg.syntax import parse_term
from kategg.unionfind import EClassId, UnionFind

logger = structlog.get_logger("kategg.egraph")


# -------------------------------------------------------------------
# E-Graph internals
@dataclass(frozen=True)
class ENode:
    op: Symbol
    children: Tuple[EClassId, ...] = ()

    def canonicalize(self, find: Callable[[EClassId], EClassId]) -> ENode:
        if not self.children:
            return self
        return ENode(self.op, tuple(find(c) for c in self.children))


@dataclass
class EClass:
    id: EClassId
    nodes: List[ENode]
    parents: List[Tuple[ENode, EClassId]] = field(default_factory=list)  # (parent node, parent class)

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self) -> Iterator[ENode]:
        return iter(self.nodes)


class EGraph:
    def __init__(self, language: Optional[Language] = None):
        self.language = language
        self.uf = UnionFind()
        self.eclasses: Dict[EClassId, EClass] = {}     # canonical id -> class
        self.hashcons: Dict[ENode, EClassId] = {}
        self.pending: List[Tuple[ENode, EClassId]] = []
        self.dirty: Set[EClassId] = set()
        self.classes_by_op: Dict[Symbol, Set[EClassId]] = {}
        self.n_unions: int = 0
        self.clean: bool = True

    def __repr__(self) -> str:
        return f"EGraph(classes={self.number_of_classes}, nodes={self.total_size})"

    # --------- queries ---------
    def find(self, cid: EClassId) -> EClassId:
        return self.uf.find(cid)

    def __getitem__(self, cid: EClassId) -> EClass:
        return self.eclasses[self.find(cid)]

    def __contains__(self, cid: EClassId) -> bool:
        return 0 <= cid < len(self.uf)

    def classes(self) -> Iterator[EClass]:
        return iter(list(self.eclasses.values()))

    def classes_with_op(self, op: Symbol) -> Set[EClassId]:
        return self.classes_by_op.get(op, set())

    @property
    def number_of_classes(self) -> int:
        return len(self.eclasses)

    @property
    def total_size(self) -> int:
        return sum(len(c.nodes) for c in self.eclasses.values())

    @property
    def is_clean(self) -> bool:
        return self.clean

    def equivalent(self, a: EClassId, b: EClassId) -> bool:
        return self.find(a) == self.find(b)

    def lookup(self, enode: ENode) -> Optional[EClassId]:
        cid = self.hashcons.get(enode.canonicalize(self.find))
        if cid is None:
            return None
        return self.find(cid)

    def lookup_term(self, t: Term) -> Optional[EClassId]:
        kids: List[EClassId] = []
        for child in t[1:]:
            cid = self.lookup_term(child)
            if cid is None:
                return None
            kids.append(cid)
        return self.lookup(ENode(t[0], tuple(kids)))

    # --------- insertion ---------
    def add(self, enode: ENode) -> EClassId:
        if self.language is not None:
            self.language.check(enode.op, len(enode.children))
        enode = enode.canonicalize(self.find)
        existing = self.hashcons.get(enode)
        if existing is not None:
            return self.find(existing)

        # a new class holds one e-node; union sums these weights
        cid = self.uf.make_set(weight=1)
        self.eclasses[cid] = EClass(cid, [enode])
        for ch in enode.children:
            self.eclasses[ch].parents.append((enode, cid))
        self.hashcons[enode] = cid
        self.classes_by_op.setdefault(enode.op, set()).add(cid)
        return cid

    def add_term(self, t: Term) -> EClassId:
        if self.language is not None:
            self.language.check_term(t)
        return self._add_term(t)

    def _add_term(self, t: Term) -> EClassId:
        kids = tuple(self._add_term(c) for c in t[1:])
        return self.add(ENode(intern(t[0]), kids))

    def add_expr(self, expr: Union[str, Term]) -> EClassId:
        if isinstance(expr, str):
            expr = parse_term(expr, self.language)
        return self.add_term(expr)

    # --------- merging & rebuilding ---------
    def union(self, a: EClassId, b: EClassId) -> bool:
        """Merge the classes of ``a`` and ``b``; False if already equal.

        Congruence is restored lazily: the retired class's parents are
        queued and only re-hashed by :meth:`rebuild`.
        """
        ra, rb = self.find(a), self.find(b)
        if ra == rb:
            return False
        root, _ = self.uf.union(ra, rb)
        retired = rb if root == ra else ra

        gone = self.eclasses.pop(retired)
        leader = self.eclasses[root]
        self.pending.extend(gone.parents)
        leader.nodes.extend(gone.nodes)
        leader.parents.extend(gone.parents)
        self.dirty.add(root)
        self.n_unions += 1
        self.clean = False
        return True

    def rebuild(self) -> int:
        """Restore the congruence invariant; returns the number of unions it made."""
        n_unions = 0
        while self.pending:
            todo = self.pending
            self.pending = []
            for node, cid in todo:
                self.hashcons.pop(node, None)
                node = node.canonicalize(self.find)
                cid = self.find(cid)
                self.dirty.add(cid)
                old = self.hashcons.get(node)
                self.hashcons[node] = cid
                if old is not None and self.union(old, cid):
                    n_unions += 1

        self._rebuild_classes()
        self.clean = True
        if n_unions:
            logger.debug("rebuild_complete", unions=n_unions, classes=self.number_of_classes)
        return n_unions

    def _rebuild_classes(self) -> None:
        find = self.find
        for cid in {find(c) for c in self.dirty}:
            eclass = self.eclasses[cid]
            # canonical nodes, deduplicated, keeping first-seen order
            eclass.nodes = list(dict.fromkeys(n.canonicalize(find) for n in eclass.nodes))
            for node in eclass.nodes:
                self.hashcons[node] = cid
            eclass.parents = list(dict.fromkeys((n.canonicalize(find), find(p)) for n, p in eclass.parents))
        self.dirty.clear()
        for op, ids in self.classes_by_op.items():
            self.classes_by_op[op] = {find(c) for c in ids}
