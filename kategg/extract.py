# extract.py - cheapest representative term of an e-class

from __future__ import annotations

import math
from typing import Callable, Dict, Mapping, Optional, Protocol, Set, Tuple

from kategg.egraph import EClass, EGraph, ENode
from kategg.errors import ExtractionError
from kategg.language import Term
from kategg.unionfind import EClassId

ChildCost = Callable[[EClassId], float]


class CostFunction(Protocol):
    def cost(self, enode: ENode, child_cost: ChildCost) -> float: ...


class AstSize:
    def cost(self, enode: ENode, child_cost: ChildCost) -> float:
        return 1 + sum(child_cost(c) for c in enode.children)


class AstDepth:
    def cost(self, enode: ENode, child_cost: ChildCost) -> float:
        return 1 + max((child_cost(c) for c in enode.children), default=0)


class OpCost:
    """Per-operator weight plus the children's costs; unlisted operators cost ``default``."""

    def __init__(self, table: Mapping[str, float], default: float = 1):
        self.table = dict(table)
        self.default = default

    def cost(self, enode: ENode, child_cost: ChildCost) -> float:
        return self.table.get(enode.op, self.default) + sum(child_cost(c) for c in enode.children)


# -------------------------------------------------------------------
# Extraction (fixpoint relaxation, every class starts at infinity)
class Extractor:
    def __init__(self, egraph: EGraph, cost_function: Optional[CostFunction] = None):
        self.egraph = egraph
        self.cost_function = cost_function if cost_function is not None else AstSize()
        self.costs: Dict[EClassId, Tuple[float, ENode]] = {}
        self._find_costs()

    def _child_cost(self, cid: EClassId) -> float:
        best = self.costs.get(self.egraph.find(cid))
        return math.inf if best is None else best[0]

    def _node_cost(self, node: ENode) -> float:
        if any(self.egraph.find(c) not in self.costs for c in node.children):
            return math.inf
        cost = self.cost_function.cost(node, self._child_cost)
        if cost < 0:
            raise ExtractionError(f"negative cost {cost} for operator {node.op!r}")
        return cost

    def _make_pass(self, eclass: EClass) -> Optional[Tuple[float, ENode]]:
        best: Optional[Tuple[float, ENode]] = None
        for node in eclass.nodes:
            cost = self._node_cost(node)
            if math.isfinite(cost) and (best is None or cost < best[0]):
                best = (cost, node)
        return best

    def _find_costs(self) -> None:
        changed = True
        while changed:
            changed = False
            for eclass in self.egraph.classes():
                best = self._make_pass(eclass)
                if best is None:
                    continue
                prev = self.costs.get(eclass.id)
                if prev is None or best[0] < prev[0]:
                    self.costs[eclass.id] = best
                    changed = True

    # --------- results ---------
    def find_best_cost(self, root: EClassId) -> float:
        return self._best(root)[0]

    def find_best_node(self, root: EClassId) -> ENode:
        return self._best(root)[1]

    def find_best(self, root: EClassId) -> Tuple[float, Term]:
        cost, _ = self._best(root)
        return cost, self._build(self.egraph.find(root), set())

    def _best(self, root: EClassId) -> Tuple[float, ENode]:
        if root not in self.egraph:
            raise ExtractionError(f"unknown e-class {root}")
        cid = self.egraph.find(root)
        best = self.costs.get(cid)
        if best is None:
            raise ExtractionError(f"e-class {cid} has no finite-cost term")
        return best

    def _build(self, cid: EClassId, on_path: Set[EClassId]) -> Term:
        if cid in on_path:
            raise ExtractionError(f"cyclic choice of best nodes through e-class {cid}")
        _, node = self._best(cid)
        on_path.add(cid)
        kids = tuple(self._build(self.egraph.find(c), on_path) for c in node.children)
        on_path.discard(cid)
        return (node.op,) + kids


def extract_best(egraph: EGraph, root: EClassId,
                 cost_function: Optional[CostFunction] = None) -> Tuple[float, Term]:
    return Extractor(egraph, cost_function).find_best(root)
