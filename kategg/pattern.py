# pattern.py - e-matching of pattern trees and conjunctive multi-patterns

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from kategg.egraph import EGraph, ENode
from kategg.errors import RuleError
from kategg.language import Language, PatternTree, is_var
from kategg.syntax import parse_pattern, to_sexp
from kategg.unionfind import EClassId

Subst = Dict[str, EClassId]


def pattern_vars(tree: PatternTree) -> List[str]:
    seen: Dict[str, None] = {}

    def visit(p: PatternTree) -> None:
        if is_var(p):
            seen.setdefault(p, None)
            return
        for child in p[1:]:
            visit(child)

    visit(tree)
    return list(seen)


def _check_tree(tree: Any) -> None:
    if is_var(tree):
        if len(tree) < 2:
            raise RuleError(f"malformed pattern variable {tree!r}")
        return
    if not isinstance(tree, tuple) or not tree or not isinstance(tree[0], str) or is_var(tree[0]):
        raise RuleError(f"malformed pattern node {tree!r}")
    for child in tree[1:]:
        _check_tree(child)


@dataclass
class SearchMatches:
    eclass: EClassId
    substs: List[Subst]


# -------------------------------------------------------------------
# Single patterns
class Pattern:
    def __init__(self, tree: PatternTree):
        _check_tree(tree)
        self.tree = tree
        self.vars = pattern_vars(tree)

    @classmethod
    def parse(cls, text: str, language: Optional[Language] = None) -> Pattern:
        return cls(parse_pattern(text, language))

    def __str__(self) -> str:
        return to_sexp(self.tree)

    def __repr__(self) -> str:
        return f"Pattern({self})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Pattern) and self.tree == other.tree

    def __hash__(self) -> int:
        return hash(self.tree)

    @property
    def is_var(self) -> bool:
        return is_var(self.tree)

    def check(self, language: Language) -> None:
        if self.is_var:
            return
        for sub in _pattern_nodes(self.tree):
            language.check(sub[0], len(sub) - 1)

    # --------- e-matching ---------
    def candidates(self, egraph: EGraph) -> Iterable[EClassId]:
        if self.is_var:
            return [c.id for c in egraph.classes()]
        return sorted(egraph.classes_with_op(self.tree[0]))

    def search(self, egraph: EGraph) -> List[SearchMatches]:
        results: List[SearchMatches] = []
        for cid in self.candidates(egraph):
            m = self.search_eclass(egraph, cid)
            if m is not None:
                results.append(m)
        return results

    def search_eclass(self, egraph: EGraph, cid: EClassId) -> Optional[SearchMatches]:
        cid = egraph.find(cid)
        substs = _dedup(match(egraph, self.tree, cid, {}))
        if not substs:
            return None
        return SearchMatches(cid, substs)

    def instantiate(self, egraph: EGraph, subst: Subst) -> EClassId:
        def build(p: PatternTree) -> EClassId:
            if is_var(p):
                return subst[p]
            kids = tuple(build(ch) for ch in p[1:])
            return egraph.add(ENode(p[0], kids))

        return build(self.tree)


def _pattern_nodes(tree: PatternTree) -> Iterator[Tuple[Any, ...]]:
    if is_var(tree):
        return
    yield tree
    for child in tree[1:]:
        yield from _pattern_nodes(child)


def _dedup(substs: Iterable[Subst]) -> List[Subst]:
    seen = set()
    out: List[Subst] = []
    for s in substs:
        key = tuple(sorted(s.items()))
        if key not in seen:
            seen.add(key)
            out.append(s)
    return out


def match(egraph: EGraph, pat: PatternTree, cid: EClassId, subst: Subst) -> Iterator[Subst]:
    """Yield every extension of ``subst`` under which ``pat`` is in class ``cid``."""
    cid = egraph.find(cid)
    if is_var(pat):
        bound = subst.get(pat)
        if bound is None:
            extended = dict(subst)
            extended[pat] = cid
            yield extended
        elif egraph.find(bound) == cid:
            yield subst
        return

    head, kids = pat[0], pat[1:]
    for node in egraph[cid].nodes:
        if node.op != head or len(node.children) != len(kids):
            continue
        yield from _match_children(egraph, kids, node.children, 0, subst)


def _match_children(egraph: EGraph, kids: Sequence[PatternTree], child_ids: Sequence[EClassId],
                    i: int, subst: Subst) -> Iterator[Subst]:
    if i == len(kids):
        yield subst
        return
    for s in match(egraph, kids[i], child_ids[i], subst):
        yield from _match_children(egraph, kids, child_ids, i + 1, s)


# -------------------------------------------------------------------
# Multi-patterns: a conjunction of equations sharing one substitution
@dataclass(frozen=True)
class Equation:
    lhs: Pattern
    rhs: Pattern

    def __str__(self) -> str:
        return f"{self.lhs} = {self.rhs}"

    @property
    def vars(self) -> List[str]:
        return list(dict.fromkeys(self.lhs.vars + self.rhs.vars))


class MultiPattern:
    def __init__(self, equations: Sequence[Equation]):
        if not equations:
            raise RuleError("a multi-pattern needs at least one equation")
        self.equations = list(equations)
        self.vars = list(dict.fromkeys(v for eq in self.equations for v in eq.vars))

    def __str__(self) -> str:
        return ", ".join(str(eq) for eq in self.equations)

    def __repr__(self) -> str:
        return f"MultiPattern({self})"

    def check(self, language: Language) -> None:
        for eq in self.equations:
            eq.lhs.check(language)
            eq.rhs.check(language)

    def search(self, egraph: EGraph) -> List[SearchMatches]:
        by_class: Dict[EClassId, List[Subst]] = {}
        for root, subst in self._solve(egraph, 0, {}):
            by_class.setdefault(root, []).append(subst)
        return [SearchMatches(cid, _dedup(substs)) for cid, substs in by_class.items()]

    def _solve(self, egraph: EGraph, i: int, subst: Subst,
               root: Optional[EClassId] = None) -> Iterator[Tuple[EClassId, Subst]]:
        if i == len(self.equations):
            assert root is not None
            yield root, subst
            return
        for cid, s in self._match_equation(egraph, self.equations[i], subst):
            yield from self._solve(egraph, i + 1, s, cid if root is None else root)

    def _match_equation(self, egraph: EGraph, eq: Equation, subst: Subst) -> Iterator[Tuple[EClassId, Subst]]:
        first, second = eq.lhs, eq.rhs
        # scan from the side that narrows the candidate classes most
        if first.is_var and first.tree not in subst and not (second.is_var and second.tree not in subst):
            first, second = second, first
        if first.is_var and first.tree in subst:
            candidates: Iterable[EClassId] = [egraph.find(subst[first.tree])]
        elif second.is_var and second.tree in subst:
            candidates = [egraph.find(subst[second.tree])]
        else:
            candidates = first.candidates(egraph)
        for cid in candidates:
            cid = egraph.find(cid)
            seeded = subst
            if second.is_var and second.tree not in subst:
                # bind the bare variable side first so the tree side is pruned by it
                seeded = dict(subst)
                seeded[second.tree] = cid
            for s1 in match(egraph, first.tree, cid, seeded):
                for s2 in match(egraph, second.tree, cid, s1):
                    yield cid, s2
