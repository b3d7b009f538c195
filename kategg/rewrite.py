# rewrite.py - named rewrite rules and rule sets

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Union

from kategg.egraph import EGraph
from kategg.errors import RuleError
from kategg.language import Language
from kategg.pattern import Equation, MultiPattern, Pattern, SearchMatches
from kategg.syntax import parse_equations


class Rewrite:
    """``searcher => applier``: every match of the searcher is unioned with the
    instantiated applier."""

    def __init__(self, name: str, searcher: Pattern, applier: Pattern):
        if not name:
            raise RuleError("rewrite needs a name")
        missing = [v for v in applier.vars if v not in searcher.vars]
        if missing:
            raise RuleError(f"{name}: right-hand side uses unbound variables {missing}")
        self.name = name
        self.searcher = searcher
        self.applier = applier

    def __repr__(self) -> str:
        return f"Rewrite({self.name!r}, {self.searcher} => {self.applier})"

    def check(self, language: Language) -> None:
        self.searcher.check(language)
        self.applier.check(language)

    def search(self, egraph: EGraph) -> List[SearchMatches]:
        return self.searcher.search(egraph)

    def apply(self, egraph: EGraph, matches: Sequence[SearchMatches]) -> int:
        changed = 0
        for m in matches:
            for subst in m.substs:
                new_c = self.applier.instantiate(egraph, subst)
                if egraph.union(m.eclass, new_c):
                    changed += 1
        return changed


class MultiRewrite:
    """Conditional rewrite: when every premise equation already holds under one
    substitution, assert every conclusion equation."""

    def __init__(self, name: str, premises: MultiPattern, conclusions: Sequence[Equation]):
        if not name:
            raise RuleError("rewrite needs a name")
        if not conclusions:
            raise RuleError(f"{name}: no conclusions")
        bound = set(premises.vars)
        for eq in conclusions:
            missing = [v for v in eq.vars if v not in bound]
            if missing:
                raise RuleError(f"{name}: conclusion {eq} uses unbound variables {missing}")
        self.name = name
        self.premises = premises
        self.conclusions = list(conclusions)

    def __repr__(self) -> str:
        conclusions = ", ".join(str(eq) for eq in self.conclusions)
        return f"MultiRewrite({self.name!r}, {self.premises} => {conclusions})"

    def check(self, language: Language) -> None:
        self.premises.check(language)
        for eq in self.conclusions:
            eq.lhs.check(language)
            eq.rhs.check(language)

    def search(self, egraph: EGraph) -> List[SearchMatches]:
        return self.premises.search(egraph)

    def apply(self, egraph: EGraph, matches: Sequence[SearchMatches]) -> int:
        changed = 0
        for m in matches:
            for subst in m.substs:
                for eq in self.conclusions:
                    a = eq.lhs.instantiate(egraph, subst)
                    b = eq.rhs.instantiate(egraph, subst)
                    if egraph.union(a, b):
                        changed += 1
        return changed


AnyRewrite = Union[Rewrite, MultiRewrite]


# -------------------------------------------------------------------
# Constructors from s-expression text
def rewrite(name: str, lhs: str, rhs: str, bidirectional: bool = False,
            language: Optional[Language] = None) -> List[Rewrite]:
    """Build ``lhs => rhs``; with ``bidirectional`` also ``rhs => lhs`` named
    ``<name>-rev``."""
    left = Pattern.parse(lhs)
    right = Pattern.parse(rhs)
    rules = [Rewrite(name, left, right)]
    if bidirectional:
        rules.append(Rewrite(f"{name}-rev", right, left))
    if language is not None:
        for r in rules:
            r.check(language)
    return rules


def multi_rewrite(name: str, premises: str, conclusions: str,
                  language: Optional[Language] = None) -> MultiRewrite:
    lhs = [Equation(Pattern(a), Pattern(b)) for a, b in parse_equations(premises)]
    rhs = [Equation(Pattern(a), Pattern(b)) for a, b in parse_equations(conclusions)]
    rule = MultiRewrite(name, MultiPattern(lhs), rhs)
    if language is not None:
        rule.check(language)
    return rule


RuleSpec = Union[AnyRewrite, Iterable["RuleSpec"]]


def _flatten(rules: Iterable[RuleSpec]) -> Iterator[AnyRewrite]:
    for r in rules:
        if isinstance(r, (Rewrite, MultiRewrite)):
            yield r
        elif isinstance(r, RuleSet):
            yield from r
        elif isinstance(r, (list, tuple)):
            yield from _flatten(r)
        else:
            raise RuleError(f"not a rewrite: {r!r}")


class RuleSet:
    """Ordered, validated collection of rewrites handed to a runner."""

    def __init__(self, rules: Iterable[RuleSpec] = (), language: Optional[Language] = None):
        self.language = language
        self.rules: List[AnyRewrite] = []
        self._by_name: Dict[str, AnyRewrite] = {}
        for r in _flatten(rules):
            if r.name in self._by_name:
                raise RuleError(f"duplicate rule name {r.name!r}")
            if language is not None:
                r.check(language)
            self._by_name[r.name] = r
            self.rules.append(r)

    def __iter__(self) -> Iterator[AnyRewrite]:
        return iter(self.rules)

    def __len__(self) -> int:
        return len(self.rules)

    def __contains__(self, name: str) -> bool:
        return name in self._by_name

    def __getitem__(self, name: str) -> AnyRewrite:
        return self._by_name[name]

    def __add__(self, other: RuleSpec) -> RuleSet:
        return RuleSet([self.rules, other], self.language)

    def __repr__(self) -> str:
        return f"RuleSet({len(self.rules)} rules)"

    @property
    def names(self) -> List[str]:
        return [r.name for r in self.rules]
