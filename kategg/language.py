# language.py - terms, pattern variables and operator tables

from __future__ import annotations

import sys
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple, Union

from kategg.errors import LanguageError

# -------------------------------------------------------------------
# Terms are tuples:
#   ("0",) / ("alpha",)             # leaf: 0-ary operator or free variable
#   ("seq", t1, t2)                 # operator applied to child terms
#
# Pattern trees have the same shape, but any position may hold a pattern
# variable: a string that starts with '?', e.g. '?p'

Symbol = str
Term = Tuple[Any, ...]
PatternTree = Union[str, Tuple[Any, ...]]

_RESERVED = set("()=,;")


def is_var(x: Any) -> bool:
    return isinstance(x, str) and x.startswith("?")


def intern(symbol: str) -> Symbol:
    return sys.intern(symbol)


def valid_symbol(symbol: Any) -> bool:
    if not isinstance(symbol, str) or not symbol:
        return False
    if symbol.startswith("?"):
        return False
    return not any(ch.isspace() or ch in _RESERVED for ch in symbol)


def term_size(t: Term) -> int:
    return 1 + sum(term_size(c) for c in t[1:])


def walk(t: Term) -> Iterator[Term]:
    yield t
    for child in t[1:]:
        yield from walk(child)


# -------------------------------------------------------------------
# Language: operator symbol -> arity, plus free-variable leaves
class Language:
    def __init__(self, name: str, operators: Mapping[str, int], allow_variables: bool = True):
        self.name = name
        self.allow_variables = allow_variables
        self.operators: Dict[Symbol, int] = {}
        for symbol, arity in operators.items():
            if not valid_symbol(symbol):
                raise LanguageError(f"{name}: invalid operator symbol {symbol!r}")
            if isinstance(arity, bool) or not isinstance(arity, int) or arity < 0:
                raise LanguageError(f"{name}: operator {symbol!r} has invalid arity {arity!r}")
            self.operators[intern(symbol)] = arity

    def __repr__(self) -> str:
        return f"Language({self.name!r}, {len(self.operators)} operators)"

    def __contains__(self, symbol: str) -> bool:
        return symbol in self.operators

    def arity(self, symbol: str) -> Optional[int]:
        if symbol in self.operators:
            return self.operators[symbol]
        if self.is_variable(symbol):
            return 0
        return None

    def is_variable(self, symbol: str) -> bool:
        return self.allow_variables and symbol not in self.operators and valid_symbol(symbol)

    def check(self, symbol: str, n_children: int) -> None:
        if symbol in self.operators:
            expected = self.operators[symbol]
            if expected != n_children:
                raise LanguageError(
                    f"{self.name}: operator {symbol!r} expects {expected} children, got {n_children}"
                )
            return
        if n_children > 0:
            raise LanguageError(f"{self.name}: unknown operator {symbol!r}")
        if not self.is_variable(symbol):
            raise LanguageError(f"{self.name}: unknown symbol {symbol!r}")

    def check_term(self, t: Term) -> None:
        for sub in walk(t):
            self.check(sub[0], len(sub) - 1)
