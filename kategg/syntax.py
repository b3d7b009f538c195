# syntax.py - s-expression reader/printer for terms, patterns and equations

from __future__ import annotations

import re
from typing import Any, List, Optional, Tuple

from kategg.errors import LanguageError, ParseError
from kategg.language import Language, PatternTree, Term, intern, is_var

Token = Tuple[str, int]  # (text, character offset)

_TOKEN_RE = re.compile(r"\s*(?:([()=,])|([^\s()=,]+))")


def tokenize(text: str) -> List[Token]:
    tokens: List[Token] = []
    pos = 0
    while pos < len(text):
        m = _TOKEN_RE.match(text, pos)
        if m is None:  # trailing whitespace
            break
        tok = m.group(1) or m.group(2)
        start = m.start(1) if m.group(1) else m.start(2)
        tokens.append((tok, start))
        pos = m.end()
    return tokens


class _Reader:
    def __init__(self, text: str, language: Optional[Language], allow_vars: bool):
        self.text = text
        self.tokens = tokenize(text)
        self.i = 0
        self.language = language
        self.allow_vars = allow_vars

    def peek(self) -> Optional[Token]:
        if self.i < len(self.tokens):
            return self.tokens[self.i]
        return None

    def next(self) -> Token:
        tok = self.peek()
        if tok is None:
            raise ParseError("unexpected end of input", None, len(self.text))
        self.i += 1
        return tok

    def expect_end(self) -> None:
        tok = self.peek()
        if tok is not None:
            raise ParseError("unexpected trailing token", tok[0], tok[1])

    def check(self, symbol: str, n_children: int, pos: int) -> None:
        if self.language is None:
            return
        try:
            self.language.check(symbol, n_children)
        except LanguageError as exc:
            raise ParseError(str(exc), symbol, pos) from exc

    def read(self) -> Any:
        text, pos = self.next()
        if text == "(":
            head, head_pos = self.next()
            if head in ("(", ")", "=", ","):
                raise ParseError("expected operator", head, head_pos)
            if is_var(head):
                raise ParseError("pattern variable in operator position", head, head_pos)
            children: List[Any] = []
            while True:
                tok = self.peek()
                if tok is None:
                    raise ParseError("unbalanced parentheses", "(", pos)
                if tok[0] == ")":
                    self.i += 1
                    break
                children.append(self.read())
            if not children:
                raise ParseError("empty application", head, head_pos)
            self.check(head, len(children), head_pos)
            return (intern(head),) + tuple(children)
        if text in (")", "=", ","):
            raise ParseError("unexpected token", text, pos)
        if is_var(text):
            if not self.allow_vars:
                raise ParseError("pattern variable in ground term", text, pos)
            if len(text) == 1:
                raise ParseError("empty pattern variable name", text, pos)
            return intern(text)
        self.check(text, 0, pos)
        return (intern(text),)


def parse_term(text: str, language: Optional[Language] = None) -> Term:
    r = _Reader(text, language, allow_vars=False)
    t = r.read()
    r.expect_end()
    return t


def parse_pattern(text: str, language: Optional[Language] = None) -> PatternTree:
    r = _Reader(text, language, allow_vars=True)
    p = r.read()
    r.expect_end()
    return p


def parse_equations(text: str, language: Optional[Language] = None) -> List[Tuple[PatternTree, PatternTree]]:
    """Parse ``"lhs = rhs, lhs = rhs"`` into a list of pattern pairs."""
    r = _Reader(text, language, allow_vars=True)
    equations: List[Tuple[PatternTree, PatternTree]] = []
    while True:
        lhs = r.read()
        tok, pos = r.next()
        if tok != "=":
            raise ParseError("expected '='", tok, pos)
        rhs = r.read()
        equations.append((lhs, rhs))
        tok_pos = r.peek()
        if tok_pos is None:
            break
        if tok_pos[0] != ",":
            raise ParseError("expected ',' between equations", tok_pos[0], tok_pos[1])
        r.i += 1
    return equations


def to_sexp(t: Any) -> str:
    if isinstance(t, str):
        return t
    if len(t) == 1:
        return t[0]
    return "(" + " ".join([t[0]] + [to_sexp(c) for c in t[1:]]) + ")"
