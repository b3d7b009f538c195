# errors.py - exception types raised by kategg

from __future__ import annotations

from typing import Optional


class KateggError(Exception):
    """Base class for every error kategg raises on purpose."""


class LanguageError(KateggError):
    """Bad language definition, or a node that disagrees with it."""


class RuleError(KateggError):
    """A rewrite or rule set that cannot be constructed."""


class ParseError(KateggError):
    def __init__(self, message: str, token: Optional[str] = None, position: Optional[int] = None):
        self.message = message
        self.token = token
        self.position = position
        where = ""
        if token is not None:
            where = f" at {token!r}"
        if position is not None:
            where += f" (position {position})"
        super().__init__(f"{message}{where}")


class ExtractionError(KateggError):
    """No finite-cost term exists for the requested e-class."""
