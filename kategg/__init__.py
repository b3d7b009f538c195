from .config import RunnerConfig, load_config
from .egraph import EClass, EGraph, ENode
from .errors import ExtractionError, KateggError, LanguageError, ParseError, RuleError
from .extract import AstDepth, AstSize, Extractor, OpCost, extract_best
from .language import Language, Term, is_var
from .pattern import Equation, MultiPattern, Pattern, SearchMatches
from .rewrite import MultiRewrite, Rewrite, RuleSet, multi_rewrite, rewrite
from .runner import Iteration, RunReport, Runner, StopReason, check_goals, equivalent, run
from .syntax import parse_equations, parse_pattern, parse_term, to_sexp
from .unionfind import UnionFind

__all__ = [
    "RunnerConfig",
    "load_config",
    "EClass",
    "EGraph",
    "ENode",
    "ExtractionError",
    "KateggError",
    "LanguageError",
    "ParseError",
    "RuleError",
    "AstDepth",
    "AstSize",
    "Extractor",
    "OpCost",
    "extract_best",
    "Language",
    "Term",
    "is_var",
    "Equation",
    "MultiPattern",
    "Pattern",
    "SearchMatches",
    "MultiRewrite",
    "Rewrite",
    "RuleSet",
    "multi_rewrite",
    "rewrite",
    "Iteration",
    "RunReport",
    "Runner",
    "StopReason",
    "check_goals",
    "equivalent",
    "run",
    "parse_equations",
    "parse_pattern",
    "parse_term",
    "to_sexp",
    "UnionFind",
]
