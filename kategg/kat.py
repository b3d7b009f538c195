# kat.py - Kleene Algebra with Tests: language and rule set
#
# tests   a,b,c ::= 0 | 1 | (not a) | (or a b) | (and a b)
# actions p,q,r ::= (test a) | (par p q) | (seq p q) | (star p)
#
# Free variables (alpha, pi, ...) stand for primitive tests or actions.
# An inequality p <= q is encoded as the equation (par p q) = q.

from __future__ import annotations

from typing import List

from kategg.language import Language
from kategg.rewrite import AnyRewrite, RuleSet, multi_rewrite, rewrite

KAT = Language(
    "KAT",
    {
        "0": 0,
        "1": 0,
        "not": 1,
        "or": 2,
        "and": 2,
        "test": 1,
        "par": 2,
        "seq": 2,
        "star": 1,
    },
)


def _bidirectional() -> List[AnyRewrite]:
    return [
        *rewrite("ka-seq-assoc", "(seq ?p (seq ?q ?r))", "(seq (seq ?p ?q) ?r)", bidirectional=True),
        # seq distributes over par: p;(q + r) = p;q + p;r, and on the right
        *rewrite("ka-dist-l", "(seq ?p (par ?q ?r))", "(par (seq ?p ?q) (seq ?p ?r))", bidirectional=True),
        *rewrite("ka-dist-r", "(seq (par ?p ?q) ?r)", "(par (seq ?p ?r) (seq ?q ?r))", bidirectional=True),
        *rewrite("ka-unroll-l", "(par (test 1) (seq ?p (star ?p)))", "(star ?p)", bidirectional=True),
        *rewrite("ka-unroll-r", "(par (test 1) (seq (star ?p) ?p))", "(star ?p)", bidirectional=True),
        # boolean algebra: copies of the KA laws (no star)
        *rewrite("ba-and-assoc", "(and ?a (and ?b ?c))", "(and (and ?a ?b) ?c)", bidirectional=True),
        # and distributes over or: a(b + c) = ab + ac, and on the right
        *rewrite("ba-dist-l", "(and ?a (or ?b ?c))", "(or (and ?a ?b) (and ?a ?c))", bidirectional=True),
        *rewrite("ba-dist-r", "(and (or ?a ?b) ?c)", "(or (and ?a ?c) (and ?b ?c))", bidirectional=True),
        *rewrite("ba-plus-dist", "(or ?a (and ?b ?c))", "(and (or ?a ?b) (or ?a ?c))", bidirectional=True),
        # tests embed into actions
        *rewrite("ba-sub-ka-zero", "(test 0)", "0", bidirectional=True),
        *rewrite("ba-sub-ka-one", "(test 1)", "1", bidirectional=True),
        *rewrite("ba-sub-ka-par", "(test (or ?a ?b))", "(par (test ?a) (test ?b))", bidirectional=True),
        *rewrite("ba-sub-ka-seq", "(test (and ?a ?b))", "(seq (test ?a) (test ?b))", bidirectional=True),
    ]


def _directed() -> List[AnyRewrite]:
    return [
        *rewrite("ka-plus-assoc", "(par ?p (par ?q ?r))", "(par (par ?p ?q) ?r)"),
        *rewrite("ka-plus-comm", "(par ?p ?q)", "(par ?q ?p)"),
        *rewrite("ka-plus-zero", "(par ?p 0)", "?p"),
        *rewrite("ka-plus-idem", "(par ?p ?p)", "?p"),
        *rewrite("ka-seq-one", "(seq (test 1) ?p)", "?p"),
        *rewrite("ka-one-seq", "(seq ?p (test 1))", "?p"),
        *rewrite("ka-seq-zero", "(seq (test 0) ?p)", "(test 0)"),
        *rewrite("ka-zero-seq", "(seq ?p (test 0))", "(test 0)"),
        # q + pr <= r  implies  p*q <= r
        multi_rewrite("ka-lfp-l", "?r = (par (par ?q (seq ?p ?r)) ?r)", "?r = (par (seq (star ?p) ?q) ?r)"),
        # p + qr <= q  implies  pr* <= q
        multi_rewrite("ka-lfp-r", "?q = (par (par ?p (seq ?q ?r)) ?q)", "?q = (par (seq ?p (star ?r)) ?q)"),
        # boolean algebra: copies of the KA laws
        *rewrite("ba-plus-assoc", "(or ?a (or ?b ?c))", "(or (or ?a ?b) ?c)"),
        *rewrite("ba-plus-comm", "(or ?a ?b)", "(or ?b ?a)"),
        *rewrite("ba-plus-zero", "(or ?a 0)", "?a"),
        *rewrite("ba-plus-idem", "(or ?a ?a)", "?a"),
        *rewrite("ba-and-one", "(and 1 ?a)", "?a"),
        *rewrite("ba-one-and", "(and ?a 1)", "?a"),
        *rewrite("ba-and-zero", "(and 0 ?a)", "0"),
        *rewrite("ba-zero-and", "(and ?a 0)", "0"),
        # boolean algebra proper
        *rewrite("ba-plus-one", "(or ?a 1)", "1"),
        *rewrite("ba-excl-mid", "(or ?a (not ?a))", "1"),
        *rewrite("ba-seq-comm", "(and ?a ?b)", "(and ?b ?a)"),
        *rewrite("ba-contra", "(and ?a (not ?a))", "0"),
        *rewrite("ba-seq-idem", "(and ?a ?a)", "?a"),
        # complements of the constants
        *rewrite("ba-not-zero", "(not 0)", "1"),
        *rewrite("ba-not-one", "(not 1)", "0"),
        *rewrite("ba-double-neg", "(not (not ?a))", "?a"),
    ]


def rules(star_idempotence: bool = False, antisymmetry: bool = False) -> RuleSet:
    """The KAT rule set; each call builds a fresh, independent value."""
    extra: List[AnyRewrite] = []
    if star_idempotence:
        extra += rewrite("ka-star-idem", "(star (star ?p))", "(star ?p)")
    if antisymmetry:
        # p <= q and q <= p  implies  p = q
        extra.append(multi_rewrite("ka-le-le", "?q = (par ?p ?q), ?p = (par ?q ?p)", "?p = ?q"))
    return RuleSet([_bidirectional(), _directed(), extra], language=KAT)
