import pytest

from kategg import EGraph, Language, RunnerConfig, rewrite

ARITH = Language("arith", {"Add": 2, "Mul": 2})


def _assert_invariants(egraph: EGraph) -> None:
    """Congruence and hash-consing hold on a rebuilt e-graph."""
    assert egraph.is_clean
    owner = {}
    for eclass in egraph.classes():
        assert egraph.find(eclass.id) == eclass.id
        assert egraph.find(egraph.find(eclass.id)) == eclass.id
        for node in eclass.nodes:
            assert node.canonicalize(egraph.find) == node, f"stale node {node} in class {eclass.id}"
            other = owner.setdefault(node, eclass.id)
            assert other == eclass.id, f"{node} lives in classes {other} and {eclass.id}"
            assert egraph.lookup(node) == eclass.id
    assert egraph.rebuild() == 0


@pytest.fixture
def assert_invariants():
    return _assert_invariants


@pytest.fixture
def arith():
    return ARITH


@pytest.fixture
def arith_rules():
    # leaves are free variables such as 0, 1, 2
    return {
        "comm-add": rewrite("comm-add", "(Add ?a ?b)", "(Add ?b ?a)"),
        "assoc-add": rewrite("assoc-add", "(Add ?a (Add ?b ?c))", "(Add (Add ?a ?b) ?c)"),
        "comm-mul": rewrite("comm-mul", "(Mul ?a ?b)", "(Mul ?b ?a)"),
        "assoc-mul": rewrite("assoc-mul", "(Mul ?a (Mul ?b ?c))", "(Mul (Mul ?a ?b) ?c)"),
        "distr-l": rewrite("distr-l", "(Mul ?a (Add ?b ?c))", "(Add (Mul ?a ?b) (Mul ?a ?c))"),
        "distr-r": rewrite("distr-r", "(Mul (Add ?a ?b) ?c)", "(Add (Mul ?a ?c) (Mul ?b ?c))"),
        "add-zero": rewrite("add-zero", "(Add ?a 0)", "?a"),
        "mul-zero": rewrite("mul-zero", "(Mul ?a 0)", "0"),
        "mul-one": rewrite("mul-one", "(Mul ?a 1)", "?a"),
    }


@pytest.fixture
def limits():
    def make(iter_limit=10, node_limit=20_000, time_limit=30.0, **kwargs):
        return RunnerConfig(iter_limit=iter_limit, node_limit=node_limit, time_limit=time_limit, **kwargs)

    return make
