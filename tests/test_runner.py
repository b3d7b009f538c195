import time

from kategg import EGraph, Runner, RunnerConfig, StopReason, check_goals, equivalent, run


class TestRunner:
    def test_saturates(self, arith, arith_rules, limits):
        report = run(["(Add 1 2)"], arith_rules["comm-add"], limits(), language=arith)
        assert report.stop_reason is StopReason.SATURATED
        # first pass adds (Add 2 1), second pass finds nothing new
        assert len(report.iterations) == 2
        assert report.iterations[0].applied == {"comm-add": 1}
        assert report.iterations[1].n_unions == 0

    def test_iteration_limit_zero_leaves_graph_unchanged(self, arith, arith_rules, limits):
        eg = EGraph(arith)
        eg.add_expr("(Add 1 (Add 2 3))")
        nodes, classes = eg.total_size, eg.number_of_classes
        report = Runner(limits(iter_limit=0), egraph=eg).run(arith_rules["comm-add"])
        assert report.stop_reason is StopReason.ITERATION_LIMIT
        assert str(report.stop_reason) == "iteration limit reached"
        assert report.iterations == []
        assert eg.n_unions == 0
        assert (eg.total_size, eg.number_of_classes) == (nodes, classes)

    def test_iteration_limit(self, arith, arith_rules, limits):
        report = run(["(Add 1 (Add 2 (Add 3 4)))"], [arith_rules["comm-add"], arith_rules["assoc-add"]],
                     limits(iter_limit=2), language=arith)
        assert report.stop_reason is StopReason.ITERATION_LIMIT
        assert len(report.iterations) == 2

    def test_node_limit(self, arith, arith_rules, limits):
        report = run(["(Add 1 (Add 2 (Add 3 (Add 4 5))))"], [arith_rules["comm-add"], arith_rules["assoc-add"]],
                     limits(iter_limit=None, node_limit=50), language=arith)
        assert report.stop_reason is StopReason.NODE_LIMIT
        # the graph is still rebuilt and usable
        assert report.egraph.is_clean

    def test_time_limit(self, arith, arith_rules):
        config = RunnerConfig(iter_limit=None, node_limit=None, time_limit=0.01)
        runner = Runner(config, language=arith).with_expr("(Add 1 (Add 2 (Add 3 (Add 4 5))))")
        runner.with_hook(lambda r: time.sleep(0.02))
        report = runner.run([arith_rules["comm-add"], arith_rules["assoc-add"]])
        assert report.stop_reason is StopReason.TIME_LIMIT
        assert len(report.iterations) == 1

    def test_hook_stops_run(self, arith, arith_rules, limits):
        runner = Runner(limits(), language=arith).with_expr("(Add 1 (Add 2 3))")
        runner.with_hook(lambda r: "enough" if len(r.iterations) == 1 else None)
        report = runner.run([arith_rules["comm-add"], arith_rules["assoc-add"]])
        assert report.stop_reason is StopReason.OTHER
        assert report.stop_message == "enough"
        assert len(report.iterations) == 1

    def test_multiple_roots_share_one_graph(self, arith, arith_rules, limits):
        report = run(["(Add 1 2)", "(Add 2 1)", "(Mul 1 2)"], arith_rules["comm-add"], limits(), language=arith)
        a, b, c = report.roots
        assert report.equivalent(a, b)
        assert equivalent(report.egraph, a, b)
        assert not equivalent(report.egraph, a, c)

    def test_unclean_graph_is_rebuilt_first(self, limits, assert_invariants):
        eg = EGraph()
        fa = eg.add_expr("(f a)")
        fb = eg.add_expr("(f b)")
        eg.union(eg.add_expr("a"), eg.add_expr("b"))
        Runner(limits(iter_limit=1), egraph=eg).run([])
        assert eg.find(fa) == eg.find(fb)
        assert_invariants(eg)

    def test_empty_rule_set_saturates(self, limits):
        report = run(["(f a)"], [], limits())
        assert report.stop_reason is StopReason.SATURATED
        assert len(report.iterations) == 1

    def test_explanations_flag_is_accepted(self, arith, arith_rules, limits):
        report = run(["(Add 1 2)", "(Add 2 1)"], arith_rules["comm-add"],
                     limits(explanations_enabled=True), language=arith)
        assert report.equivalent(*report.roots)

    def test_equalities_only_accumulate(self, arith, arith_rules, limits, assert_invariants):
        snapshots = []

        def record(r):
            eg = r.egraph
            snapshots.append([eg.find(i) for i in range(len(eg.uf))])
            assert_invariants(eg)
            return None

        runner = Runner(limits(iter_limit=4), language=arith)
        runner.with_expr("(Mul (Add 1 2) (Add 2 1))").with_expr("(Add (Mul 1 2) 0)")
        runner.with_hook(record)
        rules = [arith_rules[n] for n in ("comm-add", "comm-mul", "distr-l", "add-zero")]
        report = runner.run(rules)

        eg = report.egraph
        for snap in snapshots:
            for i, root_i in enumerate(snap):
                for j, root_j in enumerate(snap):
                    if root_i == root_j:
                        assert eg.find(i) == eg.find(j)
        assert [it.index for it in report.iterations] == list(range(len(report.iterations)))


class TestCheckGoals:
    def test_proves_and_stops_early(self, arith, arith_rules, limits):
        report = check_goals(
            "(Mul a (Add b c))",
            ["(Add (Mul c a) (Mul a b))"],
            [arith_rules[n] for n in ("comm-add", "comm-mul", "distr-l")],
            limits(),
            language=arith,
        )
        assert report.proved
        assert report.stop_reason is StopReason.OTHER
        assert report.stop_message == "proved all goals"

    def test_unprovable_goal(self, arith, arith_rules, limits):
        report = check_goals("(Add 1 2)", ["(Mul 1 2)"], arith_rules["comm-add"], limits(), language=arith)
        assert report.proved is False
        assert report.stop_reason is StopReason.SATURATED
