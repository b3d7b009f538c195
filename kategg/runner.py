# runner.py - equality saturation loop with iteration/node/time limits

from __future__ import annotations

import enum
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Union

import structlog

from kategg.config import RunnerConfig
from kategg.egraph import EGraph
from kategg.language import Language, Term
from kategg.pattern import SearchMatches
from kategg.rewrite import AnyRewrite, RuleSet
from kategg.unionfind import EClassId

logger = structlog.get_logger("kategg.runner")


class StopReason(enum.StrEnum):
    SATURATED = "saturated"
    ITERATION_LIMIT = "iteration limit reached"
    NODE_LIMIT = "node limit reached"
    TIME_LIMIT = "time limit reached"
    OTHER = "other"


@dataclass
class Iteration:
    index: int
    egraph_nodes: int
    egraph_classes: int
    applied: Dict[str, int] = field(default_factory=dict)  # rule -> unions that changed the graph
    n_unions: int = 0
    rebuild_unions: int = 0
    search_time: float = 0.0
    apply_time: float = 0.0
    rebuild_time: float = 0.0
    total_time: float = 0.0
    stop_reason: Optional[StopReason] = None


@dataclass
class RunReport:
    stop_reason: StopReason
    iterations: List[Iteration]
    egraph: EGraph
    roots: List[EClassId]
    total_time: float = 0.0
    stop_message: Optional[str] = None
    proved: Optional[bool] = None

    def equivalent(self, a: EClassId, b: EClassId) -> bool:
        return self.egraph.equivalent(a, b)


Hook = Callable[["Runner"], Optional[str]]


class _Stop(Exception):
    def __init__(self, reason: StopReason):
        super().__init__(reason.value)
        self.reason = reason


# -------------------------------------------------------------------
# Runner
class Runner:
    def __init__(self, config: Optional[RunnerConfig] = None, egraph: Optional[EGraph] = None,
                 language: Optional[Language] = None):
        self.config = config if config is not None else RunnerConfig()
        self.egraph = egraph if egraph is not None else EGraph(language)
        self.roots: List[EClassId] = []
        self.iterations: List[Iteration] = []
        self.hooks: List[Hook] = []
        self.stop_reason: Optional[StopReason] = None
        self.stop_message: Optional[str] = None
        self._start: Optional[float] = None
        if self.config.explanations_enabled:
            logger.warning("explanations_unsupported", detail="explanations_enabled is ignored")

    def with_expr(self, expr: Union[str, Term]) -> Runner:
        self.roots.append(self.egraph.add_expr(expr))
        return self

    def with_hook(self, hook: Hook) -> Runner:
        self.hooks.append(hook)
        return self

    @property
    def elapsed(self) -> float:
        if self._start is None:
            return 0.0
        return time.monotonic() - self._start

    # --------- limits ---------
    def _check_limits(self) -> None:
        cfg = self.config
        if cfg.iter_limit is not None and len(self.iterations) >= cfg.iter_limit:
            raise _Stop(StopReason.ITERATION_LIMIT)
        self._check_nodes()
        self._check_time()

    def _check_nodes(self) -> None:
        if self.config.node_limit is not None and self.egraph.total_size > self.config.node_limit:
            raise _Stop(StopReason.NODE_LIMIT)

    def _check_time(self) -> None:
        if self.config.time_limit is not None and self.elapsed > self.config.time_limit:
            raise _Stop(StopReason.TIME_LIMIT)

    # --------- main loop ---------
    def run(self, rules: Union[RuleSet, Iterable[AnyRewrite]]) -> RunReport:
        if not isinstance(rules, RuleSet):
            rules = RuleSet(rules)
        self._start = time.monotonic()
        if not self.egraph.is_clean:
            self.egraph.rebuild()

        while self.stop_reason is None:
            try:
                self._check_limits()
            except _Stop as stop:
                self.stop_reason = stop.reason
                break
            iteration = self._run_one(rules)
            self.iterations.append(iteration)
            if iteration.stop_reason is not None:
                self.stop_reason = iteration.stop_reason
                break
            for hook in self.hooks:
                message = hook(self)
                if message is not None:
                    self.stop_reason = StopReason.OTHER
                    self.stop_message = message
                    break

        report = RunReport(
            stop_reason=self.stop_reason,
            iterations=self.iterations,
            egraph=self.egraph,
            roots=list(self.roots),
            total_time=self.elapsed,
            stop_message=self.stop_message,
        )
        logger.info(
            "run_stopped",
            reason=str(report.stop_reason),
            message=report.stop_message,
            iterations=len(report.iterations),
            nodes=self.egraph.total_size,
            classes=self.egraph.number_of_classes,
            duration_ms=int(report.total_time * 1000),
        )
        return report

    def _run_one(self, rules: RuleSet) -> Iteration:
        egraph = self.egraph
        start = time.monotonic()
        nodes_before = egraph.total_size
        iteration = Iteration(index=len(self.iterations), egraph_nodes=nodes_before,
                              egraph_classes=egraph.number_of_classes)

        # 1. search: read-only over the clean graph
        found: List[Tuple[AnyRewrite, List[SearchMatches]]] = []
        try:
            for rule in rules:
                matches = rule.search(egraph)
                if matches:
                    found.append((rule, matches))
                self._check_time()
        except _Stop as stop:
            iteration.search_time = time.monotonic() - start
            iteration.total_time = iteration.search_time
            iteration.stop_reason = stop.reason
            return iteration
        iteration.search_time = time.monotonic() - start

        # 2. apply every match, then 3. rebuild once
        t = time.monotonic()
        try:
            for rule, matches in found:
                changed = rule.apply(egraph, matches)
                if changed:
                    iteration.applied[rule.name] = iteration.applied.get(rule.name, 0) + changed
                    iteration.n_unions += changed
                self._check_nodes()
        except _Stop as stop:
            iteration.stop_reason = stop.reason
        iteration.apply_time = time.monotonic() - t

        t = time.monotonic()
        iteration.rebuild_unions = egraph.rebuild()
        iteration.rebuild_time = time.monotonic() - t
        iteration.total_time = time.monotonic() - start

        # 4. saturation: nothing merged and nothing new
        if iteration.stop_reason is None and iteration.n_unions == 0 and egraph.total_size == nodes_before:
            iteration.stop_reason = StopReason.SATURATED

        logger.debug(
            "iteration_complete",
            index=iteration.index,
            unions=iteration.n_unions,
            rebuild_unions=iteration.rebuild_unions,
            nodes=egraph.total_size,
            classes=egraph.number_of_classes,
            applied=iteration.applied,
        )
        return iteration


# -------------------------------------------------------------------
# Query API
def run(roots: Sequence[Union[str, Term]], rules: Union[RuleSet, Iterable[AnyRewrite]],
        config: Optional[RunnerConfig] = None, language: Optional[Language] = None) -> RunReport:
    if language is None and isinstance(rules, RuleSet):
        language = rules.language
    runner = Runner(config, language=language)
    for expr in roots:
        runner.with_expr(expr)
    return runner.run(rules)


def equivalent(egraph: EGraph, a: EClassId, b: EClassId) -> bool:
    return egraph.equivalent(a, b)


def check_goals(start: Union[str, Term], goals: Sequence[Union[str, Term]],
                rules: Union[RuleSet, Iterable[AnyRewrite]], config: Optional[RunnerConfig] = None,
                language: Optional[Language] = None) -> RunReport:
    """Saturate from ``start`` (with every goal inserted) until all goals join
    the start's class or a limit is reached."""
    if language is None and isinstance(rules, RuleSet):
        language = rules.language
    runner = Runner(config, language=language)
    runner.with_expr(start)
    for goal in goals:
        runner.with_expr(goal)

    def all_goals_proved(r: Runner) -> Optional[str]:
        root = r.roots[0]
        if all(r.egraph.equivalent(root, g) for g in r.roots[1:]):
            return "proved all goals"
        return None

    report = runner.with_hook(all_goals_proved).run(rules)
    report.proved = all(report.egraph.equivalent(report.roots[0], g) for g in report.roots[1:])
    return report
