"""
kategg - command-line harness

    kategg prove START GOAL [GOAL ...]   # exit 0 iff every goal is proven equal
    kategg simplify EXPR [EXPR ...]      # print the smallest equivalent term
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

import structlog

from kategg import kat
from kategg.config import load_config
from kategg.errors import KateggError
from kategg.extract import Extractor
from kategg.logging import setup_logging
from kategg.runner import check_goals, run
from kategg.syntax import to_sexp

logger = structlog.get_logger("kategg.cli")


def _add_run_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--iter-limit", type=int, default=None, help="maximum saturation iterations")
    parser.add_argument("--node-limit", type=int, default=None, help="maximum live e-nodes")
    parser.add_argument("--time-limit", type=float, default=None, help="wall-clock budget in seconds")
    parser.add_argument("--explanations", action="store_true", default=None,
                        help="accepted for compatibility; explanations are not produced")
    parser.add_argument("--config", default=None, help="YAML file with runner options")
    parser.add_argument("--star-idempotence", action="store_true", help="include ka-star-idem")
    parser.add_argument("--antisymmetry", action="store_true", help="include ka-le-le")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="kategg", description="Equality saturation for KAT terms")
    parser.add_argument("--log-level", default="warning")
    parser.add_argument("--log-format", choices=["console", "json"], default="console")
    sub = parser.add_subparsers(dest="command", required=True)

    prove = sub.add_parser("prove", help="check that goals are equal to a start term")
    prove.add_argument("start")
    prove.add_argument("goals", nargs="+")
    _add_run_options(prove)

    simplify = sub.add_parser("simplify", help="extract the smallest equivalent term")
    simplify.add_argument("exprs", nargs="+")
    _add_run_options(simplify)
    return parser


def _prove(args: argparse.Namespace) -> int:
    config = load_config(args.config, iter_limit=args.iter_limit, node_limit=args.node_limit,
                         time_limit=args.time_limit, explanations_enabled=args.explanations)
    rules = kat.rules(star_idempotence=args.star_idempotence, antisymmetry=args.antisymmetry)
    report = check_goals(args.start, args.goals, rules, config)
    egraph = report.egraph
    for goal, root in zip(args.goals, report.roots[1:]):
        status = "proved" if egraph.equivalent(report.roots[0], root) else "not proved"
        print(f"{status}: {args.start} = {goal}")
    print(f"stop reason: {report.stop_reason} after {len(report.iterations)} iterations, "
          f"{egraph.total_size} nodes, {egraph.number_of_classes} classes")
    return 0 if report.proved else 1


def _simplify(args: argparse.Namespace) -> int:
    config = load_config(args.config, iter_limit=args.iter_limit, node_limit=args.node_limit,
                         time_limit=args.time_limit, explanations_enabled=args.explanations)
    rules = kat.rules(star_idempotence=args.star_idempotence, antisymmetry=args.antisymmetry)
    report = run(args.exprs, rules, config)
    extractor = Extractor(report.egraph)
    for expr, root in zip(args.exprs, report.roots):
        cost, best = extractor.find_best(root)
        print(f"{expr} => {to_sexp(best)} (cost {cost:g})")
    print(f"stop reason: {report.stop_reason}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level, args.log_format)
    try:
        if args.command == "prove":
            return _prove(args)
        return _simplify(args)
    except (KateggError, ValueError) as exc:
        logger.error("command_failed", command=args.command, error=str(exc))
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
