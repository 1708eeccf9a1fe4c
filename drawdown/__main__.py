"""CLI entry point for drawdown."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys

from .countries import default_profile_for, get_policy
from .report import summary_lines, table_lines, write_result
from .schema import SchemaError, load_plan
from .simulation import run_plan
from .validate import validate_plan


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Retirement accumulation and drawdown planner")
    parser.add_argument("plan", help="Path to plan JSON file")
    parser.add_argument("-o", "--output", help="Write full results as JSON to this path")
    parser.add_argument("--validate", action="store_true", help="Validate JSON only")
    parser.add_argument("--summary", action="store_true", help="Print text summary to stdout")
    parser.add_argument("--table", action="store_true", help="Print the year-by-year withdrawal table")
    parser.add_argument("--start-year", type=int, help="Calendar year at the current age (default: this year)")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase log verbosity (-v, -vv)")
    return parser


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _print_validation(errors: list[str], warnings: list[str]) -> None:
    for warning in warnings:
        print(f"WARNING: {warning}")
    for error in errors:
        print(f"ERROR: {error}", file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    try:
        plan = load_plan(args.plan, profile_defaults=default_profile_for)
    except (SchemaError, OSError, ValueError) as exc:
        print(f"Failed to load plan: {exc}", file=sys.stderr)
        return 2

    validation = validate_plan(plan)
    _print_validation(validation.errors, validation.warnings)
    if not validation.is_valid:
        return 1

    if args.validate:
        print("Plan is valid.")
        return 0

    policy = get_policy(plan.country)
    result = run_plan(plan, policy=policy, start_year=args.start_year)

    if args.summary or not (args.table or args.output):
        for line in summary_lines(plan, result, policy):
            print(line)
    if args.table:
        for line in table_lines(result):
            print(line)
    if args.output:
        write_result(args.output, plan, result)
        print(f"Wrote results to {Path(args.output)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
