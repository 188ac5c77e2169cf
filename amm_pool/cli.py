"""Command-line interface for fuzzing and quoting pools."""

import argparse
import logging
import sys
from decimal import Decimal
from typing import Optional

from amm_pool.core import swap_math
from amm_pool.core.config import DEFAULT_POOL_CONFIG
from amm_pool.core.errors import PoolError
from amm_pool.harness.checker import PropertyChecker
from amm_pool.harness.config import (
    DEFAULT_HARNESS_SETTINGS,
    ONE,
    resolve_n_sessions,
    resolve_seed,
)


def fuzz_command(args: argparse.Namespace) -> int:
    """Run invariant sessions and report the first minimized counterexample."""
    config = DEFAULT_POOL_CONFIG.without_bonus() if args.no_bonus else DEFAULT_POOL_CONFIG
    settings = DEFAULT_HARNESS_SETTINGS.with_overrides(
        n_sessions=args.sessions if args.sessions is not None else resolve_n_sessions(),
        n_steps=args.steps,
        seed=args.seed if args.seed is not None else resolve_seed(),
    )

    print(
        f"Running {settings.n_sessions} sessions x {settings.n_steps} steps "
        f"(seed {settings.seed}, bonus {'off' if args.no_bonus else 'on'})..."
    )
    checker = PropertyChecker(config=config, settings=settings)
    report = checker.run(stop_on_failure=not args.keep_going)

    print(
        f"\n{report.sessions_run} sessions, {report.total_calls} calls "
        f"({report.executed_calls} executed) in {report.duration_seconds:.2f}s"
    )
    if report.passed:
        print("All reserve-delta properties held.")
        return 0

    for counterexample in report.counterexamples:
        print()
        print(counterexample.describe())
    return 1


def quote_command(args: argparse.Namespace) -> int:
    """Print SwapMath results for the given reserves."""
    config = DEFAULT_POOL_CONFIG
    try:
        if args.input is not None:
            amount = swap_math.output_for_input(
                args.input, args.reserve_a, args.reserve_b,
                config.fee_numerator, config.fee_denominator,
            )
            print(f"Selling {args.input} A returns {amount} B")
        else:
            amount = swap_math.input_for_output(
                args.output, args.reserve_a, args.reserve_b,
                config.fee_numerator, config.fee_denominator,
            )
            print(f"Buying {args.output} B costs {amount} A")
    except PoolError as e:
        print(f"Error: {e}")
        return 1

    print(f"  ({Decimal(amount) / Decimal(ONE):.6f} whole units, fee {config.fee_rate:.2%})")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Constant product pool - invariant fuzzing and pricing",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  amm-pool fuzz --sessions 64 --steps 100
  amm-pool fuzz --no-bonus --seed 7
  amm-pool quote --reserve-a 100 --reserve-b 50 --output 1
        """,
    )
    parser.add_argument(
        "-v", "--verbose", action="count", default=0,
        help="Log progress (-v) or every pool event (-vv)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    fuzz_parser = subparsers.add_parser(
        "fuzz", help="Run random call sequences and check reserve deltas"
    )
    fuzz_parser.add_argument(
        "--sessions",
        type=int,
        default=None,
        help="Independent sessions to run (defaults to AMM_POOL_SESSIONS or shared settings)",
    )
    fuzz_parser.add_argument(
        "--steps",
        type=int,
        default=None,
        help="Calls per session (defaults to shared settings)",
    )
    fuzz_parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Base seed; session i uses seed + i (defaults to AMM_POOL_SEED or 0)",
    )
    fuzz_parser.add_argument(
        "--no-bonus",
        action="store_true",
        help="Disable the periodic bonus payout",
    )
    fuzz_parser.add_argument(
        "--keep-going",
        action="store_true",
        help="Keep running sessions after the first counterexample",
    )
    fuzz_parser.set_defaults(func=fuzz_command)

    quote_parser = subparsers.add_parser("quote", help="Price a swap against given reserves")
    quote_parser.add_argument("--reserve-a", type=int, required=True, help="Input-side reserve")
    quote_parser.add_argument("--reserve-b", type=int, required=True, help="Output-side reserve")
    side = quote_parser.add_mutually_exclusive_group(required=True)
    side.add_argument("--input", type=int, help="Exact amount of A sold")
    side.add_argument("--output", type=int, help="Exact amount of B bought")
    quote_parser.set_defaults(func=quote_command)

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG if args.verbose > 1 else logging.INFO,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )

    if args.command is None:
        parser.print_help()
        return 1

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
