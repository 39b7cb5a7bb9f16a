#!/usr/bin/env python3
"""Command-line interface for rpnsearch."""

import argparse
import random
import sys

from .config import get_config, setup_logging
from .core import ParseError, evaluate, parse
from .improve import climb
from .sample import sample_expressions, summarize_values, write_samples
from .search import search
from .verify import check_balance


def search_main(argv=None):
    """Main entry point for rpnsearch-search command."""
    defaults = get_config().search
    parser = argparse.ArgumentParser(description="Search for postfix expressions approximating a number")
    parser.add_argument("--target", type=float, default=defaults.target, help="Number to approximate")
    parser.add_argument(
        "--precision", type=int, default=defaults.precision, help="Decimal places that must match"
    )
    parser.add_argument("--min-length", type=int, default=defaults.min_length, help="Shortest expression length")
    parser.add_argument(
        "--max-length", type=int, default=defaults.max_length, help="Longest expression length (exclusive)"
    )
    parser.add_argument("--min-number", type=int, default=defaults.min_number, help="Smallest literal")
    parser.add_argument(
        "--max-number", type=int, default=defaults.max_number, help="Largest literal (exclusive)"
    )
    parser.add_argument("--workers", type=int, default=defaults.workers, help="Number of worker processes")
    parser.add_argument("--seed", type=int, help="Base random seed")
    parser.add_argument("--max-samples", type=int, help="Expressions per worker (runs forever if omitted)")
    parser.add_argument("--log-level", default=get_config().log_level, help="Logging level")

    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    try:
        search(
            target=args.target,
            precision=args.precision,
            min_length=args.min_length,
            max_length=args.max_length,
            min_number=args.min_number,
            max_number=args.max_number,
            workers=args.workers,
            seed=args.seed,
            max_samples=args.max_samples,
            sqrt_probability=get_config().generator.sqrt_probability,
        )
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)


def sample_main(argv=None):
    """Main entry point for rpnsearch-sample command."""
    defaults = get_config().sample
    generator = get_config().generator
    parser = argparse.ArgumentParser(description="Write random expressions and their values as CSV")
    parser.add_argument("--count", type=int, default=defaults.count, help="Number of expressions")
    parser.add_argument("--length", type=int, default=defaults.length, help="Expression length")
    parser.add_argument("--min-number", type=int, default=generator.min_number, help="Smallest literal")
    parser.add_argument(
        "--max-number", type=int, default=generator.max_number, help="Largest literal (exclusive)"
    )
    parser.add_argument("--seed", type=int, help="Random seed")
    parser.add_argument("--output", help="CSV file to write (stdout if omitted)")
    parser.add_argument("--log-level", default=get_config().log_level, help="Logging level")

    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    rng = random.Random(args.seed)
    samples = sample_expressions(args.count, args.length, rng, args.min_number, args.max_number)

    try:
        if args.output:
            with open(args.output, "w", newline="") as f:
                values = write_samples(f, samples)
        else:
            values = write_samples(sys.stdout, samples)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    summarize_values(values)


def eval_main(argv=None):
    """Main entry point for rpnsearch-eval command."""
    parser = argparse.ArgumentParser(description="Evaluate a postfix expression")
    parser.add_argument("expression", help="Space-separated postfix expression, e.g. '1 2 + 3 *'")
    parser.add_argument("--improve-toward", type=float, help="Nudge literals toward this target")
    parser.add_argument("--max-steps", type=int, help="Maximum accepted improvements")
    parser.add_argument("--log-level", default="WARNING", help="Logging level")

    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    try:
        expression = parse(args.expression)
    except ParseError as e:
        print(f"Error: {e}")
        sys.exit(1)

    is_valid, errors = check_balance(expression)
    if not is_valid:
        for error in errors:
            print(f"Error: {error}")
        sys.exit(1)

    print(f"{evaluate(expression)!r}")

    if args.improve_toward is not None:
        value, diff, steps = climb(expression, args.improve_toward, args.max_steps)
        print(f"Improved in {steps} steps: {expression}")
        print(f"{value!r} (diff={diff:g})")


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] in ("search", "sample", "eval"):
        command = sys.argv.pop(1)
        {"search": search_main, "sample": sample_main, "eval": eval_main}[command]()
    else:
        search_main()
