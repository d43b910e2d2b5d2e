#!/usr/bin/env python3
"""Command-line interface for the synthetic history generator."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Iterator
from itertools import islice

from synthfeed.types import Slice


def cmd_gen_history(args: argparse.Namespace) -> int:
    """Generate synthetic history and write it to CSV."""
    from synthfeed.commands.gen_history import load_gen_history_config
    from synthfeed.events import LoggingObserver
    from synthfeed.exceptions import ConfigError, SynthFeedError
    from synthfeed.export import write_slices_csv
    from synthfeed.provider import SineHistoryProvider
    from synthfeed.securities import SecurityManager

    if args.limit is not None and args.limit < 0:
        print(f"Configuration error: --limit must be zero or positive, got {args.limit}")
        return 1

    try:
        config = load_gen_history_config(args.config)
    except ConfigError as e:
        print(f"Configuration error: {e}")
        return 1

    output = args.output or config.output or f"{config.dataset_id}.csv"

    print("=" * 60)
    print("GENERATE SINE HISTORY")
    print("=" * 60)
    print(f"Dataset ID:  {config.dataset_id}")
    print(f"Requests:    {len(config.requests)}")
    print(f"Symbols:     {', '.join(str(r.symbol) for r in config.requests)}")
    print(f"Securities:  {', '.join(str(s) for s in config.securities) or '(none)'}")
    print(f"Slice zone:  {config.slice_time_zone}")
    print(f"Output:      {output}")

    securities = SecurityManager(config.securities)
    provider = SineHistoryProvider(securities, observer=LoggingObserver())

    slice_count = 0

    def apply_prices(slices: Iterator[Slice]) -> Iterator[Slice]:
        nonlocal slice_count
        for time_slice in slices:
            securities.update_prices(time_slice)
            slice_count += 1
            yield time_slice

    try:
        slices = provider.get_history(config.requests, config.slice_time_zone)
        if args.limit is not None:
            slices = islice(slices, args.limit)
        rows = write_slices_csv(apply_prices(slices), output)
    except SynthFeedError as e:
        print(f"Error: {e}")
        return 1

    print("\n" + "=" * 60)
    print("RESULTS")
    print("=" * 60)
    print(f"Slices:      {slice_count}")
    print(f"Bars:        {rows}")
    print(f"Data points: {provider.data_point_count}")
    for security in securities:
        price = f"${security.price:,.4f}" if security.price is not None else "n/a"
        print(f"   {security.symbol:<12} last price {price}")

    return 0


def cmd_plan(args: argparse.Namespace) -> int:
    """Show the bucket plan for a configuration without generating bars."""
    from synthfeed.commands.gen_history import load_gen_history_config
    from synthfeed.exceptions import ConfigError
    from synthfeed.planner import plan

    try:
        config = load_gen_history_config(args.config)
    except ConfigError as e:
        print(f"Configuration error: {e}")
        return 1

    bucket_plan = plan(config.requests)

    print("=" * 60)
    print("BUCKET PLAN")
    print("=" * 60)
    print(f"Bar size:    {bucket_plan.bar_size}")
    print(f"Span:        {bucket_plan.start_utc.isoformat()} to {bucket_plan.end_utc.isoformat()}")
    print(f"Buckets:     {len(bucket_plan)}")
    if len(bucket_plan) > 0:
        keys = list(bucket_plan)
        print(f"First:       {keys[0].isoformat()}")
        print(f"Last:        {keys[-1].isoformat()}")

    print("\nBuckets per symbol:")
    for symbol, count in bucket_plan.bucket_counts().items():
        print(f"   {symbol:<12} {count:>8}")

    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    from synthfeed.exceptions import ConfigError
    from synthfeed.logger import configure_logging

    parser = argparse.ArgumentParser(
        description="Synthetic sine-curve market history generator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--log-level", default="WARNING", help="Log level (default: WARNING)"
    )
    # Subcommands accept --log-level too; SUPPRESS keeps the global value when omitted
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--log-level", default=argparse.SUPPRESS, help="Log level")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Generate history command
    gen_parser = subparsers.add_parser(
        "gen-history",
        parents=[common],
        help="Generate synthetic history from configuration",
    )
    gen_parser.add_argument("config", help="Path to YAML configuration file")
    gen_parser.add_argument(
        "-o", "--output", default=None, help="CSV output path (overrides config)"
    )
    gen_parser.add_argument(
        "-n", "--limit", type=int, default=None, help="Stop after N slices"
    )

    # Plan command
    plan_parser = subparsers.add_parser(
        "plan", parents=[common], help="Show the bucket plan for a configuration"
    )
    plan_parser.add_argument("config", help="Path to YAML configuration file")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        configure_logging(args.log_level)
    except ConfigError as e:
        print(f"Configuration error: {e}")
        return 1

    if args.command == "gen-history":
        return cmd_gen_history(args)
    elif args.command == "plan":
        return cmd_plan(args)

    return 0


if __name__ == "__main__":
    sys.exit(main())
