#!/usr/bin/env python3
"""CLI interface for color-search."""

import argparse
import logging
import sys

from .config import SearchConfig
from .engine import SearchEngine, benchmark_workers
from .histograms import HistogramError


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with search and benchmark commands."""
    parser = argparse.ArgumentParser(
        prog="color-search",
        description="Find the images in a directory whose colors best match a query image",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Enable debug logging")

    defaults = SearchConfig()
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("query", type=str, help="Path to the query image")
    common.add_argument("dataset", type=str, help="Directory of images to search")
    common.add_argument("--depth", type=int, default=defaults.depth,
                        help="Bits kept per color channel (histogram has 2^(3*depth) buckets)")
    common.add_argument("--ext", action="append", dest="extensions", default=None,
                        help="Image extension to include (repeatable; default: "
                             + ", ".join(sorted(defaults.extensions)) + ")")

    subparsers = parser.add_subparsers(dest="command", required=True)

    search = subparsers.add_parser(
        "search", parents=[common],
        help="Rank dataset images by similarity to the query",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    search.add_argument("--workers", "-k", type=int, default=defaults.workers,
                        help="Number of parallel worker tasks")
    search.add_argument("--top-n", "-n", type=int, default=defaults.top_n,
                        help="Number of most similar images to report")

    bench = subparsers.add_parser(
        "benchmark", parents=[common],
        help="Time the dataset scan for several worker counts",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    bench.add_argument("--workers", "-k", type=int, nargs="+",
                       default=[1, 2, 4, 8, 16, 64, 256],
                       help="Worker counts to time")

    return parser


def _config_from_args(args: argparse.Namespace, workers: int) -> SearchConfig:
    overrides = {}
    if args.extensions:
        overrides["extensions"] = args.extensions
    if getattr(args, "top_n", None) is not None:
        overrides["top_n"] = args.top_n

    config = SearchConfig(depth=args.depth, workers=workers, **overrides)
    config.validate()
    return config


def run_search(args: argparse.Namespace) -> None:
    config = _config_from_args(args, args.workers)
    engine = SearchEngine(config)

    print(f"Finding similarity with K={config.workers}")
    result = engine.search(args.query, args.dataset)

    print(f"Top {config.top_n} similar images:")
    for i, (name, score) in enumerate(result.matches, start=1):
        print(f"{i}: {name} - Score: {score:f}")


def run_benchmark(args: argparse.Namespace) -> None:
    config = _config_from_args(args, args.workers[0])
    for workers, seconds in benchmark_workers(args.query, args.dataset,
                                              args.workers, config):
        print(f"Execution time for K={workers}: {seconds:.6f}s")


def main(argv=None) -> int:
    """CLI entry point for color-search.

    Returns:
        Process exit status: 0 on success, 1 on a fatal error.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S"
    )

    try:
        if args.command == "search":
            run_search(args)
        else:
            run_benchmark(args)
    except (HistogramError, OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
