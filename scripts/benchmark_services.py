"""Benchmark the batched service listing against a scratch store."""

from __future__ import annotations

import argparse
import logging

import anyio

from ops_inventory.benchmark import run_benchmark
from ops_inventory.database import Database
from ops_inventory.logging_config import setup_logging

logger = logging.getLogger("benchmark")


def parse_args() -> argparse.Namespace:
    """Parse command-line options.

    Returns
    -------
    argparse.Namespace
        Parsed options.
    """
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--database-url",
        default="sqlite+aiosqlite://",
        help="Store to seed; defaults to an in-memory database.",
    )
    parser.add_argument("--services", type=int, default=100)
    parser.add_argument("--tags", type=int, default=5)
    parser.add_argument("--iterations", type=int, default=10)
    return parser.parse_args()


async def main(args: argparse.Namespace) -> None:
    """Seed the store, run the benchmark and log a summary.

    Returns
    -------
    None
        Logs the timings.
    """
    database = await Database(args.database_url).initialize()
    try:
        result = await run_benchmark(
            database,
            service_count=args.services,
            tag_count=args.tags,
            iterations=args.iterations,
        )
    finally:
        await database.dispose()

    logger.info("Average: %.2fms", result.avg_ms)
    logger.info("Min: %.2fms", result.min_ms)
    logger.info("Max: %.2fms", result.max_ms)
    logger.info("Statements per read: %d", result.statements_per_read)
    logger.info("Throughput: %.0f services/second", result.services_per_second)


if __name__ == "__main__":
    setup_logging("INFO")
    anyio.run(main, parse_args())
