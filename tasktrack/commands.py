"""
Maintenance commands

tasktrack-clear-stats-cache [--limit N]
    Evict cached task statistics for one limit, or for every common limit.
    Only useful with CACHE_BACKEND=redis; the in-memory cache lives inside
    each API process.
"""
import argparse
import asyncio
import logging
import sys
from typing import Optional, Sequence

from tasktrack.core.cache import get_cache
from tasktrack.core.config import settings
from tasktrack.services.statistics import evict_statistics

logger = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError("limit must be a positive integer")
    return number


async def clear_statistics_cache(limit: Optional[int] = None) -> list[str]:
    return await evict_statistics(get_cache(), limit)


def clear_stats_cache(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="tasktrack-clear-stats-cache",
        description="Clear the cached per-user task statistics.",
    )
    parser.add_argument(
        "--limit",
        type=_positive_int,
        default=None,
        help="Only clear the entry for this limit (default: all common limits)",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=settings.LOG_LEVEL.upper(), format="%(levelname)s %(message)s")

    try:
        keys = asyncio.run(clear_statistics_cache(args.limit))
    except Exception as e:
        logger.error(f"Failed to clear statistics cache: {type(e).__name__}: {e}", exc_info=True)
        return 1

    for key in keys:
        print(f"cleared {key}")
    return 0


def main() -> None:
    sys.exit(clear_stats_cache())


if __name__ == "__main__":
    main()
