#!/usr/bin/env python3
"""Schedule wake-up notifications for idle devices that have no stored messages."""

import argparse
import asyncio
import json

from idle_notifier.config import get_settings
from idle_notifier.log_config import setup_logging
from idle_notifier.tasks.idle_device_tasks import run_idle_device_crawl


def _positive_int(value: str) -> int:
    parsed = int(value)
    if parsed < 1:
        raise argparse.ArgumentTypeError("must be a positive integer")
    return parsed


def main() -> None:
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Notify idle devices without messages")
    parser.add_argument(
        "--max-concurrency",
        type=_positive_int,
        default=settings.idle_crawl_max_concurrency,
        help=f"Max concurrent accounts to process (default: {settings.idle_crawl_max_concurrency})",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=settings.idle_crawl_dry_run,
        help="Evaluate devices but don't schedule any notifications",
    )
    args = parser.parse_args()

    setup_logging(debug=settings.debug)
    summary = asyncio.run(
        run_idle_device_crawl(settings, dry_run=args.dry_run, max_concurrency=args.max_concurrency)
    )
    print(json.dumps(summary.as_dict(), indent=2, sort_keys=True))


if __name__ == "__main__":
    main()
