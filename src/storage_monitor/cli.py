"""CLI entry point for the storage monitor."""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from typing import List, Optional

from .config import get_settings
from .errors import StorageMonitorError
from .monitor import StorageMonitor, StorageReport

logger = logging.getLogger(__name__)


def _log_report(report: StorageReport) -> None:
    wear = report.wear_information
    if wear is None:
        logger.info("Wear: not reported")
    else:
        logger.info(
            "Wear: A=%s B=%s pre-EOL=%s",
            wear.lifetime_estimate_a,
            wear.lifetime_estimate_b,
            wear.pre_eol_info.name,
        )
    if report.io_window is not None:
        totals = report.io_window.totals
        logger.info(
            "I/O window: %d uids, %d bytes written to storage, %d fsync calls",
            len(report.io_window),
            totals.bytes_written_to_storage,
            totals.fsync_calls,
        )
    logger.info("Health: %s (score %d)", report.assessment.level, report.assessment.score)


def main(argv: Optional[List[str]] = None) -> int:
    p = argparse.ArgumentParser(description="Storage wear and per-uid I/O monitor")
    p.add_argument("--once", action="store_true", help="run a single poll and exit")
    p.add_argument("--interval", type=float, default=None, help="seconds between polls")
    p.add_argument("--json", action="store_true", help="print each report as JSON")
    p.add_argument("--env-file", default=None)
    args = p.parse_args(argv)

    try:
        settings = get_settings(args.env_file)
    except StorageMonitorError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )

    interval = args.interval if args.interval is not None else settings.io_sample_window_ms / 1000
    monitor = StorageMonitor(settings)
    logger.info("Storage monitor started (interval %.1fs, state %s)", interval, settings.state_file)

    while True:
        try:
            report = monitor.poll()
            if args.json:
                print(json.dumps(report.to_dict(), indent=2))
            else:
                _log_report(report)
            monitor.save()
        except StorageMonitorError as exc:
            logger.error("Poll failed: %s", exc)
            if args.once:
                return 1
        if args.once:
            return 0
        try:
            time.sleep(interval)
        except KeyboardInterrupt:
            logger.info("Stopping")
            monitor.save()
            return 0


if __name__ == "__main__":
    sys.exit(main())
