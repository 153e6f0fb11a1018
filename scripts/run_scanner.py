#!/usr/bin/env python
"""Run the stuck-order scanner on its configured interval."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from order_monitor.config import get_settings  # noqa: E402
from order_monitor.scanner import run_scanner  # noqa: E402
from order_monitor.storage import dispose_engine  # noqa: E402

LOGGER = logging.getLogger(__name__)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Scan for stuck orders and dispatch alerts.")
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single scan and exit.",
    )
    parser.add_argument(
        "--max-iterations",
        type=int,
        default=None,
        help="Stop after this many scans (default: run until interrupted).",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO).",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    settings = get_settings()
    if not settings.scanner.enabled:
        LOGGER.warning("SCANNER_ENABLED is false; scans will be skipped")

    max_iterations = 1 if args.once else args.max_iterations
    try:
        alerts_sent = run_scanner(settings, max_iterations=max_iterations)
    finally:
        dispose_engine()
    LOGGER.info("Scanner finished, %s alerts sent", alerts_sent)


if __name__ == "__main__":
    main()
