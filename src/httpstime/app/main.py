#!/usr/bin/env python3
"""Estimate the local clock offset against an HTTPS server's Date header.

Usage examples:
  - httpstime -s example.com
  - httpstime -s example.com:8443 -n 16 -d

Prints one line on stdout:
  *RESULT 0 <server> <low> <high> <width>      (offsets in seconds, local - server)
  *RESULT 1 <server> nan nan nan <message>     (verification or run failure)
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from pydantic import ValidationError

from httpstime.api.probe import HttpsTimeProbe
from httpstime.app.reporter import ResultReporter
from httpstime.app.runner import TimeProbeRun
from httpstime.config.settings import VERSION, get_settings
from httpstime.timing.estimator import OffsetEstimator
from httpstime.timing.scheduler import PollScheduler
from httpstime.utils.logging_config import setup_logging
from httpstime.utils.validation import validate_server


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="httpstime",
        description="Estimate clock offset to an HTTPS server from its Date header",
    )
    parser.add_argument(
        "-s", "--server",
        required=True,
        metavar="HOST[:PORT]",
        help="Server to poll",
    )
    parser.add_argument(
        "-n", "--num-polls",
        type=int,
        metavar="INTEGER",
        help="Number of times to poll (default: 8)",
    )
    parser.add_argument(
        "-t", "--timeout",
        type=float,
        metavar="SECONDS",
        help="Per-request timeout (default: 5.0)",
    )
    parser.add_argument(
        "-d", "--debug",
        action="store_true",
        help="Debug logging",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = get_settings(
            num_polls=args.num_polls,
            request_timeout=args.timeout,
            log_level="DEBUG" if args.debug else None,
        )
    except ValidationError as e:
        parser.error(f"Invalid option: {e.errors()[0]['loc'][0]}: {e.errors()[0]['msg']}")

    logger = setup_logging(settings.log_level)

    try:
        server = validate_server(args.server)
    except ValueError as e:
        parser.error(str(e))

    logger.debug(f"httpstime {VERSION} initializing...")

    probe = HttpsTimeProbe(
        server,
        path=settings.well_known_path,
        user_agent=settings.user_agent,
        timeout=settings.request_timeout,
        logger=logger.bind(component="probe"),
    )
    runner = TimeProbeRun(
        probe=probe,
        estimator=OffsetEstimator(logger=logger.bind(component="estimator")),
        scheduler=PollScheduler(logger=logger.bind(component="scheduler")),
        reporter=ResultReporter(logger=logger.bind(component="reporter")),
        num_polls=settings.num_polls,
        max_round_retries=settings.max_round_retries,
        min_samples=settings.min_samples,
        abort_on_missing_date=settings.missing_date_policy == "abort",
        logger=logger.bind(component="runner"),
    )
    with probe:
        result = runner.run()
    return result.status


if __name__ == "__main__":
    sys.exit(main())
