"""
Radius Demographics - Report Runner

Generates a multi-radius demographic report for one point from the
configured block group and ACS files.

Usage:
    python -m src.run_report --lat 32.78 --lon -96.80 --radii 1 3 5
    python -m src.run_report --lat 32.78 --lon -96.80 --output report.json
"""

import argparse
import json
import sys
from datetime import datetime
from typing import List, Optional

from src.ingest.context import load_report_context
from src.processing.diagnostics import DataNotLoadedError
from src.processing.engine import generate_radius_report
from src.utils.logging import setup_logging

logger = setup_logging("report")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Radius Demographics - Multi-Radius Report"
    )

    parser.add_argument("--lat", type=float, required=True, help="Center latitude")
    parser.add_argument("--lon", type=float, required=True, help="Center longitude")

    parser.add_argument(
        "--radii",
        type=float,
        nargs="+",
        help="Radii in miles (default: 1 3 5)"
    )

    parser.add_argument("--block-groups", type=str, help="Block group GeoJSON path")
    parser.add_argument("--demographics", type=str, help="Demographic CSV path")
    parser.add_argument("--rates", type=str, help="ACS rate CSV path")

    parser.add_argument(
        "--output",
        type=str,
        help="Write report JSON to this file instead of stdout"
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Run one report; returns the process exit code"""
    args = build_parser().parse_args(argv)

    start_time = datetime.now()
    logger.info(f"Report start: {vars(args)}")

    try:
        context = load_report_context(args.block_groups, args.demographics, args.rates)
        report = generate_radius_report(context, args.lat, args.lon, args.radii)
        payload = json.dumps(report.to_dict(), indent=2)

        if args.output:
            with open(args.output, "w") as f:
                f.write(payload)
            logger.info(f"Report written to {args.output}")
        else:
            print(payload)

    except DataNotLoadedError as e:
        logger.error(f"Report failed: {e}")
        return 1

    except Exception as e:
        logger.error(f"Report failed with unhandled exception: {e}", exc_info=True)
        return 1

    duration = (datetime.now() - start_time).total_seconds()
    logger.info(f"Report complete in {duration:.1f} seconds")
    return 0


if __name__ == "__main__":
    sys.exit(main())
