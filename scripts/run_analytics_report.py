"""
Analytics Report Runner

Fetches grain entries for one report type and prints the daily series,
trend summary and top elevators as JSON.

Run with: python -m scripts.run_analytics_report [--type basis_trend] [--class CWRS]
          [--region ID] [--elevator ID] [--town ID] [--from YYYY-MM-DD] [--to YYYY-MM-DD]
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from src.analytics import FilterSpec, InvalidFilterRange, ReportType, build_report
from src.analytics_config import DEFAULT_CROP_CLASS_CODE, DEFAULT_TOP_N

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(message)s",
)
logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run a grain analytics report")
    parser.add_argument(
        "--type",
        choices=[rt.value for rt in ReportType],
        default=ReportType.BASIS_TREND.value,
        help="Report type (default: basis_trend)",
    )
    parser.add_argument(
        "--class",
        dest="crop_class_code",
        default=DEFAULT_CROP_CLASS_CODE,
        help=f"Crop class code (default: {DEFAULT_CROP_CLASS_CODE}, empty string for all)",
    )
    parser.add_argument("--region", dest="region_id", default=None, help="Region ID")
    parser.add_argument("--elevator", dest="elevator_id", default=None, help="Elevator ID")
    parser.add_argument("--town", dest="town_id", default=None, help="Town ID")
    parser.add_argument("--from", dest="date_from", default=None, help="Start date (YYYY-MM-DD)")
    parser.add_argument("--to", dest="date_to", default=None, help="End date (YYYY-MM-DD)")
    parser.add_argument("--top", type=int, default=DEFAULT_TOP_N, help="Number of elevators to rank")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    try:
        filters = FilterSpec(
            crop_class_code=args.crop_class_code,
            region_id=args.region_id,
            elevator_id=args.elevator_id,
            town_id=args.town_id,
            date_from=args.date_from,
            date_to=args.date_to,
        )
    except ValueError as e:
        logger.error(f"Invalid date: {e}")
        return 2

    report_type = ReportType(args.type)
    logger.info(f"Running {report_type.value} report with filters {filters.to_dict()}")

    try:
        report = build_report(report_type, filters, top_n=args.top)
    except InvalidFilterRange as e:
        logger.error(str(e))
        return 2

    print(json.dumps(report, indent=2))
    return 1 if report["error"] else 0


if __name__ == "__main__":
    sys.exit(main())
