import argparse
import logging
import sys

from court_pricing import run

# --- Logging Setup ---

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool):
    """Configures logging to stderr with local time."""
    import time

    level = logging.DEBUG if verbose else logging.INFO
    handler = logging.StreamHandler(sys.stderr)
    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s]: %(name)s:%(lineno)d | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    formatter.converter = time.localtime
    handler.setFormatter(formatter)

    logging.basicConfig(
        level=level,
        handlers=[handler],
    )


def parse_arguments(argv=None):
    """Parses command line arguments."""
    parser = argparse.ArgumentParser(description="Quote court prices from court and group price rules.")
    parser.add_argument("--data", type=str, help="Pricing data JSON file. Defaults to $PRICING_DATA_FILE.")
    parser.add_argument("--start-date", type=str, help="Start date in YYYY-MM-DD format. Defaults to today.")
    parser.add_argument("--days", type=int, default=7, help="Number of days to quote. Defaults to 7.")
    parser.add_argument("--start", type=str, default="18:00", help="Slot start in HH:MM format. Defaults to 18:00.")
    parser.add_argument("--end", type=str, default="19:00", help="Slot end in HH:MM format. Defaults to 19:00.")
    parser.add_argument("--report", type=str, help="Where to write the JSON report.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging.")
    return parser.parse_args(argv)


def main():
    args = parse_arguments()
    setup_logging(args.verbose)
    run.run(
        data_file=args.data,
        start_date=args.start_date,
        days=args.days,
        start_time=args.start,
        end_time=args.end,
        report_file=args.report,
    )


if __name__ == "__main__":
    main()
