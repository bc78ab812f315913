import argparse
import logging
import sys
import time
from datetime import date, datetime
from typing import Optional

from pydantic import ValidationError

from zhs_courtwatch import config, run
from zhs_courtwatch.errors import CourtwatchError, InputFormatError
from zhs_courtwatch.models import Activity, SearchWindow

# --- Logging Setup ---

logger = logging.getLogger(__name__)

ACTIVITIES = {
    "tennis": Activity.TENNIS,
    "beach": Activity.BEACH_VOLLEYBALL,
    "pickleball": Activity.PICKLEBALL,
}


def setup_logging(verbose: bool):
    """Configures logging to stderr with local time."""
    level = logging.DEBUG if verbose else logging.INFO
    handler = logging.StreamHandler(sys.stderr)
    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s]: %(name)s:%(lineno)d | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    # Use local time instead of UTC for logging
    formatter.converter = time.localtime
    handler.setFormatter(formatter)

    logging.basicConfig(
        level=level,
        handlers=[handler],
    )


def parse_arguments(argv=None):
    """Parses command line arguments."""
    parser = argparse.ArgumentParser(description="Watch zhs-courtbuchung.de for a free court and notify via ntfy.")
    parser.add_argument("-d", "--date", required=True, help="Date to watch in DD.MM.YYYY format.")
    parser.add_argument(
        "--after",
        default=config.DEFAULT_AFTER,
        help="Exclusive earliest start time (HH:MM). For a court at 14:00 pass 13:30. Defaults to 00:00.",
    )
    parser.add_argument(
        "--before",
        default=config.DEFAULT_BEFORE,
        help="Exclusive latest start time (HH:MM). For a court starting at 14:00 pass 14:30. Defaults to 23:00.",
    )
    parser.add_argument("-l", "--length", help="Minimum length of a free block in minutes.")
    parser.add_argument(
        "-a", "--activity", choices=sorted(ACTIVITIES), default="tennis", help="Activity to watch. Defaults to tennis."
    )
    parser.add_argument(
        "-i",
        "--interval",
        default=str(config.POLL_INTERVAL_SECONDS),
        help="Seconds to wait between checks.",
    )
    parser.add_argument("--no-merge", action="store_true", help="Report adjacent slots separately.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging.")
    return parser.parse_args(argv)


def parse_date(value: str) -> date:
    try:
        return datetime.strptime(value.strip(), config.DATE_FORMAT).date()
    except ValueError as e:
        raise InputFormatError(f"Date must be in DD.MM.YYYY format, got {value!r}") from e


def parse_window(after: str, before: str) -> SearchWindow:
    times = []
    for name, value in (("after", after), ("before", before)):
        try:
            times.append(datetime.strptime(value.strip(), config.TIME_FORMAT).time())
        except ValueError as e:
            raise InputFormatError(f"--{name} must be in HH:MM format, got {value!r}") from e
    try:
        return SearchWindow(after=times[0], before=times[1])
    except ValidationError as e:
        raise InputFormatError(f"Invalid search window {after} - {before}: --after must be earlier than --before") from e


def parse_length(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        minutes = int(value)
    except ValueError as e:
        raise InputFormatError(f"--length must be a number of minutes, got {value!r}") from e
    if minutes < 0:
        raise InputFormatError(f"--length must not be negative, got {minutes}")
    return minutes


def parse_interval(value: str) -> float:
    try:
        seconds = float(value)
    except ValueError as e:
        raise InputFormatError(f"--interval must be a number of seconds, got {value!r}") from e
    if not seconds >= 0:
        raise InputFormatError(f"--interval must not be negative, got {value}")
    return seconds


def main(argv=None):
    args = parse_arguments(argv)
    setup_logging(args.verbose)

    try:
        day = parse_date(args.date)
        window = parse_window(args.after, args.before)
        min_duration = parse_length(args.length)
        poll_interval = parse_interval(args.interval)
        run.run(
            day=day,
            window=window,
            activity=ACTIVITIES[args.activity],
            min_duration=min_duration,
            merge=not args.no_merge,
            poll_interval=poll_interval,
        )
    except CourtwatchError as e:
        logger.error(f"Error: {e}")
        sys.exit(1)
