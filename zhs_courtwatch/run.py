import logging
import time
from dataclasses import dataclass
from datetime import date
from typing import Optional

import cloudscraper

from zhs_courtwatch import config, filtering, ntfy_notifier, scraper
from zhs_courtwatch.errors import FetchError, ParseError
from zhs_courtwatch.models import Activity, AvailabilityMap, SearchWindow

logger = logging.getLogger(__name__)


@dataclass
class TickOutcome:
    matches: AvailabilityMap
    error: Optional[FetchError] = None

    @property
    def found(self) -> bool:
        return bool(self.matches)


def print_availability_report(matches: AvailabilityMap):
    """Prints the matching intervals per court to stdout."""
    for court_id, intervals in matches.items():
        print(f"Court {court_id}")
        for interval in intervals:
            print(str(interval))


def check_once(
    activity: Activity,
    day: date,
    window: SearchWindow,
    min_duration: Optional[int] = None,
    merge: bool = True,
) -> TickOutcome:
    """Runs one tick: fetch every page for the day and filter it.

    Fetch failures are returned on the outcome so the caller can retry.
    Parse failures mean the site layout changed and are raised.
    """
    try:
        with cloudscraper.create_scraper() as session:
            availability = scraper.get_day_availability(activity, day, session=session)
    except FetchError as e:
        logger.warning(f"Fetching the schedule failed: {e}")
        return TickOutcome(matches={}, error=e)
    except ParseError as e:
        logger.error(f"Could not parse the schedule, has the site layout changed? {e}")
        raise

    courts_total = len(availability)
    matches = filtering.select_matches(availability, window, min_duration=min_duration, merge=merge)
    logger.info(f"{courts_total} courts with free slots, {len(matches)} matching the search")
    return TickOutcome(matches=matches)


def run(
    day: date,
    window: SearchWindow,
    activity: Activity = Activity.TENNIS,
    min_duration: Optional[int] = None,
    merge: bool = True,
    poll_interval: float = config.POLL_INTERVAL_SECONDS,
    max_failures: int = config.MAX_CONSECUTIVE_FAILURES,
) -> AvailabilityMap:
    """Polls until a matching slot shows up, sends one notification and returns the matches.

    Failed fetches are retried after ``poll_interval`` like an empty result.
    With ``max_failures`` > 0 the last fetch error is raised after that many
    failed ticks in a row.
    """
    print(
        f"Searching for open {activity.name.lower().replace('_', ' ')} courts on {day.strftime(config.DATE_FORMAT)} "
        f"after {window.after.strftime(config.TIME_FORMAT)} and before {window.before.strftime(config.TIME_FORMAT)}, "
        f"checking every {poll_interval:g}s"
    )

    failures = 0
    while True:
        outcome = check_once(activity, day, window, min_duration=min_duration, merge=merge)

        if outcome.error is not None:
            failures += 1
            if max_failures > 0 and failures >= max_failures:
                logger.error(f"Giving up after {failures} failed attempts in a row.")
                raise outcome.error
        else:
            failures = 0

        if outcome.found:
            print_availability_report(outcome.matches)
            ntfy_notifier.send_ntfy_message(ntfy_notifier.build_result_string(outcome.matches))
            return outcome.matches

        if outcome.error is not None:
            print(f"Check failed ({outcome.error}). Retrying in {poll_interval:g}s")
        else:
            print(f"Nothing found. Sleeping {poll_interval:g}s")
        time.sleep(poll_interval)
