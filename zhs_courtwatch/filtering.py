import logging
from functools import reduce
from typing import Iterable, List, Optional

from zhs_courtwatch.models import AvailabilityMap, SearchWindow, TimeInterval

logger = logging.getLogger(__name__)


def filter_availability(availability: AvailabilityMap, window: SearchWindow) -> AvailabilityMap:
    """Keeps only intervals whose start lies strictly inside the search window.

    Courts without a matching interval are dropped. Interval order within a
    court is kept as given.
    """
    filtered: AvailabilityMap = {}
    for court_id, intervals in availability.items():
        matching = [interval for interval in intervals if window.admits(interval.start)]
        if matching:
            filtered[court_id] = matching
    return filtered


def _absorb(merged: List[TimeInterval], interval: TimeInterval) -> List[TimeInterval]:
    if merged and (merged[-1].is_adjacent_to(interval) or merged[-1].overlaps(interval)):
        return merged[:-1] + [merged[-1].merge(interval)]
    return merged + [interval]


def merge_adjacent(intervals: Iterable[TimeInterval]) -> List[TimeInterval]:
    """Sorts intervals by start and joins every chain of touching slots.

    ``[16:00-16:30, 16:30-17:00, 18:00-19:00]`` becomes
    ``[16:00-17:00, 18:00-19:00]``.
    """
    ordered = sorted(intervals, key=lambda interval: (interval.start, interval.end))
    return reduce(_absorb, ordered, [])


def merge_availability(availability: AvailabilityMap) -> AvailabilityMap:
    return {court_id: merge_adjacent(intervals) for court_id, intervals in availability.items()}


def apply_min_duration(availability: AvailabilityMap, minutes: Optional[int]) -> AvailabilityMap:
    """Drops intervals shorter than ``minutes``. ``None`` or 0 keeps everything."""
    if not minutes:
        return availability

    kept: AvailabilityMap = {}
    for court_id, intervals in availability.items():
        long_enough = [interval for interval in intervals if interval.duration_minutes >= minutes]
        if long_enough:
            kept[court_id] = long_enough
    return kept


def select_matches(
    availability: AvailabilityMap,
    window: SearchWindow,
    min_duration: Optional[int] = None,
    merge: bool = True,
) -> AvailabilityMap:
    """Filters a day's availability down to what the user asked for.

    Filtering runs on the published slots before merging, so a slot starting
    inside the window is never hidden inside a block that starts before it.
    """
    matches = filter_availability(availability, window)
    if merge:
        matches = merge_availability(matches)
    matches = apply_min_duration(matches, min_duration)
    logger.debug(f"{sum(len(v) for v in matches.values())} matching intervals on {len(matches)} courts")
    return matches
