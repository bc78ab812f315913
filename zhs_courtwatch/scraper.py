import logging
import re
from datetime import date
from typing import List, Optional, Tuple
from urllib.parse import urlencode

import cloudscraper
import requests
from bs4 import BeautifulSoup, Tag

from zhs_courtwatch import config
from zhs_courtwatch.errors import (
    CourtLabelParseError,
    DecodeError,
    HttpStatusError,
    TransportError,
)
from zhs_courtwatch.models import Activity, AvailabilityMap, TimeInterval

logger = logging.getLogger(__name__)

# One <td> per court inside the content table; some pages omit the <tbody>
COURT_COLUMN_SELECTOR = "div.content > table > tbody > tr > td, div.content > table > tr > td"
# The site spells the class "avaliable"
AVAILABLE_CELL_SELECTOR = "td.avaliable, td.available"

_TRAILING_NUMBER = re.compile(r"(\d+)\s*$")


def build_url(activity: Activity, day: date, page: int) -> str:
    """Constructs the reservations page URL for one activity, date and page."""
    qs = {
        "action": config.RESERVATIONS_ACTION,
        "type_id": activity.code,
        "date": day.strftime(config.DATE_FORMAT),
        "page": page,
    }
    url = f"{config.BASE_URL}/reservations.php?{urlencode(qs)}"
    logger.debug(f"Built URL: {url}")
    return url


def fetch_page(session: requests.Session, url: str) -> str:
    """Fetches one schedule page and returns its HTML."""
    try:
        response = session.get(url, headers=config.COMMON_HEADERS, timeout=config.REQUEST_TIMEOUT)
    except requests.exceptions.RequestException as e:
        raise TransportError(f"GET {url} failed: {e}") from e
    except (cloudscraper.exceptions.CloudflareException, cloudscraper.exceptions.CaptchaException) as e:
        raise TransportError(f"GET {url} failed the Cloudflare challenge: {e}") from e

    logger.debug(f"Response status: {response.status_code}")
    if not 200 <= response.status_code < 300:
        if response.status_code == 403:
            logger.error("Request was blocked even with cloudscraper.")
        raise HttpStatusError(url, response.status_code)

    try:
        return response.content.decode(response.encoding or "utf-8")
    except (UnicodeDecodeError, LookupError) as e:
        raise DecodeError(f"Cannot decode body of {url}: {e}") from e


def parse_court_id(label: Optional[str], activity: Activity) -> int:
    """Reads the court number from a column header such as ``"Court 07"``."""
    if label is None:
        raise CourtLabelParseError(label, "column has no header")

    label = label.strip()
    if activity.prefix_length is None:
        match = _TRAILING_NUMBER.search(label)
        if not match:
            raise CourtLabelParseError(label, "no trailing court number")
        remainder = match.group(1)
    else:
        if len(label) <= activity.prefix_length:
            raise CourtLabelParseError(label, f"shorter than the {activity.name} prefix")
        remainder = label[activity.prefix_length:].strip()

    if not (remainder.isascii() and remainder.isdigit()):
        raise CourtLabelParseError(label, f"{remainder!r} is not a number")
    court_id = int(remainder)
    if court_id <= 0:
        raise CourtLabelParseError(label, "court number must be positive")
    return court_id


def parse_court_column(column: Tag, activity: Activity) -> Tuple[int, List[TimeInterval]]:
    """Returns the court id and free intervals of one court column."""
    header = column.find("th")
    label = header.get_text().strip() if header else None
    court_id = parse_court_id(label, activity)

    intervals = [
        TimeInterval.from_label(cell.get_text().strip())
        for cell in column.select(AVAILABLE_CELL_SELECTOR)
    ]
    return court_id, intervals


def _parse_page(html: str, activity: Activity) -> Tuple[int, AvailabilityMap]:
    soup = BeautifulSoup(html, "html.parser")
    columns = soup.select(COURT_COLUMN_SELECTOR)
    page_map: AvailabilityMap = {}

    for column in columns:
        court_id, intervals = parse_court_column(column, activity)
        if not intervals:
            logger.debug(f"Court {court_id} is fully booked")
            continue
        page_map[court_id] = intervals

    return len(columns), page_map


def count_court_columns(html: str) -> int:
    return len(BeautifulSoup(html, "html.parser").select(COURT_COLUMN_SELECTOR))


def parse_schedule_page(html: str, activity: Activity) -> AvailabilityMap:
    """Parses one reservations page into court id -> free intervals.

    Courts without a single free cell are left out. An empty result means
    either that the page has no court columns (past the last page) or that
    every court on it is booked; use ``count_court_columns`` to tell them apart.
    """
    _, page_map = _parse_page(html, activity)
    return page_map


def fold_page(accumulated: AvailabilityMap, page_map: AvailabilityMap) -> AvailabilityMap:
    """Returns a new map with the courts of one page added to ``accumulated``."""
    merged = {court_id: list(intervals) for court_id, intervals in accumulated.items()}
    for court_id, intervals in page_map.items():
        merged[court_id] = merged.get(court_id, []) + list(intervals)
    return dict(sorted(merged.items()))


def get_day_availability(
    activity: Activity,
    day: date,
    session: Optional[requests.Session] = None,
) -> AvailabilityMap:
    """Walks the paginated schedule for one day and returns every free interval.

    Pages are requested from ``activity.first_page`` upwards until one has no
    court columns. Fetch and parse errors propagate; nothing partial is returned.
    """
    if session is None:
        with cloudscraper.create_scraper() as own_session:
            return get_day_availability(activity, day, session=own_session)

    accumulated: AvailabilityMap = {}
    page = activity.first_page

    while True:
        url = build_url(activity, day, page)
        logger.info(f"Fetching {activity.name} page {page} for {day.strftime(config.DATE_FORMAT)}")
        html = fetch_page(session, url)

        column_count, page_map = _parse_page(html, activity)
        if column_count == 0:
            logger.debug(f"Page {page} has no court columns, stopping")
            return accumulated

        accumulated = fold_page(accumulated, page_map)
        page += 1
