import logging
import os
from typing import Dict

logger = logging.getLogger(__name__)

# --- Booking site ---
BASE_URL = os.environ.get("ZHS_BASE_URL", "https://zhs-courtbuchung.de").rstrip("/")
RESERVATIONS_ACTION = os.environ.get("ZHS_RESERVATIONS_ACTION", "showReservations")
REQUEST_TIMEOUT = int(os.environ.get("ZHS_REQUEST_TIMEOUT", "10"))

DATE_FORMAT = "%d.%m.%Y"
TIME_FORMAT = "%H:%M"

# Headers to mimic a browser
COMMON_HEADERS: Dict[str, str] = {
    "User-Agent": os.environ.get(
        "SCRAPER_USER_AGENT",
        (
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/129.0.0.0 Safari/537.36"
        ),
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": os.environ.get("SCRAPER_ACCEPT_LANGUAGE", "de-DE,de;q=0.9,en;q=0.8"),
    "Connection": "keep-alive",
}

# --- Search defaults ---
DEFAULT_AFTER = "00:00"
DEFAULT_BEFORE = "23:00"

# --- Polling ---
POLL_INTERVAL_SECONDS = float(os.environ.get("POLL_INTERVAL_SECONDS", "5"))
# 0 means retry failed ticks forever
MAX_CONSECUTIVE_FAILURES = int(os.environ.get("MAX_CONSECUTIVE_FAILURES", "0"))

# --- ntfy ---
NTFY_BASE_URL = os.environ.get("NTFY_BASE_URL", "https://ntfy.sh").rstrip("/")
NTFY_TOPIC = os.environ.get("NTFY_TOPIC", "zhsbot")
NOTIFY_ATTEMPTS = int(os.environ.get("NOTIFY_ATTEMPTS", "3"))
NOTIFY_BACKOFF_SECONDS = float(os.environ.get("NOTIFY_BACKOFF_SECONDS", "2"))

if not NTFY_TOPIC:
    logger.warning("NTFY_TOPIC is empty. Notifications will be posted to the ntfy root.")
