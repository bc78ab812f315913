import logging
import time

import requests

from zhs_courtwatch import config
from zhs_courtwatch.errors import NotificationDeliveryError
from zhs_courtwatch.models import AvailabilityMap

logger = logging.getLogger(__name__)

NOTHING_AVAILABLE = "Sorry, nothing available"


def build_result_string(availability: AvailabilityMap) -> str:
    """Formats matches as one "Court <id>:" block per court."""
    if not availability:
        return NOTHING_AVAILABLE

    lines = []
    for court_id, intervals in availability.items():
        lines.append(f"Court {court_id}:")
        for interval in intervals:
            lines.append(str(interval))
    return "\n".join(lines) + "\n"


def send_ntfy_message(message: str, title: str = "Free court found"):
    """Posts a message to the configured ntfy topic.

    Retries with a linear backoff and raises NotificationDeliveryError once
    all attempts have failed.
    """
    url = f"{config.NTFY_BASE_URL}/{config.NTFY_TOPIC}"
    attempts = max(1, config.NOTIFY_ATTEMPTS)
    last_error = None

    for attempt in range(1, attempts + 1):
        try:
            response = requests.post(
                url,
                data=message.encode("utf-8"),
                headers={"Title": title},
                timeout=config.REQUEST_TIMEOUT,
            )
            response.raise_for_status()
            logger.info("ntfy notification sent successfully.")
            return
        except requests.exceptions.RequestException as e:
            last_error = e
            logger.warning(f"Failed to send ntfy message (attempt {attempt}/{attempts}): {e}")
            if attempt < attempts:
                time.sleep(config.NOTIFY_BACKOFF_SECONDS * attempt)

    raise NotificationDeliveryError(f"Could not deliver notification to {url}: {last_error}") from last_error
