from typing import Optional


class CourtwatchError(Exception):
    """Base class for all errors raised by zhs_courtwatch."""

    retryable = False


class InputFormatError(CourtwatchError):
    """A date, time or duration given at startup could not be parsed."""


class FetchError(CourtwatchError):
    """Fetching a schedule page failed. The next tick may succeed."""

    retryable = True


class TransportError(FetchError):
    """Connection, timeout or other transport-level failure."""


class HttpStatusError(FetchError):
    def __init__(self, url: str, status_code: int):
        super().__init__(f"GET {url} returned HTTP {status_code}")
        self.url = url
        self.status_code = status_code


class DecodeError(FetchError):
    """The response body could not be read as text."""


class ParseError(CourtwatchError):
    """The page did not look the way the parser expects."""


class CourtLabelParseError(ParseError):
    def __init__(self, label: Optional[str], reason: str = "not a court label"):
        super().__init__(f"Cannot read court id from {label!r}: {reason}")
        self.label = label


class TimeLabelParseError(ParseError):
    def __init__(self, label: str, reason: str = "expected 'HH:MM - HH:MM'"):
        super().__init__(f"Cannot read time interval from {label!r}: {reason}")
        self.label = label


class NotificationDeliveryError(CourtwatchError):
    """The push notification could not be delivered."""
