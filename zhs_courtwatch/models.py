from datetime import datetime, time
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, model_validator

from zhs_courtwatch import config
from zhs_courtwatch.errors import TimeLabelParseError


class Activity(Enum):
    """Facility types offered by the booking site.

    Each member carries the site's ``type_id`` code, the length of the text
    prefix in front of the court number in the column header, and the first
    page index the site uses for that activity.
    """

    TENNIS = (1, 6, 2)
    BEACH_VOLLEYBALL = (2, 5, 1)
    # Header prefix not known, court number is read from the trailing digits
    PICKLEBALL = (3, None, 1)

    def __init__(self, code: int, prefix_length: Optional[int], first_page: int):
        self.code = code
        self.prefix_length = prefix_length
        self.first_page = first_page


class TimeInterval(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: time
    end: time

    @model_validator(mode="after")
    def check_order(self):
        if self.end < self.start:
            raise ValueError(f"interval ends ({self.end}) before it starts ({self.start})")
        return self

    @classmethod
    def from_label(cls, label: str) -> "TimeInterval":
        """Parses a label like ``"14:00 - 15:30"``."""
        parts = label.strip().split("-")
        if len(parts) != 2:
            raise TimeLabelParseError(label)
        try:
            start = datetime.strptime(parts[0].strip(), config.TIME_FORMAT).time()
            end = datetime.strptime(parts[1].strip(), config.TIME_FORMAT).time()
        except ValueError as e:
            raise TimeLabelParseError(label) from e
        if end < start:
            raise TimeLabelParseError(label, "end is before start")
        return cls(start=start, end=end)

    @property
    def duration_minutes(self) -> int:
        return (self.end.hour * 60 + self.end.minute) - (self.start.hour * 60 + self.start.minute)

    def is_adjacent_to(self, other: "TimeInterval") -> bool:
        return self.end == other.start or other.end == self.start

    def overlaps(self, other: "TimeInterval") -> bool:
        return self.start < other.end and other.start < self.end

    def merge(self, other: "TimeInterval") -> "TimeInterval":
        """Returns one interval spanning both. They must touch or overlap."""
        if not (self.is_adjacent_to(other) or self.overlaps(other)):
            raise ValueError(f"cannot merge disjoint intervals {self} and {other}")
        return TimeInterval(start=min(self.start, other.start), end=max(self.end, other.end))

    def __str__(self) -> str:
        return f"{self.start.strftime(config.TIME_FORMAT)} - {self.end.strftime(config.TIME_FORMAT)}"


class SearchWindow(BaseModel):
    """Exclusive bounds for the start time of a wanted slot."""

    model_config = ConfigDict(frozen=True)

    after: time
    before: time

    @model_validator(mode="after")
    def check_bounds(self):
        if not self.after < self.before:
            raise ValueError(f"'after' ({self.after}) must be earlier than 'before' ({self.before})")
        return self

    def admits(self, start: time) -> bool:
        return self.after < start < self.before


# Court id -> free intervals, ordered by court id
AvailabilityMap = Dict[int, List[TimeInterval]]
