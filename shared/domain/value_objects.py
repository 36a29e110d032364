"""
Common Value Objects

- TimeRange: half-open [start, end) window used for all overlap checks
"""

from dataclasses import dataclass
from datetime import date, datetime, time

from shared.domain.base import ValueObject

DATE_FORMAT = '%Y-%m-%d'
TIME_FORMAT = '%H:%M'


def parse_date(value: str | date) -> date:
    """Parse a YYYY-MM-DD string; date instances pass through."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value), DATE_FORMAT).date()
    except ValueError:
        raise ValueError(f"Invalid date '{value}', expected YYYY-MM-DD") from None


def parse_time(value: str | time) -> time:
    """Parse an HH:MM string; seconds are always dropped."""
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)
    try:
        return datetime.strptime(str(value), TIME_FORMAT).time()
    except ValueError:
        raise ValueError(f"Invalid time '{value}', expected HH:MM") from None


@dataclass(frozen=True)
class TimeRange(ValueObject):
    """
    Time range value object

    Represents a window from start (inclusive) to end (exclusive).
    Timestamps are naive and interpreted in the single local zone.
    """
    start: datetime
    end: datetime

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start ({self.start}) must be before end ({self.end})")

    @classmethod
    def on_day(cls, day: str | date, start_time: str | time, end_time: str | time) -> 'TimeRange':
        """
        Build a window from a calendar date and two HH:MM times

        Examples:
            TimeRange.on_day('2025-03-01', '10:00', '11:00')
        """
        day = parse_date(day)
        return cls(
            datetime.combine(day, parse_time(start_time)),
            datetime.combine(day, parse_time(end_time)),
        )

    def overlaps_with(self, other: 'TimeRange') -> bool:
        """
        Check if this range overlaps with another

        Examples:
            - 10:00-11:00 overlaps with 10:30-11:30 -> True
            - 10:00-11:00 overlaps with 11:00-12:00 -> False (adjacent)
        """
        if not isinstance(other, TimeRange):
            raise TypeError("Can only check overlap with another TimeRange")

        return self.start < other.end and other.start < self.end

    @property
    def day(self) -> date:
        return self.start.date()

    @property
    def start_time(self) -> str:
        return self.start.strftime(TIME_FORMAT)

    @property
    def end_time(self) -> str:
        return self.end.strftime(TIME_FORMAT)

    def __str__(self):
        return f"{self.day.strftime(DATE_FORMAT)} {self.start_time}-{self.end_time}"

    def __repr__(self):
        return f"TimeRange({self.start.isoformat()}, {self.end.isoformat()})"
