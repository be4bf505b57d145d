"""Time-of-day intervals and the half-open overlap rule."""

from dataclasses import dataclass
from datetime import time

from glowbook.scheduling.errors import InvalidInterval

MINUTES_PER_DAY = 24 * 60


def minutes_since_midnight(value: time) -> int:
    return value.hour * 60 + value.minute


def time_from_minutes(total_minutes: int) -> time:
    if not 0 <= total_minutes < MINUTES_PER_DAY:
        raise InvalidInterval(f'{total_minutes} minutes is outside a single day.')
    return time(total_minutes // 60, total_minutes % 60)


def parse_time_of_day(value: str) -> time:
    """Parse an ``HH:MM`` string (seconds, if present, must be zero)."""
    parts = (value or '').strip().split(':')
    if len(parts) not in (2, 3) or not all(part.isdigit() for part in parts):
        raise InvalidInterval('Invalid time format. Use HH:mm format.')

    hour, minute = int(parts[0]), int(parts[1])
    second = int(parts[2]) if len(parts) == 3 else 0
    if hour > 23 or minute > 59 or second != 0:
        raise InvalidInterval('Invalid time format. Use HH:mm format.')

    return time(hour, minute)


def format_time_of_day(value: time) -> str:
    return value.strftime('%H:%M')


@dataclass(frozen=True, order=True)
class TimeInterval:
    """A half-open ``[start, end)`` range within one day."""

    start: time
    end: time

    def __post_init__(self):
        if self.start >= self.end:
            raise InvalidInterval('Start time must be before end time.')

    @classmethod
    def parse(cls, start: str, end: str) -> 'TimeInterval':
        return cls(parse_time_of_day(start), parse_time_of_day(end))

    @classmethod
    def from_start(cls, start: time, duration_minutes: int) -> 'TimeInterval':
        if duration_minutes <= 0:
            raise InvalidInterval('Duration must be a positive number of minutes.')
        end_minutes = minutes_since_midnight(start) + duration_minutes
        return cls(start, time_from_minutes(end_minutes))

    @property
    def duration_minutes(self) -> int:
        return minutes_since_midnight(self.end) - minutes_since_midnight(self.start)

    def __str__(self) -> str:
        return f'{format_time_of_day(self.start)}-{format_time_of_day(self.end)}'


def overlaps(a: TimeInterval, b: TimeInterval) -> bool:
    """True iff the two ranges share an instant. Touching ranges do not overlap."""
    return a.start < b.end and b.start < a.end


def within(point: time, interval: TimeInterval) -> bool:
    return interval.start <= point < interval.end


def overlaps_any(candidate: TimeInterval, intervals) -> bool:
    return any(overlaps(candidate, other) for other in intervals)
