"""Bookable start times for one specialist, date and service duration.

The list is advisory: it is a snapshot for the client UI, and the reservation
itself is re-validated by ``booking_guard.reserve_booking``.
"""

from dataclasses import dataclass
from datetime import date, time
from functools import lru_cache
from typing import Iterator

from glowbook.core import config
from glowbook.scheduling.availability import DayAvailability, load_day_availability
from glowbook.scheduling.errors import InvalidInterval
from glowbook.scheduling.intervals import (
    TimeInterval,
    minutes_since_midnight,
    overlaps_any,
    time_from_minutes,
)


@dataclass(frozen=True)
class SlotPolicy:
    """
    Business-hours window and slot grid.

    Attributes:
        open_time: first possible start time, inclusive
        close_time: latest time a booking may end
        granularity_minutes: spacing between candidate start times
    """
    open_time: time = time(9, 0)
    close_time: time = time(18, 0)
    granularity_minutes: int = 15

    def __post_init__(self):
        if self.open_time >= self.close_time:
            raise ValueError(f"open_time {self.open_time} must be before close_time {self.close_time}")
        if self.granularity_minutes <= 0:
            raise ValueError(f"granularity_minutes must be positive, got {self.granularity_minutes}")

    def candidate_starts(self, duration_minutes: int) -> Iterator[time]:
        """Every grid boundary whose ``[start, start + duration)`` fits in the window."""
        current = minutes_since_midnight(self.open_time)
        close = minutes_since_midnight(self.close_time)
        while current + duration_minutes <= close:
            yield time_from_minutes(current)
            current += self.granularity_minutes

    def is_on_grid(self, start: time) -> bool:
        offset = minutes_since_midnight(start) - minutes_since_midnight(self.open_time)
        return offset >= 0 and offset % self.granularity_minutes == 0 and start.second == 0

    def contains(self, interval: TimeInterval) -> bool:
        return self.open_time <= interval.start and interval.end <= self.close_time


@lru_cache
def get_slot_policy() -> SlotPolicy:
    return SlotPolicy(
        open_time=config.BUSINESS_OPEN_TIME,
        close_time=config.BUSINESS_CLOSE_TIME,
        granularity_minutes=config.SLOT_GRANULARITY_MINUTES,
    )


def iter_available_slots(
    availability: DayAvailability,
    booked: list[TimeInterval],
    duration_minutes: int,
    policy: SlotPolicy,
) -> Iterator[time]:
    """Yield free start times in ascending order."""
    if duration_minutes <= 0:
        raise InvalidInterval('Service duration must be a positive number of minutes.')

    if availability.is_off_day:
        return

    for start in policy.candidate_starts(duration_minutes):
        candidate = TimeInterval.from_start(start, duration_minutes)
        if overlaps_any(candidate, availability.breaks):
            continue
        if overlaps_any(candidate, booked):
            continue
        yield start


def list_available_slots(
    store,
    specialist_id: int,
    day: date,
    duration_minutes: int,
    policy: SlotPolicy | None = None,
) -> list[time]:
    """Recompute the free start times from current store state."""
    policy = policy or get_slot_policy()
    if duration_minutes <= 0:
        raise InvalidInterval('Service duration must be a positive number of minutes.')

    availability = load_day_availability(store, specialist_id, day)
    if availability.is_off_day:
        return []

    booked = [
        TimeInterval(booking.start_time, booking.end_time)
        for booking in store.list_confirmed_bookings(specialist_id, day)
    ]
    return list(iter_available_slots(availability, booked, duration_minutes, policy))
