"""Per-date availability: off-days and applicable breaks for one specialist.

Rules are read from any object carrying the ``SpecialistBreak`` fields
(``is_recurring``, ``day_of_week``, ``specific_date``, ``start_time``,
``end_time``), so ORM rows and plain value objects work the same way.

There is no precedence between recurring and date-specific breaks: each rule
either applies to a date or it does not, and every applicable rule blocks its
interval. Skipping a recurring break for a single date is not expressible;
an off-day is the only way to clear a day.
"""

from dataclasses import dataclass
from datetime import date

from glowbook.scheduling.errors import InvalidInterval
from glowbook.scheduling.intervals import TimeInterval


@dataclass(frozen=True)
class DayAvailability:
    day: date
    is_off_day: bool
    breaks: tuple[TimeInterval, ...] = ()


def rule_interval(rule) -> TimeInterval:
    return TimeInterval(rule.start_time, rule.end_time)


def weekday_number(day: date) -> int:
    """Weekday number with 0 = Sunday .. 6 = Saturday."""
    return (day.weekday() + 1) % 7


def break_applies(rule, day: date) -> bool:
    if rule.is_recurring:
        return rule.day_of_week is None or rule.day_of_week == weekday_number(day)
    return rule.specific_date is not None and rule.specific_date == day


def applicable_breaks(rules, day: date) -> tuple[TimeInterval, ...]:
    """Intervals of every rule that applies on ``day``, ordered by start.

    Overlapping or duplicate rules are kept as they are.
    """
    return tuple(sorted(rule_interval(rule) for rule in rules if break_applies(rule, day)))


def resolve_day_availability(day: date, off_days, rules) -> DayAvailability:
    is_off_day = any(off_day.date == day for off_day in off_days)
    if is_off_day:
        return DayAvailability(day=day, is_off_day=True)
    return DayAvailability(day=day, is_off_day=False, breaks=applicable_breaks(rules, day))


def load_day_availability(store, specialist_id: int, day: date) -> DayAvailability:
    if store.has_off_day(specialist_id, day):
        return DayAvailability(day=day, is_off_day=True)
    rules = store.list_breaks_for_day(specialist_id, day)
    return DayAvailability(day=day, is_off_day=False, breaks=applicable_breaks(rules, day))


def validate_break_rule(
    is_recurring: bool,
    day_of_week: int | None,
    specific_date: date | None,
) -> int | None:
    """Check a new break against the recurring/specific-date invariant.

    Returns the weekday to store: one-off breaks ignore ``day_of_week`` so it
    is dropped for them.
    """
    if is_recurring:
        if specific_date is not None:
            raise InvalidInterval('Recurring breaks cannot have a specific date.')
        if day_of_week is not None and not 0 <= day_of_week <= 6:
            raise InvalidInterval('Day of week must be between 0 (Sunday) and 6 (Saturday).')
        return day_of_week

    if specific_date is None:
        raise InvalidInterval('One-time breaks require a specific date.')
    return None
