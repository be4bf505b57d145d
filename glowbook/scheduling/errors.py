"""Errors raised by the scheduling core.

The HTTP layer maps each of these onto a status code; nothing in this package
knows about HTTP.
"""


class SchedulingError(Exception):
    """Base class for scheduling failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInterval(SchedulingError):
    """A time range or time-of-day value is malformed or empty."""


class SpecialistUnavailable(SchedulingError):
    """The specialist is off for the day or on a break at the requested time."""


class BookingConflict(SchedulingError):
    """The requested interval overlaps an existing confirmed booking."""


class NotFound(SchedulingError):
    """The entity does not exist or does not belong to the requesting user."""


class AlreadyExists(SchedulingError):
    """An equivalent entity is already recorded, e.g. a second off-day on one date."""


class InvalidStatusTransition(SchedulingError):
    """The booking's current status does not allow the requested change."""


class StorageFailure(SchedulingError):
    """The storage transaction could not complete; nothing was written."""
