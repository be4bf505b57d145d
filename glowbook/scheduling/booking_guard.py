"""Atomic reservation and cancellation of bookings.

Both operations run under the per specialist/date lock and inside one store
transaction, so two overlapping reservations for the same specialist and day
can never both commit.
"""

import logging
from datetime import date

from glowbook.models.booking import Booking, BookingStatus
from glowbook.scheduling.availability import load_day_availability
from glowbook.scheduling.errors import (
    BookingConflict,
    InvalidStatusTransition,
    NotFound,
    SpecialistUnavailable,
)
from glowbook.scheduling.intervals import TimeInterval, overlaps
from glowbook.scheduling.locks import specialist_day_lock

logger = logging.getLogger(__name__)


def find_conflict(requested: TimeInterval, bookings) -> Booking | None:
    for booking in bookings:
        if overlaps(requested, TimeInterval(booking.start_time, booking.end_time)):
            return booking
    return None


def reserve_booking(
    store,
    *,
    client_id: int,
    specialist_id: int,
    booking_date: date,
    interval: TimeInterval,
    service_name: str,
    notes: str | None = None,
) -> Booking:
    """Create a confirmed booking or raise.

    Off-days and breaks are re-checked inside the locked step, so a break
    added after the client listed slots still rejects the reservation.

    Raises:
        NotFound: unknown specialist
        SpecialistUnavailable: off-day, or the interval overlaps a break
        BookingConflict: the interval overlaps a confirmed booking
        StorageFailure: the transaction could not complete
    """
    with specialist_day_lock(specialist_id, booking_date):
        try:
            specialist = store.get_specialist(specialist_id, for_update=True)
            if specialist is None:
                raise NotFound('Specialist not found.')

            availability = load_day_availability(store, specialist_id, booking_date)
            if availability.is_off_day:
                raise SpecialistUnavailable('Specialist is not available on this date.')
            for break_interval in availability.breaks:
                if overlaps(interval, break_interval):
                    raise SpecialistUnavailable(f'Specialist is on a break from {break_interval}.')

            existing = store.list_confirmed_bookings(specialist_id, booking_date)
            conflicting = find_conflict(interval, existing)
            if conflicting is not None:
                raise BookingConflict('This time slot is already booked.')

            booking = store.add_booking(
                client_id=client_id,
                specialist_id=specialist_id,
                booking_date=booking_date,
                start_time=interval.start,
                end_time=interval.end,
                service_name=service_name,
                notes=notes,
            )
            store.commit()
        except (NotFound, SpecialistUnavailable, BookingConflict) as exc:
            store.rollback()
            logger.info(
                'Rejected booking for specialist %s on %s %s: %s',
                specialist_id, booking_date, interval, exc.message,
            )
            raise

    logger.info(
        'Booking %s confirmed for client %s with specialist %s on %s %s',
        booking.id, client_id, specialist_id, booking_date, interval,
    )
    return booking


def cancel_booking(store, *, booking_id: int, client_id: int) -> Booking:
    """Move a confirmed booking to Cancelled.

    Cancelling an already cancelled booking is a no-op. Lookups are scoped to
    the client, so another client's booking reads as not found.
    """
    booking = store.get_client_booking(booking_id, client_id)
    if booking is None:
        raise NotFound('Booking not found.')

    with specialist_day_lock(booking.specialist_id, booking.booking_date):
        store.refresh(booking)
        if booking.status == BookingStatus.CANCELLED.value:
            return booking
        if booking.status != BookingStatus.CONFIRMED.value:
            raise InvalidStatusTransition(f'A {booking.status.lower()} booking cannot be cancelled.')

        booking.status = BookingStatus.CANCELLED.value
        store.commit()

    logger.info('Booking %s cancelled by client %s', booking_id, client_id)
    return booking
