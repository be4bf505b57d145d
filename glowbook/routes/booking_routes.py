from datetime import date, datetime, time

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, field_serializer, field_validator
from sqlalchemy.orm import Session

from glowbook.auth.dependencies import get_current_user
from glowbook.core import config
from glowbook.models.user import User
from glowbook.routes.common import ensure_database_ready, get_db, to_http_exception
from glowbook.scheduling.booking_guard import cancel_booking, reserve_booking
from glowbook.scheduling.errors import InvalidInterval, SchedulingError
from glowbook.scheduling.intervals import TimeInterval, format_time_of_day
from glowbook.scheduling.slots import SlotPolicy, get_slot_policy
from glowbook.scheduling.store import SqlAlchemyBookingStore

router = APIRouter(tags=['bookings'])


class CreateBookingRequest(BaseModel):
    specialist_id: int
    booking_date: date
    start_time: str
    end_time: str
    service: str
    notes: str | None = None

    @field_validator('service')
    @classmethod
    def validate_service(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Service is required.')
        return normalized

    @field_validator('notes')
    @classmethod
    def validate_notes(cls, value: str | None) -> str | None:
        if value is None:
            return None

        normalized = value.strip()
        if not normalized:
            return None

        if len(normalized) > config.MAX_BOOKING_NOTES_LENGTH:
            raise ValueError(f'Notes must be {config.MAX_BOOKING_NOTES_LENGTH} characters or fewer.')

        return normalized


class BookingResponse(BaseModel):
    id: int
    client_id: int
    specialist_id: int
    booking_date: date
    start_time: time
    end_time: time
    service_name: str
    notes: str | None = None
    status: str
    created_at: datetime | None = None

    class Config:
        from_attributes = True

    @field_serializer('start_time', 'end_time')
    def serialize_time(self, value: time) -> str:
        return format_time_of_day(value)


def validate_requested_interval(interval: TimeInterval, policy: SlotPolicy) -> None:
    if not policy.contains(interval):
        raise InvalidInterval(
            f'Bookings must fall between {format_time_of_day(policy.open_time)} '
            f'and {format_time_of_day(policy.close_time)}.'
        )

    if not policy.is_on_grid(interval.start):
        raise InvalidInterval(f'Bookings must start on {policy.granularity_minutes}-minute boundaries.')


@router.get('', response_model=list[BookingResponse])
def list_my_bookings(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        bookings = SqlAlchemyBookingStore(db).list_client_bookings(current_user.id)
        return [BookingResponse.model_validate(booking) for booking in bookings]
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc


@router.get('/specialist/{specialist_id}/date/{day}', response_model=list[BookingResponse])
def list_specialist_day_bookings(specialist_id: int, day: date, db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        bookings = SqlAlchemyBookingStore(db).list_confirmed_bookings(specialist_id, day)
        return [BookingResponse.model_validate(booking) for booking in bookings]
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc


@router.post('', response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
def create_booking(
    data: CreateBookingRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        interval = TimeInterval.parse(data.start_time, data.end_time)
        validate_requested_interval(interval, get_slot_policy())

        booking = reserve_booking(
            SqlAlchemyBookingStore(db),
            client_id=current_user.id,
            specialist_id=data.specialist_id,
            booking_date=data.booking_date,
            interval=interval,
            service_name=data.service,
            notes=data.notes,
        )
        return BookingResponse.model_validate(booking)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc


@router.delete('/{booking_id}', status_code=status.HTTP_204_NO_CONTENT)
def cancel_my_booking(
    booking_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        cancel_booking(SqlAlchemyBookingStore(db), booking_id=booking_id, client_id=current_user.id)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc
