from datetime import date, time

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, field_serializer, field_validator
from sqlalchemy.orm import Session

from glowbook.auth.dependencies import get_current_specialist
from glowbook.models.user import User
from glowbook.routes.booking_routes import BookingResponse
from glowbook.routes.common import ensure_database_ready, get_db, to_http_exception
from glowbook.scheduling.availability import validate_break_rule
from glowbook.scheduling.errors import NotFound, SchedulingError
from glowbook.scheduling.intervals import TimeInterval, format_time_of_day
from glowbook.scheduling.slots import list_available_slots
from glowbook.scheduling.store import SqlAlchemyBookingStore

router = APIRouter(tags=['availability'])

MAX_REASON_LENGTH = 200


def _normalize_optional_text(value: str | None) -> str | None:
    if value is None:
        return None

    normalized = value.strip()
    if not normalized:
        return None

    if len(normalized) > MAX_REASON_LENGTH:
        raise ValueError(f'Text must be {MAX_REASON_LENGTH} characters or fewer.')

    return normalized


class CreateOffDayRequest(BaseModel):
    date: date
    reason: str | None = None

    @field_validator('reason')
    @classmethod
    def validate_reason(cls, value: str | None) -> str | None:
        return _normalize_optional_text(value)


class BulkDeleteRequest(BaseModel):
    ids: list[int]


class CreateBreakRequest(BaseModel):
    day_of_week: int | None = None
    start_time: str
    end_time: str
    description: str | None = None
    is_recurring: bool = True
    specific_date: date | None = None

    @field_validator('description')
    @classmethod
    def validate_description(cls, value: str | None) -> str | None:
        return _normalize_optional_text(value)


class OffDayResponse(BaseModel):
    id: int
    date: date
    reason: str | None = None

    class Config:
        from_attributes = True


class BreakResponse(BaseModel):
    id: int
    day_of_week: int | None = None
    start_time: time
    end_time: time
    description: str | None = None
    is_recurring: bool
    specific_date: date | None = None

    class Config:
        from_attributes = True

    @field_serializer('start_time', 'end_time')
    def serialize_time(self, value: time) -> str:
        return format_time_of_day(value)


class AvailabilityResponse(BaseModel):
    off_days: list[OffDayResponse]
    breaks: list[BreakResponse]


class BulkDeleteResponse(BaseModel):
    deleted: int


def build_availability_response(store: SqlAlchemyBookingStore, specialist_id: int) -> AvailabilityResponse:
    return AvailabilityResponse(
        off_days=[OffDayResponse.model_validate(off_day) for off_day in store.list_off_days(specialist_id)],
        breaks=[BreakResponse.model_validate(break_rule) for break_rule in store.list_breaks(specialist_id)],
    )


@router.get('/me/availability', response_model=AvailabilityResponse)
def get_my_availability(
    current_user: User = Depends(get_current_specialist),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        return build_availability_response(SqlAlchemyBookingStore(db), current_user.id)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc


@router.get('/me/appointments', response_model=list[BookingResponse])
def list_my_appointments(
    current_user: User = Depends(get_current_specialist),
    db: Session = Depends(get_db),
):
    ensure_database_ready()

    try:
        bookings = SqlAlchemyBookingStore(db).list_specialist_bookings(current_user.id)
        return [BookingResponse.model_validate(booking) for booking in bookings]
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc


@router.post('/me/off-days', response_model=OffDayResponse, status_code=status.HTTP_201_CREATED)
def create_off_day(
    data: CreateOffDayRequest,
    current_user: User = Depends(get_current_specialist),
    db: Session = Depends(get_db),
):
    ensure_database_ready()
    store = SqlAlchemyBookingStore(db)

    try:
        off_day = store.add_off_day(current_user.id, data.date, data.reason)
        store.commit()
        return OffDayResponse.model_validate(off_day)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc


@router.delete('/me/off-days/{off_day_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_off_day(
    off_day_id: int,
    current_user: User = Depends(get_current_specialist),
    db: Session = Depends(get_db),
):
    ensure_database_ready()
    store = SqlAlchemyBookingStore(db)

    try:
        if not store.delete_off_day(current_user.id, off_day_id):
            raise NotFound('Off day not found.')
        store.commit()
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc


@router.post('/me/off-days/bulk-delete', response_model=BulkDeleteResponse)
def bulk_delete_off_days(
    data: BulkDeleteRequest,
    current_user: User = Depends(get_current_specialist),
    db: Session = Depends(get_db),
):
    ensure_database_ready()
    store = SqlAlchemyBookingStore(db)

    try:
        deleted = store.delete_off_days(current_user.id, data.ids)
        store.commit()
        return BulkDeleteResponse(deleted=deleted)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc


@router.post('/me/breaks', response_model=BreakResponse, status_code=status.HTTP_201_CREATED)
def create_break(
    data: CreateBreakRequest,
    current_user: User = Depends(get_current_specialist),
    db: Session = Depends(get_db),
):
    ensure_database_ready()
    store = SqlAlchemyBookingStore(db)

    try:
        interval = TimeInterval.parse(data.start_time, data.end_time)
        day_of_week = validate_break_rule(data.is_recurring, data.day_of_week, data.specific_date)

        break_rule = store.add_break(
            current_user.id,
            day_of_week=day_of_week,
            start_time=interval.start,
            end_time=interval.end,
            description=data.description,
            is_recurring=data.is_recurring,
            specific_date=data.specific_date,
        )
        store.commit()
        return BreakResponse.model_validate(break_rule)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc


@router.delete('/me/breaks/{break_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_break(
    break_id: int,
    current_user: User = Depends(get_current_specialist),
    db: Session = Depends(get_db),
):
    ensure_database_ready()
    store = SqlAlchemyBookingStore(db)

    try:
        if not store.delete_break(current_user.id, break_id):
            raise NotFound('Break not found.')
        store.commit()
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc


@router.get('/{specialist_id}/availability', response_model=AvailabilityResponse)
def get_specialist_availability(specialist_id: int, db: Session = Depends(get_db)):
    ensure_database_ready()
    store = SqlAlchemyBookingStore(db)

    try:
        if store.get_specialist(specialist_id) is None:
            raise NotFound('Specialist not found.')
        return build_availability_response(store, specialist_id)
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc


@router.get('/{specialist_id}/slots', response_model=list[str])
def list_slots(
    specialist_id: int,
    day: date = Query(..., alias='date'),
    service_id: int = Query(...),
    db: Session = Depends(get_db),
):
    ensure_database_ready()
    store = SqlAlchemyBookingStore(db)

    try:
        if store.get_specialist(specialist_id) is None:
            raise NotFound('Specialist not found.')

        service = store.get_service(service_id)
        if service is None:
            raise NotFound('Service not found.')

        slots = list_available_slots(store, specialist_id, day, service.duration_minutes)
        return [format_time_of_day(slot) for slot in slots]
    except SchedulingError as exc:
        raise to_http_exception(exc) from exc
