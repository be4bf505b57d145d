import os
from datetime import date, time

import pytest
from fastapi import HTTPException
from pydantic import ValidationError
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')

from glowbook.database import Base  # noqa: E402
from glowbook.models.availability import SpecialistBreak, SpecialistOffDay  # noqa: E402
from glowbook.models.booking import Booking  # noqa: E402
from glowbook.models.service import Service  # noqa: E402
from glowbook.models.user import CLIENT_ROLE, SPECIALIST_ROLE, User  # noqa: E402
from glowbook.routes.booking_routes import (  # noqa: E402
    CreateBookingRequest,
    cancel_my_booking,
    create_booking,
    list_my_bookings,
    list_specialist_day_bookings,
)

MONDAY = date(2024, 6, 10)
TABLES = [
    User.__table__,
    Service.__table__,
    SpecialistOffDay.__table__,
    SpecialistBreak.__table__,
    Booking.__table__,
]


@pytest.fixture
def booking_db(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr('glowbook.routes.booking_routes.ensure_database_ready', lambda: None)

    engine = create_engine('sqlite:///:memory:')
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine, tables=TABLES)

    db = testing_session_local()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine, tables=list(reversed(TABLES)))


@pytest.fixture
def users(booking_db) -> dict[str, User]:
    people = {
        'specialist': User(email='stylist@glowbook.test', hashed_password='', role=SPECIALIST_ROLE),
        'client': User(email='client@example.com', hashed_password='', role=CLIENT_ROLE),
        'other': User(email='other@example.com', hashed_password='', role=CLIENT_ROLE),
    }
    booking_db.add_all(people.values())
    booking_db.commit()
    for person in people.values():
        booking_db.refresh(person)
    return people


def booking_request(specialist: User, start: str, end: str, **overrides) -> CreateBookingRequest:
    fields = {
        'specialist_id': specialist.id,
        'booking_date': MONDAY,
        'start_time': start,
        'end_time': end,
        'service': 'Haircut',
    }
    fields.update(overrides)
    return CreateBookingRequest(**fields)


def test_create_booking_request_normalizes_notes() -> None:
    request = CreateBookingRequest(
        specialist_id=1,
        booking_date=MONDAY,
        start_time='09:00',
        end_time='10:00',
        service=' Haircut ',
        notes='   ',
    )

    assert request.service == 'Haircut'
    assert request.notes is None


def test_create_booking_request_rejects_blank_service() -> None:
    with pytest.raises(ValidationError):
        CreateBookingRequest(specialist_id=1, booking_date=MONDAY, start_time='09:00', end_time='10:00', service=' ')


def test_create_booking_returns_confirmed_booking(booking_db, users) -> None:
    response = create_booking(
        data=booking_request(users['specialist'], '09:00', '10:00', notes='Trim only'),
        current_user=users['client'],
        db=booking_db,
    )

    payload = response.model_dump(mode='json')
    assert payload['status'] == 'Confirmed'
    assert payload['client_id'] == users['client'].id
    assert payload['booking_date'] == '2024-06-10'
    assert (payload['start_time'], payload['end_time']) == ('09:00', '10:00')
    assert payload['notes'] == 'Trim only'


def test_overlapping_booking_returns_conflict(booking_db, users) -> None:
    create_booking(
        data=booking_request(users['specialist'], '09:00', '10:00'),
        current_user=users['client'],
        db=booking_db,
    )

    with pytest.raises(HTTPException) as exception_info:
        create_booking(
            data=booking_request(users['specialist'], '09:30', '10:30'),
            current_user=users['other'],
            db=booking_db,
        )

    assert exception_info.value.status_code == 409
    assert exception_info.value.detail == 'This time slot is already booked.'

    back_to_back = create_booking(
        data=booking_request(users['specialist'], '10:00', '11:00'),
        current_user=users['other'],
        db=booking_db,
    )
    assert back_to_back.start_time == time(10, 0)


@pytest.mark.parametrize(
    ('start', 'end', 'error_detail'),
    [
        ('9am', '10:00', 'Invalid time format. Use HH:mm format.'),
        ('10:00', '09:00', 'Start time must be before end time.'),
        ('08:30', '09:30', 'Bookings must fall between 09:00 and 18:00.'),
        ('17:30', '18:30', 'Bookings must fall between 09:00 and 18:00.'),
        ('09:10', '09:40', 'Bookings must start on 15-minute boundaries.'),
    ],
)
def test_create_booking_rejects_invalid_intervals(booking_db, users, start, end, error_detail) -> None:
    with pytest.raises(HTTPException) as exception_info:
        create_booking(
            data=booking_request(users['specialist'], start, end),
            current_user=users['client'],
            db=booking_db,
        )

    assert exception_info.value.status_code == 400
    assert exception_info.value.detail == error_detail


def test_create_booking_checks_only_the_start_against_the_grid(booking_db, users) -> None:
    response = create_booking(
        data=booking_request(users['specialist'], '09:00', '09:50'),
        current_user=users['client'],
        db=booking_db,
    )

    assert (response.start_time, response.end_time) == (time(9, 0), time(9, 50))


def test_create_booking_on_off_day_is_rejected(booking_db, users) -> None:
    booking_db.add(SpecialistOffDay(specialist_id=users['specialist'].id, date=MONDAY))
    booking_db.commit()

    with pytest.raises(HTTPException) as exception_info:
        create_booking(
            data=booking_request(users['specialist'], '09:00', '10:00'),
            current_user=users['client'],
            db=booking_db,
        )

    assert exception_info.value.status_code == 400
    assert exception_info.value.detail == 'Specialist is not available on this date.'


def test_create_booking_with_unknown_specialist_is_not_found(booking_db, users) -> None:
    with pytest.raises(HTTPException) as exception_info:
        create_booking(
            data=booking_request(users['other'], '09:00', '10:00'),
            current_user=users['client'],
            db=booking_db,
        )

    assert exception_info.value.status_code == 404


def test_cancel_booking_frees_day_listing(booking_db, users) -> None:
    created = create_booking(
        data=booking_request(users['specialist'], '09:00', '10:00'),
        current_user=users['client'],
        db=booking_db,
    )
    before = list_specialist_day_bookings(specialist_id=users['specialist'].id, day=MONDAY, db=booking_db)

    cancel_my_booking(booking_id=created.id, current_user=users['client'], db=booking_db)
    cancel_my_booking(booking_id=created.id, current_user=users['client'], db=booking_db)
    after = list_specialist_day_bookings(specialist_id=users['specialist'].id, day=MONDAY, db=booking_db)

    assert [booking.id for booking in before] == [created.id]
    assert after == []
    assert list_my_bookings(current_user=users['client'], db=booking_db)[0].status == 'Cancelled'


def test_cancel_booking_of_another_client_is_not_found(booking_db, users) -> None:
    created = create_booking(
        data=booking_request(users['specialist'], '09:00', '10:00'),
        current_user=users['client'],
        db=booking_db,
    )

    with pytest.raises(HTTPException) as exception_info:
        cancel_my_booking(booking_id=created.id, current_user=users['other'], db=booking_db)

    assert exception_info.value.status_code == 404
    assert exception_info.value.detail == 'Booking not found.'


def test_list_my_bookings_is_newest_first(booking_db, users) -> None:
    for day, start, end in [(MONDAY, '09:00', '10:00'), (date(2024, 6, 11), '09:00', '10:00'), (MONDAY, '14:00', '15:00')]:
        create_booking(
            data=booking_request(users['specialist'], start, end, booking_date=day),
            current_user=users['client'],
            db=booking_db,
        )

    bookings = list_my_bookings(current_user=users['client'], db=booking_db)

    assert [(booking.booking_date, booking.start_time) for booking in bookings] == [
        (date(2024, 6, 11), time(9, 0)),
        (MONDAY, time(14, 0)),
        (MONDAY, time(9, 0)),
    ]
    assert list_my_bookings(current_user=users['other'], db=booking_db) == []
