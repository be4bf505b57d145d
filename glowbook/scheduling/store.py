"""Storage port for scheduling data and its SQLAlchemy implementation.

Write methods only flush; the caller owns the transaction and decides when
to ``commit``. Any database error rolls the session back and surfaces as
``StorageFailure``, so a failed step never leaves partial state behind.
"""

import logging
from contextlib import contextmanager
from datetime import date, datetime, time
from typing import Iterable, Protocol

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from glowbook.models.availability import SpecialistBreak, SpecialistOffDay
from glowbook.models.booking import Booking, BookingStatus
from glowbook.models.service import Service
from glowbook.models.user import SPECIALIST_ROLE, User
from glowbook.scheduling.errors import AlreadyExists, StorageFailure

logger = logging.getLogger(__name__)

DATABASE_UNAVAILABLE = 'Database unavailable. Verify DATABASE_URL and database credentials.'


class BookingStore(Protocol):
    def get_specialist(self, specialist_id: int, for_update: bool = False) -> User | None: ...

    def get_service(self, service_id: int) -> Service | None: ...

    def has_off_day(self, specialist_id: int, day: date) -> bool: ...

    def list_off_days(self, specialist_id: int) -> list[SpecialistOffDay]: ...

    def add_off_day(self, specialist_id: int, day: date, reason: str | None) -> SpecialistOffDay: ...

    def delete_off_day(self, specialist_id: int, off_day_id: int) -> bool: ...

    def delete_off_days(self, specialist_id: int, off_day_ids: Iterable[int]) -> int: ...

    def list_breaks(self, specialist_id: int) -> list[SpecialistBreak]: ...

    def list_breaks_for_day(self, specialist_id: int, day: date) -> list[SpecialistBreak]: ...

    def add_break(self, specialist_id: int, **fields) -> SpecialistBreak: ...

    def delete_break(self, specialist_id: int, break_id: int) -> bool: ...

    def list_confirmed_bookings(self, specialist_id: int, day: date) -> list[Booking]: ...

    def list_client_bookings(self, client_id: int) -> list[Booking]: ...

    def list_specialist_bookings(self, specialist_id: int) -> list[Booking]: ...

    def get_client_booking(self, booking_id: int, client_id: int) -> Booking | None: ...

    def add_booking(self, **fields) -> Booking: ...

    def refresh(self, entity) -> None: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


class SqlAlchemyBookingStore:
    """``BookingStore`` backed by a SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _storage_errors(self):
        try:
            yield
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception('Scheduling storage operation failed')
            raise StorageFailure(DATABASE_UNAVAILABLE) from exc

    def _begin_write_transaction(self) -> None:
        # SQLite has no row locks; take the database write lock up front so a
        # second process blocks until this transaction ends.
        connection = self.db.connection()
        if connection.dialect.name != 'sqlite':
            return
        if not connection.connection.driver_connection.in_transaction:
            connection.exec_driver_sql('BEGIN IMMEDIATE')

    def get_specialist(self, specialist_id: int, for_update: bool = False) -> User | None:
        """Load a specialist. ``for_update`` serializes writers on that specialist.

        PostgreSQL takes a row lock. SQLite takes the database write lock.
        """
        with self._storage_errors():
            query = self.db.query(User).filter(
                User.id == specialist_id,
                User.role == SPECIALIST_ROLE,
            )
            if for_update:
                self._begin_write_transaction()
                query = query.with_for_update()
            return query.first()

    def get_service(self, service_id: int) -> Service | None:
        with self._storage_errors():
            return self.db.query(Service).filter(Service.id == service_id).first()

    def has_off_day(self, specialist_id: int, day: date) -> bool:
        with self._storage_errors():
            return self.db.query(SpecialistOffDay.id).filter(
                SpecialistOffDay.specialist_id == specialist_id,
                SpecialistOffDay.date == day,
            ).first() is not None

    def list_off_days(self, specialist_id: int) -> list[SpecialistOffDay]:
        with self._storage_errors():
            return self.db.query(SpecialistOffDay).filter(
                SpecialistOffDay.specialist_id == specialist_id,
            ).order_by(SpecialistOffDay.date.asc()).all()

    def add_off_day(self, specialist_id: int, day: date, reason: str | None) -> SpecialistOffDay:
        off_day = SpecialistOffDay(
            specialist_id=specialist_id,
            date=day,
            reason=reason,
            created_at=datetime.now(),
        )
        try:
            self.db.add(off_day)
            self.db.flush()
        except IntegrityError as exc:
            self.db.rollback()
            raise AlreadyExists('Off day already exists for this date.') from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception('Failed to add off day for specialist %s', specialist_id)
            raise StorageFailure(DATABASE_UNAVAILABLE) from exc
        return off_day

    def delete_off_day(self, specialist_id: int, off_day_id: int) -> bool:
        with self._storage_errors():
            off_day = self.db.query(SpecialistOffDay).filter(
                SpecialistOffDay.id == off_day_id,
                SpecialistOffDay.specialist_id == specialist_id,
            ).first()
            if off_day is None:
                return False
            self.db.delete(off_day)
            self.db.flush()
            return True

    def delete_off_days(self, specialist_id: int, off_day_ids: Iterable[int]) -> int:
        ids = set(off_day_ids)
        if not ids:
            return 0
        with self._storage_errors():
            off_days = self.db.query(SpecialistOffDay).filter(
                SpecialistOffDay.id.in_(ids),
                SpecialistOffDay.specialist_id == specialist_id,
            ).all()
            for off_day in off_days:
                self.db.delete(off_day)
            self.db.flush()
            return len(off_days)

    def list_breaks(self, specialist_id: int) -> list[SpecialistBreak]:
        with self._storage_errors():
            return self.db.query(SpecialistBreak).filter(
                SpecialistBreak.specialist_id == specialist_id,
            ).order_by(
                SpecialistBreak.day_of_week.asc(),
                SpecialistBreak.start_time.asc(),
            ).all()

    def list_breaks_for_day(self, specialist_id: int, day: date) -> list[SpecialistBreak]:
        with self._storage_errors():
            return self.db.query(SpecialistBreak).filter(
                SpecialistBreak.specialist_id == specialist_id,
                or_(
                    SpecialistBreak.is_recurring.is_(True),
                    SpecialistBreak.specific_date == day,
                ),
            ).all()

    def add_break(
        self,
        specialist_id: int,
        *,
        day_of_week: int | None,
        start_time: time,
        end_time: time,
        description: str | None,
        is_recurring: bool,
        specific_date: date | None,
    ) -> SpecialistBreak:
        break_rule = SpecialistBreak(
            specialist_id=specialist_id,
            day_of_week=day_of_week,
            start_time=start_time,
            end_time=end_time,
            description=description,
            is_recurring=is_recurring,
            specific_date=specific_date,
            created_at=datetime.now(),
        )
        with self._storage_errors():
            self.db.add(break_rule)
            self.db.flush()
        return break_rule

    def delete_break(self, specialist_id: int, break_id: int) -> bool:
        with self._storage_errors():
            break_rule = self.db.query(SpecialistBreak).filter(
                SpecialistBreak.id == break_id,
                SpecialistBreak.specialist_id == specialist_id,
            ).first()
            if break_rule is None:
                return False
            self.db.delete(break_rule)
            self.db.flush()
            return True

    def list_confirmed_bookings(self, specialist_id: int, day: date) -> list[Booking]:
        with self._storage_errors():
            return self.db.query(Booking).filter(
                Booking.specialist_id == specialist_id,
                Booking.booking_date == day,
                Booking.status == BookingStatus.CONFIRMED.value,
            ).order_by(Booking.start_time.asc()).all()

    def list_client_bookings(self, client_id: int) -> list[Booking]:
        with self._storage_errors():
            return self.db.query(Booking).filter(
                Booking.client_id == client_id,
            ).order_by(Booking.booking_date.desc(), Booking.start_time.desc()).all()

    def list_specialist_bookings(self, specialist_id: int) -> list[Booking]:
        with self._storage_errors():
            return self.db.query(Booking).filter(
                Booking.specialist_id == specialist_id,
            ).order_by(Booking.booking_date.desc(), Booking.start_time.asc()).all()

    def get_client_booking(self, booking_id: int, client_id: int) -> Booking | None:
        with self._storage_errors():
            return self.db.query(Booking).filter(
                Booking.id == booking_id,
                Booking.client_id == client_id,
            ).first()

    def add_booking(
        self,
        *,
        client_id: int,
        specialist_id: int,
        booking_date: date,
        start_time: time,
        end_time: time,
        service_name: str,
        notes: str | None,
    ) -> Booking:
        booking = Booking(
            client_id=client_id,
            specialist_id=specialist_id,
            booking_date=booking_date,
            start_time=start_time,
            end_time=end_time,
            service_name=service_name,
            notes=notes,
            status=BookingStatus.CONFIRMED.value,
            created_at=datetime.now(),
        )
        with self._storage_errors():
            self.db.add(booking)
            self.db.flush()
        return booking

    def refresh(self, entity) -> None:
        with self._storage_errors():
            self.db.refresh(entity)

    def commit(self) -> None:
        with self._storage_errors():
            self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
