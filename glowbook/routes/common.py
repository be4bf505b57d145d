from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError

from glowbook.database import SessionLocal, ensure_scheduling_schema
from glowbook.scheduling.errors import (
    AlreadyExists,
    BookingConflict,
    InvalidInterval,
    InvalidStatusTransition,
    NotFound,
    SchedulingError,
    SpecialistUnavailable,
    StorageFailure,
)
from glowbook.scheduling.store import DATABASE_UNAVAILABLE

ERROR_STATUS_CODES = {
    InvalidInterval: status.HTTP_400_BAD_REQUEST,
    SpecialistUnavailable: status.HTTP_400_BAD_REQUEST,
    AlreadyExists: status.HTTP_400_BAD_REQUEST,
    InvalidStatusTransition: status.HTTP_400_BAD_REQUEST,
    BookingConflict: status.HTTP_409_CONFLICT,
    NotFound: status.HTTP_404_NOT_FOUND,
    StorageFailure: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def ensure_database_ready() -> None:
    try:
        ensure_scheduling_schema()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE,
        ) from exc


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def to_http_exception(exc: SchedulingError) -> HTTPException:
    status_code = ERROR_STATUS_CODES.get(type(exc), status.HTTP_400_BAD_REQUEST)
    return HTTPException(status_code=status_code, detail=exc.message)
