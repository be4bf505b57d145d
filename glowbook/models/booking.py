"""Booking model definitions."""

from datetime import datetime
from enum import Enum

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, Time
from glowbook.database import Base


class BookingStatus(str, Enum):
    CONFIRMED = "Confirmed"
    CANCELLED = "Cancelled"
    COMPLETED = "Completed"


class Booking(Base):
    """Represents a client's reservation with a specialist."""
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True)
    client_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    specialist_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    booking_date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    service_name = Column(String, nullable=False)
    notes = Column(String)
    status = Column(String, default=BookingStatus.CONFIRMED.value, nullable=False)
    created_at = Column(DateTime, default=datetime.now)
