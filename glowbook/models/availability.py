"""Specialist availability model definitions."""

from datetime import datetime

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, String, Time, UniqueConstraint
from glowbook.database import Base


class SpecialistOffDay(Base):
    """A calendar date on which a specialist takes no bookings."""
    __tablename__ = "specialist_off_days"
    __table_args__ = (UniqueConstraint("specialist_id", "date", name="uq_off_day_specialist_date"),)

    id = Column(Integer, primary_key=True)
    specialist_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    date = Column(Date, nullable=False)
    reason = Column(String)
    created_at = Column(DateTime, default=datetime.now)


class SpecialistBreak(Base):
    """A recurring or date-specific break within a working day.

    Recurring breaks apply every week on ``day_of_week`` (0 = Sunday), or on
    every day when ``day_of_week`` is null. One-off breaks apply only on
    ``specific_date``.
    """
    __tablename__ = "specialist_breaks"

    id = Column(Integer, primary_key=True)
    specialist_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    day_of_week = Column(Integer, nullable=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    description = Column(String)
    is_recurring = Column(Boolean, default=True, nullable=False)
    specific_date = Column(Date, nullable=True)
    created_at = Column(DateTime, default=datetime.now)
