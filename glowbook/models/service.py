"""Service catalog model definitions."""

from sqlalchemy import Column, Integer, String, Numeric, ForeignKey
from glowbook.database import Base


class Service(Base):
    """A bookable service; only its duration matters to scheduling."""
    __tablename__ = "services"

    id = Column(Integer, primary_key=True)
    specialist_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    name = Column(String, nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2))
