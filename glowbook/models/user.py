"""User model definitions."""

from sqlalchemy import Column, Integer, String
from glowbook.database import Base

CLIENT_ROLE = "client"
SPECIALIST_ROLE = "specialist"
ADMIN_ROLE = "admin"


class User(Base):
    """Represents an application user."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True)
    name = Column(String)
    hashed_password = Column(String)
    role = Column(String, default=CLIENT_ROLE)  # client/specialist/admin

    @property
    def is_specialist(self) -> bool:
        return self.role == SPECIALIST_ROLE
