import os
from datetime import time

from dotenv import load_dotenv

load_dotenv()


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_time(value: str | None, default: time) -> time:
    if value is None or not value.strip():
        return default
    hour, minute = value.strip().split(":", 1)
    return time(int(hour), int(minute))


def _get_list(value: str | None, default: list[str]) -> list[str]:
    if value is None:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]

APP_ENV = os.getenv("APP_ENV", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./glowbook.db")
DATABASE_ECHO = _get_bool(os.getenv("DATABASE_ECHO"), default=False)

CORS_ORIGINS = _get_list(os.getenv("CORS_ORIGINS"), ["http://localhost:5173"])

JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRES_MINUTES = int(os.getenv("JWT_EXPIRES_MINUTES", "60"))

# Salon-wide booking window; the slot grid starts at the opening time.
BUSINESS_OPEN_TIME = _get_time(os.getenv("BUSINESS_OPEN_TIME"), time(9, 0))
BUSINESS_CLOSE_TIME = _get_time(os.getenv("BUSINESS_CLOSE_TIME"), time(18, 0))
SLOT_GRANULARITY_MINUTES = int(os.getenv("SLOT_GRANULARITY_MINUTES", "15"))

MAX_BOOKING_NOTES_LENGTH = int(os.getenv("MAX_BOOKING_NOTES_LENGTH", "600"))


def validate_runtime_config() -> None:
    if APP_ENV.lower() == "production" and JWT_SECRET_KEY == "change-me":
        raise RuntimeError("JWT_SECRET_KEY must be set in production.")
    if BUSINESS_OPEN_TIME >= BUSINESS_CLOSE_TIME:
        raise RuntimeError("BUSINESS_OPEN_TIME must be earlier than BUSINESS_CLOSE_TIME.")
    if SLOT_GRANULARITY_MINUTES <= 0:
        raise RuntimeError("SLOT_GRANULARITY_MINUTES must be a positive number of minutes.")
