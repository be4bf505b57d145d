from threading import Lock

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import declarative_base, sessionmaker

from glowbook.core import config


def _connect_args(database_url: str) -> dict:
    if database_url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    config.DATABASE_URL,
    echo=config.DATABASE_ECHO,
    connect_args=_connect_args(config.DATABASE_URL),
)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_scheduling_schema_checked = False

SCHEDULING_INDEXES = {
    'bookings': [
        'CREATE INDEX IF NOT EXISTS idx_bookings_specialist_day '
        'ON bookings(specialist_id, booking_date, status)',
        'CREATE INDEX IF NOT EXISTS idx_bookings_client_day ON bookings(client_id, booking_date)',
    ],
    'specialist_off_days': [
        'CREATE INDEX IF NOT EXISTS idx_off_days_specialist_date ON specialist_off_days(specialist_id, date)',
    ],
    'specialist_breaks': [
        'CREATE INDEX IF NOT EXISTS idx_breaks_specialist_recurring '
        'ON specialist_breaks(specialist_id, is_recurring, specific_date)',
    ],
}


def ensure_scheduling_schema() -> None:
    global _scheduling_schema_checked

    if _scheduling_schema_checked:
        return

    with _schema_lock:
        if _scheduling_schema_checked:
            return

        existing_tables = set(inspect(engine).get_table_names())

        with engine.begin() as connection:
            for table_name, statements in SCHEDULING_INDEXES.items():
                if table_name not in existing_tables:
                    continue
                for statement in statements:
                    connection.execute(text(statement))

        _scheduling_schema_checked = True
