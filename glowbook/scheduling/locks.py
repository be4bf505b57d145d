"""In-process serialization of booking writes per specialist and date.

A fixed pool of locks is striped by ``hash((specialist_id, day))`` so the
registry never grows. Two unrelated keys may share a stripe; that only costs
throughput.
"""

from contextlib import contextmanager
from datetime import date
from threading import Lock

LOCK_STRIPES = 64

_locks = [Lock() for _ in range(LOCK_STRIPES)]


def _stripe_for(specialist_id: int, day: date) -> Lock:
    return _locks[hash((specialist_id, day)) % LOCK_STRIPES]


@contextmanager
def specialist_day_lock(specialist_id: int, day: date):
    lock = _stripe_for(specialist_id, day)
    with lock:
        yield
