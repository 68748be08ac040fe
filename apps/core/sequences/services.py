import logging
import time

from django.db import IntegrityError, OperationalError, connection, transaction

from .models import Counter

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 5
RETRY_DELAY_SECONDS = 0.05


def _locked_counter(key):
    counter = Counter.objects.select_for_update().filter(key=key).first()
    if counter is not None:
        return counter
    try:
        with transaction.atomic():
            return Counter.objects.create(key=key, current=0)
    except IntegrityError:
        # Another transaction created the row first.
        return Counter.objects.select_for_update().get(key=key)


def _with_retry(key, update):
    """Run ``update`` on the locked counter in its own transaction, retrying lock contention.

    Inside a caller's transaction a failed attempt cannot be replayed, so the
    error propagates and the caller's transaction is rolled back as a whole.
    """
    for attempt in range(1, MAX_ATTEMPTS + 1):
        try:
            with transaction.atomic():
                return update(_locked_counter(key))
        except OperationalError:
            if connection.in_atomic_block or attempt == MAX_ATTEMPTS:
                raise
            logger.warning('Counter %s was locked on attempt %s; retrying.', key, attempt)
            time.sleep(RETRY_DELAY_SECONDS * attempt)


def _increment(counter):
    counter.current += 1
    counter.save(update_fields=['current', 'updated_at'])
    return counter.current


def next_sequence(key: str) -> int:
    """Read, increment and write the counter for ``key`` under a row lock."""
    return _with_retry(key, _increment)


def peek_sequence(key: str) -> int:
    return Counter.objects.filter(key=key).values_list('current', flat=True).first() or 0


def ensure_counter_at_least(key: str, value: int) -> int:
    """Raise the counter for ``key`` to ``value`` if it is behind; never lowers it."""

    def raise_to(counter):
        if counter.current < value:
            counter.current = value
            counter.save(update_fields=['current', 'updated_at'])
        return counter.current

    return _with_retry(key, raise_to)
