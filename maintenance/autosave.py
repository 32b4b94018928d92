import logging
from dataclasses import dataclass

from django.utils import timezone

from .conf import get_setting
from .exceptions import PersistenceError

logger = logging.getLogger(__name__)

THRESHOLD = 'threshold'
MANUAL = 'manual'
COMPLETE = 'complete'
EXIT = 'exit'


@dataclass
class FlushResult:
    ok: bool
    reason: str
    written: int = 0
    error: str = None

    def as_dict(self):
        return {'ok': self.ok, 'reason': self.reason, 'written': self.written, 'error': self.error}


class AutoSaveScheduler:
    """
    Draft persistence: batch threshold plus explicit flushes.

    A flush always writes the *whole* current snapshot through ``writer``, so
    overlapping flushes are commutative and an upserting writer makes them
    idempotent. The pending count is measured against the store's mutation
    counter as it was when the last successful flush took its snapshot;
    failed flushes leave it untouched so the next trigger retries.
    """

    def __init__(self, writer, threshold=None):
        self.writer = writer
        self.threshold = threshold or get_setting('AUTOSAVE_THRESHOLD')
        self.in_flight = 0
        self.last_saved_at = None
        self.last_error = None
        self._baseline = 0

    def pending(self, store):
        return store.mutations - self._baseline

    @property
    def saving(self):
        return self.in_flight > 0

    def mutation_recorded(self, store):
        """Call after every mutation. Returns a FlushResult when one ran."""
        if self.pending(store) >= self.threshold:
            return self.flush(store, reason=THRESHOLD)
        return None

    def flush(self, store, reason=MANUAL):
        mark = store.mutations
        snapshot = store.snapshot()
        self.in_flight += 1
        try:
            self.writer(snapshot)
        except PersistenceError as exc:
            self.last_error = str(exc)
            logger.warning("Answer flush (%s) failed, %d mutations kept pending: %s",
                           reason, self.pending(store), exc)
            return FlushResult(ok=False, reason=reason, error=str(exc))
        finally:
            self.in_flight -= 1

        self._baseline = max(self._baseline, mark)
        self.last_saved_at = timezone.now()
        self.last_error = None
        logger.debug("Answer flush (%s) wrote %d answers", reason, len(snapshot))
        return FlushResult(ok=True, reason=reason, written=len(snapshot))

    def flush_on_exit(self, store):
        """Best-effort final flush; losing the last few mutations is acceptable."""
        if self.pending(store) <= 0:
            return None
        try:
            return self.flush(store, reason=EXIT)
        except Exception as exc:
            logger.exception("Final flush on exit failed")
            return FlushResult(ok=False, reason=EXIT, error=str(exc))
