import threading
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional, Tuple

from logging_config import get_logger

logger = get_logger("dedup")

DedupKey = Tuple[str, str, str]


class DeduplicationCache:
    """
    Remembers when each (user, type, title) last fired and suppresses repeats
    while less than `window` has elapsed. Process-local; lost on restart.

    Owned by one Scheduler. Every replica keeps its own cache, so running
    several replicas can still deliver duplicates.
    """

    def __init__(self, window: timedelta = timedelta(minutes=60), clock: Callable[[], datetime] = datetime.now):
        self.window = window
        self._clock = clock
        self._last_fired: Dict[DedupKey, datetime] = {}
        self._last_eviction: Optional[datetime] = None
        self._lock = threading.Lock()

    def should_suppress(self, user_id: str, notification_type: str, title: str, now: Optional[datetime] = None) -> bool:
        """Check-and-record: False (and the key is stamped) the first time in a window, True afterwards."""
        now = now or self._clock()
        key = (user_id, notification_type, title)
        with self._lock:
            self._evict_if_due(now)
            last = self._last_fired.get(key)
            if last is not None and now - last < self.window:
                return True
            self._last_fired[key] = now
            return False

    def is_suppressed(self, user_id: str, notification_type: str, title: str, now: Optional[datetime] = None) -> bool:
        """Check only. The key is stamped separately with mark_fired() once the reminder is stored."""
        now = now or self._clock()
        with self._lock:
            self._evict_if_due(now)
            last = self._last_fired.get((user_id, notification_type, title))
            return last is not None and now - last < self.window

    def mark_fired(self, user_id: str, notification_type: str, title: str, now: Optional[datetime] = None):
        now = now or self._clock()
        with self._lock:
            self._last_fired[(user_id, notification_type, title)] = now

    def clear(self):
        with self._lock:
            self._last_fired.clear()
            self._last_eviction = None

    def __len__(self):
        return len(self._last_fired)

    def _evict_if_due(self, now: datetime):
        # Caller holds the lock. Sweeps at most once per window.
        if self._last_eviction is not None and now - self._last_eviction < self.window:
            return
        cutoff = now - 2 * self.window
        stale = [key for key, fired in self._last_fired.items() if fired < cutoff]
        for key in stale:
            del self._last_fired[key]
        self._last_eviction = now
        if stale:
            logger.debug(f"Evicted {len(stale)} expired dedup entries", extra={"data": {"remaining": len(self._last_fired)}})
