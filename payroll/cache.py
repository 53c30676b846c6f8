# ==============================================================================
# payroll/cache.py
# ------------------------------------------------------------------------------
# A small in-memory cache with per-entry time-to-live.
# One instance is built by the application factory and handed to whichever
# layer wants memoization. Entries are best-effort: two callers missing the
# same key at once both recompute.
# ==============================================================================

import threading
import time

DEFAULT_TTL_SECONDS = 15 * 60


class TTLCache:
    """Key/value store whose entries expire `ttl` seconds after they are set."""

    def __init__(self, default_ttl=DEFAULT_TTL_SECONDS, clock=time.monotonic):
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def set(self, key, value, ttl=None):
        expires_at = self._clock() + (self.default_ttl if ttl is None else ttl)
        with self._lock:
            self._entries[key] = (value, expires_at)

    def get(self, key, default=None):
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return default
            value, expires_at = entry
            if now > expires_at:
                del self._entries[key]
                self._misses += 1
                return default
            self._hits += 1
            return value

    def has(self, key):
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return False
            if now > entry[1]:
                del self._entries[key]
                return False
            return True

    def clear(self, key=None):
        with self._lock:
            if key is None:
                self._entries.clear()
            else:
                self._entries.pop(key, None)

    def keys(self):
        """Live keys; expired entries are dropped on the way."""
        now = self._clock()
        with self._lock:
            expired = [key for key, (_, expires_at) in self._entries.items() if now > expires_at]
            for key in expired:
                del self._entries[key]
            return list(self._entries)

    def stats(self):
        with self._lock:
            total = self._hits + self._misses
            return {
                'entries': len(self._entries),
                'hits': self._hits,
                'misses': self._misses,
                'hit_rate': self._hits / total if total else 0.0,
            }


# Cache keys
def sheet_key(sheet_name):
    return f"sheet:{sheet_name}"


def riders_key(supervisor_code):
    return f"riders:{supervisor_code}"
