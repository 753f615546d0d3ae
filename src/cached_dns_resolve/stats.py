"""
Statistics registry for the DNS cache
"""
import time
from typing import Optional

from .types import DnsCacheStats


class StatsRegistry:
    """Counters owned by one DnsCacheResolver. dns_entries is filled in at snapshot time"""

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self.refreshed = 0
        self.hits = 0
        self.misses = 0
        self.idle_expired = 0
        self.errors = 0
        self.last_error: Optional[BaseException] = None
        self.last_error_at: Optional[float] = None

    def record_error(self, err: BaseException) -> None:
        self.errors += 1
        self.last_error = err
        self.last_error_at = time.time()

    def snapshot(self, dns_entries: int) -> DnsCacheStats:
        return DnsCacheStats(
            dns_entries=dns_entries,
            refreshed=self.refreshed,
            hits=self.hits,
            misses=self.misses,
            idle_expired=self.idle_expired,
            errors=self.errors,
            last_error=self.last_error,
            last_error_at=self.last_error_at,
        )
