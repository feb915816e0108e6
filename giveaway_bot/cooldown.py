from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from collections.abc import Callable
from datetime import datetime, timedelta

from .models import utc_now

log = logging.getLogger(__name__)

FAILURE_COOLDOWN = timedelta(seconds=30)


class CooldownTracker:
    """Remembers the last giveaway creation failure per guild.

    Entries older than the window are pruned on every write and the map never
    holds more than ``max_entries`` guilds (least recently failed go first).
    """

    def __init__(
        self,
        window: timedelta = FAILURE_COOLDOWN,
        *,
        max_entries: int = 10_000,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be positive")
        self._window = window
        self._max_entries = max_entries
        self._clock = clock
        self._lock = threading.Lock()
        self._latest_failure: OrderedDict[int, datetime] = OrderedDict()

    @property
    def window(self) -> timedelta:
        return self._window

    def is_on_cooldown(self, guild_id: int) -> bool:
        now = self._clock()
        with self._lock:
            latest = self._latest_failure.get(guild_id)
        return latest is not None and now - latest < self._window

    def record_failure(self, guild_id: int) -> None:
        now = self._clock()
        with self._lock:
            self._latest_failure[guild_id] = now
            self._latest_failure.move_to_end(guild_id)
            self._prune(now)
        log.info("Giveaway creation cooldown started for guild %s", guild_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._latest_failure)

    def _prune(self, now: datetime) -> None:
        # oldest failures sit at the front
        while self._latest_failure:
            guild_id, latest = next(iter(self._latest_failure.items()))
            expired = now - latest >= self._window
            if not expired and len(self._latest_failure) <= self._max_entries:
                break
            del self._latest_failure[guild_id]


__all__ = ["CooldownTracker", "FAILURE_COOLDOWN"]
