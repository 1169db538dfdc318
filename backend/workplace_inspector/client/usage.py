"""Daily free-analysis quota kept in device-local storage.

This is a soft limiter: clearing the store resets it. It gates calls from
this client only; the server does not enforce it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable

from .storage import KeyValueStore, load_json, save_json

logger = logging.getLogger(__name__)

DAILY_KEY = "wi_daily_usage_v1"
DAILY_FREE_LIMIT = 2

UPGRADE_MESSAGE = "You have used all free analyses for today. Upgrade to keep analyzing, or come back tomorrow."


class UsageLimitReached(Exception):
    """Raised instead of calling the endpoint once today's quota is used up."""

    def __init__(self, count: int, limit: int) -> None:
        super().__init__(UPGRADE_MESSAGE)
        self.count = count
        self.limit = limit
        self.message = UPGRADE_MESSAGE


@dataclass(frozen=True)
class DailyUsage:
    date: str
    count: int

    def to_dict(self) -> dict:
        return {"date": self.date, "count": self.count}


def today_key(today: date | None = None) -> str:
    """Local calendar day as ``YYYY-MM-DD``."""
    return (today or date.today()).isoformat()


class UsageGate:
    def __init__(
        self,
        store: KeyValueStore,
        *,
        limit: int = DAILY_FREE_LIMIT,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._store = store
        self.limit = limit
        self._today = today

    def _read(self) -> DailyUsage:
        t = today_key(self._today())
        data = load_json(self._store, DAILY_KEY, {"date": t, "count": 0})
        if not isinstance(data, dict):
            return DailyUsage(date=t, count=0)
        try:
            count = max(0, int(data.get("count") or 0))
        except (TypeError, ValueError):
            count = 0
        return DailyUsage(date=str(data.get("date") or t), count=count)

    def load(self) -> DailyUsage:
        """Current usage for today; a stale day is reset to zero and persisted."""
        t = today_key(self._today())
        usage = self._read()
        if usage.date != t:
            usage = DailyUsage(date=t, count=0)
            save_json(self._store, DAILY_KEY, usage.to_dict())
        return usage

    def remaining_today(self) -> int:
        return max(0, self.limit - self.load().count)

    def is_exhausted(self) -> bool:
        return self.load().count >= self.limit

    def check(self) -> None:
        """Raise ``UsageLimitReached`` when no analyses are left today."""
        usage = self.load()
        if usage.count >= self.limit:
            logger.info("Daily limit reached (%d/%d)", usage.count, self.limit)
            raise UsageLimitReached(usage.count, self.limit)

    def record_success(self) -> DailyUsage:
        """Count one completed analysis for today."""
        t = today_key(self._today())
        current = self._read()
        if current.date == t:
            nxt = DailyUsage(date=t, count=current.count + 1)
        else:
            nxt = DailyUsage(date=t, count=1)
        save_json(self._store, DAILY_KEY, nxt.to_dict())
        return nxt
