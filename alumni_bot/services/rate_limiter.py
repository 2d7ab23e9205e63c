# Role: Daily search quota per identity. Counters are keyed by (identity, UTC date), so they roll over at
# midnight without a cleanup job.

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Callable, Dict, Optional, Protocol, Tuple

import alumni_bot.config as config
from alumni_bot.utils.logger import get_logger

log = get_logger("rate_limiter")


class RateLimiter(Protocol):
    async def check_daily_limit(self, identity: str) -> bool: ...


def _utc_today() -> date:
    return datetime.now(timezone.utc).date()


class DailyRateLimiter:
    def __init__(self, limit: Optional[int] = None, today: Callable[[], date] = _utc_today) -> None:
        self.limit = limit
        self._today = today
        self._counts: Dict[Tuple[str, date], int] = {}

    async def check_daily_limit(self, identity: str) -> bool:
        # Counts this request when allowed; a refused request does not consume quota.
        limit = self.limit if self.limit is not None else config.DAILY_SEARCH_LIMIT
        day = self._today()

        # Drop yesterday's counters lazily.
        for key in [k for k in self._counts if k[1] != day]:
            del self._counts[key]

        key = (identity, day)
        used = self._counts.get(key, 0)
        if used >= limit:
            log.info("Daily search limit reached identity=%s used=%d limit=%d", identity, used, limit)
            return False

        self._counts[key] = used + 1
        return True

    def used_today(self, identity: str) -> int:
        return self._counts.get((identity, self._today()), 0)
