# Role: In-memory session store. Owns lifecycle of Session objects:
# create/get by phone, refresh last-seen, and cleanup expired sessions.

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

import alumni_bot.config as config
from alumni_bot.models.session import Session


class StateManager:
    def __init__(self, session_ttl_minutes: Optional[int] = None) -> None:
        self._sessions: Dict[str, Session] = {}
        self._ttl = timedelta(minutes=session_ttl_minutes or config.SESSION_TTL_MINUTES)

    def get(self, phone: str) -> Optional[Session]:
        return self._sessions.get(phone)

    def get_or_create(self, phone: str) -> Session:
        # Reuse existing session or initialize a fresh one.
        session = self._sessions.get(phone)
        if session is None:
            session = Session(phone=phone)
            self._sessions[phone] = session
        return session

    def reset(self, phone: str) -> Session:
        self._sessions.pop(phone, None)
        return self.get_or_create(phone)

    def cleanup_expired(self) -> int:
        # Role: drop inactive sessions to avoid unbounded growth (best for long-running servers).
        now = datetime.now(timezone.utc)
        to_delete = [p for p, s in self._sessions.items() if (now - s.updated_at) > self._ttl]
        for p in to_delete:
            del self._sessions[p]
        return len(to_delete)
