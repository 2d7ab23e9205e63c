# alumni_bot/core/flow_controller.py
# Role: Orchestrator for one conversation turn. It glues together:
# per-phone serialization, session lookup, user lookup, intent classification, and the state machine.

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Dict, Optional

import alumni_bot.config as config
from alumni_bot.core.search_pipeline import SearchPipeline
from alumni_bot.core.state_machine import CasualResponder, ProfileStateMachine
from alumni_bot.core.state_manager import StateManager
from alumni_bot.llm.ai_service import AITextService
from alumni_bot.llm.casual_responder import CasualResponder as LLMCasualResponder
from alumni_bot.llm.intent_classifier import IntentClassifier
from alumni_bot.models.intent import IntentResult
from alumni_bot.services.analytics import AnalyticsSink, LoggingAnalyticsSink
from alumni_bot.services.rate_limiter import DailyRateLimiter, RateLimiter
from alumni_bot.services.user_store import InMemoryUserStore, UserStore
from alumni_bot.utils.logger import get_logger

log = get_logger("flow")

NOT_REGISTERED_MESSAGE = (
    "👋 Hi! This number isn't registered in the JY Alumni network yet.\n\n"
    "Please contact the alumni team to get your account set up."
)


@dataclass(frozen=True)
class TurnResponse:
    phone: str
    reply: str
    waiting_for: Optional[str]


class FlowController:
    def __init__(
        self,
        store: Optional[UserStore] = None,
        state_manager: Optional[StateManager] = None,
        intent_classifier: Optional[IntentClassifier] = None,
        ai: Optional[AITextService] = None,
        casual: Optional[CasualResponder] = None,
        rate_limiter: Optional[RateLimiter] = None,
        analytics: Optional[AnalyticsSink] = None,
        state_machine: Optional[ProfileStateMachine] = None,
    ) -> None:
        # Key line: dependencies are injectable for testing/mocking.
        self.store = store or InMemoryUserStore()
        self.state_manager = state_manager or StateManager()
        self.intent_classifier = intent_classifier or IntentClassifier()
        self.ai = ai or AITextService()
        self.analytics = analytics or LoggingAnalyticsSink()
        self.state_machine = state_machine or ProfileStateMachine(
            store=self.store,
            search=SearchPipeline(
                store=self.store,
                ai=self.ai,
                rate_limiter=rate_limiter or DailyRateLimiter(),
                analytics=self.analytics,
            ),
            casual=casual or LLMCasualResponder(),
            ai=self.ai,
            analytics=self.analytics,
        )
        self._locks: Dict[str, asyncio.Lock] = {}

    def _lock_for(self, phone: str) -> asyncio.Lock:
        lock = self._locks.get(phone)
        if lock is None:
            lock = self._locks[phone] = asyncio.Lock()
        return lock

    def _drop_idle_locks(self) -> None:
        # A lock whose session is gone and that nobody holds can be recreated on the next turn.
        idle = [p for p, lock in self._locks.items() if not lock.locked() and self.state_manager.get(p) is None]
        for p in idle:
            del self._locks[p]

    async def handle_turn(
        self,
        phone: str,
        message: str,
        intent: Optional[IntentResult] = None,
    ) -> TurnResponse:
        # 1) Serialize turns per phone (the state machine does no locking)
        # 2) Drop idle sessions, then load session + fresh user record
        # 3) Classify intent unless the caller already did
        # 4) Dispatch to the state machine
        async with self._lock_for(phone):
            expired = self.state_manager.cleanup_expired()
            if expired:
                self._drop_idle_locks()
                log.debug("Dropped %d expired sessions", expired)
            session = self.state_manager.get_or_create(phone)

            user = await self.store.find_by_identity(phone)
            if user is None:
                log.info("Unregistered phone=%s", phone)
                return TurnResponse(phone=phone, reply=NOT_REGISTERED_MESSAGE, waiting_for=session.waiting_for)
            session.user = user

            if intent is None:
                intent = await self.intent_classifier.classify(message, session.waiting_for)

            if config.DEBUG:
                log.debug("TURN phone=%s intent=%s waiting_for=%s", phone, intent.intent.value, session.waiting_for)

            reply = await self.state_machine.handle(message, intent, session)
            return TurnResponse(phone=phone, reply=reply, waiting_for=session.waiting_for)
