"""Shared fakes and builders for the bot tests. AI calls never reach the network."""

import asyncio
from typing import Any, Dict, List, Optional, Tuple

import pytest

from alumni_bot.core.search_pipeline import SearchPipeline
from alumni_bot.core.state_machine import ProfileStateMachine
from alumni_bot.llm.ai_service import AITextService
from alumni_bot.models.fields import REQUIRED_FIELDS, ProfileField
from alumni_bot.models.user_record import BasicProfile, EnhancedProfile, UserRecord
from alumni_bot.services.rate_limiter import DailyRateLimiter
from alumni_bot.services.user_store import InMemoryUserStore

PHONE = "919876543210"

COMPLETE_VALUES: Dict[ProfileField, Any] = {
    ProfileField.FULL_NAME: "Asha Rao",
    ProfileField.GENDER: "Female",
    ProfileField.DATE_OF_BIRTH: "12-03-1992",
    ProfileField.COUNTRY: "India",
    ProfileField.STATE: "Karnataka",
    ProfileField.CITY: "Bangalore",
    ProfileField.PHONE: "+91 9876543210",
    ProfileField.LINKEDIN: "https://linkedin.com/in/asha",
    ProfileField.DOMAIN: "Technology",
    ProfileField.PROFESSIONAL_ROLE: "Working Professional",
    ProfileField.YATRA_IMPACT: ["Built a lasting peer network"],
    ProfileField.COMMUNITY_ASKS: ["Mentorship", "Partnerships", "Peer support"],
    ProfileField.COMMUNITY_GIVES: ["Mentoring"],
}


def run(coro):
    return asyncio.run(coro)


def make_user(
    identity: str = PHONE,
    missing: Tuple[ProfileField, ...] = (),
    email: Optional[str] = "asha@example.com",
    about: Optional[str] = None,
    **overrides: Any,
) -> UserRecord:
    user = UserRecord(
        identity=identity,
        basic_profile=BasicProfile(name="Asha", email=email, about=about),
        enhanced_profile=EnhancedProfile(),
    )
    for field in REQUIRED_FIELDS:
        if field in missing:
            continue
        user.set_field(field, overrides.get(field.value, COMPLETE_VALUES[field]))
    for name, value in overrides.items():
        field = ProfileField.parse(name)
        if field is not None and field not in REQUIRED_FIELDS:
            user.set_field(field, value)
    return user


class FailingClient:
    """Stands in for GeminiClient; every call fails like an unreachable API."""

    def __init__(self) -> None:
        self.calls = 0

    async def generate_text(self, prompt: str, **kwargs: Any) -> str:
        self.calls += 1
        raise RuntimeError("Gemini API call failed: offline")


class ScriptedClient:
    """Returns queued responses in order; records the prompts it was sent."""

    def __init__(self, *responses: str) -> None:
        self.responses = list(responses)
        self.prompts: List[str] = []

    async def generate_text(self, prompt: str, **kwargs: Any) -> str:
        self.prompts.append(prompt)
        if not self.responses:
            raise RuntimeError("no scripted response left")
        return self.responses.pop(0)


class RecordingSink:
    def __init__(self) -> None:
        self.events: List[Tuple[Optional[str], str, Dict[str, Any]]] = []
        self.errors: List[Tuple[BaseException, Dict[str, Any]]] = []

    async def log_event(self, identity: Optional[str], event: str, data: Dict[str, Any]) -> None:
        self.events.append((identity, event, data))

    async def log_error(self, error: BaseException, context: Dict[str, Any]) -> None:
        self.errors.append((error, context))

    def named(self, event: str) -> List[Dict[str, Any]]:
        return [data for _, name, data in self.events if name == event]


class CountingStore(InMemoryUserStore):
    """In-memory store that counts calls and can be told to fail writes."""

    def __init__(self, fail_writes: bool = False, explode_on_search: bool = False) -> None:
        super().__init__()
        self.fail_writes = fail_writes
        self.explode_on_search = explode_on_search
        self.search_calls = 0
        self.update_calls: List[Tuple[str, ProfileField, Any]] = []
        self.completed_calls = 0

    async def update_field(self, identity, field, value):
        self.update_calls.append((identity, field, value))
        if self.fail_writes:
            return False
        return await super().update_field(identity, field, value)

    async def mark_completed(self, identity):
        self.completed_calls += 1
        return await super().mark_completed(identity)

    async def search(self, filter, projection=None, limit=50):
        self.search_calls += 1
        if self.explode_on_search:
            raise RuntimeError("database unavailable")
        if projection is None:
            return await super().search(filter, limit=limit)
        return await super().search(filter, projection, limit)


class EchoCasual:
    async def respond(self, message: str, context: Dict[str, Any]) -> str:
        return f"Hi {context.get('name')}!"


@pytest.fixture(autouse=True)
def _no_gemini_key(monkeypatch):
    # Lazily created clients then fail fast and every AI path takes its fallback.
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def offline_ai() -> AITextService:
    return AITextService(client=FailingClient())


@pytest.fixture
def store() -> CountingStore:
    return CountingStore()


def build_machine(store, ai, sink=None, limiter=None) -> ProfileStateMachine:
    pipeline = SearchPipeline(store=store, ai=ai, rate_limiter=limiter or DailyRateLimiter(limit=100), analytics=sink)
    return ProfileStateMachine(store=store, search=pipeline, casual=EchoCasual(), ai=ai, analytics=sink)

