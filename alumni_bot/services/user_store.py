# Role: User-record persistence boundary. UserStore is the protocol the bot talks to; InMemoryUserStore is the
# reference adapter used by the API, the CLI and the tests (a real deployment plugs a database in here).

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

from alumni_bot.models.fields import ProfileField
from alumni_bot.models.user_record import UserRecord
from alumni_bot.utils.logger import get_logger

log = get_logger("user_store")

# Profile text the search regex is matched against.
SEARCH_FIELDS: Tuple[str, ...] = (
    "basic_profile.about",
    "basic_profile.name",
    "enhanced_profile.full_name",
    "enhanced_profile.domain",
    "enhanced_profile.professional_role",
    "enhanced_profile.city",
    "enhanced_profile.state",
    "enhanced_profile.country",
    "enhanced_profile.community_asks",
    "enhanced_profile.community_gives",
    "enhanced_profile.yatra_impact",
)

# Only what rendering and ranking need ever leaves the store on a search.
SEARCH_PROJECTION: Tuple[str, ...] = (
    "identity",
    "basic_profile.name",
    "basic_profile.email",
    "basic_profile.about",
    "basic_profile.linkedin",
    "enhanced_profile.full_name",
    "enhanced_profile.domain",
    "enhanced_profile.professional_role",
    "enhanced_profile.city",
    "enhanced_profile.state",
    "enhanced_profile.country",
    "enhanced_profile.phone",
    "enhanced_profile.linkedin",
    "enhanced_profile.community_gives",
    "enhanced_profile.community_asks",
    "enhanced_profile.yatra_impact",
    "enhanced_profile.completed",
    "metadata.last_active",
)


@dataclass(frozen=True)
class LinkResult:
    success: bool
    error: Optional[str] = None


@dataclass(frozen=True)
class SearchFilter:
    pattern: str
    fields: Sequence[str] = SEARCH_FIELDS
    exclude_identity: Optional[str] = None


def build_search_pattern(keywords: Sequence[str]) -> str:
    # Keywords are escaped so user text can never change the regex's meaning.
    return "|".join(re.escape(k) for k in keywords if k and k.strip())


def digits_only(value: Optional[str]) -> str:
    return re.sub(r"\D", "", value or "")


class UserStore(Protocol):
    async def find_by_identity(self, identity: str) -> Optional[UserRecord]: ...

    async def update_field(self, identity: str, field: ProfileField, value: Any) -> bool: ...

    async def mark_completed(self, identity: str) -> bool: ...

    async def link_additional_email(self, identity: str, email: str) -> LinkResult: ...

    async def search(
        self,
        filter: SearchFilter,
        projection: Sequence[str] = SEARCH_PROJECTION,
        limit: int = 50,
    ) -> List[UserRecord]: ...


def _dig(doc: Dict[str, Any], path: str) -> Any:
    cur: Any = doc
    for part in path.split("."):
        if not isinstance(cur, dict):
            return None
        cur = cur.get(part)
    return cur


def _project(doc: Dict[str, Any], projection: Sequence[str]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for path in projection:
        value = _dig(doc, path)
        if value is None:
            continue
        parts = path.split(".")
        target = out
        for part in parts[:-1]:
            target = target.setdefault(part, {})
        target[parts[-1]] = value
    return out


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return " ".join(str(v) for v in value)
    return str(value)


@dataclass
class InMemoryUserStore:
    users: Dict[str, UserRecord] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self._lock = asyncio.Lock()

    def _key(self, identity: str) -> str:
        return digits_only(identity) or identity

    def add(self, user: UserRecord) -> UserRecord:
        self.users[self._key(user.identity)] = user
        return user

    async def find_by_identity(self, identity: str) -> Optional[UserRecord]:
        user = self.users.get(self._key(identity))
        # Callers get a copy: session-side edits never leak into the store.
        return user.model_copy(deep=True) if user else None

    async def update_field(self, identity: str, field: ProfileField, value: Any) -> bool:
        async with self._lock:
            user = self.users.get(self._key(identity))
            if user is None:
                log.warning("update_field: no user for identity=%s", identity)
                return False
            user.set_field(field, value)
            user.metadata.last_active = datetime.now(timezone.utc)
            log.debug("update_field identity=%s field=%s", identity, field.value)
            return True

    async def mark_completed(self, identity: str) -> bool:
        async with self._lock:
            user = self.users.get(self._key(identity))
            if user is None:
                return False
            user.enhanced_profile.completed = True
            return True

    async def link_additional_email(self, identity: str, email: str) -> LinkResult:
        # 1) Reject when another member already owns the address
        # 2) Append to linked_emails and mirror into additional_email
        email = email.strip().lower()
        async with self._lock:
            user = self.users.get(self._key(identity))
            if user is None:
                return LinkResult(success=False, error="❌ We couldn't find your account. Please contact support.")

            for other_key, other in self.users.items():
                if other_key == self._key(identity):
                    continue
                owned = {(other.basic_profile.email or "").lower(), *(e.lower() for e in other.basic_profile.linked_emails)}
                if email in owned:
                    return LinkResult(
                        success=False,
                        error="❌ This email is already linked to another alumni account.",
                    )

            if email == (user.basic_profile.email or "").lower() or email in user.basic_profile.linked_emails:
                return LinkResult(success=False, error="❌ This email is already linked to your account.")

            user.basic_profile.linked_emails.append(email)
            user.set_field(ProfileField.ADDITIONAL_EMAIL, email)
            return LinkResult(success=True)

    async def search(
        self,
        filter: SearchFilter,
        projection: Sequence[str] = SEARCH_PROJECTION,
        limit: int = 50,
    ) -> List[UserRecord]:
        if not filter.pattern:
            return []
        rx = re.compile(filter.pattern, re.IGNORECASE)
        excluded = digits_only(filter.exclude_identity)

        results: List[UserRecord] = []
        for user in self.users.values():
            if excluded and digits_only(user.identity) == excluded:
                continue
            doc = user.model_dump()
            if not any(rx.search(_as_text(_dig(doc, path))) for path in filter.fields):
                continue
            results.append(UserRecord.model_validate(_project(doc, projection)))
            if len(results) >= limit:
                break
        return results
