# Role: Per-conversation session. The completion pass (incomplete snapshot, remaining queue, active field)
# lives in one CompletionPass object so it is always seeded, advanced and cleared as a unit.
# waiting_for / current_field / remaining_fields / incomplete_fields are read-only views over it.

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel, Field

from alumni_bot.models.fields import ProfileField
from alumni_bot.models.user_record import UserRecord
from alumni_bot.utils.logger import get_logger

log = get_logger("session")

_UPDATING_PREFIX = "updating_"


class Stage(str, Enum):
    READY = "ready"
    UPDATING_FIELD = "updating_field"
    PROFILE_CHOICE = "profile_choice"
    ADDITIONAL_EMAIL_CHOICE = "additional_email_choice"
    ADDITIONAL_EMAIL_INPUT = "additional_email_input"
    INSTAGRAM_CHOICE = "instagram_choice"


class CompletionPass(BaseModel):
    incomplete_fields: List[ProfileField] = Field(default_factory=list)
    remaining_fields: List[ProfileField] = Field(default_factory=list)
    current_field: Optional[ProfileField] = None

    @property
    def total_steps(self) -> int:
        # Key line: never divide by zero when a pass was entered only for an optional field.
        return len(self.incomplete_fields) or 1


class Session(BaseModel):
    phone: str
    stage: Optional[Stage] = None
    completion: Optional[CompletionPass] = None

    field_retry_count: int = 0
    instagram_choice: Optional[bool] = None
    offered_optional: List[ProfileField] = Field(default_factory=list)

    search_blocked: bool = False
    profile_completion_started: bool = False
    profile_skipped: bool = False
    profile_completed: bool = False
    ready: bool = False

    user: Optional[UserRecord] = None

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    # ---- read-only views (external names) ----

    @property
    def current_field(self) -> Optional[ProfileField]:
        return self.completion.current_field if self.completion else None

    @property
    def remaining_fields(self) -> List[ProfileField]:
        return list(self.completion.remaining_fields) if self.completion else []

    @property
    def incomplete_fields(self) -> List[ProfileField]:
        return list(self.completion.incomplete_fields) if self.completion else []

    @property
    def waiting_for(self) -> Optional[str]:
        if self.stage is None:
            return None
        if self.stage == Stage.UPDATING_FIELD:
            field = self.current_field
            return f"{_UPDATING_PREFIX}{field.value}" if field else None
        return self.stage.value

    @property
    def is_updating(self) -> bool:
        return self.stage == Stage.UPDATING_FIELD and self.current_field is not None

    # ---- transitions ----

    def start_pass(self, fields: Sequence[ProfileField]) -> ProfileField:
        # Seeds the whole pass at once: current = fields[0], remaining = fields[1:].
        if not fields:
            raise ValueError("Cannot start a completion pass without incomplete fields")
        ordered = list(fields)
        self.completion = CompletionPass(
            incomplete_fields=ordered,
            remaining_fields=ordered[1:],
            current_field=ordered[0],
        )
        self.stage = Stage.UPDATING_FIELD
        self.field_retry_count = 0
        self.instagram_choice = None
        self.offered_optional = []
        return ordered[0]

    def advance(self) -> Optional[ProfileField]:
        # Moves the head of remaining_fields into focus; None when the pass is exhausted.
        if not self.completion or not self.completion.remaining_fields:
            return None
        nxt = self.completion.remaining_fields[0]
        self.completion = CompletionPass(
            incomplete_fields=self.completion.incomplete_fields,
            remaining_fields=self.completion.remaining_fields[1:],
            current_field=nxt,
        )
        self.stage = Stage.UPDATING_FIELD
        self.field_retry_count = 0
        self.instagram_choice = None
        return nxt

    def focus(self, field: ProfileField) -> None:
        # Collect a field outside the remaining queue (optional extras). Remaining is untouched.
        base = self.completion or CompletionPass()
        self.completion = CompletionPass(
            incomplete_fields=base.incomplete_fields,
            remaining_fields=base.remaining_fields,
            current_field=field,
        )
        self.stage = Stage.UPDATING_FIELD
        self.field_retry_count = 0

    def park(self, stage: Stage) -> None:
        # Enter a yes/no sub-choice; the pass stays, but no field is actively being collected.
        if stage == Stage.UPDATING_FIELD:
            raise ValueError("Use focus() or advance() to collect a field")
        if self.completion is not None:
            self.completion = CompletionPass(
                incomplete_fields=self.completion.incomplete_fields,
                remaining_fields=self.completion.remaining_fields,
                current_field=None,
            )
        self.stage = stage

    def end_pass(self, *, skipped: bool = False, completed: bool = False) -> None:
        self.completion = None
        self.field_retry_count = 0
        self.instagram_choice = None
        self.offered_optional = []
        self.stage = Stage.READY
        self.ready = True
        if skipped:
            self.profile_skipped = True
        if completed:
            self.profile_completed = True

    def mark_ready(self) -> None:
        self.stage = Stage.READY
        self.ready = True

    def touch(self) -> None:
        self.updated_at = datetime.now(timezone.utc)

    # ---- flat document (external persistence) ----

    def to_flat(self) -> Dict[str, Any]:
        return {
            "phone": self.phone,
            "waiting_for": self.waiting_for,
            "current_field": self.current_field.value if self.current_field else None,
            "remaining_fields": [f.value for f in self.remaining_fields],
            "incomplete_fields": [f.value for f in self.incomplete_fields],
            "field_retry_count": self.field_retry_count,
            "instagram_choice": self.instagram_choice,
            "offered_optional": [f.value for f in self.offered_optional],
            "search_blocked": self.search_blocked,
            "profile_completion_started": self.profile_completion_started,
            "profile_skipped": self.profile_skipped,
            "profile_completed": self.profile_completed,
            "ready": self.ready,
        }

    @classmethod
    def from_flat(cls, data: Dict[str, Any]) -> "Session":
        # 1) Parse field lists (unknown names are dropped and logged)
        # 2) Rebuild stage + pass from the waiting_for tag
        # 3) Unknown updating_<field> tags degrade to READY
        def _fields(names: Any) -> List[ProfileField]:
            out: List[ProfileField] = []
            for name in names or []:
                f = ProfileField.parse(name)
                if f is None:
                    log.warning("Dropping unknown field %r from stored session", name)
                    continue
                out.append(f)
            return out

        session = cls(
            phone=str(data.get("phone") or ""),
            field_retry_count=int(data.get("field_retry_count") or 0),
            instagram_choice=data.get("instagram_choice"),
            offered_optional=_fields(data.get("offered_optional")),
            search_blocked=bool(data.get("search_blocked")),
            profile_completion_started=bool(data.get("profile_completion_started")),
            profile_skipped=bool(data.get("profile_skipped")),
            profile_completed=bool(data.get("profile_completed")),
            ready=bool(data.get("ready")),
        )

        incomplete = _fields(data.get("incomplete_fields"))
        remaining = _fields(data.get("remaining_fields"))
        tag = data.get("waiting_for")

        if isinstance(tag, str) and tag.startswith(_UPDATING_PREFIX):
            field = ProfileField.parse(tag[len(_UPDATING_PREFIX):])
            if field is None:
                log.warning("Unknown field in waiting_for=%r; resetting session to ready", tag)
                session.stage = Stage.READY
                return session
            session.completion = CompletionPass(
                incomplete_fields=incomplete,
                remaining_fields=remaining,
                current_field=field,
            )
            session.stage = Stage.UPDATING_FIELD
            return session

        if tag:
            try:
                session.stage = Stage(tag)
            except ValueError:
                log.warning("Unknown waiting_for=%r; resetting session to ready", tag)
                session.stage = Stage.READY

        if incomplete or remaining:
            session.completion = CompletionPass(incomplete_fields=incomplete, remaining_fields=remaining)
        return session
