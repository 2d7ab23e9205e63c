# Role: Durable alumni record (one per phone identity). This is the shape the user store reads and writes;
# set_field() is the single place a validated field value lands on the model.

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, Field

from alumni_bot.models.fields import LIST_FIELDS, ProfileField


class BasicProfile(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    about: Optional[str] = None
    linkedin: Optional[str] = None
    linked_emails: List[str] = Field(default_factory=list)


class EnhancedProfile(BaseModel):
    full_name: Optional[str] = None
    gender: Optional[str] = None
    date_of_birth: Optional[str] = None
    country: Optional[str] = None
    state: Optional[str] = None
    city: Optional[str] = None
    phone: Optional[str] = None
    additional_email: Optional[str] = None
    linkedin: Optional[str] = None
    instagram: Optional[str] = None
    domain: Optional[str] = None
    professional_role: Optional[str] = None
    yatra_impact: List[str] = Field(default_factory=list)
    community_asks: List[str] = Field(default_factory=list)
    community_gives: List[str] = Field(default_factory=list)

    completed: bool = False


class UserMetadata(BaseModel):
    last_active: Optional[datetime] = None


class UserRecord(BaseModel):
    identity: str
    basic_profile: BasicProfile = Field(default_factory=BasicProfile)
    enhanced_profile: EnhancedProfile = Field(default_factory=EnhancedProfile)
    metadata: UserMetadata = Field(default_factory=UserMetadata)

    @property
    def display_name(self) -> str:
        return self.enhanced_profile.full_name or self.basic_profile.name or "there"

    def get_field(self, field: ProfileField) -> Any:
        return getattr(self.enhanced_profile, field.value)

    def set_field(self, field: ProfileField, value: Any) -> None:
        # 1) List fields keep order, drop blanks
        # 2) Strings are stripped; blank strings become None (absent)
        if field in LIST_FIELDS:
            items = value if isinstance(value, (list, tuple)) else []
            cleaned = [str(v).strip() for v in items if isinstance(v, str) and v.strip()]
            setattr(self.enhanced_profile, field.value, cleaned)
            return

        if isinstance(value, str):
            value = value.strip() or None
        setattr(self.enhanced_profile, field.value, value)


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) == 0
    return False
