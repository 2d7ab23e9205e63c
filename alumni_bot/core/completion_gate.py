# Role: Profile completion gate. Computes the ordered list of missing required fields and the completion
# percentage, and answers the all-or-nothing question "may this user search?".

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from alumni_bot.models.fields import REQUIRED_FIELDS, ProfileField
from alumni_bot.models.user_record import UserRecord, is_blank


@dataclass(frozen=True)
class SearchAccess:
    can_access: bool
    completion_percentage: int
    incomplete_fields: List[ProfileField]

    @property
    def reason(self) -> str:
        return "Profile complete" if self.can_access else "Profile incomplete"


def incomplete_fields(
    user: Optional[UserRecord],
    fields: Sequence[ProfileField] = REQUIRED_FIELDS,
) -> List[ProfileField]:
    # Key line: iterate in canonical order; this is also the collection order.
    if user is None:
        return list(fields)
    return [f for f in fields if is_blank(user.get_field(f))]


def completion_percentage(
    user: Optional[UserRecord],
    fields: Sequence[ProfileField] = REQUIRED_FIELDS,
) -> int:
    total = len(fields)
    if total == 0:
        return 100
    done = total - len(incomplete_fields(user, fields))
    # Half-up rounding (round() would use banker's rounding).
    return int(100 * done / total + 0.5)


def is_profile_complete(user: Optional[UserRecord]) -> bool:
    return not incomplete_fields(user)


def can_access_search(user: Optional[UserRecord]) -> SearchAccess:
    missing = incomplete_fields(user)
    return SearchAccess(
        can_access=len(missing) == 0,
        completion_percentage=completion_percentage(user),
        incomplete_fields=missing,
    )
