# Role: Central enum of user intents plus the classified value the state machine consumes.
# The classifier (LLM or rules) produces IntentResult; search intents carry the free-text query.

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Intent(str, Enum):
    SEARCH = "search"
    SKIP_AND_SEARCH = "skip_and_search"
    PROFILE_UPDATE = "profile_update"
    SKIP_PROFILE = "skip_profile"
    AFFIRMATIVE = "affirmative"
    NEGATIVE = "negative"
    CASUAL = "casual"
    UNKNOWN = "unknown"


SEARCH_INTENTS = frozenset({Intent.SEARCH, Intent.SKIP_AND_SEARCH})


@dataclass(frozen=True)
class IntentResult:
    intent: Intent
    query: Optional[str] = None
    confidence: float = 1.0

    @property
    def is_search(self) -> bool:
        return self.intent in SEARCH_INTENTS
