# Role: Turns free text into an IntentResult. The LLM classifies under a strict JSON contract; a rule-based
# classifier is the deterministic fallback, and a guard keeps profile answers from being read as searches.

from __future__ import annotations

import re
from typing import Any, Callable, Optional

from alumni_bot.llm.gemini_client import GeminiClient
from alumni_bot.llm.structured import best_effort, try_parse_json
from alumni_bot.models.intent import Intent, IntentResult
from alumni_bot.prompts.intent_prompt import build_intent_prompt
from alumni_bot.utils.logger import get_logger

log = get_logger("llm.intent")

_YES = {"yes", "y", "yeah", "yep", "sure", "ok", "okay", "yes please", "go ahead", "continue"}
_NO = {"no", "n", "nope", "nah", "not now", "no thanks"}
_CASUAL = {
    "hi", "hello", "hey", "hii", "namaste", "good morning", "good evening", "good afternoon",
    "thanks", "thank you", "thx", "ok thanks", "bye", "how are you",
}

_SEARCH_MARKERS = re.compile(
    r"\b(find|search|looking for|look for|need|want|connect me|who (is|are|can)|recommend|"
    r"experts?|mentors?|developers?|founders?|professionals?|alumni (in|from|working))\b",
    re.IGNORECASE,
)
_SKIP_MARKERS = re.compile(r"\b(skip|later|not now|stop)\b", re.IGNORECASE)
_PROFILE_MARKERS = re.compile(r"\b(complete|update|edit|finish|continue)\b.*\bprofile\b|\bmy profile\b", re.IGNORECASE)
_SKIP_PREFIX = re.compile(r"^\s*(skip( profile)?( and)?( just)?|later)[\s,.:-]*", re.IGNORECASE)


def _normalize(text: str) -> str:
    return re.sub(r"\s+", " ", (text or "").strip().lower()).rstrip("!.?")


def classify_rules(message: str, waiting_for: Optional[str] = None) -> IntentResult:
    # Deterministic classifier used when the LLM is unavailable or returns junk.
    t = _normalize(message)
    updating = bool(waiting_for and waiting_for.startswith("updating_"))

    if t in _YES:
        return IntentResult(Intent.AFFIRMATIVE, confidence=0.6)
    if t in _NO:
        return IntentResult(Intent.NEGATIVE, confidence=0.6)

    has_search = bool(_SEARCH_MARKERS.search(t))
    has_skip = bool(_SKIP_MARKERS.search(t))

    if has_skip and has_search:
        query = _SKIP_PREFIX.sub("", message).strip() or message.strip()
        return IntentResult(Intent.SKIP_AND_SEARCH, query=query, confidence=0.6)
    if has_skip and ("profile" in t or len(t.split()) <= 3):
        return IntentResult(Intent.SKIP_PROFILE, confidence=0.6)
    if _PROFILE_MARKERS.search(t):
        return IntentResult(Intent.PROFILE_UPDATE, confidence=0.6)
    if t in _CASUAL:
        return IntentResult(Intent.CASUAL, confidence=0.6)
    if has_search:
        return IntentResult(Intent.SEARCH, query=message.strip(), confidence=0.5)

    # Waiting for an answer or a choice: treat the text as that answer.
    if waiting_for and waiting_for != "ready":
        return IntentResult(Intent.UNKNOWN, confidence=0.3)

    # Ready and not small talk: a free-text description of who they are looking for.
    if len(t.split()) >= 2:
        return IntentResult(Intent.SEARCH, query=message.strip(), confidence=0.4)
    return IntentResult(Intent.UNKNOWN, confidence=0.2)


def _parse_intent_json(raw: str) -> Optional[IntentResult]:
    parsed, method = try_parse_json(raw)
    if not isinstance(parsed, dict):
        return None
    if method != "strict":
        log.debug("Intent JSON was repaired (method=%s)", method)

    value = parsed.get("intent")
    try:
        intent = Intent(value) if isinstance(value, str) else None
    except ValueError:
        intent = None
    if intent is None:
        return None

    query: Any = parsed.get("query")
    query = query.strip() if isinstance(query, str) and query.strip() else None

    try:
        confidence = min(max(float(parsed.get("confidence")), 0.0), 1.0)
    except (TypeError, ValueError):
        confidence = 0.0

    return IntentResult(intent=intent, query=query, confidence=confidence)


class IntentClassifier:
    """
    LLM-backed intent classification.

    Contract:
    - We ask the model to return a single JSON object only.
    - Models sometimes wrap JSON in code fences or add extra text; the shared parser repairs that.
    - Anything unusable falls back to classify_rules().
    """

    def __init__(
        self,
        client: Optional[GeminiClient] = None,
        client_factory: Callable[[], GeminiClient] = GeminiClient,
        timeout: Optional[float] = None,
    ) -> None:
        self._client = client
        self._client_factory = client_factory
        self.timeout = timeout

    @property
    def client(self) -> GeminiClient:
        if self._client is None:
            self._client = self._client_factory()
        return self._client

    async def classify(self, message: str, waiting_for: Optional[str] = None) -> IntentResult:
        # 1) LLM under the strict JSON contract (rules on failure)
        # 2) Search intents always carry a query
        # 3) Guard: mid-update, a search needs an explicit search phrase
        result = await best_effort(
            "classify_intent",
            lambda: self.client.generate_text(build_intent_prompt(message, waiting_for), temperature=0.0),
            _parse_intent_json,
            lambda: classify_rules(message, waiting_for),
            timeout=self.timeout,
        )
        intent = result.value

        if intent.is_search and not intent.query:
            intent = IntentResult(intent.intent, query=message.strip(), confidence=intent.confidence)

        if (
            waiting_for
            and waiting_for.startswith("updating_")
            and intent.is_search
            and not _SEARCH_MARKERS.search(message or "")
        ):
            log.debug("OVERRIDE: %s -> unknown while %s", intent.intent.value, waiting_for)
            intent = IntentResult(Intent.UNKNOWN, confidence=intent.confidence)

        log.debug("Intent for %r (waiting_for=%s): %s", message, waiting_for, intent)
        return intent
