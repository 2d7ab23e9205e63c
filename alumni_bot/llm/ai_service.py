# Role: The three AI text operations the bot depends on (keyword extraction, candidate ranking, geography
# classification). Each goes through best_effort(), so callers always receive a usable value.

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Sequence

import alumni_bot.config as config
from alumni_bot.llm.gemini_client import GeminiClient
from alumni_bot.llm.structured import BestEffortResult, best_effort, parse_string_list
from alumni_bot.models.user_record import UserRecord
from alumni_bot.prompts.geography_prompt import build_geography_prompt, build_geography_system_prompt
from alumni_bot.prompts.search_prompt import (
    KEYWORD_SYSTEM_PROMPT,
    build_keyword_prompt,
    build_ranking_prompt,
    build_ranking_system_prompt,
)
from alumni_bot.utils import gazetteer
from alumni_bot.utils.keywords import MAX_KEYWORDS, candidate_key, expand_keywords, score_candidates
from alumni_bot.utils.logger import get_logger

log = get_logger("llm.ai_service")

RANKING_WINDOW = 15
BIO_PREVIEW = 150


def _summarize(user: UserRecord) -> Dict[str, object]:
    # Compact, token-cheap view of a candidate for the ranking prompt.
    basic, enhanced = user.basic_profile, user.enhanced_profile
    location = ", ".join(p for p in (enhanced.city, enhanced.state) if p) or "Location not specified"
    return {
        "key": candidate_key(user),
        "name": enhanced.full_name or basic.name or "Name not available",
        "about": (basic.about or "")[:BIO_PREVIEW],
        "role": enhanced.professional_role or "Role not specified",
        "domain": enhanced.domain or "Domain not specified",
        "location": location,
        "gives": list(enhanced.community_gives),
        "asks": list(enhanced.community_asks),
    }


def _parse_verdict(text: str) -> Optional[bool]:
    answer = (text or "").strip().strip(".\"'`").upper()
    if answer == "VALID":
        return True
    if answer == "INVALID":
        return False
    return None


class AITextService:
    """
    Best-effort AI operations.

    The client is created lazily: a missing GEMINI_API_KEY surfaces as a failed call inside best_effort(),
    which means the deterministic fallback runs instead of the whole bot refusing to start.
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

    async def extract_keywords(self, query: str) -> BestEffortResult[List[str]]:
        def _parse(raw: str) -> Optional[List[str]]:
            items = parse_string_list(raw)
            return items[:MAX_KEYWORDS] if items else None

        return await best_effort(
            "extract_keywords",
            lambda: self.client.generate_text(
                build_keyword_prompt(query),
                system_instruction=KEYWORD_SYSTEM_PROMPT,
                temperature=0.3,
                max_output_tokens=300,
            ),
            _parse,
            lambda: expand_keywords(query),
            timeout=self.timeout,
        )

    async def rank_candidates(
        self,
        candidates: Sequence[UserRecord],
        query: str,
        keywords: Sequence[str],
        limit: Optional[int] = None,
    ) -> BestEffortResult[List[UserRecord]]:
        # 1) Ask the model for an ordered list of keys over the first RANKING_WINDOW candidates
        # 2) Map keys back to candidates (unknown keys ignored, duplicates dropped)
        # 3) An answer that maps to nobody counts as malformed -> score-based fallback
        limit = limit or config.MAX_SEARCH_RESULTS
        window = list(candidates[:RANKING_WINDOW])
        by_key = {candidate_key(u): u for u in window}

        def _parse(raw: str) -> Optional[List[UserRecord]]:
            keys = parse_string_list(raw)
            if not keys:
                return None
            picked: List[UserRecord] = []
            seen = set()
            for key in keys:
                user = by_key.get(key)
                if user is not None and key not in seen:
                    seen.add(key)
                    picked.append(user)
            return picked[:limit] or None

        return await best_effort(
            "rank_candidates",
            lambda: self.client.generate_text(
                build_ranking_prompt(query, keywords, [_summarize(u) for u in window]),
                system_instruction=build_ranking_system_prompt(limit),
                temperature=0.1,
                max_output_tokens=300,
            ),
            _parse,
            lambda: score_candidates(candidates, keywords, limit),
            timeout=self.timeout,
        )

    async def classify_geography(self, text: str, kind: str) -> BestEffortResult[bool]:
        # Fallback is the heuristic verdict; callers use from_ai to tell a verified answer from a guess.
        return await best_effort(
            f"classify_geography[{kind}]",
            lambda: self.client.generate_text(
                build_geography_prompt(text, kind),
                system_instruction=build_geography_system_prompt(kind),
                temperature=0.1,
                max_output_tokens=20,
            ),
            _parse_verdict,
            lambda: gazetteer.heuristic_accepts(text),
            timeout=self.timeout,
        )
