# Role: Alumni search for a member with a complete profile.
# rate limit -> keywords (AI or expander) -> store search -> top-N selection (AI or score) -> rendering,
# with one analytics event per search and a retryable message on any unexpected failure.

from __future__ import annotations

from typing import List, Optional

import alumni_bot.config as config
from alumni_bot.core.validator import sanitize_input
from alumni_bot.llm.ai_service import AITextService
from alumni_bot.models.user_record import UserRecord
from alumni_bot.services.analytics import AnalyticsSink, emit, report_error
from alumni_bot.services.rate_limiter import RateLimiter
from alumni_bot.services.user_store import SEARCH_PROJECTION, SearchFilter, UserStore, build_search_pattern
from alumni_bot.utils.logger import get_logger
from alumni_bot.utils.search_format import (
    RATE_LIMITED_MESSAGE,
    SEARCH_FAILED_MESSAGE,
    format_results,
    no_results_message,
)

log = get_logger("search_pipeline")

CANDIDATE_LIMIT = 50


class SearchPipeline:
    def __init__(
        self,
        store: UserStore,
        ai: AITextService,
        rate_limiter: RateLimiter,
        analytics: Optional[AnalyticsSink] = None,
        max_results: Optional[int] = None,
    ) -> None:
        self.store = store
        self.ai = ai
        self.rate_limiter = rate_limiter
        self.analytics = analytics
        self.max_results = max_results

    async def run(self, query: str, identity: str) -> str:
        clean_query = sanitize_input(query)
        try:
            return await self._run(clean_query, identity)
        except Exception as e:
            log.exception("Search failed identity=%s query=%r", identity, clean_query)
            await emit(self.analytics, identity, "search_error", query=clean_query, total=0, returned=0)
            await report_error(self.analytics, e, operation="alumni_search", query=clean_query)
            return SEARCH_FAILED_MESSAGE

    async def _run(self, query: str, identity: str) -> str:
        # 1) Quota
        if not await self.rate_limiter.check_daily_limit(identity):
            return RATE_LIMITED_MESSAGE

        # 2) Keywords
        extracted = await self.ai.extract_keywords(query)
        keywords = extracted.value
        log.info("Search keywords (%s): %s", "ai" if extracted.from_ai else "fallback", keywords)

        # 3) Candidates (requester excluded)
        candidates = await self.store.search(
            SearchFilter(pattern=build_search_pattern(keywords), exclude_identity=identity),
            projection=SEARCH_PROJECTION,
            limit=CANDIDATE_LIMIT,
        )
        log.info("Store search returned %d candidates", len(candidates))

        # 4) Nothing matched
        if not candidates:
            await emit(self.analytics, identity, "alumni_search", query=query, total=0, returned=0)
            return no_results_message(query)

        # 5) Selection
        selected = await self._select(candidates, query, keywords)

        # 6) Rendering
        reply = format_results(selected, query, len(candidates))

        # 7) Analytics
        await emit(
            self.analytics,
            identity,
            "alumni_search",
            query=query,
            total=len(candidates),
            returned=len(selected),
        )
        return reply

    async def _select(self, candidates: List[UserRecord], query: str, keywords: List[str]) -> List[UserRecord]:
        limit = self.max_results or config.MAX_SEARCH_RESULTS
        if len(candidates) <= limit:
            return candidates

        ranked = await self.ai.rank_candidates(candidates, query, keywords, limit)
        log.info("Ranking via %s: %d selected", "ai" if ranked.from_ai else "fallback", len(ranked.value))
        return ranked.value
