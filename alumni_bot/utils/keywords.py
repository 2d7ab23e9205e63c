# Role: Deterministic search helpers used whenever the AI path is unavailable:
# rule-based keyword expansion and a simple relevance score for ranking candidates.

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Sequence

from alumni_bot.models.user_record import UserRecord

MAX_KEYWORDS = 12
MAX_DIRECT_KEYWORDS = 8
ACTIVE_WINDOW_DAYS = 30

# Topic -> synonyms, matched by substring against the lowercased query.
SEARCH_ENHANCEMENT_MAP = {
    "web dev": "web development frontend backend javascript react nodejs",
    "web development": "web development frontend backend javascript react nodejs",
    "devops": "devops development operations infrastructure deployment automation cloud",
    "react": "react javascript frontend development programming web ui",
    "marketing": "marketing advertising digital promotion branding social media",
    "fintech": "fintech financial technology banking payments digital finance",
    "healthtech": "healthtech healthcare medical technology digital health",
    "edtech": "edtech education technology learning digital education",
    "agritech": "agritech agriculture technology farming digital agriculture",
    "startup": "startup entrepreneur business founder venture",
    "ai": "artificial intelligence machine learning data science AI ML",
    "blockchain": "blockchain cryptocurrency crypto distributed ledger",
    "mobile": "mobile app android ios flutter react native",
    "design": "design UI UX user interface user experience graphic",
    "sales": "sales business development customer acquisition revenue",
    "hr": "human resources talent management recruitment hiring",
    "legal": "legal compliance law regulatory corporate legal",
    "consulting": "consulting advisory strategy business consulting",
    "finance": "finance accounting financial analysis investment banking",
}

STOPWORDS = frozenset(
    {"help", "need", "want", "looking", "find", "search", "connect", "assistance", "support", "with", "for", "in"}
)


def _dedupe(items: Iterable[str]) -> List[str]:
    seen = set()
    out: List[str] = []
    for item in items:
        if item and item not in seen:
            seen.add(item)
            out.append(item)
    return out


def expand_keywords(query: str) -> List[str]:
    # 1) Synonyms from every topic whose key appears in the query
    # 2) Direct tokens (stopwords removed, > 2 chars, first 8)
    # 3) Deduplicate preserving order, cap at 12
    normalized = (query or "").lower()
    keywords: List[str] = []

    for topic, synonyms in SEARCH_ENHANCEMENT_MAP.items():
        if topic in normalized:
            keywords.extend(synonyms.split())

    tokens = [t for t in re.split(r"[,\s]+", normalized) if t]
    direct = [t for t in tokens if t not in STOPWORDS and len(t) > 2]
    keywords.extend(direct[:MAX_DIRECT_KEYWORDS])

    return _dedupe(keywords)[:MAX_KEYWORDS]


def candidate_key(user: UserRecord) -> str:
    return user.basic_profile.email or user.identity


def searchable_text(user: UserRecord) -> str:
    basic, enhanced = user.basic_profile, user.enhanced_profile
    parts = [
        basic.about or "",
        basic.name or "",
        enhanced.full_name or "",
        enhanced.domain or "",
        enhanced.professional_role or "",
        enhanced.city or "",
        enhanced.state or "",
        *enhanced.community_gives,
        *enhanced.community_asks,
    ]
    return " ".join(parts).lower()


def score_candidate(user: UserRecord, keywords: Sequence[str], now: Optional[datetime] = None) -> int:
    text = searchable_text(user)
    score = sum(1 for kw in keywords if kw and kw.lower() in text)

    enhanced = user.enhanced_profile
    if enhanced.completed:
        score += 2
    if enhanced.linkedin:
        score += 1
    if enhanced.community_gives:
        score += 1

    last_active = user.metadata.last_active
    if last_active is not None:
        now = now or datetime.now(timezone.utc)
        if last_active.tzinfo is None:
            last_active = last_active.replace(tzinfo=timezone.utc)
        if (now - last_active).days < ACTIVE_WINDOW_DAYS:
            score += 1

    return score


def score_candidates(
    candidates: Sequence[UserRecord],
    keywords: Sequence[str],
    limit: int,
    now: Optional[datetime] = None,
) -> List[UserRecord]:
    # sorted() is stable, so ties keep store order.
    ranked = sorted(candidates, key=lambda u: score_candidate(u, keywords, now), reverse=True)
    return ranked[:limit]
