# Role: Prompt templates for the two search-side LLM calls: keyword expansion and candidate ranking.
# Both demand a raw JSON array so the shared parser can shape-check the answer.

from __future__ import annotations

import json
from typing import Any, Dict, List, Sequence


KEYWORD_SYSTEM_PROMPT = """
Extract relevant search keywords from user queries for professional alumni networking.

Rules:
- Return 8-12 keywords/phrases that help find relevant professionals
- Include synonyms, related terms, and domain-specific language
- Focus on skills, roles, industries, and expertise areas
- Return as a JSON array of strings only, no other text or formatting

Examples:
"web development help" -> ["web development", "frontend", "backend", "javascript", "react", "nodejs", "programming", "developer", "software", "coding"]
"marketing expert" -> ["marketing", "digital marketing", "advertising", "branding", "social media", "growth", "strategy", "promotion", "campaigns", "expert"]
""".strip()


def build_keyword_prompt(query: str) -> str:
    return f'Extract keywords from: "{query}"'


def build_ranking_system_prompt(limit: int) -> str:
    return f"""
Select the TOP {limit} MOST RELEVANT alumni profiles for the user's query.

Ranking Criteria:
1. Direct skill/expertise match
2. Professional role relevance
3. Industry domain alignment
4. Geographic relevance (if specified)
5. Community contributions that match needs
6. Profile completeness and activity

Return ONLY a JSON array of the {limit} most relevant profile keys (the "key" field) in order of relevance,
no other text or formatting:
["key1", "key2", ...]
""".strip()


def build_ranking_prompt(query: str, keywords: Sequence[str], summaries: List[Dict[str, Any]]) -> str:
    return (
        f'User query: "{query}"\n'
        f"Keywords: {', '.join(keywords)}\n\n"
        f"Profiles to rank:\n{json.dumps(summaries, ensure_ascii=False, indent=2)}"
    )
