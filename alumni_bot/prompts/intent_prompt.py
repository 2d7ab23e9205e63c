# Role: Strict prompt template for intent classification. It teaches the LLM a rigid JSON schema and adds a
# "pending state" hint while the bot is waiting for a profile answer or a yes/no choice.

from __future__ import annotations

import json
from typing import Optional

from alumni_bot.models.intent import Intent


def build_intent_prompt(user_message: str, waiting_for: Optional[str] = None) -> str:
    intents = [i.value for i in Intent]

    # Mid-flow: most messages are answers, not new requests.
    pending_block = ""
    if waiting_for and waiting_for.startswith("updating_"):
        field = waiting_for[len("updating_") :]
        pending_block = (
            "\n\nPENDING_ANSWER (SYSTEM STATE):\n"
            f"- The bot previously asked the user for their profile field: {field}\n"
            "- Treat the message as the ANSWER to that field (intent='unknown') unless it is clearly\n"
            "  a request to search the alumni network or to stop/skip the profile.\n"
            "- Short values (names, places, numbers like '1,3,5', dates, URLs) are ALWAYS answers.\n"
        )
    elif waiting_for and waiting_for not in ("ready",):
        pending_block = (
            "\n\nPENDING_CHOICE (SYSTEM STATE):\n"
            f"- The bot previously asked a YES/NO question ({waiting_for}).\n"
            "- yes/y/sure/ok -> intent='affirmative'; no/n/not now -> intent='negative'.\n"
        )

    good_example = {
        "intent": "search",
        "confidence": 0.9,
        "query": "fintech founders in Mumbai",
        "notes": "User wants to find alumni.",
    }

    return f"""
ROLE:
You are a STRICT intent-classification component for a WhatsApp alumni networking bot.
Your job is ONLY to classify the user's message. You must NOT answer the user.

HARD OUTPUT CONTRACT (NON-NEGOTIABLE):
- Output MUST be EXACTLY ONE raw JSON object.
- Output MUST start with '{{' and end with '}}'.
- Output MUST contain NO markdown and NO code fences.

VALID OUTPUT EXAMPLE (copy this style):
{json.dumps(good_example, ensure_ascii=False)}

Allowed intents (choose exactly ONE):
{json.dumps(intents, ensure_ascii=False)}

Rules:
1) Looking for people/expertise/help from alumni ("React developers in Pune", "need a mentor") -> "search"
2) Wants to skip the profile AND search right away ("skip, just find marketing experts") -> "skip_and_search"
3) Wants to complete/update/edit their profile -> "profile_update"
4) Wants to stop/skip/pause the profile questions ("later", "skip profile") -> "skip_profile"
5) yes/sure/ok -> "affirmative"; no/nope/not now -> "negative"
6) Greetings, thanks, small talk -> "casual"
7) Anything else -> "unknown"

For "search" and "skip_and_search", put the user's search request (without filler like "skip") in "query".
Otherwise "query" is null.
{pending_block}

Output JSON schema:
{{
  "intent": "<allowed intent>",
  "confidence": <0.0..1.0>,
  "query": <string or null>,
  "notes": <string>
}}

User message: {user_message}
""".strip()
