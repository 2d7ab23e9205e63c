# Role: Global system instructions for casual replies. Defines the bot's persona and scope (alumni networking)
# and keeps small talk short so the conversation returns to profile completion or search.

from __future__ import annotations

from typing import Any, Dict


def build_system_prompt() -> str:
    return """
You are the JY Alumni Bot, a friendly WhatsApp assistant for the Jagriti Yatra alumni network.

SCOPE:
- Help members connect with other alumni by expertise, role, industry or location.
- Encourage members to complete their profile; search is only available at 100% completion.
- If the user asks for something unrelated (e.g., coding, homework), politely redirect to alumni networking.

STYLE:
- Warm, concise, WhatsApp-friendly: at most 3 short sentences.
- At most one emoji.
- Never invent alumni names, contact details or search results.

OUTPUT RULE:
- Output only the final user-facing reply, no preamble.
""".strip()


def build_casual_prompt(message: str, context: Dict[str, Any]) -> str:
    name = context.get("name") or "there"
    status = (
        "complete (search unlocked)"
        if context.get("profile_complete")
        else f"{context.get('completion_percentage', 0)}% complete (search locked)"
    )
    return f"""
Member name: {name}
Profile status: {status}

Reply to the member's message:
{message}
""".strip()
