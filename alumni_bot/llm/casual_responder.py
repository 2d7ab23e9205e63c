# Role: Small-talk replies. Calls the LLM with the persona prompt, cleans common preamble artifacts,
# and falls back to a canned greeting whenever the model is unavailable.

from __future__ import annotations

from typing import Any, Callable, Dict, Optional

from alumni_bot.llm.gemini_client import GeminiClient
from alumni_bot.llm.structured import best_effort
from alumni_bot.prompts.system_prompt import build_casual_prompt, build_system_prompt
from alumni_bot.utils.logger import get_logger

log = get_logger("llm.casual")

_ALWAYS_DROP_PREFIXES = ("the user", "my plan", "i will", "i'll", "i am going to", "here's my reply")
_SOFT_DROP_PREFIXES = ("okay", "ok", "sure", "alright", "got it")


def clean_llm_output(text: str) -> str:
    # Role: remove common filler/preambles without changing actual content.
    if not text:
        return text

    lines = [ln.rstrip() for ln in text.strip().splitlines()]
    cleaned: list[str] = []
    skipping = True

    for ln in lines:
        low_norm = ln.strip().lower().rstrip(":,.-! ")

        if skipping:
            if not low_norm:
                continue
            if any(low_norm.startswith(p) for p in _ALWAYS_DROP_PREFIXES):
                continue
            if any(low_norm.startswith(p) for p in _SOFT_DROP_PREFIXES) and len(low_norm) <= 40:
                continue

        skipping = False
        cleaned.append(ln)

    out = "\n".join(cleaned).strip()
    return out if out else text.strip()


def canned_reply(context: Dict[str, Any]) -> str:
    name = context.get("name") or "there"
    if context.get("profile_complete"):
        return f"Hi {name}! 👋 Tell me what expertise you're looking for and I'll search the alumni network."
    return f"Hi {name}! 👋 I'm here to help you connect with our alumni network."


class CasualResponder:
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

    async def respond(self, message: str, context: Dict[str, Any]) -> str:
        result = await best_effort(
            "casual_reply",
            lambda: self.client.generate_text(
                build_casual_prompt(message, context),
                system_instruction=build_system_prompt(),
                temperature=0.6,
                max_output_tokens=200,
            ),
            lambda raw: clean_llm_output(raw) or None,
            lambda: canned_reply(context),
            timeout=self.timeout,
        )
        return result.value
