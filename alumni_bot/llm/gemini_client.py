# Role: Minimal async wrapper around the Gemini API. Centralizes model name, temperature, timeout and error
# handling, so the rest of the code calls a single method: await generate_text(prompt).

from __future__ import annotations

import os
from typing import Optional

from google import genai

import alumni_bot.config as config


class GeminiClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        temperature: float = 0.3,
        timeout_seconds: Optional[float] = None,
    ) -> None:
        # Key lines:
        # - Reads secrets from env (no secrets in code).
        # - HTTP timeout is bounded so a hung call cannot stall a conversation.
        self.api_key = api_key or os.getenv("GEMINI_API_KEY")
        if not self.api_key:
            raise RuntimeError("Missing GEMINI_API_KEY in environment or .env")

        self.model_name = model or config.GEMINI_MODEL
        self.temperature = temperature
        self.timeout_seconds = timeout_seconds or config.AI_TIMEOUT_SECONDS

        self.client = genai.Client(
            api_key=self.api_key,
            http_options={"timeout": int(self.timeout_seconds * 1000)},
        )

    async def generate_text(
        self,
        prompt: str,
        *,
        system_instruction: Optional[str] = None,
        temperature: Optional[float] = None,
        max_output_tokens: Optional[int] = None,
    ) -> str:
        # 1) Validate prompt
        # 2) Call Gemini (single text completion, async)
        # 3) Validate non-empty response
        if not prompt or not prompt.strip():
            raise ValueError("Prompt must be non-empty.")

        generation_config = {"temperature": self.temperature if temperature is None else temperature}
        if system_instruction:
            generation_config["system_instruction"] = system_instruction
        if max_output_tokens:
            generation_config["max_output_tokens"] = max_output_tokens

        try:
            resp = await self.client.aio.models.generate_content(
                model=self.model_name,
                contents=prompt,
                config=generation_config,
            )
        except Exception as e:
            raise RuntimeError(f"Gemini API call failed: {e}") from e

        text = getattr(resp, "text", None)
        if not text:
            raise RuntimeError("Gemini returned an empty response.")

        return text.strip()
