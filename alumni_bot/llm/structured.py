# Role: One "best-effort structured extraction" helper for every LLM call site.
# Contract: call the model under a bounded timeout, parse + shape-check the text, and on ANY failure
# (missing client, timeout, API error, malformed output) return the deterministic fallback instead.

from __future__ import annotations

import asyncio
import json
import re
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Optional, Tuple, TypeVar

import alumni_bot.config as config
from alumni_bot.utils.logger import get_logger

log = get_logger("llm.structured")

T = TypeVar("T")


@dataclass(frozen=True)
class BestEffortResult(Generic[T]):
    value: T
    from_ai: bool
    error: Optional[str] = None


def strip_code_fences(text: str) -> str:
    # Role: remove markdown fences if the model wrapped its JSON.
    if not text:
        return ""
    t = text.strip()

    if t.startswith("```"):
        t = re.sub(r"^\s*```(?:json)?\s*", "", t, flags=re.IGNORECASE)
        t = re.sub(r"\s*```\s*$", "", t)
    return t.replace("`", "").strip()


def try_parse_json(text: str) -> Tuple[Optional[Any], str]:
    # 1) strict json.loads
    # 2) strip code fences
    # 3) extract the outermost [...] or {...} substring as last attempt
    raw = (text or "").strip()

    try:
        return json.loads(raw), "strict"
    except json.JSONDecodeError:
        pass

    cleaned = strip_code_fences(raw)
    if cleaned != raw:
        try:
            return json.loads(cleaned), "stripped_fences"
        except json.JSONDecodeError:
            pass

    for open_ch, close_ch in (("[", "]"), ("{", "}")):
        start = cleaned.find(open_ch)
        end = cleaned.rfind(close_ch)
        if start != -1 and end > start:
            try:
                return json.loads(cleaned[start : end + 1]), "extracted"
            except json.JSONDecodeError:
                continue

    return None, "failed"


def parse_string_list(text: str) -> Optional[list[str]]:
    # Shape check used by keyword extraction and ranking: a non-empty JSON array of strings.
    parsed, _ = try_parse_json(text)
    if not isinstance(parsed, list):
        return None
    out = [item.strip() for item in parsed if isinstance(item, str) and item.strip()]
    return out or None


async def best_effort(
    operation: str,
    call: Callable[[], Awaitable[str]],
    parse: Callable[[str], Optional[T]],
    fallback: Callable[[], T],
    *,
    timeout: Optional[float] = None,
) -> BestEffortResult[T]:
    limit = timeout if timeout is not None else config.AI_TIMEOUT_SECONDS

    try:
        raw = await asyncio.wait_for(call(), timeout=limit)
    except asyncio.TimeoutError:
        log.warning("%s: AI call timed out after %.1fs; using fallback", operation, limit)
        return BestEffortResult(value=fallback(), from_ai=False, error="timeout")
    except Exception as e:
        log.warning("%s: AI call failed (%r); using fallback", operation, e)
        return BestEffortResult(value=fallback(), from_ai=False, error=repr(e))

    log.debug("%s raw output: %s", operation, raw)

    try:
        value = parse(raw)
    except Exception as e:
        log.warning("%s: could not parse AI output (%r); using fallback", operation, e)
        return BestEffortResult(value=fallback(), from_ai=False, error=repr(e))

    if value is None:
        log.warning("%s: AI output had the wrong shape; using fallback", operation)
        return BestEffortResult(value=fallback(), from_ai=False, error="malformed")

    return BestEffortResult(value=value, from_ai=True)
