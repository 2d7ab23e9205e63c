# Role: Per-field input validators. Each one takes raw user text and returns a ValidationResult carrying either
# the normalized value or display-ready error copy (with examples). Validators never raise on bad input.

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING, Any, List, Optional, Sequence
from urllib.parse import urlparse

from alumni_bot.models.fields import GENDERS
from alumni_bot.utils import gazetteer
from alumni_bot.utils.logger import get_logger

if TYPE_CHECKING:
    from alumni_bot.llm.ai_service import AITextService

log = get_logger("validator")

MAX_INPUT_LENGTH = 1000
MIN_BIRTH_YEAR = 1960
MAX_BIRTH_YEAR = 2010

_NAME_RE = re.compile(r"^[a-zA-Z\s\-.']+$")
_REPEATED_RE = re.compile(r"(.)\1{4,}")
_PLACEHOLDER_NAME_RE = re.compile(r"^(test|example|sample|dummy|user)", re.IGNORECASE)
_DATE_RE = re.compile(r"^(\d{2})-(\d{2})-(\d{4})$")
_EMAIL_RE = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
_GEO_CHARS_RE = re.compile(r"^[a-zA-Z\s\-.'()]+$")

_YES = {"yes", "y", "1", "yeah", "yep", "sure", "ok", "okay"}
_NO = {"no", "n", "2", "nope", "nah"}


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    value: Any = None
    message: Optional[str] = None
    needs_instagram_url: bool = False
    warning: Optional[str] = None

    @classmethod
    def ok(cls, value: Any, warning: Optional[str] = None) -> "ValidationResult":
        return cls(valid=True, value=value, warning=warning)

    @classmethod
    def fail(cls, message: str) -> "ValidationResult":
        return cls(valid=False, message=message)


def sanitize_input(text: Any) -> str:
    # trim, cap, strip angle brackets
    if not isinstance(text, str):
        return ""
    return text.strip()[:MAX_INPUT_LENGTH].replace("<", "").replace(">", "")


# ---------- free text ----------


def validate_full_name(text: str) -> ValidationResult:
    name = sanitize_input(text)

    if len(name) < 2 or len(name) > 100:
        return ValidationResult.fail(
            "❌ **Invalid Name Length**\n\nName should be 2-100 characters long.\n\n**Example:** Rajesh Kumar Singh"
        )
    if not _NAME_RE.match(name):
        return ValidationResult.fail(
            "❌ **Invalid Characters**\n\nName should only contain:\n• Letters (a-z, A-Z)\n• Spaces\n"
            "• Hyphens (-)\n• Apostrophes (')\n\n**Example:** Mary O'Connor-Smith"
        )
    if _REPEATED_RE.search(name):
        return ValidationResult.fail(
            "❌ **Invalid Name Pattern**\n\nPlease enter your real name.\n\n**Example:** Rajesh Kumar Singh"
        )
    if _PLACEHOLDER_NAME_RE.match(name):
        return ValidationResult.fail(
            "❌ **Please Enter Real Name**\n\nTest names are not allowed.\n\n**Example:** Your actual full name"
        )
    return ValidationResult.ok(name)


def validate_date_of_birth(text: str) -> ValidationResult:
    raw = sanitize_input(text)
    m = _DATE_RE.match(raw)
    if not m:
        return ValidationResult.fail(
            "❌ **Invalid Date Format**\n\nRequired format: DD-MM-YYYY\n\n"
            "**Examples:**\n• 15-08-1995\n• 03-12-1988\n• 25-06-1992"
        )

    day, month, year = (int(g) for g in m.groups())

    if year < MIN_BIRTH_YEAR or year > MAX_BIRTH_YEAR:
        return ValidationResult.fail(
            f"❌ **Invalid Birth Year**\n\nYear must be between {MIN_BIRTH_YEAR}-{MAX_BIRTH_YEAR}\n\n"
            "**Example:** 15-08-1995"
        )
    if month < 1 or month > 12:
        return ValidationResult.fail(
            "❌ **Invalid Month**\n\nMonth must be between 01-12\n\n"
            "**Examples:**\n• 15-01-1995 (January)\n• 15-12-1995 (December)"
        )

    try:
        date(year, month, day)
    except ValueError:
        return ValidationResult.fail(
            "❌ **Invalid Date**\n\nThis date doesn't exist.\n\n**Examples of valid dates:**\n"
            "• 28-02-1995 (Feb 28)\n• 29-02-1996 (Leap year)\n• 30-04-1995 (Apr 30)"
        )

    return ValidationResult.ok(raw)


def validate_phone_number(text: str) -> ValidationResult:
    raw = sanitize_input(text)
    digits = re.sub(r"\D", "", raw)

    if len(digits) < 10 or len(digits) > 15:
        return ValidationResult.fail(
            "❌ **Invalid Phone Number Length**\n\nPhone number must be 10-15 digits\n\n"
            "**Examples:**\n• +91 9876543210 (India)\n• +1 2025551234 (USA)\n• +44 7911123456 (UK)"
        )

    if len(digits) > 10 and not any(digits[:n] in gazetteer.CALLING_CODES for n in (1, 2, 3)):
        return ValidationResult.fail(
            "❌ **Invalid Country Code**\n\nPlease include a valid country code.\n\n"
            "**Examples:**\n• +91 9876543210 (India)\n• +1 2025551234 (USA)\n• +44 7911123456 (UK)"
        )

    return ValidationResult.ok(raw)


def validate_email(text: str) -> ValidationResult:
    email = sanitize_input(text)

    if not _EMAIL_RE.match(email):
        return ValidationResult.fail(
            "❌ **Invalid Email Format**\n\nPlease enter a valid email address.\n\n"
            "**Examples:**\n• yourname@gmail.com\n• john.smith@company.com"
        )
    if len(email) > 254:
        return ValidationResult.fail("❌ **Email Too Long**\n\nEmail address is too long (max 254 characters).")

    return ValidationResult.ok(email.lower())


# ---------- URLs ----------


def _parse_url(raw: str):
    parsed = urlparse(raw)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return None
    return parsed


def validate_linkedin_url(text: str) -> ValidationResult:
    raw = sanitize_input(text)

    if "linkedin.com" not in raw.lower():
        return ValidationResult.fail(
            "❌ **Not a LinkedIn URL**\n\nPlease enter a valid LinkedIn profile URL.\n\n"
            "**Examples:**\n• https://linkedin.com/in/yourname\n• https://www.linkedin.com/in/john-smith-123"
        )

    parsed = _parse_url(raw)
    if parsed is None:
        return ValidationResult.fail(
            "❌ **Invalid URL Format**\n\nPlease enter a complete LinkedIn URL.\n\n"
            "**Example:** https://linkedin.com/in/yourname\n\n**Tip:** Make sure it starts with https://"
        )
    if "linkedin.com" not in (parsed.hostname or "").lower():
        return ValidationResult.fail(
            "❌ **Invalid LinkedIn Domain**\n\nURL must be from linkedin.com\n\n"
            "**Example:** https://linkedin.com/in/yourprofile"
        )
    if "/in/" not in parsed.path:
        return ValidationResult.fail(
            "❌ **Invalid LinkedIn Profile URL**\n\nPlease use your personal profile URL.\n\n"
            "**Example:** https://www.linkedin.com/in/john-smith-123"
        )

    return ValidationResult.ok(raw)


def validate_instagram_url(text: str) -> ValidationResult:
    raw = sanitize_input(text)

    if "instagram.com" not in raw.lower():
        return ValidationResult.fail(
            "❌ **Not an Instagram URL**\n\nPlease enter a valid Instagram profile URL.\n\n"
            "**Examples:**\n• https://instagram.com/yourprofile\n• https://www.instagram.com/username"
        )

    parsed = _parse_url(raw)
    if parsed is None:
        return ValidationResult.fail(
            "❌ **Invalid URL Format**\n\nPlease enter a complete Instagram URL.\n\n"
            "**Example:** https://instagram.com/yourprofile\n\n**Tip:** Make sure it starts with https://"
        )
    if "instagram.com" not in (parsed.hostname or "").lower():
        return ValidationResult.fail(
            "❌ **Invalid Instagram Domain**\n\nURL must be from instagram.com\n\n"
            "**Example:** https://instagram.com/yourprofile"
        )

    return ValidationResult.ok(raw)


# ---------- choices ----------


def validate_yes_no(text: str) -> ValidationResult:
    answer = sanitize_input(text).lower().rstrip("!.")
    if answer in _YES:
        return ValidationResult.ok(True)
    if answer in _NO:
        return ValidationResult.ok(False)
    return ValidationResult.fail("❌ **Invalid Response**\n\nPlease reply with:\n• YES or NO\n• Y or N\n• 1 or 2")


def validate_gender(text: str) -> ValidationResult:
    choice = sanitize_input(text)
    if choice in ("1", "2", "3"):
        return ValidationResult.ok(GENDERS[int(choice) - 1])
    return ValidationResult.fail(
        "❌ **Invalid Selection**\n\nPlease select 1, 2, or 3:\n\n1️⃣ Male\n2️⃣ Female\n3️⃣ Others"
    )


def _selection_rule(min_count: int, max_count: Optional[int]) -> str:
    if max_count is not None and min_count == max_count:
        return f"exactly {min_count}"
    if max_count is None:
        return f"at least {min_count}"
    return f"{min_count} to {max_count}"


def validate_multiple_choice(
    text: str,
    options: Sequence[str],
    min_count: int = 1,
    max_count: Optional[int] = None,
) -> ValidationResult:
    # 1) Every comma-separated token must be an integer
    # 2) Count within [min, max]
    # 3) No duplicates, every index in [1, len(options)]
    # Selection order is preserved as typed.
    raw = sanitize_input(text)
    rule = _selection_rule(min_count, max_count)

    if not raw:
        return ValidationResult.fail(
            f"❌ **No Selection Made**\n\nPlease select {rule} option(s).\n\n"
            "**Format:** 1,3,5 (numbers separated by commas)"
        )

    tokens = [t.strip() for t in raw.split(",")]
    numbers: List[int] = []
    for token in tokens:
        if not re.fullmatch(r"[+-]?\d+", token):
            return ValidationResult.fail(
                "❌ **Invalid Format**\n\nPlease use numbers separated by commas.\n\n"
                "**Examples:**\n• Single: 3\n• Multiple: 1,4,7"
            )
        numbers.append(int(token))

    if len(numbers) < min_count:
        return ValidationResult.fail(
            f"❌ **Too Few Selections**\n\nPlease select {rule} option(s).\n\n"
            f"You selected: {len(numbers)}\n\n**Example:** {','.join(str(i + 1) for i in range(min_count))}"
        )
    if max_count is not None and len(numbers) > max_count:
        return ValidationResult.fail(
            f"❌ **Too Many Selections**\n\nPlease select {rule} option(s).\n\n"
            f"You selected: {len(numbers)}\n\n**Example:** {','.join(str(i + 1) for i in range(max_count))}"
        )
    if len(set(numbers)) != len(numbers):
        return ValidationResult.fail(
            "❌ **Duplicate Selections**\n\nPlease don't repeat the same option.\n\n**Example:** 1,3,5 (not 1,1,3,5)"
        )

    out_of_range = [n for n in numbers if n < 1 or n > len(options)]
    if out_of_range:
        return ValidationResult.fail(
            f"❌ **Invalid Option**\n\nInvalid: {', '.join(str(n) for n in out_of_range)}\n"
            f"Valid range: 1 to {len(options)}"
        )

    return ValidationResult.ok([options[n - 1] for n in numbers])


# ---------- geography ----------


async def validate_geography(
    text: str,
    kind: str,
    ai: Optional["AITextService"] = None,
) -> ValidationResult:
    # 1) Length + charset
    # 2) Gazetteer exact/substring hit -> accept
    # 3) AI VALID/INVALID verdict when available
    # 4) Otherwise heuristics: reject likely names/placeholders, accept the rest with a warning
    place = sanitize_input(text)
    label = kind.capitalize()
    examples = gazetteer.examples_for(kind)

    if len(place) < 2 or len(place) > 50:
        return ValidationResult.fail(
            f"❌ **Invalid {label} Length**\n\n{label} must be 2-50 characters long.\n\n**Examples:**\n{examples}"
        )
    if not _GEO_CHARS_RE.match(place):
        return ValidationResult.fail(
            f"❌ **Invalid Characters**\n\n{label} should only contain letters, spaces, hyphens (-), "
            f"periods, apostrophes (') and parentheses ().\n\n**Examples:**\n{examples}"
        )

    if gazetteer.is_known_place(place, kind):
        return ValidationResult.ok(place)

    if ai is not None:
        verdict = await ai.classify_geography(place, kind)
        accepted, from_ai = verdict.value, verdict.from_ai
    else:
        accepted, from_ai = gazetteer.heuristic_accepts(place), False

    if from_ai:
        if accepted:
            return ValidationResult.ok(place)
        return ValidationResult.fail(
            f'❌ **"{place}" is not a valid {kind}**\n\nPlease enter a real {kind} name.\n\n'
            f"**Examples:**\n{examples}\n\n**Tips:**\n• Check spelling carefully\n• Use official {kind} names"
        )

    if not accepted:
        return ValidationResult.fail(
            f'❌ **"{place}" doesn\'t appear to be a {kind}**\n\nPlease enter a real {kind} name.\n\n'
            f"**Examples:**\n{examples}"
        )

    log.info("Accepting unverified %s=%r on heuristics", kind, place)
    return ValidationResult.ok(place, warning=f'⚠️ Unable to verify "{place}" - please ensure it\'s correct')
