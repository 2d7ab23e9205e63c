# Role: Single descriptor table for profile fields: display name, prompt text, help tips and validator,
# indexed by ProfileField. Prompt rendering and validation dispatch both go through this table.

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import TYPE_CHECKING, Awaitable, Callable, Dict, Optional, Sequence, Tuple, Union

from alumni_bot.core import validator as v
from alumni_bot.models.fields import (
    COMMUNITY_ASKS,
    COMMUNITY_GIVES,
    DOMAINS,
    PROFESSIONAL_ROLES,
    YATRA_IMPACT,
    ProfileField,
)
from alumni_bot.models.session import Session
from alumni_bot.utils.logger import get_logger

if TYPE_CHECKING:
    from alumni_bot.llm.ai_service import AITextService

log = get_logger("field_catalog")

ValidatorOutput = Union[v.ValidationResult, Awaitable[v.ValidationResult]]


@dataclass
class ValidationContext:
    session: Optional[Session] = None
    ai: Optional["AITextService"] = None


@dataclass(frozen=True)
class FieldSpec:
    field: ProfileField
    display_name: str
    prompt: Callable[[Optional[Session]], str]
    help_tips: Tuple[str, ...]
    validate: Callable[[str, ValidationContext], ValidatorOutput]


def _numbered(options: Sequence[str], limit: Optional[int] = None) -> str:
    shown = options if limit is None else options[:limit]
    lines = [f"**{i}.** {opt}" for i, opt in enumerate(shown, start=1)]
    if limit is not None and len(options) > limit:
        lines.append(f"...and {len(options) - limit} more (up to {len(options)})")
    return "\n".join(lines)


def _static(text: str) -> Callable[[Optional[Session]], str]:
    return lambda _session: text


# ---------- prompts ----------

INSTAGRAM_CHOICE_PROMPT = """**📸 Instagram Profile (Optional)**

Do you have an Instagram profile to share?

This helps with networking and personal branding.

**Reply:**
• **YES** - I want to add Instagram
• **NO** - Skip Instagram profile"""

INSTAGRAM_URL_PROMPT = """**📸 Instagram Profile URL**

Please enter your Instagram profile URL:

**Example:** https://instagram.com/yourprofile"""

ADDITIONAL_EMAIL_CHOICE_PROMPT = """**📧 Additional Email (Optional)**

Do you have another email address to link?

This helps other alumni find you through multiple emails.

**Reply:**
• **YES** - Add another email
• **NO** - Continue with current email only"""

ADDITIONAL_EMAIL_INPUT_PROMPT = """**📧 Additional Email**

Please enter the email address you want to link:

**Example:** yourname@gmail.com

Reply **SKIP** to continue without it."""


def _instagram_prompt(session: Optional[Session]) -> str:
    if session is not None and session.instagram_choice:
        return INSTAGRAM_URL_PROMPT
    return INSTAGRAM_CHOICE_PROMPT


# ---------- validators bound to a field ----------


def _choice(
    options: Sequence[str],
    min_count: int,
    max_count: Optional[int],
    *,
    single: bool = False,
    preview: int = 8,
) -> Callable[[str, ValidationContext], v.ValidationResult]:
    def _validate(text: str, _ctx: ValidationContext) -> v.ValidationResult:
        result = v.validate_multiple_choice(text, options, min_count, max_count)
        if result.valid:
            return v.ValidationResult.ok(result.value[0] if single else result.value)
        return v.ValidationResult.fail(f"{result.message}\n\n**Options:**\n{_numbered(options, preview)}")

    return _validate


def _geo(kind: str) -> Callable[[str, ValidationContext], Awaitable[v.ValidationResult]]:
    def _validate(text: str, ctx: ValidationContext) -> Awaitable[v.ValidationResult]:
        return v.validate_geography(text, kind, ctx.ai)

    return _validate


def _validate_instagram(text: str, ctx: ValidationContext) -> v.ValidationResult:
    # Two-phase: yes/no first, then the URL once the user has opted in.
    session = ctx.session
    if session is not None and session.instagram_choice:
        return v.validate_instagram_url(text)

    answer = v.validate_yes_no(text)
    if not answer.valid:
        return v.ValidationResult.fail("❌ **Invalid Response**\n\nPlease reply with:\n• YES or NO\n• Y or N")
    if answer.value:
        if session is not None:
            session.instagram_choice = True
        return v.ValidationResult(valid=False, needs_instagram_url=True, message=INSTAGRAM_URL_PROMPT)
    return v.ValidationResult.ok(None)


def _plain(fn: Callable[[str], v.ValidationResult]) -> Callable[[str, ValidationContext], v.ValidationResult]:
    return lambda text, _ctx: fn(text)


# ---------- the table ----------

FIELD_SPECS: Dict[ProfileField, FieldSpec] = {
    spec.field: spec
    for spec in (
        FieldSpec(
            field=ProfileField.FULL_NAME,
            display_name="Full Name",
            prompt=_static(
                "**👤 Full Name Required**\n\nPlease enter your complete legal name:\n\n"
                "**Requirements:**\n• 2-100 characters\n• Only letters, spaces, hyphens, apostrophes\n"
                "• Your real name (no nicknames)\n\n**Examples:**\n• Rajesh Kumar Singh\n• Mary O'Connor-Smith"
            ),
            help_tips=(
                "Use your complete legal name",
                "Include first, middle (if any), and last name",
                "Only letters, spaces, hyphens, and apostrophes allowed",
                "No nicknames, usernames, or special characters",
            ),
            validate=_plain(v.validate_full_name),
        ),
        FieldSpec(
            field=ProfileField.GENDER,
            display_name="Gender",
            prompt=_static(
                "**⚧ Gender Selection**\n\nPlease select your gender:\n\n"
                "**1.** Male\n**2.** Female\n**3.** Others\n\nReply with the number (1, 2, or 3)"
            ),
            help_tips=("Reply with a single number: 1, 2 or 3",),
            validate=_plain(v.validate_gender),
        ),
        FieldSpec(
            field=ProfileField.DATE_OF_BIRTH,
            display_name="Date of Birth",
            prompt=_static(
                "**🎂 Date of Birth Required**\n\nPlease enter your date of birth:\n\n**Format:** DD-MM-YYYY\n\n"
                "**Requirements:**\n• Valid date between 1960-2010\n• Use exact format shown\n\n"
                "**Examples:**\n• 15-08-1995\n• 03-12-1988"
            ),
            help_tips=(
                "Use the exact format DD-MM-YYYY with dashes",
                "Day and month need two digits (05, not 5)",
                "Year must be between 1960 and 2010",
            ),
            validate=_plain(v.validate_date_of_birth),
        ),
        FieldSpec(
            field=ProfileField.COUNTRY,
            display_name="Country",
            prompt=_static(
                "**🌍 Country of Residence**\n\nPlease enter your current country:\n\n"
                "**Examples:**\n• India\n• United States\n• United Kingdom\n• Canada"
            ),
            help_tips=(
                "Enter the country you currently live in",
                "Use the official country name",
                "Avoid abbreviations like 'US' or 'UK'",
            ),
            validate=_geo("country"),
        ),
        FieldSpec(
            field=ProfileField.STATE,
            display_name="State/Province",
            prompt=_static(
                "**📍 State/Province Required**\n\nPlease enter your state or province:\n\n"
                "**Examples:**\n• Maharashtra (India)\n• California (USA)\n• Ontario (Canada)"
            ),
            help_tips=(
                "Enter your state, province or region",
                "Use the official name, not a code",
                "Avoid entering your city or country here",
            ),
            validate=_geo("state"),
        ),
        FieldSpec(
            field=ProfileField.CITY,
            display_name="City",
            prompt=_static(
                "**🏙️ City of Residence**\n\nPlease enter your current city:\n\n"
                "**Examples:**\n• Mumbai\n• New York\n• London\n• Toronto"
            ),
            help_tips=(
                "Enter your current city of residence",
                "Use official city names only",
                "Avoid abbreviations like 'NYC'",
                "Don't enter a person's name",
            ),
            validate=_geo("city"),
        ),
        FieldSpec(
            field=ProfileField.PHONE,
            display_name="Phone Number",
            prompt=_static(
                "**📱 Phone Number Required**\n\nPlease enter your phone number with country code:\n\n"
                "**Examples:**\n• +91 9876543210 (India)\n• +1 2025551234 (USA)\n• +44 7911123456 (UK)"
            ),
            help_tips=(
                "Always include country code",
                "Format: +[country code] [number]",
                "10-15 digits total length",
            ),
            validate=_plain(v.validate_phone_number),
        ),
        FieldSpec(
            field=ProfileField.ADDITIONAL_EMAIL,
            display_name="Additional Email",
            prompt=_static(ADDITIONAL_EMAIL_INPUT_PROMPT),
            help_tips=("Use a complete address like name@example.com",),
            validate=_plain(v.validate_email),
        ),
        FieldSpec(
            field=ProfileField.LINKEDIN,
            display_name="LinkedIn Profile",
            prompt=_static(
                "**🔗 LinkedIn Profile Required**\n\nPlease enter your LinkedIn profile URL:\n\n"
                "**Requirements:**\n• Complete LinkedIn URL\n• Must include linkedin.com/in/\n\n"
                "**Examples:**\n• https://linkedin.com/in/yourname\n• https://www.linkedin.com/in/john-smith-123"
            ),
            help_tips=(
                "Use your complete LinkedIn profile URL",
                "Must include 'linkedin.com/in/'",
                "Copy directly from your LinkedIn profile",
            ),
            validate=_plain(v.validate_linkedin_url),
        ),
        FieldSpec(
            field=ProfileField.INSTAGRAM,
            display_name="Instagram Profile",
            prompt=_instagram_prompt,
            help_tips=(
                "Reply YES or NO first",
                "Then paste your full profile URL, e.g. https://instagram.com/yourprofile",
            ),
            validate=_validate_instagram,
        ),
        FieldSpec(
            field=ProfileField.DOMAIN,
            display_name="Industry Domain",
            prompt=_static(
                "**🏢 Industry Domain**\n\nPlease select your primary industry domain:\n\n"
                f"{_numbered(DOMAINS)}\n\nReply with the number (1-{len(DOMAINS)})"
            ),
            help_tips=("Reply with ONE number from the list", f"Valid numbers are 1 to {len(DOMAINS)}"),
            validate=_choice(DOMAINS, 1, 1, single=True, preview=10),
        ),
        FieldSpec(
            field=ProfileField.PROFESSIONAL_ROLE,
            display_name="Professional Role",
            prompt=_static(
                "**💼 Professional Role**\n\nPlease select your current professional role:\n\n"
                f"{_numbered(PROFESSIONAL_ROLES)}\n\nReply with the number (1-{len(PROFESSIONAL_ROLES)})"
            ),
            help_tips=(
                "Reply with ONE number from the list",
                f"Valid numbers are 1 to {len(PROFESSIONAL_ROLES)}",
            ),
            validate=_choice(PROFESSIONAL_ROLES, 1, 1, single=True, preview=5),
        ),
        FieldSpec(
            field=ProfileField.YATRA_IMPACT,
            display_name="Yatra Impact",
            prompt=_static(
                "**🚆 Jagriti Yatra Impact**\n\nHow did Jagriti Yatra help you personally?\n\n"
                f"Select 1-3 options that apply:\n\n{_numbered(YATRA_IMPACT)}\n\n"
                "**Reply with numbers separated by commas, e.g.** 1,2"
            ),
            help_tips=("Pick between 1 and 3 options", "Separate numbers with commas: 1,3"),
            validate=_choice(YATRA_IMPACT, 1, 3),
        ),
        FieldSpec(
            field=ProfileField.COMMUNITY_ASKS,
            display_name="Community Support Needs",
            prompt=_static(
                "**🤝 Community Support Needs**\n\nWhat are your PRIMARY 3 support needs from our community?\n\n"
                f"**⚠️ Select EXACTLY 3 options:**\n\n{_numbered(COMMUNITY_ASKS)}\n\n"
                "**Reply with exactly 3 numbers, e.g.** 1,3,5"
            ),
            help_tips=("Select exactly 3 different numbers", "Separate them with commas: 2,7,10"),
            validate=_choice(COMMUNITY_ASKS, 3, 3),
        ),
        FieldSpec(
            field=ProfileField.COMMUNITY_GIVES,
            display_name="Community Contributions",
            prompt=_static(
                "**🎁 Community Contributions**\n\nWhat can you contribute to our community?\n\n"
                f"Select all that apply:\n\n{_numbered(COMMUNITY_GIVES)}\n\n"
                "**Reply with numbers separated by commas, e.g.** 1,3,5"
            ),
            help_tips=("Select at least one option", "Separate numbers with commas: 1,3,5"),
            validate=_choice(COMMUNITY_GIVES, 1, None),
        ),
    )
}


# ---------- lookups ----------


def get_spec(field: Union[ProfileField, str]) -> Optional[FieldSpec]:
    parsed = ProfileField.parse(field)
    if parsed is None:
        log.error("Unknown profile field requested: %r", field)
        return None
    return FIELD_SPECS[parsed]


def render_prompt(field: Union[ProfileField, str], session: Optional[Session] = None) -> str:
    spec = get_spec(field)
    if spec is None:
        return f"Please provide your {field}:"
    return spec.prompt(session)


def display_name(field: Union[ProfileField, str]) -> str:
    spec = get_spec(field)
    if spec is None:
        return str(field).replace("_", " ").title()
    return spec.display_name


def help_tips(field: Union[ProfileField, str]) -> Tuple[str, ...]:
    spec = get_spec(field)
    if spec is None:
        return ("Follow the format shown in the example",)
    return spec.help_tips


def format_help(field: Union[ProfileField, str]) -> str:
    tips = "\n".join(f"• {tip}" for tip in help_tips(field))
    return f"💡 **Tips for {display_name(field)}:**\n{tips}"


async def validate_field(
    field: Union[ProfileField, str],
    raw: str,
    session: Optional[Session] = None,
    ai: Optional["AITextService"] = None,
) -> v.ValidationResult:
    spec = get_spec(field)
    if spec is None:
        return v.ValidationResult.fail(
            f'❌ **Unknown Field**\n\nField "{field}" is not recognized. Please contact support.'
        )

    out = spec.validate(v.sanitize_input(raw), ValidationContext(session=session, ai=ai))
    if inspect.isawaitable(out):
        out = await out
    return out
