# Role: Deterministic rendering of search results into a WhatsApp-sized message.
# Full cards for the top 3; a compact name/email/role list when the full text would exceed the message limit.

from __future__ import annotations

from typing import List, Sequence

from alumni_bot.models.user_record import UserRecord

MESSAGE_BUDGET = 4000
TOP_N = 3
BIO_LIMIT = 150
TAG_LIMIT = 2


def _name(user: UserRecord) -> str:
    return user.enhanced_profile.full_name or user.basic_profile.name or "Name not available"


def _email(user: UserRecord) -> str:
    return user.basic_profile.email or "Email not available"


def render_card(index: int, user: UserRecord) -> str:
    basic, enhanced = user.basic_profile, user.enhanced_profile
    lines: List[str] = [f"{index}. **{_name(user)}**"]

    role, domain = enhanced.professional_role, enhanced.domain
    if role and domain:
        lines.append(f"💼 {role} in {domain}")
    elif role:
        lines.append(f"💼 {role}")
    elif domain:
        lines.append(f"🏢 {domain}")

    location = [p for p in (enhanced.city, enhanced.state, enhanced.country) if p]
    if location:
        lines.append(f"📍 {', '.join(location)}")

    about = basic.about or ""
    if len(about) > 10:
        lines.append(f"📋 {about[:BIO_LIMIT] + '...' if len(about) > BIO_LIMIT else about}")

    if enhanced.yatra_impact:
        lines.append(f"🚆 Yatra Impact: {', '.join(enhanced.yatra_impact[:TAG_LIMIT])}")
    if enhanced.community_gives:
        lines.append(f"🎁 Offers: {', '.join(enhanced.community_gives[:TAG_LIMIT])}")

    lines.append(f"📧 {_email(user)}")

    linkedin = enhanced.linkedin or basic.linkedin
    if linkedin:
        lines.append(f"🔗 {linkedin}")
    if enhanced.phone:
        lines.append(f"📱 {enhanced.phone}")

    return "\n".join(lines)


def render_compact(index: int, user: UserRecord) -> str:
    role = user.enhanced_profile.professional_role
    return f"{index}. {_name(user)}\n📧 {_email(user)}" + (f"\n💼 {role}" if role else "")


def format_results(selected: Sequence[UserRecord], query: str, total_matches: int) -> str:
    top = list(selected[:TOP_N])
    if not top:
        return no_results_message(query)

    plural = "s" if total_matches > 1 else ""
    header = f'🌟 Found {total_matches} expert{plural} for "{query}"\n\nTop {len(top)} profiles:\n\n'
    body = "\n\n".join(render_card(i, u) for i, u in enumerate(top, start=1))

    text = header + body + "\n\n🚀 Contact them directly for collaboration!"
    if total_matches > TOP_N:
        text += f"\n\n💡 {total_matches - TOP_N} more experts available - try more specific keywords."

    if len(text) <= MESSAGE_BUDGET:
        return text

    compact = "\n\n".join(render_compact(i, u) for i, u in enumerate(top, start=1))
    return f'🌟 Found {total_matches} experts for "{query}"\n\nTop {len(top)} matches:\n\n{compact}\n\n🚀 Contact them directly!'


def no_results_message(query: str) -> str:
    return (
        f'I searched our network but couldn\'t find alumni matching "{query}". 🔍\n\n'
        "Try these suggestions:\n"
        '- Use broader terms: "technology", "business", "marketing"\n'
        '- Search by role: "entrepreneur", "developer", "consultant"\n'
        '- Search by industry: "fintech", "healthtech", "edtech"\n'
        '- Search by location: "Mumbai", "Bangalore", "Delhi"\n\n'
        "What other expertise would be helpful?"
    )


SEARCH_FAILED_MESSAGE = (
    "I'm having a technical hiccup! 😅\n\nPlease try again, or try simpler terms like:\n"
    '• "web developers"\n• "business mentors"\n• "marketing help"'
)

RATE_LIMITED_MESSAGE = (
    "⏳ You've reached today's search limit.\n\nPlease try again tomorrow."
)
