# Role: The conversation core. Given (message, intent, session) it picks exactly one handler from an ordered
# rule list, mutates the session, persists validated field values, and returns the reply text.
# Search is hard-gated behind 100% profile completion; any unexpected error restores the pre-turn session.

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol, Tuple

from alumni_bot.core import field_catalog as catalog
from alumni_bot.core.completion_gate import SearchAccess, can_access_search
from alumni_bot.core.search_pipeline import SearchPipeline
from alumni_bot.core.validator import sanitize_input, validate_email, validate_yes_no
from alumni_bot.llm.ai_service import AITextService
from alumni_bot.models.fields import FIELD_ORDER, OPTIONAL_FIELDS, ProfileField
from alumni_bot.models.intent import Intent, IntentResult
from alumni_bot.models.session import Session, Stage
from alumni_bot.models.user_record import is_blank
from alumni_bot.services.analytics import AnalyticsSink, emit, report_error
from alumni_bot.services.user_store import UserStore
from alumni_bot.utils.logger import get_logger

log = get_logger("state_machine")

HELP_AFTER_FAILURES = 3

TECHNICAL_ISSUE_MESSAGE = "⚠️ I'm experiencing a technical issue. Please try your request again."

POPULAR_SEARCHES = (
    "**Popular Searches:**\n"
    '• "React developers in Bangalore"\n'
    '• "fintech startup founders"\n'
    '• "digital marketing experts"\n'
    '• "healthcare entrepreneurs"'
)


class CasualResponder(Protocol):
    async def respond(self, message: str, context: Dict[str, Any]) -> str: ...


@dataclass
class Turn:
    message: str
    intent: IntentResult
    session: Session
    access: SearchAccess

    @property
    def lowered(self) -> str:
        return self.message.lower()

    @property
    def name(self) -> str:
        user = self.session.user
        return user.display_name if user else "there"


Handler = Callable[[Turn], Awaitable[str]]
Rule = Tuple[str, Callable[[Turn], bool], Handler]


def _plural(n: int, word: str) -> str:
    return f"{n} {word}{'s' if n != 1 else ''}"


def _percent(done: int, total: int) -> int:
    return int(100 * done / total + 0.5) if total else 100


def _step_header(step: int, total: int, field: ProfileField) -> str:
    return f"**Step {step} of {total}:** {catalog.display_name(field)}"


class ProfileStateMachine:
    def __init__(
        self,
        store: UserStore,
        search: SearchPipeline,
        casual: CasualResponder,
        ai: Optional[AITextService] = None,
        analytics: Optional[AnalyticsSink] = None,
    ) -> None:
        self.store = store
        self.search = search
        self.casual = casual
        self.ai = ai
        self.analytics = analytics

        # First match wins; order is the priority.
        self.rules: List[Rule] = [
            ("field_update", lambda t: t.session.is_updating, self._handle_field_update),
            ("search", lambda t: t.intent.is_search, self._handle_search),
            ("profile_choice", lambda t: t.session.stage == Stage.PROFILE_CHOICE, self._handle_profile_choice),
            (
                "additional_email_choice",
                lambda t: t.session.stage == Stage.ADDITIONAL_EMAIL_CHOICE,
                self._handle_additional_email_choice,
            ),
            (
                "additional_email_input",
                lambda t: t.session.stage == Stage.ADDITIONAL_EMAIL_INPUT,
                self._handle_additional_email_input,
            ),
            ("instagram_choice", lambda t: t.session.stage == Stage.INSTAGRAM_CHOICE, self._handle_instagram_choice),
            ("profile_update", lambda t: t.intent.intent == Intent.PROFILE_UPDATE, self._handle_profile_update),
            ("casual", lambda t: t.intent.intent == Intent.CASUAL, self._handle_casual),
            (
                "auto_start",
                lambda t: not t.access.can_access and not t.session.profile_completion_started,
                self._handle_auto_start,
            ),
            ("complete", lambda t: t.access.can_access, self._handle_complete),
            ("fallback", lambda t: True, self._handle_fallback),
        ]

    # ---------- entry point ----------

    async def handle(self, message: str, intent: IntentResult, session: Session) -> str:
        # 1) Snapshot the session
        # 2) Run the first matching rule
        # 3) On any unexpected error: log + report, restore the snapshot, reply with a generic retry message
        snapshot = session.model_copy(deep=True)
        turn = Turn(
            message=sanitize_input(message),
            intent=intent,
            session=session,
            access=can_access_search(session.user),
        )

        rule_name = "none"
        try:
            for rule_name, matches, handler in self.rules:
                if matches(turn):
                    log.debug("phone=%s rule=%s waiting_for=%s", session.phone, rule_name, session.waiting_for)
                    reply = await handler(turn)
                    session.touch()
                    return reply
        except Exception as e:
            log.exception("Dispatch failed phone=%s rule=%s", session.phone, rule_name)
            await report_error(
                self.analytics,
                e,
                operation=f"handle:{rule_name}",
                phone=session.phone,
                intent=intent.intent.value,
                waiting_for=snapshot.waiting_for,
            )
            self._restore(session, snapshot)
            return TECHNICAL_ISSUE_MESSAGE

        return TECHNICAL_ISSUE_MESSAGE

    @staticmethod
    def _restore(session: Session, snapshot: Session) -> None:
        for name in type(session).model_fields:
            setattr(session, name, getattr(snapshot, name))

    # ---------- shared steps ----------

    def _seed(self, session: Session, access: SearchAccess) -> Tuple[ProfileField, int]:
        first = session.start_pass(access.incomplete_fields)
        return first, len(access.incomplete_fields)

    def _first_step(self, session: Session, first: ProfileField, total: int) -> str:
        return f"{_step_header(1, total, first)}\n\n{catalog.render_prompt(first, session)}"

    def _optional_offer(self, session: Session, after: ProfileField) -> Optional[ProfileField]:
        # The optional field that directly follows `after` in canonical order, if it still needs offering.
        # Only offered while required fields remain, so the last required save always completes the profile.
        if not session.remaining_fields:
            return None
        idx = FIELD_ORDER.index(after)
        if idx + 1 >= len(FIELD_ORDER):
            return None
        nxt = FIELD_ORDER[idx + 1]
        if nxt not in OPTIONAL_FIELDS or nxt in session.offered_optional:
            return None
        if session.user is not None and not is_blank(session.user.get_field(nxt)):
            return None
        return nxt

    async def _advance_or_complete(self, session: Session, after: Optional[ProfileField]) -> str:
        # 1) Mid-pass: offer the optional field that follows `after`, once per pass
        # 2) Otherwise move to the head of remaining_fields
        # 3) Otherwise mark the profile complete
        if after is not None:
            offer = self._optional_offer(session, after)
            if offer == ProfileField.ADDITIONAL_EMAIL:
                session.offered_optional.append(offer)
                session.park(Stage.ADDITIONAL_EMAIL_CHOICE)
                return catalog.ADDITIONAL_EMAIL_CHOICE_PROMPT
            if offer == ProfileField.INSTAGRAM:
                session.offered_optional.append(offer)
                session.park(Stage.INSTAGRAM_CHOICE)
                return catalog.INSTAGRAM_CHOICE_PROMPT

        total = session.completion.total_steps if session.completion else 1
        nxt = session.advance()
        if nxt is not None:
            step = total - len(session.remaining_fields)
            return f"{_step_header(step, total, nxt)}\n\n{catalog.render_prompt(nxt, session)}"

        ok = await self.store.mark_completed(session.phone)
        if not ok:
            log.warning("mark_completed returned False phone=%s", session.phone)
        session.end_pass(completed=True)
        await emit(self.analytics, session.phone, "profile_completed")

        return (
            "🎉 **PROFILE COMPLETED!**\n\n"
            "✅ **100% Complete - Search Now Unlocked!**\n"
            "🌟 **Welcome to the full JY Alumni Network!**\n\n"
            "What expertise are you looking for today?\n\n"
            "**Try these searches:**\n"
            '• "React developers in your city"\n'
            '• "startup mentors in fintech"\n'
            '• "marketing strategy experts"'
        )

    async def _reload_user(self, session: Session) -> None:
        fresh = await self.store.find_by_identity(session.phone)
        if fresh is not None:
            session.user = fresh

    def _is_yes(self, turn: Turn) -> bool:
        if turn.intent.intent == Intent.AFFIRMATIVE:
            return True
        answer = validate_yes_no(turn.message)
        return (answer.valid and answer.value is True) or "yes" in turn.lowered

    # ---------- rule 1: field update ----------

    async def _handle_field_update(self, turn: Turn) -> str:
        session = turn.session
        field = session.current_field
        if field is None:
            raise RuntimeError(f"No field in focus for phone={session.phone}")
        total = session.completion.total_steps if session.completion else 1

        # Optional fields can be left out without pausing the pass ("skip" would otherwise read as a stop)
        if field in OPTIONAL_FIELDS and turn.lowered in ("skip", "no", "none"):
            return await self._advance_or_complete(session, field)

        # Stop / defer
        if turn.intent.intent == Intent.SKIP_PROFILE or "later" in turn.lowered or "stop" in turn.lowered:
            done = 0
            if session.user is not None:
                done = sum(1 for f in session.incomplete_fields if not is_blank(session.user.get_field(f)))
            session.end_pass(skipped=True)
            return (
                "⏸️ **Profile Update Paused**\n\n"
                f"Progress: {done}/{total} fields completed\n"
                "🔒 **Search remains locked until 100% completion**\n\n"
                'When ready to continue, type:\n• "complete profile"\n• "update profile"\n\n'
                "What can I help you with in the meantime?"
            )

        # Search is blocked mid-update; nothing changes
        if turn.intent.is_search:
            step = total - len(session.remaining_fields) + 1
            return (
                "🔒 **Profile Completion Required First**\n\n"
                "Please complete this field to unlock search.\n\n"
                f"**Current: Step {min(step, total)} of {total}**\n"
                f"**Field:** {catalog.display_name(field)}\n\n"
                f"{catalog.render_prompt(field, session)}\n\n"
                "🔍 *Search unlocks after ALL fields are completed.*"
            )

        result = await catalog.validate_field(field, turn.message, session, self.ai)

        if not result.valid:
            if result.needs_instagram_url:
                # Phase change (yes -> ask for URL), not a failed attempt.
                return result.message or catalog.render_prompt(field, session)

            session.field_retry_count += 1
            message = result.message or "❌ That doesn't look right. Please try again."
            if session.field_retry_count >= HELP_AFTER_FAILURES:
                message += (
                    "\n\n💡 **Need Help?**\nHaving trouble with this field? Here are some tips:\n\n"
                    + "\n".join(f"• {tip}" for tip in catalog.help_tips(field))
                    + "\n\nOr type \"later\" to pause and continue another time."
                )
            log.info("Validation failed phone=%s field=%s retries=%d", session.phone, field.value, session.field_retry_count)
            return message

        saved = await self.store.update_field(session.phone, field, result.value)
        if not saved:
            log.warning("Store write failed phone=%s field=%s", session.phone, field.value)
            return (
                "❌ **Database Error**\n\n"
                f"Unable to save your {catalog.display_name(field)}. Please try again.\n\n"
                f"{catalog.render_prompt(field, session)}"
            )

        session.field_retry_count = 0
        await self._reload_user(session)

        current_step = total - len(session.remaining_fields)
        reply = (
            f"✅ **{catalog.display_name(field)} Saved!**\n\n"
            f"📊 **Progress:** {current_step}/{total} ({_percent(current_step, total)}%)"
        )
        if result.warning:
            reply += f"\n\n{result.warning}"

        await emit(
            self.analytics,
            session.phone,
            "profile_field_updated",
            field=field.value,
            progress=f"{current_step}/{total}",
        )

        return f"{reply}\n\n{await self._advance_or_complete(session, field)}"

    # ---------- rule 2: search ----------

    async def _handle_search(self, turn: Turn) -> str:
        session, access = turn.session, turn.access

        if not access.can_access:
            first, total = self._seed(session, access)
            session.search_blocked = True
            return (
                "🚫 **SEARCH BLOCKED - Profile Incomplete**\n\n"
                f"Your profile: {access.completion_percentage}% complete\n"
                "**⚠️ REQUIRED: 100% completion for search access**\n\n"
                f"Missing {_plural(total, 'field')}. Let's complete them now:\n\n"
                f"{self._first_step(session, first, total)}\n\n"
                "🔒 *Search will be unlocked only after completing ALL fields.*"
            )

        query = turn.intent.query or turn.message
        result = await self.search.run(query, session.phone)

        session.mark_ready()
        session.search_blocked = False
        if turn.intent.intent == Intent.SKIP_AND_SEARCH:
            session.profile_skipped = True
            return f"Here's what I found:\n\n{result}"
        return result

    # ---------- rules 3: sub-choices ----------

    async def _handle_profile_choice(self, turn: Turn) -> str:
        session, access = turn.session, turn.access

        if self._is_yes(turn):
            if access.can_access:
                session.mark_ready()
                return "Your profile is already complete! 🎉\n\nWhat can I help you find today?"
            first, total = self._seed(session, access)
            return f"Great! Let's complete your profile.\n\n{self._first_step(session, first, total)}"

        if not access.can_access:
            return (
                "⚠️ **Search Requires Complete Profile**\n\n"
                f"Your profile: {access.completion_percentage}% complete\n"
                "Required: 100% completion\n\n"
                "You must complete your profile to access alumni search.\n\n"
                "Ready to continue? Reply YES"
            )

        session.mark_ready()
        session.profile_skipped = True
        return "Perfect! I'm here to help you connect with amazing alumni. 🌟\n\nWhat can I help you find today?"

    async def _handle_additional_email_choice(self, turn: Turn) -> str:
        session = turn.session
        if self._is_yes(turn):
            session.park(Stage.ADDITIONAL_EMAIL_INPUT)
            return catalog.ADDITIONAL_EMAIL_INPUT_PROMPT
        return await self._advance_or_complete(session, ProfileField.ADDITIONAL_EMAIL)

    async def _handle_additional_email_input(self, turn: Turn) -> str:
        session = turn.session

        if turn.lowered == "skip":
            return await self._advance_or_complete(session, ProfileField.ADDITIONAL_EMAIL)

        email = validate_email(turn.message)
        if not email.valid:
            return f'{email.message}\n\nPlease enter a valid email address, or type "skip" to continue.'

        linked = await self.store.link_additional_email(session.phone, email.value)
        if not linked.success:
            return f'{linked.error}\n\nPlease try a different email or type "skip" to continue.'

        await self._reload_user(session)
        await emit(self.analytics, session.phone, "additional_email_linked")
        nxt = await self._advance_or_complete(session, ProfileField.ADDITIONAL_EMAIL)
        return f"✅ Additional email linked successfully!\n\n{nxt}"

    async def _handle_instagram_choice(self, turn: Turn) -> str:
        session = turn.session
        if self._is_yes(turn):
            session.focus(ProfileField.INSTAGRAM)
            session.instagram_choice = True
            return f"{catalog.render_prompt(ProfileField.INSTAGRAM, session)}\n\nType \"skip\" to leave it out."
        return await self._advance_or_complete(session, ProfileField.INSTAGRAM)

    # ---------- rules 4-8 ----------

    async def _handle_profile_update(self, turn: Turn) -> str:
        session, access = turn.session, turn.access
        if access.can_access:
            return (
                "🎉 **Profile Complete!**\n\n✅ All fields completed (100%)\n🔓 Search is now available!\n\n"
                f"What expertise are you looking for today?\n\n{POPULAR_SEARCHES}"
            )

        first, total = self._seed(session, access)
        return (
            "✨ **Profile Completion Required**\n\n"
            f"Currently: {access.completion_percentage}% complete\n"
            f"Missing: {_plural(total, 'field')}\n\n"
            f"{self._first_step(session, first, total)}"
        )

    async def _handle_casual(self, turn: Turn) -> str:
        access = turn.access
        reply = await self.casual.respond(
            turn.message,
            {
                "name": turn.name,
                "profile_complete": access.can_access,
                "completion_percentage": access.completion_percentage,
            },
        )
        if access.can_access:
            return reply
        return (
            f"{reply}\n\n"
            f"📋 **Profile Status:** {access.completion_percentage}% complete\n"
            f"🔒 Missing {_plural(len(access.incomplete_fields), 'field')} for search access.\n\n"
            'Type "complete profile" to continue.'
        )

    async def _handle_auto_start(self, turn: Turn) -> str:
        session, access = turn.session, turn.access
        first, total = self._seed(session, access)
        session.profile_completion_started = True
        return (
            f"👋 **Welcome back, {turn.name}!**\n\n"
            f"Your profile: {access.completion_percentage}% complete\n"
            "🔒 **Search requires 100% completion**\n\n"
            f"Let's complete the remaining {_plural(total, 'field')}:\n\n"
            f"{self._first_step(session, first, total)}"
        )

    async def _handle_complete(self, turn: Turn) -> str:
        turn.session.mark_ready()
        return (
            f"🌟 **Hi {turn.name}!**\n\n"
            "✅ **Profile Complete** (100%)\n"
            "🔓 **Search Unlocked**\n\n"
            f"What expertise are you looking for today?\n\n{POPULAR_SEARCHES}\n\n"
            "Or describe what you need help with!"
        )

    async def _handle_fallback(self, turn: Turn) -> str:
        # Only reachable with an incomplete profile after auto-start already ran this session.
        session, access = turn.session, turn.access
        session.park(Stage.PROFILE_CHOICE)
        return (
            f"Hi {turn.name}! 👋\n\n"
            "I'm here to help you connect with our alumni network.\n\n"
            f"Your profile is {access.completion_percentage}% complete and search needs 100%.\n"
            "Would you like to continue completing it now? Reply YES or NO"
        )
