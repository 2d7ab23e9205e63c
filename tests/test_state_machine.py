import pytest

from alumni_bot.core import field_catalog as catalog
from alumni_bot.core.completion_gate import can_access_search
from alumni_bot.core.state_machine import TECHNICAL_ISSUE_MESSAGE, Turn
from alumni_bot.models.fields import ProfileField
from alumni_bot.models.intent import Intent, IntentResult
from alumni_bot.models.session import Session

from conftest import PHONE, CountingStore, build_machine, make_user, run

ANSWER = IntentResult(Intent.UNKNOWN)
YES = IntentResult(Intent.AFFIRMATIVE)
NO = IntentResult(Intent.NEGATIVE)


def search(query: str, intent: Intent = Intent.SEARCH) -> IntentResult:
    return IntentResult(intent, query=query)


def new_session(store) -> Session:
    return Session(phone=PHONE, user=run(store.find_by_identity(PHONE)))


def say(machine, session, message, intent=ANSWER) -> str:
    return run(machine.handle(message, intent, session))


class TestSearchGate:
    def test_blocked_search_seeds_the_pass(self, store, offline_ai, sink):
        store.add(make_user(missing=(ProfileField.CITY, ProfileField.PHONE)))
        machine = build_machine(store, offline_ai, sink)
        session = new_session(store)

        reply = say(machine, session, "find fintech founders", search("fintech founders"))

        assert "SEARCH BLOCKED" in reply
        assert "85% complete" in reply
        assert "**Step 1 of 2:** City" in reply
        assert session.waiting_for == "updating_city"
        assert session.remaining_fields == [ProfileField.PHONE]
        assert session.search_blocked
        assert store.search_calls == 0

    def test_skip_and_search_is_gated_too(self, store, offline_ai):
        store.add(make_user(missing=(ProfileField.CITY,)))
        machine = build_machine(store, offline_ai)
        session = new_session(store)

        reply = say(machine, session, "skip, find mentors", search("mentors", Intent.SKIP_AND_SEARCH))

        assert "SEARCH BLOCKED" in reply
        assert session.waiting_for == "updating_city"
        assert store.search_calls == 0
        assert not session.profile_skipped

    def test_search_mid_update_changes_nothing(self, store, offline_ai):
        store.add(make_user(missing=(ProfileField.CITY, ProfileField.PHONE)))
        machine = build_machine(store, offline_ai)
        session = new_session(store)
        session.start_pass([ProfileField.CITY, ProfileField.PHONE])

        reply = say(machine, session, "find developers", search("developers"))

        assert "Profile Completion Required First" in reply
        assert "Step 1 of 2" in reply
        assert session.waiting_for == "updating_city"
        assert store.search_calls == 0
        assert store.update_calls == []

    def test_complete_profile_searches(self, store, offline_ai, sink):
        store.add(make_user())
        store.add(make_user("919811111111", email="priya@example.com", about="Fintech founder in Mumbai"))
        machine = build_machine(store, offline_ai, sink)
        session = new_session(store)
        session.search_blocked = True

        reply = say(machine, session, "fintech founders", search("fintech founders"))

        assert "Found 1 expert" in reply
        assert "priya@example.com" in reply
        assert session.waiting_for == "ready"
        assert not session.search_blocked
        assert sink.named("alumni_search") == [{"query": "fintech founders", "total": 1, "returned": 1}]

    def test_skip_and_search_with_complete_profile(self, store, offline_ai):
        store.add(make_user())
        machine = build_machine(store, offline_ai)
        session = new_session(store)

        reply = say(machine, session, "skip, marketing", search("marketing", Intent.SKIP_AND_SEARCH))

        assert reply.startswith("Here's what I found:")
        assert session.profile_skipped


class TestFieldCollection:
    def test_city_then_phone_then_completion(self, store, offline_ai, sink):
        store.add(make_user(missing=(ProfileField.CITY, ProfileField.PHONE)))
        machine = build_machine(store, offline_ai, sink)
        session = new_session(store)
        say(machine, session, "find mentors", search("mentors"))

        reply = say(machine, session, "Mumbai")
        assert "✅ **City Saved!**" in reply
        assert "1/2 (50%)" in reply
        assert "**Step 2 of 2:** Phone Number" in reply
        assert session.waiting_for == "updating_phone"
        assert session.user.enhanced_profile.city == "Mumbai"

        reply = say(machine, session, "+91 9876543210")
        assert "2/2 (100%)" in reply
        assert "PROFILE COMPLETED" in reply
        assert catalog.ADDITIONAL_EMAIL_CHOICE_PROMPT not in reply
        assert session.waiting_for == "ready"
        assert session.profile_completed
        assert store.completed_calls == 1
        assert store.users[PHONE].enhanced_profile.completed
        assert [d["field"] for d in sink.named("profile_field_updated")] == ["city", "phone"]
        assert len(sink.named("profile_completed")) == 1

    def test_search_right_after_last_field_keeps_completed_flag(self, store, offline_ai):
        store.add(make_user(missing=(ProfileField.PHONE,)))
        store.add(make_user("919811111111", email="priya@example.com", about="Fintech founder in Mumbai"))
        machine = build_machine(store, offline_ai)
        session = new_session(store)
        say(machine, session, "update profile", IntentResult(Intent.PROFILE_UPDATE))

        say(machine, session, "+91 9876543210")
        reply = say(machine, session, "fintech founders", search("fintech founders"))

        assert "Found 1 expert" in reply
        assert session.waiting_for == "ready"
        assert store.completed_calls == 1
        assert store.users[PHONE].enhanced_profile.completed

    def test_failed_validation_counts_retries_and_offers_help(self, store, offline_ai):
        store.add(make_user(missing=(ProfileField.DATE_OF_BIRTH,)))
        machine = build_machine(store, offline_ai)
        session = new_session(store)
        say(machine, session, "complete profile", IntentResult(Intent.PROFILE_UPDATE))

        first = say(machine, session, "1995/08/15")
        assert session.field_retry_count == 1
        assert "Need Help?" not in first

        say(machine, session, "1995/08/15")
        third = say(machine, session, "yesterday")
        assert session.field_retry_count == 3
        assert "Need Help?" in third
        assert "DD-MM-YYYY" in third
        assert session.waiting_for == "updating_date_of_birth"
        assert store.update_calls == []

    def test_write_failure_leaves_session_unchanged(self, offline_ai):
        store = CountingStore(fail_writes=True)
        store.add(make_user(missing=(ProfileField.CITY, ProfileField.PHONE)))
        machine = build_machine(store, offline_ai)
        session = new_session(store)
        session.start_pass([ProfileField.CITY, ProfileField.PHONE])
        before = session.to_flat()

        reply = say(machine, session, "Mumbai")

        assert "Database Error" in reply
        assert session.to_flat() == before
        assert store.completed_calls == 0

    def test_pause_reports_saved_progress(self, store, offline_ai):
        store.add(make_user(missing=(ProfileField.CITY, ProfileField.PHONE)))
        machine = build_machine(store, offline_ai)
        session = new_session(store)
        session.start_pass([ProfileField.CITY, ProfileField.PHONE])
        say(machine, session, "Pune")

        reply = say(machine, session, "later")

        assert "Profile Update Paused" in reply
        assert "Progress: 1/2 fields completed" in reply
        assert session.waiting_for == "ready"
        assert session.profile_skipped

    def test_unverified_place_saves_with_warning(self, store, offline_ai):
        store.add(make_user(missing=(ProfileField.CITY,)))
        machine = build_machine(store, offline_ai)
        session = new_session(store)
        session.start_pass([ProfileField.CITY])

        reply = say(machine, session, "Shivamogga")

        assert 'Unable to verify "Shivamogga"' in reply
        assert store.users[PHONE].enhanced_profile.city == "Shivamogga"


class TestOptionalFields:
    def test_instagram_offer_then_url(self, store, offline_ai):
        store.add(make_user(missing=(ProfileField.LINKEDIN, ProfileField.DOMAIN)))
        machine = build_machine(store, offline_ai)
        session = new_session(store)
        say(machine, session, "update profile", IntentResult(Intent.PROFILE_UPDATE))

        reply = say(machine, session, "https://linkedin.com/in/asha-rao")
        assert catalog.INSTAGRAM_CHOICE_PROMPT in reply
        assert session.waiting_for == "instagram_choice"

        reply = say(machine, session, "yes", YES)
        assert catalog.INSTAGRAM_URL_PROMPT in reply
        assert session.waiting_for == "updating_instagram"

        reply = say(machine, session, "https://instagram.com/asha")
        assert "**Step 2 of 2:** Industry Domain" in reply
        assert session.waiting_for == "updating_domain"
        assert store.users[PHONE].enhanced_profile.instagram == "https://instagram.com/asha"

        reply = say(machine, session, "1")
        assert "PROFILE COMPLETED" in reply
        assert store.completed_calls == 1

    def test_no_offer_after_the_last_required_field(self, store, offline_ai):
        store.add(make_user(missing=(ProfileField.LINKEDIN,)))
        machine = build_machine(store, offline_ai)
        session = new_session(store)
        say(machine, session, "update profile", IntentResult(Intent.PROFILE_UPDATE))

        reply = say(machine, session, "https://linkedin.com/in/asha-rao")

        assert "PROFILE COMPLETED" in reply
        assert catalog.INSTAGRAM_CHOICE_PROMPT not in reply
        assert session.waiting_for == "ready"
        assert store.completed_calls == 1

    def test_optional_field_can_be_skipped(self, store, offline_ai):
        store.add(make_user())
        machine = build_machine(store, offline_ai)
        session = new_session(store)
        session.focus(ProfileField.INSTAGRAM)
        session.instagram_choice = True

        reply = say(machine, session, "skip", IntentResult(Intent.SKIP_PROFILE))

        assert "PROFILE COMPLETED" in reply
        assert "Paused" not in reply
        assert store.update_calls == []

    def test_additional_email_is_linked(self, store, offline_ai):
        store.add(make_user(missing=(ProfileField.PHONE, ProfileField.LINKEDIN)))
        machine = build_machine(store, offline_ai)
        session = new_session(store)
        session.start_pass([ProfileField.PHONE, ProfileField.LINKEDIN])

        reply = say(machine, session, "+91 9876543210")
        assert catalog.ADDITIONAL_EMAIL_CHOICE_PROMPT in reply
        say(machine, session, "yes", YES)
        assert session.waiting_for == "additional_email_input"

        reply = say(machine, session, "Asha.Work@Example.com")
        assert "Additional email linked successfully" in reply
        assert "**Step 2 of 2:** LinkedIn Profile" in reply
        user = store.users[PHONE]
        assert user.enhanced_profile.additional_email == "asha.work@example.com"
        assert user.basic_profile.linked_emails == ["asha.work@example.com"]

    def test_email_owned_by_someone_else_is_refused(self, store, offline_ai):
        store.add(make_user(missing=(ProfileField.PHONE, ProfileField.LINKEDIN)))
        store.add(make_user("919811111111", email="priya@example.com"))
        machine = build_machine(store, offline_ai)
        session = new_session(store)
        session.start_pass([ProfileField.PHONE, ProfileField.LINKEDIN])
        say(machine, session, "+91 9876543210")
        say(machine, session, "yes", YES)

        reply = say(machine, session, "priya@example.com")

        assert "already linked to another alumni account" in reply
        assert session.waiting_for == "additional_email_input"


class TestEntryRules:
    def test_first_message_auto_starts(self, store, offline_ai):
        store.add(make_user(missing=(ProfileField.GENDER,)))
        machine = build_machine(store, offline_ai)
        session = new_session(store)

        reply = say(machine, session, "hmm")

        assert "Welcome back, Asha Rao!" in reply
        assert session.profile_completion_started
        assert session.waiting_for == "updating_gender"

    def test_after_pausing_bot_asks_before_restarting(self, store, offline_ai):
        store.add(make_user(missing=(ProfileField.GENDER,)))
        machine = build_machine(store, offline_ai)
        session = new_session(store)
        say(machine, session, "hmm")
        say(machine, session, "stop")

        reply = say(machine, session, "what now")
        assert "Reply YES or NO" in reply
        assert session.waiting_for == "profile_choice"

        reply = say(machine, session, "no", NO)
        assert "Search Requires Complete Profile" in reply

        reply = say(machine, session, "yes", YES)
        assert "**Step 1 of 1:** Gender" in reply
        assert session.waiting_for == "updating_gender"

    def test_casual_mentions_profile_status(self, store, offline_ai):
        store.add(make_user(missing=(ProfileField.GENDER,)))
        machine = build_machine(store, offline_ai)
        session = new_session(store)

        reply = say(machine, session, "hi", IntentResult(Intent.CASUAL))

        assert reply.startswith("Hi Asha Rao!")
        assert "92% complete" in reply

    def test_complete_profile_gets_ready(self, store, offline_ai):
        store.add(make_user())
        machine = build_machine(store, offline_ai)
        session = new_session(store)

        reply = say(machine, session, "hmm")

        assert "Search Unlocked" in reply
        assert session.waiting_for == "ready"


class ExplodingCompletionStore(CountingStore):
    async def mark_completed(self, identity):
        raise RuntimeError("write conflict")


class TestErrorBoundary:
    def test_unexpected_error_restores_session(self, offline_ai, sink):
        store = ExplodingCompletionStore()
        store.add(make_user(missing=(ProfileField.COMMUNITY_GIVES,)))
        machine = build_machine(store, offline_ai, sink)
        session = new_session(store)
        session.start_pass([ProfileField.COMMUNITY_GIVES])
        session.field_retry_count = 2
        before = session.to_flat()

        reply = say(machine, session, "1,3")

        assert reply == TECHNICAL_ISSUE_MESSAGE
        assert session.to_flat() == before
        assert session.user.enhanced_profile.community_gives == []
        assert len(sink.errors) == 1
        assert sink.errors[0][1]["operation"] == "handle:field_update"

    def test_field_update_without_focus_raises(self, store, offline_ai):
        store.add(make_user(missing=(ProfileField.CITY,)))
        machine = build_machine(store, offline_ai)
        session = new_session(store)
        turn = Turn(message="Mumbai", intent=ANSWER, session=session, access=can_access_search(session.user))

        with pytest.raises(RuntimeError, match="No field in focus"):
            run(machine._handle_field_update(turn))
