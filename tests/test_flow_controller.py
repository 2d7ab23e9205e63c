import asyncio
from datetime import timedelta

from alumni_bot.core.flow_controller import NOT_REGISTERED_MESSAGE, FlowController
from alumni_bot.core.state_manager import StateManager
from alumni_bot.llm.intent_classifier import IntentClassifier
from alumni_bot.models.fields import ProfileField
from alumni_bot.models.intent import Intent, IntentResult

from conftest import PHONE, EchoCasual, FailingClient, RecordingSink, make_user, run


def controller(store, offline_ai, sink=None) -> FlowController:
    return FlowController(
        store=store,
        state_manager=StateManager(),
        intent_classifier=IntentClassifier(client=FailingClient()),
        ai=offline_ai,
        casual=EchoCasual(),
        analytics=sink or RecordingSink(),
    )


class TestFlowController:
    def test_unregistered_phone(self, store, offline_ai):
        result = run(controller(store, offline_ai).handle_turn("910000000000", "hi"))
        assert result.reply == NOT_REGISTERED_MESSAGE

    def test_classifies_when_no_intent_given(self, store, offline_ai):
        store.add(make_user(missing=(ProfileField.CITY,)))
        flow = controller(store, offline_ai)

        result = run(flow.handle_turn(PHONE, "find react developers"))

        assert "SEARCH BLOCKED" in result.reply
        assert result.waiting_for == "updating_city"

        # The pending-answer guard keeps the city answer out of search.
        result = run(flow.handle_turn(PHONE, "Mumbai"))
        assert "City Saved" in result.reply

    def test_explicit_intent_skips_classification(self, store, offline_ai):
        store.add(make_user())
        flow = controller(store, offline_ai)
        result = run(flow.handle_turn(PHONE, "whatever", IntentResult(Intent.CASUAL)))
        assert result.reply == "Hi Asha Rao!"

    def test_fresh_user_record_each_turn(self, store, offline_ai):
        store.add(make_user(missing=(ProfileField.GENDER,)))
        flow = controller(store, offline_ai)
        first = run(flow.handle_turn(PHONE, "hello", IntentResult(Intent.CASUAL)))
        assert "92% complete" in first.reply

        store.users[PHONE].enhanced_profile.gender = "Male"
        result = run(flow.handle_turn(PHONE, "hello", IntentResult(Intent.CASUAL)))
        assert result.reply == "Hi Asha Rao!"

    def test_turns_for_one_phone_are_serialized(self, store, offline_ai):
        store.add(make_user())
        flow = controller(store, offline_ai)
        active = []
        overlaps = []

        class SlowMachine:
            async def handle(self, message, intent, session):
                active.append(message)
                if len(active) > 1:
                    overlaps.append(message)
                await asyncio.sleep(0.01)
                active.remove(message)
                return message

        flow.state_machine = SlowMachine()

        async def both():
            return await asyncio.gather(
                flow.handle_turn(PHONE, "one", IntentResult(Intent.CASUAL)),
                flow.handle_turn(PHONE, "two", IntentResult(Intent.CASUAL)),
            )

        replies = run(both())
        assert [r.reply for r in replies] == ["one", "two"]
        assert overlaps == []

    def test_expired_sessions_release_their_locks(self, store, offline_ai):
        flow = controller(store, offline_ai)
        run(flow.handle_turn("910000000000", "hi"))
        assert "910000000000" in flow._locks

        flow.state_manager.get("910000000000").updated_at -= timedelta(days=1)
        run(flow.handle_turn("910000000001", "hi"))

        assert "910000000000" not in flow._locks
        assert "910000000001" in flow._locks


class TestOptionalFieldsEndToEnd:
    def test_skip_at_instagram_url_moves_on(self, store, offline_ai):
        store.add(make_user(missing=(ProfileField.LINKEDIN, ProfileField.DOMAIN)))
        flow = controller(store, offline_ai)

        run(flow.handle_turn(PHONE, "complete my profile"))
        result = run(flow.handle_turn(PHONE, "https://linkedin.com/in/asha-rao"))
        assert result.waiting_for == "instagram_choice"
        result = run(flow.handle_turn(PHONE, "yes"))
        assert result.waiting_for == "updating_instagram"

        result = run(flow.handle_turn(PHONE, "skip"))
        assert "Paused" not in result.reply
        assert "**Step 2 of 2:** Industry Domain" in result.reply
        assert result.waiting_for == "updating_domain"

        result = run(flow.handle_turn(PHONE, "1"))
        assert "PROFILE COMPLETED" in result.reply
        assert store.completed_calls == 1
        assert store.users[PHONE].enhanced_profile.instagram is None

    def test_skip_at_additional_email_moves_on(self, store, offline_ai):
        store.add(make_user(missing=(ProfileField.PHONE, ProfileField.LINKEDIN)))
        flow = controller(store, offline_ai)

        run(flow.handle_turn(PHONE, "complete my profile"))
        result = run(flow.handle_turn(PHONE, "+91 9876543210"))
        assert result.waiting_for == "additional_email_choice"
        result = run(flow.handle_turn(PHONE, "yes"))
        assert result.waiting_for == "additional_email_input"

        result = run(flow.handle_turn(PHONE, "skip"))
        assert "**Step 2 of 2:** LinkedIn Profile" in result.reply
        assert result.waiting_for == "updating_linkedin"

        result = run(flow.handle_turn(PHONE, "https://linkedin.com/in/asha-rao"))
        assert "PROFILE COMPLETED" in result.reply
        assert store.completed_calls == 1
        assert store.users[PHONE].enhanced_profile.additional_email is None
