import asyncio

from alumni_bot.llm.structured import best_effort, parse_string_list, strip_code_fences, try_parse_json
from alumni_bot.llm.casual_responder import CasualResponder, clean_llm_output

from conftest import FailingClient, ScriptedClient, run


class TestJsonRepair:
    def test_strict(self):
        assert try_parse_json('{"a": 1}') == ({"a": 1}, "strict")

    def test_code_fences(self):
        assert try_parse_json('```json\n["x", "y"]\n```') == (["x", "y"], "stripped_fences")
        assert strip_code_fences("```\nhi\n```") == "hi"

    def test_extracts_embedded_array(self):
        parsed, method = try_parse_json('Sure! Here you go: ["react", "node"] hope it helps')
        assert parsed == ["react", "node"]
        assert method == "extracted"

    def test_gives_up(self):
        assert try_parse_json("no json here") == (None, "failed")

    def test_string_list_shape(self):
        assert parse_string_list('["a", " ", 3, "b "]') == ["a", "b"]
        assert parse_string_list('{"a": 1}') is None
        assert parse_string_list("[]") is None


class TestBestEffort:
    def test_success(self):
        async def call():
            return '["x"]'

        result = run(best_effort("op", call, parse_string_list, lambda: ["fallback"]))
        assert result.value == ["x"] and result.from_ai

    def test_call_failure(self):
        client = FailingClient()
        result = run(best_effort("op", lambda: client.generate_text("p"), parse_string_list, lambda: ["fb"]))
        assert result.value == ["fb"]
        assert not result.from_ai
        assert "offline" in result.error

    def test_malformed_output(self):
        async def call():
            return "not a list"

        result = run(best_effort("op", call, parse_string_list, lambda: ["fb"]))
        assert result.value == ["fb"] and result.error == "malformed"

    def test_parser_exception(self):
        async def call():
            return "x"

        def parse(_raw):
            raise KeyError("boom")

        assert run(best_effort("op", call, parse, lambda: 0)).value == 0

    def test_timeout(self):
        async def call():
            await asyncio.sleep(1)
            return "late"

        result = run(best_effort("op", call, lambda raw: raw, lambda: "fb", timeout=0.01))
        assert result.value == "fb" and result.error == "timeout"


class TestCasualResponder:
    def test_cleans_preamble(self):
        assert clean_llm_output("Okay!\nHi Asha, welcome back.") == "Hi Asha, welcome back."
        assert clean_llm_output("The user wants a greeting.\n\nHello!") == "Hello!"

    def test_reply_from_model(self):
        responder = CasualResponder(client=ScriptedClient("Sure.\nHello Asha! 👋"))
        assert run(responder.respond("hi", {"name": "Asha"})) == "Hello Asha! 👋"

    def test_canned_reply_when_model_is_down(self):
        responder = CasualResponder(client=FailingClient())
        reply = run(responder.respond("hi", {"name": "Asha", "profile_complete": True}))
        assert reply.startswith("Hi Asha! 👋")
        assert "search the alumni network" in reply
