import pytest

from alumni_bot.core import validator as v
from alumni_bot.llm.ai_service import AITextService
from alumni_bot.models.fields import COMMUNITY_ASKS, YATRA_IMPACT

from conftest import FailingClient, ScriptedClient, run


class TestSanitize:
    def test_trims_caps_and_strips_brackets(self):
        assert v.sanitize_input("  <b>hi</b>  ") == "bhi/b"
        assert len(v.sanitize_input("x" * 5000)) == v.MAX_INPUT_LENGTH
        assert v.sanitize_input(None) == ""


class TestFullName:
    @pytest.mark.parametrize("name", ["Rajesh Kumar Singh", "Mary O'Connor-Smith", "J. R. Tolkien"])
    def test_accepts_real_names(self, name):
        result = v.validate_full_name(name)
        assert result.valid and result.value == name

    @pytest.mark.parametrize(
        "name, heading",
        [
            ("A", "Invalid Name Length"),
            ("R2D2", "Invalid Characters"),
            ("Aaaaaaa Bee", "Invalid Name Pattern"),
            ("Test User", "Please Enter Real Name"),
        ],
    )
    def test_rejects_with_reason(self, name, heading):
        result = v.validate_full_name(name)
        assert not result.valid
        assert heading in result.message


class TestDateOfBirth:
    def test_leap_day_in_leap_year(self):
        assert v.validate_date_of_birth("29-02-1996").value == "29-02-1996"

    @pytest.mark.parametrize("raw", ["29-02-1995", "31-04-2000"])
    def test_impossible_dates(self, raw):
        result = v.validate_date_of_birth(raw)
        assert not result.valid
        assert "doesn't exist" in result.message

    def test_format_year_and_month(self):
        assert "Invalid Date Format" in v.validate_date_of_birth("1995-08-15").message
        assert "Invalid Birth Year" in v.validate_date_of_birth("15-08-1950").message
        assert "Invalid Month" in v.validate_date_of_birth("15-13-1995").message


class TestPhone:
    def test_accepts_and_keeps_raw_text(self):
        result = v.validate_phone_number("+91 98765 43210")
        assert result.valid
        assert result.value == "+91 98765 43210"

    def test_ten_digits_need_no_country_code(self):
        assert v.validate_phone_number("9876543210").valid

    def test_length_bounds(self):
        assert "Length" in v.validate_phone_number("12345").message
        assert "Length" in v.validate_phone_number("1" * 16).message

    def test_unknown_country_code(self):
        result = v.validate_phone_number("+999 9876543210")
        assert not result.valid
        assert "Country Code" in result.message


class TestEmailAndUrls:
    def test_email_is_lowercased(self):
        assert v.validate_email("Asha.Rao@Example.COM").value == "asha.rao@example.com"
        assert not v.validate_email("asha@").valid

    def test_linkedin(self):
        assert v.validate_linkedin_url("https://www.linkedin.com/in/john-smith-123").valid
        assert "Not a LinkedIn URL" in v.validate_linkedin_url("https://example.com/in/x").message
        assert "Invalid URL Format" in v.validate_linkedin_url("linkedin.com/in/x").message
        assert "Invalid LinkedIn Profile URL" in v.validate_linkedin_url("https://linkedin.com/company/acme").message

    def test_instagram(self):
        assert v.validate_instagram_url("https://instagram.com/asha").valid
        assert not v.validate_instagram_url("instagram.com/asha").valid
        assert "Invalid Instagram Domain" in v.validate_instagram_url("https://evil.com/instagram.com").message


class TestChoices:
    @pytest.mark.parametrize("raw, expected", [("YES", True), ("y", True), ("1", True), ("nope", False), ("2", False)])
    def test_yes_no(self, raw, expected):
        assert v.validate_yes_no(raw).value is expected

    def test_yes_no_rejects_other_text(self):
        assert not v.validate_yes_no("maybe").valid

    def test_gender(self):
        assert v.validate_gender("2").value == "Female"
        assert not v.validate_gender("Female").valid

    def test_exactly_three_preserves_typed_order(self):
        result = v.validate_multiple_choice("5, 1,3", COMMUNITY_ASKS, 3, 3)
        assert result.value == [COMMUNITY_ASKS[4], COMMUNITY_ASKS[0], COMMUNITY_ASKS[2]]

    def test_three_distinct_accepted(self):
        assert v.validate_multiple_choice("1,2,3", COMMUNITY_ASKS, 3, 3).value == list(COMMUNITY_ASKS[:3])

    def test_duplicates_rejected(self):
        result = v.validate_multiple_choice("1,1,3", COMMUNITY_ASKS, 3, 3)
        assert "Duplicate" in result.message

    def test_too_many_for_small_list(self):
        result = v.validate_multiple_choice("1,2,3,4", YATRA_IMPACT, 1, 3)
        assert "Too Many" in result.message

    def test_out_of_range_lists_offenders(self):
        result = v.validate_multiple_choice("0,2", YATRA_IMPACT, 1, 3)
        assert not result.valid
        assert "Invalid: 0" in result.message
        assert "1 to 3" in result.message

    def test_non_numeric_token(self):
        assert "Invalid Format" in v.validate_multiple_choice("1,two", YATRA_IMPACT).message

    def test_too_few(self):
        assert "Too Few" in v.validate_multiple_choice("1,2", COMMUNITY_ASKS, 3, 3).message


class TestGeography:
    def test_gazetteer_hit_skips_ai(self):
        client = ScriptedClient()
        result = run(v.validate_geography("Mumbai", "city", AITextService(client=client)))
        assert result.valid and result.warning is None
        assert client.prompts == []

    def test_person_name_rejected_when_ai_is_down(self):
        result = run(v.validate_geography("John Smith", "city", AITextService(client=FailingClient())))
        assert not result.valid

    def test_unverified_place_accepted_with_warning(self):
        result = run(v.validate_geography("Shivamogga", "city", AITextService(client=FailingClient())))
        assert result.valid
        assert result.value == "Shivamogga"
        assert 'Unable to verify "Shivamogga"' in result.warning

    def test_ai_verdict_is_final(self):
        ai = AITextService(client=ScriptedClient("INVALID", "VALID"))
        assert not run(v.validate_geography("Gotham", "city", ai)).valid
        ok = run(v.validate_geography("Shivamogga", "city", ai))
        assert ok.valid and ok.warning is None

    def test_length_and_charset(self):
        assert "Length" in run(v.validate_geography("X", "country")).message
        assert "Invalid Characters" in run(v.validate_geography("Pune 411001", "city")).message

    def test_heuristics_without_ai(self):
        assert not run(v.validate_geography("Dr Strange", "city")).valid
        assert run(v.validate_geography("Shivamogga", "city")).warning is not None
