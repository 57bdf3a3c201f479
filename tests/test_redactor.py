import pytest

from envshelter.config import PartialMode, Policy
from envshelter.engine.redactor import mask_value, redact, split_quotes


@pytest.fixture
def full():
    return Policy()


@pytest.fixture
def partial():
    return Policy(partial=PartialMode(show_start=3, show_end=3, min_mask=3))


class TestFullMasking:
    @pytest.mark.parametrize("value", ["localhost", "x", "p@ss w0rd!", "ключ"])
    def test_same_length_no_original_chars(self, full, value):
        out = redact(value, full)
        assert len(out) == len(value)
        assert set(out) == {"*"}

    def test_empty_value(self, full):
        assert redact("", full) == ""

    def test_custom_mask_char(self):
        assert redact("secret", Policy(mask_char="#")) == "######"

    def test_remasking_is_stable(self, full):
        once = redact("hunter2", full)
        assert redact(once, full) == once


class TestPartialMasking:
    def test_shows_edges(self, partial):
        assert redact("secret123", partial) == "sec***123"

    def test_long_value_masks_whole_middle(self, partial):
        value = "abcdefghijklmnop"
        out = redact(value, partial)
        assert out.startswith("abc")
        assert out.endswith("nop")
        assert out[3:-3] == "*" * (len(value) - 6)

    @pytest.mark.parametrize("value", ["ab", "abcdef", "abcdefgh"])
    def test_short_values_fall_back_to_full_mask(self, partial, value):
        assert redact(value, partial) == "*" * len(value)

    def test_min_mask_wins_over_middle_length(self):
        policy = Policy(partial=PartialMode(show_start=1, show_end=1, min_mask=5))
        # 7 chars: 1 + 5 + 1 is the minimum, middle is exactly 5
        assert redact("abcdefg", policy) == "a*****g"
        assert redact("abcdef", policy) == "******"

    def test_zero_edges(self):
        policy = Policy(partial=PartialMode(show_start=0, show_end=2, min_mask=1))
        assert redact("abcdef", policy) == "****ef"

    def test_first_char_variant_for_short_values(self):
        policy = Policy(partial=PartialMode(short_value="first_char"))
        assert redact("ab", policy) == "a***"
        assert redact("abcdefgh", policy) == "a*******"

    def test_masked_input_is_stable(self, partial):
        masked = "*" * 12
        assert redact(masked, partial) == masked


class TestQuotes:
    def test_split_quotes(self):
        assert split_quotes('"secret"') == ('"', "secret")
        assert split_quotes("'a'") == ("'", "a")
        assert split_quotes("plain") == (None, "plain")
        assert split_quotes('"open') == (None, '"open')
        assert split_quotes("\"mixed'") == (None, "\"mixed'")

    def test_quote_is_rewrapped(self, full):
        assert redact("secret", full, quote='"') == '"******"'

    def test_partial_with_quotes(self, partial):
        assert mask_value('"secret123"', partial) == '"sec***123"'

    def test_quotes_never_masked(self, full):
        assert mask_value("'abc'", full) == "'***'"

    def test_empty_quoted(self, full):
        assert mask_value('""', full) == '""'
