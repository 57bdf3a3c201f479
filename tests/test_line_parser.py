import pytest

from envshelter.detect.line_parser import ParsedLine, iter_parsed, parse_line, split_lines


@pytest.mark.parametrize("line", ["", "   ", "# DB_HOST=localhost", "   # comment = x", "NO_SEPARATOR", "=value"])
def test_lines_without_values_are_skipped(line):
    assert parse_line(line) is None


def test_simple_pair():
    parsed = parse_line("DB_HOST=localhost")
    assert parsed == ParsedLine(key="DB_HOST", raw_value="localhost", value_byte_offset=8, quote=None, value_offset=8)


def test_key_and_value_are_trimmed():
    parsed = parse_line("  API_KEY =  abc123  ")
    assert parsed.key == "API_KEY"
    assert parsed.raw_value == "abc123"
    assert parsed.value_byte_offset == 11
    assert parsed.padding == "  "


def test_double_quoted_value():
    parsed = parse_line('API_KEY="secret123"')
    assert parsed.raw_value == "secret123"
    assert parsed.quote == '"'
    assert parsed.rendered_value == '"secret123"'


def test_quoted_value_stops_at_first_matching_quote():
    parsed = parse_line("TOKEN='abc' # comment with 'quotes'")
    assert parsed.raw_value == "abc"
    assert parsed.quote == "'"


def test_quoted_value_may_contain_spaces_and_hash():
    parsed = parse_line('PASS="a b#c"')
    assert parsed.raw_value == "a b#c"


def test_unquoted_value_stops_at_inline_comment():
    assert parse_line("PORT=5432#db port").raw_value == "5432"
    assert parse_line("PORT=5432 # db port").raw_value == "5432"


def test_unterminated_quote_takes_rest_of_line():
    parsed = parse_line('X="abc def  ')
    assert parsed.quote is None
    assert parsed.raw_value == '"abc def'


def test_value_may_contain_equals():
    parsed = parse_line("URL=postgres://u:p@h/db?sslmode=require")
    assert parsed.key == "URL"
    assert parsed.raw_value == "postgres://u:p@h/db?sslmode=require"


def test_escaped_equals_is_not_a_separator():
    parsed = parse_line(r"A\=B=value")
    assert parsed.key == r"A\=B"
    assert parsed.raw_value == "value"


def test_empty_value():
    parsed = parse_line("EMPTY=")
    assert parsed.raw_value == ""
    assert parsed.quote is None


def test_byte_offset_counts_utf8_bytes():
    parsed = parse_line("CLÉ=valeur")
    assert parsed.value_offset == 4
    assert parsed.value_byte_offset == 5


def test_iter_parsed_numbers_lines_from_one():
    lines = ["# header", "A=1", "", "B=2"]
    assert [(n, p.key) for n, p in iter_parsed(lines)] == [(2, "A"), (4, "B")]


def test_iter_parsed_with_offset():
    assert [n for n, _ in iter_parsed(["A=1", "B=2"], start_line=11)] == [11, 12]


def test_no_padding_without_whitespace():
    assert parse_line("A=1").padding == ""


def test_split_lines_breaks_on_newline_only():
    text = "A=1\r\nB=x\x0cy\x1cz w\nC=3\n"
    assert split_lines(text) == ["A=1", "B=x\x0cy\x1cz w", "C=3"]


def test_split_lines_keeps_inner_blank_lines():
    assert split_lines("A=1\n\nB=2") == ["A=1", "", "B=2"]
    assert split_lines("") == []
