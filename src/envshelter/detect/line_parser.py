"""
Locate the value of a `KEY=value` line.

What this does
--------------
- Skips blank lines and comment lines (`#` after optional whitespace).
- Splits on the first `=` that is not escaped with a backslash.
- Extracts the value token:
    * quoted   -> up to the first matching closing quote; anything after it
                  (inline comments) is ignored; with no closing quote the
                  rest of the line is the value
    * unquoted -> the run of characters up to whitespace or `#`
- Records where the value begins so an overlay can be placed over it while
  the key and `=` stay untouched.

Nothing is cached: a line's content may change between redraws, so callers
parse again on every pass.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Tuple
import re

from ..engine.redactor import QUOTE_CHARS

# first '=' not preceded by a backslash
_SEPARATOR = re.compile(r"(?<!\\)=")
# unquoted value: stops at whitespace or an inline comment
_UNQUOTED = re.compile(r"[^\s#]*")


@dataclass(frozen=True)
class ParsedLine:
    """
    A value found on one line.

    Attributes:
        key:               Trimmed key left of the separator.
        raw_value:         Value without its quotes.
        value_byte_offset: UTF-8 byte index just after `=` in the original line.
        quote:             Quote character wrapping the value, or None.
        value_offset:      Same position as a character index.
        padding:           Whitespace between `=` and the value, kept in
                           front of overlay text so the overlay covers it.
    """
    key: str
    raw_value: str
    value_byte_offset: int
    quote: Optional[str] = None
    value_offset: int = 0
    padding: str = ""

    @property
    def rendered_value(self) -> str:
        """The value as written in the file, quotes included."""
        if self.quote:
            return f"{self.quote}{self.raw_value}{self.quote}"
        return self.raw_value


def _extract_value(rest: str) -> Tuple[str, Optional[str]]:
    value = rest.strip()
    if value and value[0] in QUOTE_CHARS:
        closing = value.find(value[0], 1)
        if closing != -1:
            return value[1:closing], value[0]
        # unterminated quote: the rest of the line is the value
        return value, None
    return _UNQUOTED.match(value).group(0), None


def parse_line(line: str) -> Optional[ParsedLine]:
    """
    Parse one line of env text.

    Returns:
        A `ParsedLine`, or None when the line holds no redactable value
        (blank, comment, no separator, or empty key).
    """
    stripped = line.strip()
    if not stripped or stripped.startswith("#"):
        return None

    m = _SEPARATOR.search(line)
    if m is None:
        return None

    key = line[: m.start()].strip()
    if not key:
        return None

    rest = line[m.end():]
    value, quote = _extract_value(rest)
    return ParsedLine(
        key=key,
        raw_value=value,
        value_byte_offset=len(line[: m.end()].encode("utf-8")),
        quote=quote,
        value_offset=m.end(),
        padding=rest[: len(rest) - len(rest.lstrip())],
    )


def split_lines(text: str) -> List[str]:
    r"""
    Split on `\n` only (a trailing `\r` is dropped), unlike `str.splitlines`,
    which also breaks on form feeds and other separators editors keep inline.
    """
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [ln[:-1] if ln.endswith("\r") else ln for ln in lines]


def iter_parsed(lines: Iterable[str], start_line: int = 1) -> Iterator[Tuple[int, ParsedLine]]:
    """Yield (line_number, ParsedLine) for every line with a value. Numbering is 1-based."""
    for number, line in enumerate(lines, start=start_line):
        parsed = parse_line(line)
        if parsed is not None:
            yield number, parsed
