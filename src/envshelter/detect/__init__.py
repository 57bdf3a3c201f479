"""Finding env files and the values inside them."""

from .env_files import EnvFileRecognizer
from .line_parser import ParsedLine, iter_parsed, parse_line, split_lines

__all__ = [
    "EnvFileRecognizer",
    "ParsedLine",
    "iter_parsed",
    "parse_line",
    "split_lines",
]
