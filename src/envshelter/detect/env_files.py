"""
Decide whether a file is a secret-bearing env file.

Default rule: the base name is `.env` or starts with `.env` (`.env.local`,
`.env.production`, `.envrc`...). Extra patterns are regular expressions
searched against the full path, e.g. `^.+/config\\.env$`.
"""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import Iterable, List, Optional
import logging
import re

logger = logging.getLogger(__name__)

_DEFAULT_NAME = re.compile(r"^\.env.*$")


class EnvFileRecognizer:
    """Match file names against the default `.env*` rule plus user patterns."""

    def __init__(self, patterns: Optional[Iterable[str]] = None) -> None:
        self.patterns: List[re.Pattern] = []
        for raw in patterns or ():
            try:
                self.patterns.append(re.compile(raw))
            except re.error as exc:
                logger.warning("Ignoring invalid env_file_pattern %r: %s", raw, exc)

    def matches(self, filename: str) -> bool:
        if not filename:
            return False
        normalized = filename.replace("\\", "/")
        if _DEFAULT_NAME.match(PurePosixPath(normalized).name):
            return True
        return any(p.search(normalized) for p in self.patterns)

    __call__ = matches
