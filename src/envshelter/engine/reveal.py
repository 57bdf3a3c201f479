"""
Single-line reveal sessions.

A reveal shows the real value of one line of one document until a
qualifying interaction ends it:

  Idle --reveal(doc, line)--> Revealing(doc, line) --end/clear--> Idle

A session ends when the user
  - leaves the revealed document (or acts on another one), or
  - moves the cursor, or enters insert mode, on a different line.

Text edits and insert mode on the revealed line keep it open. Starting a new
reveal replaces the previous one; reveals never stack.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
from typing import Hashable, Optional, Set

logger = logging.getLogger(__name__)


class EventKind(str, Enum):
    DOCUMENT_ENTERED = "document_entered"
    TEXT_CHANGED = "text_changed"
    CURSOR_MOVED = "cursor_moved"
    INSERT_ENTERED = "insert_entered"
    DOCUMENT_LEFT = "document_left"


@dataclass(frozen=True)
class InteractionEvent:
    """A discrete host event. `line` is the 1-based cursor line when known."""
    kind: EventKind
    document: Hashable
    line: Optional[int] = None


class RevealTracker:
    """Tracks which line of which document is currently shown un-redacted."""

    def __init__(self) -> None:
        self._document: Optional[Hashable] = None
        self._revealed: Set[int] = set()

    @property
    def active(self) -> bool:
        return bool(self._revealed)

    @property
    def document(self) -> Optional[Hashable]:
        return self._document

    @property
    def line(self) -> Optional[int]:
        return next(iter(self._revealed), None)

    def reveal(self, document: Hashable, line: int) -> None:
        if line < 1:
            raise ValueError(f"line numbers are 1-based, got {line}")
        self._document = document
        self._revealed = {line}
        logger.debug("Revealing line %d of %r", line, document)

    def clear(self) -> None:
        if self._revealed:
            logger.debug("Ending reveal of %r", self._document)
        self._document = None
        self._revealed = set()

    def is_revealed(self, line: int, document: Optional[Hashable] = None) -> bool:
        """
        True if `line` is revealed. When `document` is given it must also be
        the revealed document, so a redraw of another document never shows
        anything.
        """
        if document is not None and document != self._document:
            return False
        return line in self._revealed

    def should_end(self, event: InteractionEvent) -> bool:
        """Decide whether `event` ends the current session. Does not mutate."""
        if not self.active:
            return False
        if event.document != self._document:
            return True
        if event.kind is EventKind.DOCUMENT_LEFT:
            return True
        if event.kind in (EventKind.CURSOR_MOVED, EventKind.INSERT_ENTERED):
            return event.line is not None and event.line not in self._revealed
        return False

    def observe(self, event: InteractionEvent) -> bool:
        """Check `event` and clear the session if it ends. Returns True when it ended."""
        if self.should_end(event):
            self.clear()
            return True
        return False
