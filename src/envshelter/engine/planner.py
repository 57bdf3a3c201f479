"""
Turn document text into overlay instructions.

For every line holding a value the planner emits at most one
`RenderInstruction`: where the value starts, what to draw over it and which
style to draw it in. The document itself is never modified.

Plans are always recomputed in full from the current text; nothing is
diffed or patched. Large documents can be planned in bounded chunks so a host
can interleave the work with rendering; a `PlanningPass` collects the chunks
of one redraw and only hands them to the sink once all of them are done.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
from typing import FrozenSet, Hashable, Iterator, List, Optional, Sequence

from ..config import Policy
from ..detect.line_parser import iter_parsed
from .features import Feature, FeatureState
from .redactor import redact
from .reveal import RevealTracker

logger = logging.getLogger(__name__)


class StyleTag(str, Enum):
    MASKED = "masked"
    REVEALED = "revealed"


@dataclass(frozen=True)
class RenderInstruction:
    """Draw `text` over line `line` (1-based) starting at byte column `start_column`."""
    line: int
    start_column: int
    text: str
    style_tag: StyleTag


def _plan_lines(
    lines: Sequence[str],
    policy: Policy,
    revealed: FrozenSet[int],
    start_line: int,
) -> List[RenderInstruction]:
    out: List[RenderInstruction] = []
    for number, parsed in iter_parsed(lines, start_line=start_line):
        visible = number in revealed
        if visible:
            text = parsed.rendered_value
        else:
            text = redact(parsed.raw_value, policy, parsed.quote)
        if not text:
            continue
        out.append(
            RenderInstruction(
                line=number,
                start_column=parsed.value_byte_offset,
                # covers the whitespace after `=` too, so nothing shows through
                text=parsed.padding + text,
                style_tag=StyleTag.REVEALED if visible else StyleTag.MASKED,
            )
        )
    return out


def _revealed_lines(reveal: Optional[RevealTracker], document: Optional[Hashable]) -> FrozenSet[int]:
    if reveal is None or not reveal.active:
        return frozenset()
    if document is not None and reveal.document != document:
        return frozenset()
    return frozenset([reveal.line])


def plan(
    lines: Sequence[str],
    policy: Policy,
    feature: Feature,
    features: FeatureState,
    reveal: Optional[RevealTracker] = None,
    *,
    document: Optional[Hashable] = None,
    start_line: int = 1,
) -> List[RenderInstruction]:
    """
    Compute the overlay for `lines`.

    Args:
        lines: Document lines, in order.
        policy: Redaction policy.
        feature: The consumer asking. Nothing is planned when it is disabled.
        features: Current feature switches.
        reveal: Reveal session, if any.
        document: Identifier of the document being planned; a reveal for a
            different document is ignored.
        start_line: Number of the first line in `lines` (for slices).
    """
    if not features.is_enabled(feature):
        return []
    return _plan_lines(lines, policy, _revealed_lines(reveal, document), start_line)


def plan_chunks(
    lines: Sequence[str],
    policy: Policy,
    feature: Feature,
    features: FeatureState,
    reveal: Optional[RevealTracker] = None,
    *,
    document: Optional[Hashable] = None,
    chunk_size: int = 500,
) -> Iterator[List[RenderInstruction]]:
    """
    Plan `lines` in slices of `chunk_size`, yielding one list per slice.

    Line numbers stay global. Feature and reveal state are read once, before
    the first chunk, so every chunk belongs to the same pass.
    """
    if chunk_size < 1:
        raise ValueError("chunk_size must be >= 1")
    if not features.is_enabled(feature):
        return
    revealed = _revealed_lines(reveal, document)
    for offset in range(0, len(lines), chunk_size):
        yield _plan_lines(lines[offset:offset + chunk_size], policy, revealed, offset + 1)


class PassState(str, Enum):
    PENDING = "pending"
    COMPLETE = "complete"
    COMMITTED = "committed"
    ABANDONED = "abandoned"


class PlanningPass:
    """
    One redraw of one document, computed chunk by chunk.

    Inputs (text, policy, feature switch, reveal) are captured when the pass
    is created. Instructions reach the sink only through `commit`, which
    clears the document's previous overlay and applies the whole plan at
    once. An abandoned pass never touches the sink.
    """

    def __init__(
        self,
        document: Hashable,
        lines: Sequence[str],
        policy: Policy,
        feature: Feature,
        features: FeatureState,
        reveal: Optional[RevealTracker] = None,
        chunk_size: int = 500,
    ) -> None:
        if chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")
        self.document = document
        self.chunk_size = chunk_size
        self._lines = list(lines)
        self._policy = policy
        self._enabled = features.is_enabled(feature)
        self._revealed = _revealed_lines(reveal, document)
        self._offset = 0
        self._instructions: List[RenderInstruction] = []
        self.state = PassState.PENDING if self._enabled and self._lines else PassState.COMPLETE

    @property
    def done(self) -> bool:
        return self.state is not PassState.PENDING

    @property
    def instructions(self) -> List[RenderInstruction]:
        if self.state not in (PassState.COMPLETE, PassState.COMMITTED):
            raise RuntimeError(f"planning pass is {self.state.value}")
        return list(self._instructions)

    def step(self) -> bool:
        """Plan the next chunk. Returns True while chunks remain."""
        if self.state is not PassState.PENDING:
            return False
        chunk = self._lines[self._offset:self._offset + self.chunk_size]
        self._instructions.extend(_plan_lines(chunk, self._policy, self._revealed, self._offset + 1))
        self._offset += len(chunk)
        if self._offset >= len(self._lines):
            self.state = PassState.COMPLETE
            return False
        return True

    def run(self) -> "PlanningPass":
        while self.step():
            pass
        return self

    def abandon(self) -> None:
        if self.state in (PassState.PENDING, PassState.COMPLETE):
            self.state = PassState.ABANDONED
            self._instructions = []

    def commit(self, sink) -> bool:
        """Replace the document's overlay with this pass. False if not complete or abandoned."""
        if self.state is not PassState.COMPLETE:
            return False
        sink.clear(self.document)
        if self._instructions:
            sink.apply(self.document, list(self._instructions))
        self.state = PassState.COMMITTED
        logger.debug("Committed %d overlay(s) for %r", len(self._instructions), self.document)
        return True
