"""
Interfaces the engine talks to, plus in-memory implementations.

- DocumentSource: current lines of a document (read only)
- OverlaySink:    applies / clears overlay instructions per document
- Notifier:       user-visible messages, `(message, logging level)`

Editor integrations provide their own implementations; the in-memory ones
back the CLI and the tests.
"""

from __future__ import annotations

from typing import Dict, Hashable, List, Protocol, Sequence

from ..detect.line_parser import split_lines
from .features import Notifier
from .planner import RenderInstruction

__all__ = [
    "DocumentSource",
    "OverlaySink",
    "Notifier",
    "InMemoryDocuments",
    "InMemoryOverlaySink",
]


class DocumentSource(Protocol):
    def lines(self, document: Hashable) -> Sequence[str]: ...

    def name(self, document: Hashable) -> str: ...


class OverlaySink(Protocol):
    def apply(self, document: Hashable, instructions: Sequence[RenderInstruction]) -> None: ...

    def clear(self, document: Hashable) -> None: ...


class InMemoryDocuments:
    """Documents keyed by identifier; the identifier doubles as the file name."""

    def __init__(self, documents: Dict[Hashable, str] | None = None) -> None:
        self._text: Dict[Hashable, str] = dict(documents or {})

    def set_text(self, document: Hashable, text: str) -> None:
        self._text[document] = text

    def lines(self, document: Hashable) -> Sequence[str]:
        return split_lines(self._text.get(document, ""))

    def name(self, document: Hashable) -> str:
        return str(document)


class InMemoryOverlaySink:
    """Keeps the applied overlay of each document."""

    def __init__(self) -> None:
        self.overlays: Dict[Hashable, List[RenderInstruction]] = {}

    def apply(self, document: Hashable, instructions: Sequence[RenderInstruction]) -> None:
        self.overlays.setdefault(document, []).extend(instructions)

    def clear(self, document: Hashable) -> None:
        self.overlays.pop(document, None)

    def get(self, document: Hashable) -> List[RenderInstruction]:
        return list(self.overlays.get(document, []))

    def render(self, document: Hashable, lines: Sequence[str]) -> List[str]:
        """
        Draw the overlay over `lines` the way an editor would: the overlay
        text covers as many characters as it is long, starting at the value.
        """
        by_line = {ins.line: ins for ins in self.overlays.get(document, [])}
        out: List[str] = []
        for number, line in enumerate(lines, start=1):
            ins = by_line.get(number)
            if ins is None:
                out.append(line)
                continue
            raw = line.encode("utf-8")
            head = raw[: ins.start_column].decode("utf-8", errors="ignore")
            rest = line[len(head):]
            out.append(head + ins.text + rest[len(ins.text):])
        return out
