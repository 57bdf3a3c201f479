"""
Redaction for buffers rendered by someone else.

A picker's file previewer draws arbitrary file content into its own
read-only buffer. Instead of patching the previewer, it asks one question
per buffer through this module:

    request  -> (file name, buffer text, which previewer is asking)
    response -> not applicable, or the full overlay plan to apply

The exchange holds no reference to the previewer and works on partial text:
a trailing line without a newline is planned like any other line.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import TYPE_CHECKING, Callable, List, Optional

from ..config import Policy
from ..detect.line_parser import split_lines
from .features import Feature, FeatureState
from .planner import RenderInstruction, plan, plan_chunks

if TYPE_CHECKING:
    from .controller import ShelterController

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PreviewRequest:
    filename: str
    text: str
    feature: Feature


@dataclass(frozen=True)
class PreviewDecision:
    applicable: bool
    instructions: List[RenderInstruction] = field(default_factory=list)
    reason: str = ""


def _not_applicable(reason: str) -> PreviewDecision:
    return PreviewDecision(applicable=False, reason=reason)


def intercept_preview(
    request: PreviewRequest,
    *,
    policy: Policy,
    features: FeatureState,
    recognizer: Callable[[str], bool],
    chunk_size: Optional[int] = None,
) -> PreviewDecision:
    """
    Answer a previewer's "should this buffer be redacted?" question.

    Args:
        request: File name, buffer text and the asking feature.
        policy: Redaction policy.
        features: Current feature switches.
        recognizer: Env-file recognition rule.
        chunk_size: Plan in slices of this many lines (None -> one pass).

    Returns:
        `applicable=False` when the file is not an env file or the feature is
        off; otherwise the full plan. Reveal sessions never apply here.
    """
    if not features.is_enabled(request.feature):
        return _not_applicable(f"{request.feature.value} is disabled")
    if not recognizer(request.filename):
        return _not_applicable("not an env file")

    lines = split_lines(request.text)
    if chunk_size and len(lines) > chunk_size:
        instructions: List[RenderInstruction] = []
        for chunk in plan_chunks(lines, policy, request.feature, features, chunk_size=chunk_size):
            instructions.extend(chunk)
    else:
        instructions = plan(lines, policy, request.feature, features)

    logger.debug("Preview of %s: %d overlay(s)", request.filename, len(instructions))
    return PreviewDecision(applicable=True, instructions=instructions)


class PreviewInterceptor:
    """
    The hook shape handed to a foreign preview pipeline.

    Bound to a controller so each call sees the controller's current policy,
    switches and recognizer:

        hook = PreviewInterceptor(controller, Feature.TELESCOPE_PREVIEWER)
        decision = hook(path, text)
    """

    def __init__(self, controller: "ShelterController", feature: Feature) -> None:
        self.controller = controller
        self.feature = Feature.parse(feature)

    def __call__(self, filename: str, text: str) -> PreviewDecision:
        return self.controller.preview(filename, text, self.feature)
