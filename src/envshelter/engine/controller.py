"""
The single owner of redaction state for one host process.

`ShelterController` holds the policy, the feature switches and the reveal
session, and turns host events and user commands into overlay redraws.

Lifecycle:
  - created at setup (the feature snapshot is taken here, once)
  - `reconfigure()` swaps policy and recognizer wholesale
  - `teardown()` ends any reveal and clears every overlay it drew

All mutation goes through one re-entrant lock.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, Hashable, Optional, Set, Union

from ..config import Policy, ShelterSettings, build_policy
from ..detect.env_files import EnvFileRecognizer
from .features import Feature, FeatureState, InvalidFeature, Notifier, ToggleOutcome, log_notifier
from .interception import PreviewDecision, PreviewRequest, intercept_preview
from .planner import PlanningPass
from .ports import DocumentSource, InMemoryDocuments, InMemoryOverlaySink, OverlaySink
from .redactor import mask_value
from .reveal import EventKind, InteractionEvent, RevealTracker

logger = logging.getLogger(__name__)

_VERBS = {"enable": True, "disable": False}


class ShelterController:
    def __init__(
        self,
        settings: Optional[ShelterSettings] = None,
        documents: Optional[DocumentSource] = None,
        sink: Optional[OverlaySink] = None,
        notifier: Optional[Notifier] = None,
        recognizer: Optional[EnvFileRecognizer] = None,
    ) -> None:
        self._lock = threading.RLock()
        self._notify: Notifier = notifier or log_notifier
        self.settings = settings or ShelterSettings()
        self.documents = documents if documents is not None else InMemoryDocuments()
        self.sink = sink if sink is not None else InMemoryOverlaySink()

        self._custom_recognizer = recognizer is not None
        self.recognizer = recognizer or EnvFileRecognizer(self.settings.env_file_patterns())
        self.policy: Policy = build_policy(self.settings.shelter.configuration)

        self.features = FeatureState(self._notify)
        self.features.configure(self.settings.shelter.modules)
        self.reveal = RevealTracker()

        self._passes: Dict[Hashable, PlanningPass] = {}
        self._drawn: Set[Hashable] = set()

    # -- configuration -----------------------------------------------------------------------

    def reconfigure(self, settings: ShelterSettings) -> None:
        """Swap in new settings. The feature snapshot taken at setup is kept."""
        with self._lock:
            self.settings = settings
            self.policy = build_policy(settings.shelter.configuration)
            if not self._custom_recognizer:
                self.recognizer = EnvFileRecognizer(settings.env_file_patterns())
            logger.info("Reconfigured shelter (partial mode: %s)", self.policy.partial is not None)
            self._refresh()

    def teardown(self) -> None:
        with self._lock:
            for p in self._passes.values():
                p.abandon()
            self._passes.clear()
            self.reveal.clear()
            for document in list(self._drawn):
                self.sink.clear(document)
            self._drawn.clear()

    # -- redraw ------------------------------------------------------------------------------

    def is_env_document(self, document: Hashable) -> bool:
        return self.recognizer(self.documents.name(document))

    def begin_redraw(self, document: Hashable) -> PlanningPass:
        """
        Start a pass for `document`, superseding any outstanding one.

        Hosts that interleave planning with other work call `step()` on the
        returned pass and hand it back to `finish_redraw`.
        """
        with self._lock:
            previous = self._passes.pop(document, None)
            if previous is not None:
                previous.abandon()
            pass_ = PlanningPass(
                document,
                self.documents.lines(document),
                self.policy,
                Feature.FILES,
                self.features,
                self.reveal,
                chunk_size=self.settings.chunk_size,
            )
            self._passes[document] = pass_
            return pass_

    def finish_redraw(self, pass_: PlanningPass) -> bool:
        """Commit `pass_` if it is still the current pass of its document."""
        with self._lock:
            if self._passes.get(pass_.document) is not pass_:
                pass_.abandon()
                return False
            pass_.run()
            committed = pass_.commit(self.sink)
            del self._passes[pass_.document]
            if committed:
                self._drawn.add(pass_.document)
            return committed

    def redraw(self, document: Hashable) -> bool:
        """Recompute and apply the overlay of `document`. False if it is not an env file."""
        with self._lock:
            if not self.is_env_document(document):
                if document in self._drawn:
                    self.sink.clear(document)
                    self._drawn.discard(document)
                return False
            return self.finish_redraw(self.begin_redraw(document))

    def _refresh(self) -> None:
        for document in list(self._drawn):
            self.redraw(document)

    # -- host events -------------------------------------------------------------------------

    def handle_event(self, event: InteractionEvent) -> bool:
        """
        Feed a host event through the reveal session and redraw as needed.

        Returns True when the event ended a reveal session.
        """
        with self._lock:
            revealed_document = self.reveal.document
            ended = self.reveal.observe(event)
            if ended and revealed_document is not None:
                self.redraw(revealed_document)
            if event.kind in (EventKind.DOCUMENT_ENTERED, EventKind.TEXT_CHANGED):
                self.redraw(event.document)
            return ended

    # -- command surface ---------------------------------------------------------------------

    def reveal_current_line(self, document: Hashable, line: int) -> bool:
        with self._lock:
            if not self.features.is_enabled(Feature.FILES):
                self._notify("Shelter mode for files is not enabled", logging.WARNING)
                return False
            previous = self.reveal.document
            self.reveal.reveal(document, line)
            if previous is not None and previous != document:
                self.redraw(previous)
            self.redraw(document)
            return True

    def set_state(self, verb: str, feature: Union[str, Feature, None] = None) -> bool:
        """
        `enable`/`disable` one feature, or every feature when none is named.

        Bad input is reported through the notifier instead of raised, since
        this is called straight from user commands.
        """
        with self._lock:
            should_enable = _VERBS.get(str(verb).strip().lower())
            if should_enable is None:
                self._notify(f"Invalid command {verb!r}. Use 'enable' or 'disable'", logging.ERROR)
                return False

            word = "enabled" if should_enable else "disabled"
            if feature:
                try:
                    f = self.features.set(feature, should_enable)
                except InvalidFeature as exc:
                    self._notify(str(exc), logging.ERROR)
                    return False
                message = f"Shelter mode for {f.value.upper()} is now {word}"
            else:
                self.features.set_all(should_enable)
                message = f"All shelter modes are now {word}"

            if not self.features.is_enabled(Feature.FILES):
                self.reveal.clear()
            self._refresh()
            self._notify(message, logging.INFO)
            return True

    def toggle_all(self) -> ToggleOutcome:
        with self._lock:
            outcome = self.features.toggle_all()
            if outcome is ToggleOutcome.DISABLED:
                self.reveal.clear()
            self._refresh()
            return outcome

    # -- consumers ---------------------------------------------------------------------------

    def mask_value(self, value: str, feature: Union[str, Feature]) -> str:
        """Value as `feature` should display it (completion items, hover text)."""
        if not self.features.is_enabled(feature):
            return value
        return mask_value(value, self.policy)

    def preview(self, filename: str, text: str, feature: Union[str, Feature]) -> PreviewDecision:
        """External interception entry point, bound to the current state."""
        try:
            f = Feature.parse(feature)
        except InvalidFeature:
            return PreviewDecision(applicable=False, reason=f"unknown feature {feature!r}")
        return intercept_preview(
            PreviewRequest(filename=filename, text=text, feature=f),
            policy=self.policy,
            features=self.features,
            recognizer=self.recognizer,
            chunk_size=self.settings.chunk_size,
        )
