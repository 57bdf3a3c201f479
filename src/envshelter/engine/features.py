"""
Per-consumer redaction switches.

Each `Feature` is one consumer of the engine (completion items, the hover
panel, env file rendering, picker previews). `FeatureState` keeps what is
enabled right now plus the snapshot taken at setup, which `toggle_all`
restores.

toggle_all is asymmetric:
  - anything enabled -> everything off
  - nothing enabled  -> back to the setup snapshot (not "everything on")
"""

from __future__ import annotations

from enum import Enum
import logging
from typing import Callable, Dict, List, Mapping, Optional, Union

logger = logging.getLogger(__name__)

Notifier = Callable[[str, int], None]


class InvalidFeature(ValueError):
    """Raised when a name is not one of the known features."""


class Feature(str, Enum):
    COMPLETION = "cmp"
    HOVER = "peek"
    FILES = "files"
    TELESCOPE = "telescope"
    FZF = "fzf"
    TELESCOPE_PREVIEWER = "telescope_previewer"
    FZF_PREVIEWER = "fzf_previewer"

    @classmethod
    def parse(cls, name: Union[str, "Feature"]) -> "Feature":
        if isinstance(name, cls):
            return name
        try:
            return cls(str(name).strip().lower())
        except ValueError:
            valid = ", ".join(f"'{f.value}'" for f in cls)
            raise InvalidFeature(f"Invalid feature {name!r}. Use one of {valid}") from None


class ToggleOutcome(str, Enum):
    DISABLED = "disabled"
    RESTORED = "restored"


def log_notifier(message: str, level: int) -> None:
    logger.log(level, message)


class FeatureState:
    """
    Enabled flags for every feature plus the setup-time snapshot.

    `initial` is written once by `configure` and never changes afterwards.
    """

    def __init__(self, notifier: Optional[Notifier] = None) -> None:
        self._notify: Notifier = notifier or log_notifier
        self._enabled: Dict[Feature, bool] = {f: False for f in Feature}
        self._initial: Dict[Feature, bool] = {f: False for f in Feature}
        self._configured = False

    # -- setup -------------------------------------------------------------------------------

    def configure(self, initial: Mapping[Union[str, Feature], bool]) -> None:
        """
        Take the setup snapshot. Features missing from `initial` start disabled.

        Unknown names are skipped with a warning so a stale config entry does
        not block startup.
        """
        if self._configured:
            raise RuntimeError("FeatureState.configure() may only be called once")

        snapshot = {f: False for f in Feature}
        for name, value in initial.items():
            try:
                snapshot[Feature.parse(name)] = bool(value)
            except InvalidFeature:
                logger.warning("Ignoring unknown shelter module %r", name)

        self._initial = snapshot
        self._enabled = dict(snapshot)
        self._configured = True

    # -- queries -----------------------------------------------------------------------------

    def is_enabled(self, feature: Union[str, Feature]) -> bool:
        """Total query: unknown features are reported as disabled."""
        try:
            return self._enabled[Feature.parse(feature)]
        except InvalidFeature:
            return False

    def any_enabled(self) -> bool:
        return any(self._enabled.values())

    def enabled_features(self) -> List[Feature]:
        return [f for f in Feature if self._enabled[f]]

    def snapshot(self) -> Dict[Feature, bool]:
        return dict(self._enabled)

    @property
    def initial(self) -> Dict[Feature, bool]:
        return dict(self._initial)

    # -- mutation ----------------------------------------------------------------------------

    def set(self, feature: Union[str, Feature], enabled: bool) -> Feature:
        """
        Enable or disable one feature. The setup snapshot is left alone.

        Raises:
            InvalidFeature: `feature` is not a known feature.
        """
        f = Feature.parse(feature)
        self._enabled[f] = bool(enabled)
        return f

    def set_all(self, enabled: bool) -> None:
        for f in Feature:
            self._enabled[f] = bool(enabled)

    def toggle_all(self) -> ToggleOutcome:
        if self.any_enabled():
            self.set_all(False)
            self._notify("All shelter modes disabled", logging.INFO)
            return ToggleOutcome.DISABLED

        self._enabled = dict(self._initial)
        self._notify("Shelter modes restored to initial settings", logging.INFO)
        return ToggleOutcome.RESTORED
