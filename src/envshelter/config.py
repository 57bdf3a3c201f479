from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_MASK_CHAR = "*"
DEFAULT_CHUNK_SIZE = 500


class ConfigError(ValueError):
    """Raised when a config file cannot be read as settings at all."""


class MalformedPolicy(ValueError):
    """Raised when partial-mode numbers break the policy invariants."""


# ---- Policy (how a value is hidden) ----
class PartialMode(BaseModel):
    """Leave `show_start`/`show_end` characters visible, mask the middle."""

    model_config = ConfigDict(frozen=True)

    show_start: int = Field(default=3, ge=0)
    show_end: int = Field(default=3, ge=0)
    min_mask: int = Field(default=3, ge=1)
    # what to do with values too short for both edges plus min_mask:
    #   mask       -> hide every character
    #   first_char -> keep the first character, mask the rest
    short_value: Literal["mask", "first_char"] = "mask"


class Policy(BaseModel):
    """Immutable redaction policy. Replaced wholesale, never mutated."""

    model_config = ConfigDict(frozen=True)

    mask_char: str = Field(default=DEFAULT_MASK_CHAR, min_length=1, max_length=1)
    partial: Optional[PartialMode] = None  # None -> full masking


# ---- Settings file (.envshelter.yaml) ----
class ShelterConfiguration(BaseModel):
    mask_char: Any = DEFAULT_MASK_CHAR
    partial_mode: Any = False  # bool or mapping merged over PartialMode defaults
    short_value: Literal["mask", "first_char"] = "mask"


class ShelterSection(BaseModel):
    configuration: ShelterConfiguration = Field(default_factory=ShelterConfiguration)
    modules: Dict[str, bool] = Field(default_factory=dict)


class ShelterSettings(BaseModel):
    shelter: ShelterSection = Field(default_factory=ShelterSection)
    env_file_pattern: Optional[Union[str, List[str]]] = None
    chunk_size: int = Field(default=DEFAULT_CHUNK_SIZE, ge=1)

    def env_file_patterns(self) -> List[str]:
        if not self.env_file_pattern:
            return []
        if isinstance(self.env_file_pattern, str):
            return [self.env_file_pattern]
        return list(self.env_file_pattern)


def partial_mode_from_options(options: Any, short_value: str = "mask") -> Optional[PartialMode]:
    """
    Interpret the `partial_mode` option.

    `False`/`None` disables partial mode, `True` enables it with the defaults
    (3/3/3) and a mapping is merged over those defaults.

    Raises:
        MalformedPolicy: the option has the wrong shape or violates
            `show_start, show_end >= 0` / `min_mask >= 1`.
    """
    if options is None or options is False:
        return None
    if options is True:
        return PartialMode(short_value=short_value)
    if not isinstance(options, dict):
        raise MalformedPolicy(
            f"partial_mode must be a boolean or a mapping, got {type(options).__name__}"
        )
    merged = {"short_value": short_value, **options}
    try:
        return PartialMode.model_validate(merged)
    except ValidationError as exc:
        raise MalformedPolicy(str(exc)) from exc


def build_policy(configuration: Optional[ShelterConfiguration] = None) -> Policy:
    """
    Build the redaction policy from the `shelter.configuration` section.

    Never raises for cosmetic misconfiguration: a bad mask char falls back to
    `*` and a malformed partial mode falls back to full masking.
    """
    configuration = configuration or ShelterConfiguration()

    mask_char = configuration.mask_char
    if not isinstance(mask_char, str) or len(mask_char) != 1:
        logger.warning("mask_char must be a single character; using %r", DEFAULT_MASK_CHAR)
        mask_char = DEFAULT_MASK_CHAR

    try:
        partial = partial_mode_from_options(configuration.partial_mode, configuration.short_value)
    except MalformedPolicy as exc:
        logger.warning("Ignoring malformed partial_mode, using full masking: %s", exc)
        partial = None

    return Policy(mask_char=mask_char, partial=partial)


# ---- Loader ----
def settings_from_dict(data: Dict[str, Any]) -> ShelterSettings:
    try:
        return ShelterSettings(**data)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc


def load_config(path: Optional[Path]) -> ShelterSettings:
    if not path:
        return ShelterSettings()
    try:
        data = yaml.safe_load(Path(path).read_text())
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"cannot read {path}: {exc}") from exc
    if data is None:
        return ShelterSettings()
    if not isinstance(data, dict):
        raise ConfigError("config must be a YAML mapping")
    return settings_from_dict(data)
