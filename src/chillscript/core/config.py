"""
Settings for the chill-script parser and evaluator.

Settings come from the ``[script]`` table of ``chill.toml`` when one is
present, then from environment variables, then from defaults:

    [script]
    filler_words = ["the"]
    max_depth = 256
    division_precision = 34

Environment overrides:
    CHILL_SCRIPT_MAX_DEPTH, CHILL_SCRIPT_DIVISION_PRECISION,
    CHILL_SCRIPT_FILLER_WORDS (comma-separated)

Usage:
    from chillscript.core.config import load_settings

    settings = load_settings()  # looks for ./chill.toml
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "chill.toml"

_ENV_OVERRIDES = {
    "CHILL_SCRIPT_MAX_DEPTH": "max_depth",
    "CHILL_SCRIPT_DIVISION_PRECISION": "division_precision",
    "CHILL_SCRIPT_FILLER_WORDS": "filler_words",
}


class ScriptSettings(BaseModel):
    """Tunables shared by the parser and the runtime."""

    filler_words: tuple[str, ...] = Field(
        default=("the",),
        description="Readability words the unary rule skips before an operand",
    )
    max_depth: int = Field(
        default=256,
        ge=1,
        description=(
            "Maximum nesting of rule dispatches in one parse, and maximum height of the"
            " resulting tree. Each parenthesized group costs about ten dispatches, so the"
            " default allows roughly 25 nested parentheses"
        ),
    )
    division_precision: int = Field(
        default=34, ge=1, description="Significant digits kept by decimal division"
    )
    source_name: str = Field(default="<script>", description="Name used in error locations")

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("filler_words", mode="before")
    @classmethod
    def _split_words(cls, value: object) -> object:
        if isinstance(value, str):
            return tuple(word.strip() for word in value.split(",") if word.strip())
        return value


def load_settings(path: Path | None = None) -> ScriptSettings:
    """Load settings from ``chill.toml`` (if any) plus environment overrides.

    Args:
        path: Explicit config file. Defaults to ``./chill.toml``; a missing
            default file is not an error, a missing explicit one is.

    Returns:
        Validated settings.

    Raises:
        ConfigError: If the file is unreadable or a value fails validation.
    """
    data: dict[str, object] = {}

    config_path = path if path is not None else Path.cwd() / CONFIG_FILE_NAME
    if config_path.exists():
        try:
            document = tomllib.loads(config_path.read_text(encoding="utf-8"))
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML in {config_path}: {e}") from e
        data.update(document.get("script", {}))
        logger.debug("Loaded script settings from %s", config_path)
    elif path is not None:
        raise ConfigError(f"Config file not found: {path}")

    for env_var, field_name in _ENV_OVERRIDES.items():
        raw = os.environ.get(env_var)
        if raw is not None and raw.strip():
            data[field_name] = raw.strip()
            logger.debug("Script setting %s overridden by %s", field_name, env_var)

    try:
        return ScriptSettings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid script settings: {e}") from e
