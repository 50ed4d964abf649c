"""Configuration helpers for the title sequence tools."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def _normalise_path(value: str | None) -> Path | None:
    if value is None:
        return None

    trimmed = value.strip()
    if not trimmed:
        return None

    return Path(trimmed).expanduser()


def _normalise_log_level(value: str | None, *, default: str) -> str:
    if value is None or not value.strip():
        return default

    level = value.strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(f"TITLESEQUENCE_LOG_LEVEL '{value}' is not a logging level.")
    return level


def _normalise_flag(value: str | None, *, name: str) -> bool:
    if value is None:
        return False

    trimmed = value.strip().lower()
    if trimmed in _TRUE_VALUES:
        return True
    if trimmed in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean flag (1/0, true/false, yes/no).")


@dataclass(frozen=True)
class TitleSequenceSettings:
    """Settings shared by the command line and the editor API.

    Values are read from environment variables. Paths are expanded to support
    ``~`` prefixes while empty strings are treated as if the variable was unset.
    """

    root: Path | None = None
    log_level: str = "WARNING"
    read_only: bool = False

    @classmethod
    def from_env(
        cls, environ: Mapping[str, str] | None = None
    ) -> "TitleSequenceSettings":
        """Return settings populated from ``environ`` (defaults to :data:`os.environ`)."""

        source = environ if environ is not None else os.environ

        return cls(
            root=_normalise_path(source.get("TITLESEQUENCE_ROOT")),
            log_level=_normalise_log_level(
                source.get("TITLESEQUENCE_LOG_LEVEL"), default="WARNING"
            ),
            read_only=_normalise_flag(
                source.get("TITLESEQUENCE_READ_ONLY"), name="TITLESEQUENCE_READ_ONLY"
            ),
        )

    def configure_logging(self) -> None:
        """Route log records to stderr at the configured level."""

        logging.basicConfig(
            level=self.log_level,
            format="%(levelname)s %(name)s: %(message)s",
        )


__all__ = ["TitleSequenceSettings"]
