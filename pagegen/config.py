"""Centralised settings for the page object generator.

Settings are resolved once at start-up, in this order:

1. ``page-object-generator.json`` in the current working directory.  When it
   parses, its values are used as-is (no merge with defaults).
2. Otherwise every field falls back to an environment variable (a ``.env``
   file in the working directory is loaded first) or its built-in default.

Loading never raises: a missing or broken config file simply means defaults.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from pagegen.log import get_logger

CONFIG_FILE_NAME = "page-object-generator.json"

logger = get_logger(__name__)


def _split_devices(raw: Any) -> tuple[str, ...]:
    """Normalise a device list given as a JSON list or a comma-separated string."""
    if isinstance(raw, str):
        raw = raw.split(",")
    if not isinstance(raw, list) or not all(isinstance(d, str) for d in raw):
        raise TypeError(f"devices must be a list of strings, got {raw!r}")
    return tuple(d.strip() for d in raw if d.strip())


@dataclass(frozen=True)
class Settings:
    # ------------------------------------------------------------------
    # Language model
    # ------------------------------------------------------------------
    openai_api_key: str = field(
        default_factory=lambda: os.environ.get("OPENAI_API_KEY", "")
    )
    ai_model: str = field(
        default_factory=lambda: os.environ.get("AI_MODEL", "gpt-3.5-turbo")
    )

    # ------------------------------------------------------------------
    # Filesystem
    # ------------------------------------------------------------------
    output_dir: Path = field(
        default_factory=lambda: Path(os.environ.get("OUTPUT_DIR", "./generated"))
    )
    template_dir: Path = field(
        default_factory=lambda: Path(os.environ.get("TEMPLATE_DIR", "./templates"))
    )

    # ------------------------------------------------------------------
    # User interface
    # ------------------------------------------------------------------
    language: str = field(default_factory=lambda: os.environ.get("LANGUAGE", "en"))

    # ------------------------------------------------------------------
    # Browser
    # ------------------------------------------------------------------
    devices: tuple[str, ...] = field(
        default_factory=lambda: _split_devices(os.environ.get("DEVICES", "Desktop Chrome"))
    )

    @property
    def versions_dir(self) -> Path:
        """Directory that holds the work-in-progress copy during refinement."""
        return self.output_dir / "versions"

    @classmethod
    def from_json(cls, data: str) -> Settings:
        """Build settings from the JSON config file contents.

        Every key is required; a missing key or a wrongly typed value raises.
        """
        raw = json.loads(data)
        return cls(
            openai_api_key=str(raw["openaiApiKey"]),
            output_dir=Path(raw["outputDir"]),
            template_dir=Path(raw["templateDir"]),
            language=str(raw["language"]),
            ai_model=str(raw["aiModel"]),
            devices=_split_devices(raw["devices"]),
        )


def config_path(cwd: Path | None = None) -> Path:
    """Return the path of the JSON config file for *cwd* (default: process cwd)."""
    return (cwd or Path.cwd()) / CONFIG_FILE_NAME


def load_settings(cwd: Path | None = None) -> tuple[Settings, bool]:
    """Load settings for this run.

    Returns:
        A ``(settings, from_file)`` pair.  ``from_file`` is ``False`` when the
        config file was missing or unreadable and defaults were used instead,
        so the caller can tell the user.
    """
    base = cwd or Path.cwd()
    load_dotenv(base / ".env", override=False)

    path = config_path(base)
    try:
        settings = Settings.from_json(path.read_text(encoding="utf-8"))
    except Exception as exc:
        logger.warning("config_load_failed", path=str(path), error=repr(exc))
        return Settings(), False

    logger.debug("config_loaded", path=str(path))
    return settings, True
