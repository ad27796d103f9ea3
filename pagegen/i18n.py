"""User-facing message catalogue.

Messages live in ``pagegen/locales/<language>.json``.  The requested language
is layered over English, so a partial translation still produces complete
output.  A :class:`Translations` table is built once by the CLI and handed to
whatever needs to talk to the user.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterator

from pagegen.log import get_logger

FALLBACK_LANGUAGE = "en"
LOCALES_DIR = Path(__file__).resolve().parent / "locales"

logger = get_logger(__name__)


class Translations(Mapping):
    """Read-only ``key -> message`` table for one language."""

    def __init__(self, language: str, messages: Mapping[str, str]) -> None:
        self.language = language
        self._messages = MappingProxyType(dict(messages))

    def __getitem__(self, key: str) -> str:
        return self._messages[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def t(self, key: str, **params: Any) -> str:
        """Return the message for *key* formatted with *params*.

        Unknown keys return the key itself so a missing translation never
        breaks a run.
        """
        message = self._messages.get(key, key)
        if params:
            return message.format(**params)
        return message


def _read_catalogue(locales_dir: Path, language: str) -> dict[str, str]:
    path = locales_dir / f"{language}.json"
    if not path.exists():
        return {}
    return json.loads(path.read_text(encoding="utf-8"))


def load_translations(language: str, locales_dir: Path = LOCALES_DIR) -> Translations:
    """Load the message table for *language*, falling back to English per key."""
    messages = _read_catalogue(locales_dir, FALLBACK_LANGUAGE)
    if language != FALLBACK_LANGUAGE:
        localised = _read_catalogue(locales_dir, language)
        if not localised:
            logger.warning("locale_not_found", language=language)
        messages.update(localised)
    return Translations(language, messages)
