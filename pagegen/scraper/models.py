"""Data models for the page capture pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple

DEVICE_SEPARATOR = "\n<!-- Device Separator -->\n"


@dataclass
class CapturedMarkup:
    """Rendered HTML for one URL, one fragment per emulated device."""

    url: str
    fragments: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def devices(self) -> List[str]:
        return [device for device, _ in self.fragments]

    def joined(self) -> str:
        """Return all fragments in device order, separated by :data:`DEVICE_SEPARATOR`."""
        return DEVICE_SEPARATOR.join(html for _, html in self.fragments)
