"""Marker icon resolution for events and canonical locations.

Icons are (emoji, color) pairs from StyleConfig. Unknown event
categories fall back to the sensor-reading icon instead of failing.
"""

import logging
from dataclasses import dataclass

from cdr_timeline.constants import StyleConfig
from cdr_timeline.model.canonical_location import LocationRole, Methodology
from cdr_timeline.model.event import EventCategory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IconSpec:
    """Renderable icon handle.

    Attributes:
        emoji: Glyph drawn on the marker
        color: Marker color as hex string (#rrggbb)
    """

    emoji: str
    color: str

    def rgba(self, alpha: int = 255) -> list[int]:
        """Color as [R, G, B, A] (0-255), the pydeck format."""
        hex_color = self.color.lstrip("#")
        return [int(hex_color[0:2], 16), int(hex_color[2:4], 16), int(hex_color[4:6], 16), alpha]


class IconResolver:
    """Maps event categories and anchor roles to icons."""

    def __init__(
        self,
        event_icons: dict[str, tuple[str, str]] | None = None,
        location_icons: dict[str, dict[str, tuple[str, str]]] | None = None,
        default_category: str = StyleConfig.DEFAULT_EVENT_ICON,
    ) -> None:
        self._event_icons = event_icons if event_icons is not None else StyleConfig.EVENT_ICONS
        self._location_icons = location_icons if location_icons is not None else StyleConfig.LOCATION_ICONS
        if default_category not in self._event_icons:
            raise ValueError(f"Default icon category {default_category!r} has no icon")
        self._default_category = default_category

    def for_event(self, category: EventCategory | str) -> IconSpec:
        key = category.value if isinstance(category, EventCategory) else category
        entry = self._event_icons.get(key)
        if entry is None:
            logger.warning(f"No icon for event category {key!r}, using {self._default_category}")
            entry = self._event_icons[self._default_category]
        color, emoji = entry
        return IconSpec(emoji=emoji, color=color)

    def for_location(self, methodology: Methodology, role: LocationRole) -> IconSpec:
        color, emoji = self._location_icons[methodology.value][role.value]
        return IconSpec(emoji=emoji, color=color)
