"""MapRenderer - Pydeck rendering of the lifecycle map.

The rendering surface consumes exactly three things:
- a ViewportTarget (CenterView or BoundsView)
- markers: (coordinate, icon, popup) records
- polylines: ordered coordinate sequences with a style

Key pydeck conventions:
- Uses [lng, lat] coordinate order (GeoJSON standard)
- Colors as RGBA lists [R, G, B, A] (0-255)
- Data prepared as list[dict] for GPU streaming

Bounds targets are converted to a pydeck ViewState by fitting the
rectangle into the viewport in Web Mercator, honoring padding and the
zoom cap. This is a rendering concern; the engine itself only deals in
lat/lng rectangles.
"""

import logging
import math
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field

import pydeck as pdk

from cdr_timeline.constants import MapConfig, StyleConfig
from cdr_timeline.core.declusterer import PlacedMarker
from cdr_timeline.core.path_resolver import HighlightedPath
from cdr_timeline.core.viewport import BoundsView, CenterView, ViewportTarget
from cdr_timeline.model.canonical_location import LocationRole
from cdr_timeline.model.coordinate import Coordinate
from cdr_timeline.model.project import Project
from cdr_timeline.ui.icons import IconResolver, IconSpec

logger = logging.getLogger(__name__)

OSM_TILES_ABC = [
    "https://a.tile.openstreetmap.org/{z}/{x}/{y}.png",
    "https://b.tile.openstreetmap.org/{z}/{x}/{y}.png",
    "https://c.tile.openstreetmap.org/{z}/{x}/{y}.png",
]

# Mapbox GL style spec for a raster basemap (needs map_provider="mapbox", no API key)
OSM_STYLE: dict[str, object] = {
    "version": 8,
    "sources": {
        "osm": {
            "type": "raster",
            "tiles": OSM_TILES_ABC,
            "tileSize": MapConfig.TILE_SIZE_PX,
            "attribution": '© <a href="https://www.openstreetmap.org/copyright">OpenStreetMap</a> contributors',
        }
    },
    "layers": [{"id": "osm", "type": "raster", "source": "osm", "minzoom": 0, "maxzoom": 19}],
}


@dataclass(frozen=True)
class MapMarker:
    """A marker to draw.

    Attributes:
        position: Where to draw it
        icon: Emoji and color
        name: Popup title
        detail: Popup body text
        kind: "event" or "location"
        radius_px: Marker circle radius
    """

    position: Coordinate
    icon: IconSpec
    name: str
    detail: str = ""
    kind: str = "event"
    radius_px: int = StyleConfig.EVENT_MARKER_RADIUS_PX


@dataclass(frozen=True)
class Polyline:
    """An ordered coordinate sequence with a line style."""

    coordinates: tuple[Coordinate, ...]
    color: str
    width_px: int
    opacity: float = 1.0
    name: str = ""

    def rgba(self) -> list[int]:
        return IconSpec(emoji="", color=self.color).rgba(alpha=round(self.opacity * 255))


@dataclass
class LayerCollection:
    """Pydeck layers with z-ordering: paths -> marker circles -> emoji labels."""

    paths: list[pdk.Layer] = field(default_factory=list)
    circles: list[pdk.Layer] = field(default_factory=list)
    labels: list[pdk.Layer] = field(default_factory=list)

    def get_ordered_layers(self) -> list[pdk.Layer]:
        """Return all layers in correct z-order (back to front)."""
        return self.paths + self.circles + self.labels


# =============================================================================
# VIEWPORT FITTING
# =============================================================================


def _mercator_xy(coordinate: Coordinate) -> tuple[float, float]:
    """Web Mercator world position in [0, 1] (y grows southwards)."""
    x = (coordinate.lng + 180.0) / 360.0
    lat_rad = math.radians(coordinate.lat)
    y = (1.0 - math.log(math.tan(lat_rad) + 1.0 / math.cos(lat_rad)) / math.pi) / 2.0
    return x, y


def _mercator_lat(y: float) -> float:
    return math.degrees(math.atan(math.sinh(math.pi * (1.0 - 2.0 * y))))


def viewport_to_view_state(
    target: ViewportTarget,
    width_px: int = MapConfig.VIEWPORT_WIDTH_PX,
    height_px: int = MapConfig.VIEWPORT_HEIGHT_PX,
) -> pdk.ViewState:
    """Convert a viewport target into a pydeck ViewState.

    BoundsView: the largest zoom (capped at max_zoom) at which the
    rectangle fits inside the viewport minus padding on every side.
    """
    if isinstance(target, CenterView):
        return pdk.ViewState(latitude=target.center.lat, longitude=target.center.lng, zoom=target.zoom)

    if not isinstance(target, BoundsView):
        raise TypeError(f"Unknown viewport target {target!r}")

    west_x, north_y = _mercator_xy(target.bounds.north_west)
    east_x, south_y = _mercator_xy(target.bounds.south_east)
    span_x = east_x - west_x
    span_y = south_y - north_y
    available_w = max(width_px - 2 * target.padding_px, 1)
    available_h = max(height_px - 2 * target.padding_px, 1)

    zooms = []
    if span_x > 0:
        zooms.append(math.log2(available_w / (span_x * MapConfig.TILE_SIZE_PX)))
    if span_y > 0:
        zooms.append(math.log2(available_h / (span_y * MapConfig.TILE_SIZE_PX)))
    zoom = min([*zooms, float(target.max_zoom)])

    center_lat = _mercator_lat((north_y + south_y) / 2)
    center_lng = (target.bounds.west + target.bounds.east) / 2
    return pdk.ViewState(latitude=center_lat, longitude=center_lng, zoom=zoom)


# =============================================================================
# MARKER AND POLYLINE BUILDERS
# =============================================================================


def event_markers(placed: Iterable[PlacedMarker], icons: IconResolver) -> list[MapMarker]:
    """Markers for declustered events."""
    return [
        MapMarker(
            position=marker.position,
            icon=icons.for_event(marker.event.category),
            name=marker.event.title,
            detail=f"{marker.event.description}<br/>{marker.event.timestamp:%Y-%m-%d %H:%M %Z}",
            kind="event",
        )
        for marker in placed
    ]


def location_markers(
    project: Project,
    anchors: Mapping[LocationRole, Coordinate],
    icons: IconResolver,
) -> list[MapMarker]:
    """Markers for the canonical locations that have events."""
    markers = []
    for role, coordinate in anchors.items():
        location = project.canonical_location(role)
        markers.append(
            MapMarker(
                position=coordinate,
                icon=icons.for_location(project.methodology, role),
                name=location.short_label or location.label,
                detail=location.label,
                kind="location",
                radius_px=StyleConfig.LOCATION_MARKER_RADIUS_PX,
            )
        )
    return markers


def path_polylines(main_paths: Sequence[HighlightedPath], highlighted: HighlightedPath | None) -> list[Polyline]:
    """Connector paths, with the highlighted leg drawn last (on top)."""
    polylines = [
        Polyline(
            coordinates=tuple(path),
            color=StyleConfig.MAIN_PATH_COLOR,
            width_px=StyleConfig.MAIN_PATH_WIDTH_PX,
            opacity=StyleConfig.MAIN_PATH_OPACITY,
            name=f"Connector {i + 1}",
        )
        for i, path in enumerate(main_paths)
    ]
    if highlighted and len(highlighted) > 1:
        polylines.append(
            Polyline(
                coordinates=tuple(highlighted),
                color=StyleConfig.HIGHLIGHT_PATH_COLOR,
                width_px=StyleConfig.HIGHLIGHT_PATH_WIDTH_PX,
                opacity=StyleConfig.HIGHLIGHT_PATH_OPACITY,
                name="Transport",
            )
        )
    return polylines


# =============================================================================
# RENDERER
# =============================================================================


class MapRenderer:
    """Renders markers and polylines on a Pydeck map.

    Example:
        renderer = MapRenderer()
        deck = renderer.render(viewport=target, markers=markers, polylines=polylines)
        st.pydeck_chart(deck)
    """

    def __init__(
        self,
        width_px: int = MapConfig.VIEWPORT_WIDTH_PX,
        height_px: int = MapConfig.VIEWPORT_HEIGHT_PX,
    ) -> None:
        self.width_px = width_px
        self.height_px = height_px

    def render(
        self,
        viewport: ViewportTarget,
        markers: Sequence[MapMarker] = (),
        polylines: Sequence[Polyline] = (),
    ) -> pdk.Deck:
        """Render the complete map.

        Returns:
            pdk.Deck object ready for display.
        """
        layers = LayerCollection()
        if polylines:
            layers.paths.append(self._create_path_layer(polylines))
        if markers:
            layers.circles.append(self._create_marker_layer(markers))
            layers.labels.append(self._create_emoji_layer(markers))

        return pdk.Deck(
            map_style=OSM_STYLE,
            map_provider="mapbox",
            initial_view_state=viewport_to_view_state(viewport, self.width_px, self.height_px),
            layers=layers.get_ordered_layers(),
            tooltip=self._create_tooltip_config(),
        )

    def _create_path_layer(self, polylines: Sequence[Polyline]) -> pdk.Layer:
        path_data = [
            {
                "path": [list(c.lng_lat) for c in polyline.coordinates],
                "color": polyline.rgba(),
                "width": polyline.width_px,
                "name": polyline.name,
                "detail": "",
            }
            for polyline in polylines
        ]
        return pdk.Layer(
            "PathLayer",
            path_data,
            get_path="path",
            get_color="color",
            get_width="width",
            width_units="pixels",
            cap_rounded=True,
            joint_rounded=True,
            pickable=True,
            id="paths",
        )

    def _create_marker_layer(self, markers: Sequence[MapMarker]) -> pdk.Layer:
        marker_data = [
            {
                "position": list(marker.position.lng_lat),
                "color": marker.icon.rgba(alpha=230),
                "radius": marker.radius_px,
                "name": marker.name,
                "detail": marker.detail,
                "kind": marker.kind,
            }
            for marker in markers
        ]
        return pdk.Layer(
            "ScatterplotLayer",
            marker_data,
            get_position="position",
            get_fill_color="color",
            get_radius="radius",
            radius_units="pixels",
            get_line_color=[255, 255, 255, 255],
            stroked=True,
            line_width_min_pixels=2,
            pickable=True,
            auto_highlight=True,
            id="markers",
        )

    def _create_emoji_layer(self, markers: Sequence[MapMarker]) -> pdk.Layer:
        label_data = [
            {
                "position": list(marker.position.lng_lat),
                "emoji": marker.icon.emoji,
                "size": marker.radius_px,
            }
            for marker in markers
        ]
        return pdk.Layer(
            "TextLayer",
            label_data,
            get_position="position",
            get_text="emoji",
            get_size="size",
            character_set="auto",
            get_text_anchor='"middle"',
            get_alignment_baseline='"center"',
            pickable=False,
            id="marker_emojis",
        )

    def _create_tooltip_config(self) -> dict[str, str | dict[str, str]]:
        """Popup content: title and detail of the hovered marker."""
        return {
            "html": "<b>{name}</b><br/><span style='font-size: 11px'>{detail}</span>",
            "style": {
                "backgroundColor": "rgba(255, 255, 255, 0.95)",
                "color": "#333",
                "padding": "6px 10px",
                "borderRadius": "4px",
            },
        }
