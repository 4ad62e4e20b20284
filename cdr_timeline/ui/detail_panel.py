"""Detail panels for the active event and the project batch.

- EventDetailPanel: image, CO2 impact, date/time, location and payloads
  (sensor reading, feedstock details, blockchain proofs) of one event
- BatchCompositionPanel: feedstock material composition
- GrossRemovalsPanel: inputs behind the gross removals figure

Row builders return plain (label, value) pairs so the panels stay thin
wrappers around Streamlit calls.
"""

import logging

import streamlit as st

from cdr_timeline.model.coordinate import Coordinate
from cdr_timeline.model.event import FeedstockDetails, LifecycleEvent, SensorReading
from cdr_timeline.model.project import BatchInfo, Project
from cdr_timeline.ui.icons import IconResolver

logger = logging.getLogger(__name__)

Row = tuple[str, str]


# =============================================================================
# ROW BUILDERS
# =============================================================================


def format_coordinate(coordinate: Coordinate, decimals: int = 4) -> str:
    """Hemisphere-suffixed coordinate, e.g. '20.8893°N, 156.4729°W'."""
    ns = "N" if coordinate.lat >= 0 else "S"
    ew = "E" if coordinate.lng >= 0 else "W"
    return f"{abs(coordinate.lat):.{decimals}f}°{ns}, {abs(coordinate.lng):.{decimals}f}°{ew}"


def format_impact(co2_impact: float) -> str:
    return f"{co2_impact:+.2f} tCO₂e"


def event_detail_rows(event: LifecycleEvent, route_length_m: float | None = None) -> list[Row]:
    """Date, time, location name, coordinates and route length of an event.

    Date and time come from the event metadata when present, otherwise
    from the timestamp. The route row appears only for transport events.
    """
    date = event.metadata.get("date") or f"{event.timestamp:%Y-%m-%d}"
    time = event.metadata.get("time") or f"{event.timestamp:%H:%M} UTC"
    rows = [("Date", str(date)), ("Time", str(time))]
    if event.location_name:
        rows.append(("Location", event.location_name))
    rows.append(("Coordinates", format_coordinate(event.coordinate)))
    if route_length_m is not None:
        rows.append(("Route", f"{route_length_m / 1000:.1f} km"))
    return rows


def sensor_reading_rows(reading: SensorReading) -> list[Row]:
    rows = [("Reading", reading.type.replace("_", " "))]
    if reading.value is not None:
        rows.append(("Value", f"{reading.value:g} {reading.unit or ''}".rstrip()))
    if reading.start_time and reading.end_time:
        rows.append(("Interval", f"{reading.start_time:%Y-%m-%d %H:%M} → {reading.end_time:%Y-%m-%d %H:%M}"))
    rows.extend((key.replace("_", " ").capitalize(), str(value)) for key, value in reading.breakdown.items())
    return rows


def feedstock_rows(details: FeedstockDetails) -> list[Row]:
    return [
        ("Feedstock", details.type),
        ("Supplier", details.supplier),
        ("Volume", f"{details.volume:g} {details.unit}"),
        ("Carbon content", details.carbon_content),
    ]


def batch_material_rows(batch: BatchInfo) -> list[dict[str, str]]:
    """One table row per material plus a total row (empty batch gives [])."""
    if not batch.materials:
        return []
    rows = [
        {
            "Material": material.name,
            "Share": f"{material.percentage:g}%",
            "Weight": f"{material.weight:,.2f} {material.unit}",
        }
        for material in batch.materials
    ]
    rows.append({"Material": "Total", "Share": "", "Weight": f"{batch.total_weight:,.2f} {batch.unit}"})
    return rows


def gross_removal_rows(project: Project) -> list[Row]:
    inputs = project.gross_removals
    return [
        ("Material amount", f"{inputs.material_amount:g} t"),
        ("Stable carbon factor", f"{inputs.stable_carbon_factor:g} tCO₂e / t"),
        ("Negative emission conversion", f"{inputs.negative_emission_conversion:g}"),
        ("CO₂ / C ratio", inputs.co2_c_ratio or "n/a"),
    ]


def _render_rows(rows: list[Row]) -> None:
    for label, value in rows:
        st.markdown(f"**{label}:** {value}")


# =============================================================================
# PANELS
# =============================================================================


class EventDetailPanel:
    """Renders the detail card of the active event."""

    def __init__(self, icons: IconResolver) -> None:
        self.icons = icons

    def render(self, event: LifecycleEvent, route_length_m: float | None = None) -> None:
        icon = self.icons.for_event(event.category)
        st.subheader(f"{icon.emoji} {event.title}")

        col_image, col_info = st.columns([1, 2])
        with col_image:
            if event.image_url:
                st.image(event.image_url, caption=event.title)
            st.metric("CO₂ impact", format_impact(event.co2_impact))
        with col_info:
            st.write(event.description)
            _render_rows(event_detail_rows(event, route_length_m))

        if event.sensor_reading is not None:
            with st.expander("📈 Sensor reading", expanded=False):
                _render_rows(sensor_reading_rows(event.sensor_reading))
                if event.sensor_reading.image_url:
                    st.image(event.sensor_reading.image_url)

        if event.feedstock_details is not None:
            with st.expander("🪵 Feedstock details", expanded=False):
                _render_rows(feedstock_rows(event.feedstock_details))

        proofs = event.blockchain_proofs
        if event.feedstock_details is not None:
            proofs += event.feedstock_details.proofs
        if proofs:
            with st.expander(f"🔗 Blockchain proofs ({len(proofs)})", expanded=False):
                for proof in proofs:
                    st.markdown(f"- **{proof.label}** ({proof.type}): `{proof.hash}`")


class BatchCompositionPanel:
    """Renders the feedstock batch composition table."""

    def render(self, project: Project) -> None:
        rows = batch_material_rows(project.batch_info)
        if not rows:
            st.caption("No batch information")
            return
        st.markdown("**Batch composition**")
        st.table(rows)


class GrossRemovalsPanel:
    """Renders the gross removals figure with its calculation inputs."""

    def render(self, project: Project) -> None:
        st.metric("Gross removals", f"{project.gross_removals_t:,.2f} tCO₂e")
        with st.expander("🧮 Calculation inputs", expanded=False):
            _render_rows(gross_removal_rows(project))
