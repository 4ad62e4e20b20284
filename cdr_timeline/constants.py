"""Configuration constants for the CDR lifecycle map.

All configurable parameters are centralized here for easy tuning.

Classes:
    AppConfig: UI application settings
    MapConfig: Default map view parameters
    LocationConfig: Canonical anchor locations per methodology
    DeclusterConfig: Marker grid spacing
    ViewportConfig: Padding, zoom caps and area-of-interest size
    PathConfig: Transport leg table per methodology
    PlaybackConfig: Playback speeds
    StyleConfig: Icons, colors and line styles
    ProjectConfig: Project-level display figures
"""

from pathlib import Path

# Package root directory (where cdr_timeline/ lives)
PACKAGE_DIR = Path(__file__).parent

# Bundled sample projects (shipped as package data)
DATA_DIR = PACKAGE_DIR / "data"
DEFAULT_PROJECTS_PATH = DATA_DIR / "projects.json"


class AppConfig:
    """UI application settings."""

    TITLE = "CDR Lifecycle Map"
    ICON = "🌍"
    LAYOUT = "wide"

    # Streamlit polling interval while playback is running (seconds)
    PLAYBACK_POLL_INTERVAL_S = 0.25


class MapConfig:
    """Default map view parameters."""

    # Zoom levels: higher number = more zoomed in
    HOME_ZOOM = 13  # Project overview when nothing is selected
    EVENT_ZOOM = 15  # Single event without an area of interest

    # Viewport size used when fitting bounds into a pydeck ViewState
    VIEWPORT_WIDTH_PX = 1200
    VIEWPORT_HEIGHT_PX = 700
    TILE_SIZE_PX = 256

    # At equator, 1 degree of latitude ≈ 111,320 meters
    METERS_PER_DEGREE = 111_320.0


class LocationConfig:
    """Canonical anchor locations.

    Each methodology defines exactly three anchors in role order:
    project_prep (source) -> processing -> application.
    Tuple format: (lat, lng, label, short_label)
    """

    ROLES = ["project_prep", "processing", "application"]

    # Max |Δlat| and |Δlng| (degrees) still considered "at" an anchor (~110m)
    TOLERANCE_DEG = 0.001

    DEFAULT_ANCHORS = {
        "biochar": {
            "project_prep": (20.9211, -156.3051, "Provisioning, Planning and Delivery Location", "Project Prep"),
            "processing": (20.9211, -156.3087, "Reactor Location", "Pyrolysis Plant"),
            "application": (20.9350, -156.5100, "Farm Location", "Application Field"),
        },
        "enhanced_rock_weathering": {
            "project_prep": (43.4862, -116.1265, "Feedstock Source (Premier Aggregates)", "Feedstock Source"),
            "processing": (43.8055, -115.8672, "Malama Basecamp (Idaho City)", "Staging Grounds"),
            "application": (43.8251, -115.8903, "Field Location (Application Site)", "Application Field"),
        },
    }
    METHODOLOGIES = list(DEFAULT_ANCHORS.keys())


# Anchors must be listed in role order for every methodology
assert all(list(anchors.keys()) == LocationConfig.ROLES for anchors in LocationConfig.DEFAULT_ANCHORS.values())


class DeclusterConfig:
    """Marker grid layout for events sharing a coordinate."""

    # Spacing between neighbouring markers (~40 meters)
    BASE_OFFSET_DEG = 0.0004

    # Decimal places of the grouping key (4 decimals ≈ 11m)
    GROUP_KEY_DECIMALS = 4


class ViewportConfig:
    """Viewport fitting policy."""

    # Area of interest around a non-transport event (100 acres ≈ 632m per side)
    AREA_OF_INTEREST_SIDE_M = 632.0

    # North-south extent below which bounds are treated as a single site
    LOCATION_BOUNDS_MAX_NS_DEG = 0.02

    # Single site: tight padding, close zoom
    LOCATION_PADDING_PX = 100
    LOCATION_MAX_ZOOM = 18

    # Route between sites: loose padding, farther zoom
    PATH_PADDING_PX = 50
    PATH_MAX_ZOOM = 16


class PathConfig:
    """Transport legs highlighted on the map.

    Maps methodology -> event category -> (origin role, destination role).
    Categories missing from a methodology's table are not transport events
    for that methodology.
    """

    TRANSPORT_LEGS = {
        "biochar": {
            "feedstock_delivery": ("project_prep", "processing"),
            "feedstock_to_reactor_delivery": ("project_prep", "processing"),
            "biochar_delivery": ("processing", "application"),
        },
        "enhanced_rock_weathering": {
            "feedstock_delivery_source_to_staging": ("project_prep", "processing"),
            "transport_logistics": ("project_prep", "processing"),
            "feedstock_delivery_staging_to_field": ("processing", "application"),
            "field_mobilization": ("processing", "application"),
        },
    }
    assert set(TRANSPORT_LEGS.keys()) == set(LocationConfig.METHODOLOGIES)
    assert all(
        origin in LocationConfig.ROLES and destination in LocationConfig.ROLES and origin != destination
        for legs in TRANSPORT_LEGS.values()
        for origin, destination in legs.values()
    ), "Transport legs must connect two distinct canonical roles"

    # Connector paths always drawn between known anchors
    MAIN_CONNECTORS = [("project_prep", "processing"), ("processing", "application")]


class PlaybackConfig:
    """Playback speed settings (milliseconds per event)."""

    SPEEDS_MS = {
        "0.5x": 5000,
        "1x": 3000,
        "2x": 1500,
    }
    DEFAULT_SPEED_MS = SPEEDS_MS["1x"]
    assert DEFAULT_SPEED_MS in SPEEDS_MS.values()


class StyleConfig:
    """Visual colors and styling."""

    # Event icons: category -> (color, emoji)
    EVENT_ICONS = {
        "feedstock_provisioning": ("#2ecc71", "🌱"),
        "feedstock_delivery": ("#3498db", "🚚"),
        "feedstock_to_reactor_delivery": ("#3498db", "🚛"),
        "pyrolysis": ("#e74c3c", "🔥"),
        "biochar_delivery": ("#3498db", "🚚"),
        "biochar_application": ("#16a085", "🌾"),
        "sensor_reading": ("#9b59b6", "📊"),
        "farm_contract": ("#16a085", "📄"),
        "farm_report": ("#16a085", "🗺️"),
        "baseline_report": ("#9b59b6", "📊"),
        "delivery_scheduling": ("#3498db", "📅"),
        "biochar_lab_test": ("#e74c3c", "🔬"),
        "biochar_bagging": ("#3498db", "📦"),
        "farm_selection": ("#16a085", "✅"),
        "monitoring_report": ("#9b59b6", "📈"),
        # ERW
        "rock_characterization": ("#7f8c8d", "🏔️"),
        "rock_weighing": ("#95a5a6", "⚖️"),
        "transport_logistics": ("#3498db", "🚛"),
        "feedstock_intake": ("#e67e22", "⛺"),
        "baseline_lab_prep": ("#9b59b6", "🔬"),
        "field_mobilization": ("#16a085", "🚜"),
        "baseline_establishment": ("#27ae60", "🌾"),
        "rock_application": ("#27ae60", "🌾"),
        "verification": ("#3498db", "🔍"),
        "environmental_monitoring": ("#3498db", "🌧️"),
        "net_cdr_calculation": ("#2ecc71", "📈"),
        "feedstock_delivery_source_to_staging": ("#3498db", "🚛"),
        "feedstock_received_staging": ("#16a085", "✅"),
        "feedstock_delivery_staging_to_field": ("#3498db", "🚛"),
        "feedstock_received_field": ("#16a085", "✅"),
        # Compliance
        "stakeholder_engagement": ("#16a085", "👥"),
        "waste_verification": ("#9b59b6", "♻️"),
        "reactor_design_validation": ("#e74c3c", "🔧"),
        "emissions_monitoring": ("#3498db", "📊"),
        "safety_screening": ("#e67e22", "🛡️"),
        "carbon_stability_test": ("#9b59b6", "🔬"),
        "certified_weigh_in": ("#95a5a6", "⚖️"),
        "application_loss_accounting": ("#16a085", "📉"),
        "net_credit_minting": ("#2ecc71", "💰"),
    }
    DEFAULT_EVENT_ICON = "sensor_reading"
    assert DEFAULT_EVENT_ICON in EVENT_ICONS

    # Canonical location icons: methodology -> role -> (color, emoji)
    LOCATION_ICONS = {
        "biochar": {
            "project_prep": ("#10b981", "🚀"),
            "processing": ("#e74c3c", "⚗️"),
            "application": ("#16a085", "🚜"),
        },
        "enhanced_rock_weathering": {
            "project_prep": ("#7f8c8d", "🏔️"),
            "processing": ("#e67e22", "⛺"),
            "application": ("#27ae60", "🌾"),
        },
    }
    assert set(LOCATION_ICONS.keys()) == set(LocationConfig.METHODOLOGIES)
    assert all(list(icons.keys()) == LocationConfig.ROLES for icons in LOCATION_ICONS.values())

    # Marker radii (pixels)
    EVENT_MARKER_RADIUS_PX = 16
    LOCATION_MARKER_RADIUS_PX = 24

    # Connector paths between canonical locations
    MAIN_PATH_COLOR = "#94a3b8"
    MAIN_PATH_WIDTH_PX = 3
    MAIN_PATH_OPACITY = 0.5

    # Highlighted transport leg
    HIGHLIGHT_PATH_COLOR = "#10b981"
    HIGHLIGHT_PATH_WIDTH_PX = 5
    HIGHLIGHT_PATH_OPACITY = 0.9

    # Impact chart
    POSITIVE_IMPACT_COLOR = "#16a34a"
    NEGATIVE_IMPACT_COLOR = "#dc2626"


# Every transport category needs an icon
assert all(
    category in StyleConfig.EVENT_ICONS for legs in PathConfig.TRANSPORT_LEGS.values() for category in legs
), "Transport categories must have event icons"


class ProjectConfig:
    """Project-level display figures."""

    # Added to co2_quantity for the displayed gross removals figure (tCO2e)
    # TODO: confirm the origin of this offset with the methodology owners
    GROSS_REMOVALS_OFFSET_T = 2.47

    # Missing methodology field loads as biochar
    DEFAULT_METHODOLOGY = "biochar"
    assert DEFAULT_METHODOLOGY in LocationConfig.METHODOLOGIES
