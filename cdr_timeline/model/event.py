"""LifecycleEvent - A geotagged step in a carbon-removal project.

Events are immutable after load and form an ordered sequence indexed by
their position in the project. Optional payloads carry sensor readings,
feedstock details and proof references.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from cdr_timeline.constants import StyleConfig
from cdr_timeline.model.coordinate import Coordinate
from cdr_timeline.model.errors import DataValidationError


class EventCategory(str, Enum):
    """Closed set of lifecycle event types."""

    FEEDSTOCK_PROVISIONING = "feedstock_provisioning"
    FEEDSTOCK_DELIVERY = "feedstock_delivery"
    FEEDSTOCK_TO_REACTOR_DELIVERY = "feedstock_to_reactor_delivery"
    PYROLYSIS = "pyrolysis"
    BIOCHAR_DELIVERY = "biochar_delivery"
    BIOCHAR_APPLICATION = "biochar_application"
    SENSOR_READING = "sensor_reading"
    FARM_CONTRACT = "farm_contract"
    FARM_REPORT = "farm_report"
    BASELINE_REPORT = "baseline_report"
    DELIVERY_SCHEDULING = "delivery_scheduling"
    BIOCHAR_LAB_TEST = "biochar_lab_test"
    BIOCHAR_BAGGING = "biochar_bagging"
    FARM_SELECTION = "farm_selection"
    MONITORING_REPORT = "monitoring_report"
    ROCK_CHARACTERIZATION = "rock_characterization"
    ROCK_WEIGHING = "rock_weighing"
    TRANSPORT_LOGISTICS = "transport_logistics"
    FEEDSTOCK_INTAKE = "feedstock_intake"
    BASELINE_LAB_PREP = "baseline_lab_prep"
    FIELD_MOBILIZATION = "field_mobilization"
    BASELINE_ESTABLISHMENT = "baseline_establishment"
    ROCK_APPLICATION = "rock_application"
    VERIFICATION = "verification"
    ENVIRONMENTAL_MONITORING = "environmental_monitoring"
    NET_CDR_CALCULATION = "net_cdr_calculation"
    FEEDSTOCK_DELIVERY_SOURCE_TO_STAGING = "feedstock_delivery_source_to_staging"
    FEEDSTOCK_RECEIVED_STAGING = "feedstock_received_staging"
    FEEDSTOCK_DELIVERY_STAGING_TO_FIELD = "feedstock_delivery_staging_to_field"
    FEEDSTOCK_RECEIVED_FIELD = "feedstock_received_field"
    STAKEHOLDER_ENGAGEMENT = "stakeholder_engagement"
    WASTE_VERIFICATION = "waste_verification"
    REACTOR_DESIGN_VALIDATION = "reactor_design_validation"
    EMISSIONS_MONITORING = "emissions_monitoring"
    SAFETY_SCREENING = "safety_screening"
    CARBON_STABILITY_TEST = "carbon_stability_test"
    CERTIFIED_WEIGH_IN = "certified_weigh_in"
    APPLICATION_LOSS_ACCOUNTING = "application_loss_accounting"
    NET_CREDIT_MINTING = "net_credit_minting"


assert {category.value for category in EventCategory} == set(StyleConfig.EVENT_ICONS), (
    "Every event category needs an icon entry"
)


def parse_timestamp(value: Any, context: str) -> datetime:
    """Parse an ISO-8601 instant, rejecting anything else.

    Naive timestamps are interpreted as UTC so events stay comparable.

    Raises:
        DataValidationError: If the value is missing or not a valid instant.
    """
    if not isinstance(value, str) or not value:
        raise DataValidationError(f"{context}: timestamp must be a non-empty string, got {value!r}")
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as e:
        raise DataValidationError(f"{context}: invalid timestamp {value!r}") from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class BlockchainProof:
    """On-chain reference to an image or document."""

    hash: str
    label: str
    type: str  # "image" or "document"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BlockchainProof":
        return cls(hash=data["hash"], label=data["label"], type=data["type"])


@dataclass(frozen=True)
class FeedstockDetails:
    """Feedstock batch description attached to provisioning events."""

    type: str
    supplier: str
    volume: float
    unit: str
    carbon_content: str
    proofs: tuple[BlockchainProof, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FeedstockDetails":
        return cls(
            type=data["type"],
            supplier=data["supplier"],
            volume=float(data["volume"]),
            unit=data["unit"],
            carbon_content=data["carbonContent"],
            proofs=tuple(BlockchainProof.from_dict(p) for p in data.get("proofs", [])),
        )


@dataclass(frozen=True)
class SensorReading:
    """Measurement attached to a sensor or report event.

    Attributes:
        type: Reading kind, e.g. "reactor_temp" or "soil_ph"
        timestamp: When the reading was taken
        coordinate: Where the reading was taken
        value: Measured value (absent for image-only readings)
        unit: Unit of the value
        image_url: Optional image evidence
        start_time: Start of a measured interval
        end_time: End of a measured interval
    """

    type: str
    timestamp: datetime
    coordinate: Coordinate
    value: float | None = None
    unit: str | None = None
    image_url: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    breakdown: dict[str, float] = field(default_factory=dict, compare=False)
    evidence: dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any], context: str) -> "SensorReading":
        start = data.get("startTime")
        end = data.get("endTime")
        return cls(
            type=data["type"],
            timestamp=parse_timestamp(data.get("timestamp"), context=f"{context} sensor reading"),
            coordinate=Coordinate.from_dict(data["location"]),
            value=float(data["value"]) if data.get("value") is not None else None,
            unit=data.get("unit"),
            image_url=data.get("imageUrl"),
            start_time=parse_timestamp(start, context=f"{context} startTime") if start else None,
            end_time=parse_timestamp(end, context=f"{context} endTime") if end else None,
            breakdown=dict(data.get("breakdown", {})),
            evidence=dict(data.get("evidence", {})),
        )


@dataclass(frozen=True)
class LifecycleEvent:
    """One step of a project's lifecycle.

    Attributes:
        id: Unique identifier within the project
        category: Event type from the closed EventCategory set
        title: Short display title
        description: Longer display text
        coordinate: Where the event happened
        timestamp: When the event happened (timezone-aware)
        co2_impact: Signed CO2 impact in tonnes (positive = removal)
        location_name: Human-readable place name
    """

    id: str
    category: EventCategory
    title: str
    description: str
    coordinate: Coordinate
    timestamp: datetime
    co2_impact: float = 0.0
    image_url: str | None = None
    location_name: str | None = None
    sensor_reading: SensorReading | None = None
    feedstock_details: FeedstockDetails | None = None
    blockchain_proofs: tuple[BlockchainProof, ...] = ()
    metadata: dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def lat(self) -> float:
        """Latitude delegated from coordinate."""
        return self.coordinate.lat

    @property
    def lng(self) -> float:
        """Longitude delegated from coordinate."""
        return self.coordinate.lng

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LifecycleEvent":
        """Create LifecycleEvent from the project JSON format.

        Raises:
            DataValidationError: On missing fields, unknown category or
                unparseable timestamp.
        """
        event_id = data.get("id")
        if not event_id:
            raise DataValidationError(f"Event without id: {data!r}")
        context = f"Event {event_id}"

        try:
            category = EventCategory(data.get("type"))
        except ValueError as e:
            raise DataValidationError(f"{context}: unknown event type {data.get('type')!r}") from e

        try:
            coordinate = Coordinate.from_dict(data["location"])
        except (KeyError, TypeError, ValueError) as e:
            raise DataValidationError(f"{context}: invalid location {data.get('location')!r}") from e

        timestamp = parse_timestamp(data.get("timestamp"), context=context)

        sensor = data.get("sensorReading")
        feedstock = data.get("feedstockDetails")
        try:
            sensor_reading = SensorReading.from_dict(sensor, context=context) if sensor else None
            feedstock_details = FeedstockDetails.from_dict(feedstock) if feedstock else None
            proofs = tuple(BlockchainProof.from_dict(p) for p in data.get("blockchainProofs", []))
        except DataValidationError:
            raise
        except (KeyError, TypeError, ValueError) as e:
            raise DataValidationError(f"{context}: malformed payload ({type(e).__name__}: {e})") from e

        return cls(
            id=event_id,
            category=category,
            title=data.get("title", ""),
            description=data.get("description", ""),
            coordinate=coordinate,
            timestamp=timestamp,
            co2_impact=float(data.get("co2Impact", 0.0)),
            image_url=data.get("imageUrl") or None,
            location_name=data.get("locationName"),
            sensor_reading=sensor_reading,
            feedstock_details=feedstock_details,
            blockchain_proofs=proofs,
            metadata=dict(data.get("metadata", {})),
        )

    def __repr__(self) -> str:
        return f"LifecycleEvent({self.id}, {self.category.value}, {self.timestamp.isoformat()})"
