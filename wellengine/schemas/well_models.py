from pydantic import BaseModel, Field, ConfigDict, field_validator
from datetime import datetime, timezone
from typing import List, Literal, Optional, Tuple

WellStatus = Literal['active', 'warning', 'critical', 'offline']
HealthVerdict = Literal['healthy', 'warning', 'critical']
ReadingSource = Literal['device', 'manual', 'bulk_import']

# Numeric fields carried by a MetricReading, primary chemistry first.
PRIMARY_METRIC_FIELDS: Tuple[str, ...] = (
    'ph', 'tds', 'temperature', 'water_level', 'turbidity',
)
SECONDARY_METRIC_FIELDS: Tuple[str, ...] = (
    'conductivity', 'dissolved_oxygen', 'hardness', 'chloride', 'fluoride',
    'nitrate', 'sulfate', 'iron', 'manganese', 'arsenic', 'lead',
)
METRIC_FIELDS: Tuple[str, ...] = PRIMARY_METRIC_FIELDS + SECONDARY_METRIC_FIELDS


class EngineBaseModel(BaseModel):
    """Base configuration for immutable engine models."""
    model_config = ConfigDict(frozen=True)


class WellRecord(EngineBaseModel):
    """
    Collection: user_wells
    Identity and static attributes of a registered well.
    """
    id: str
    name: str
    user_id: Optional[str] = None
    panchayat_name: Optional[str] = None
    village_name: Optional[str] = None
    contact_phone: Optional[str] = None

    # A well may be registered without coordinates
    lat: Optional[float] = Field(default=None, ge=-90, le=90, allow_inf_nan=False)
    lng: Optional[float] = Field(default=None, ge=-180, le=180, allow_inf_nan=False)

    status: WellStatus = Field(default='active', description="Cached verdict-derived status")
    created_at: Optional[datetime] = None

    @property
    def has_coordinates(self) -> bool:
        return self.lat is not None and self.lng is not None


class MetricReading(EngineBaseModel):
    """
    Collection: well_metrics
    One timestamped sample for a well. None means "not measured".
    """
    timestamp: datetime = Field(..., description="UTC time of the sample")
    well_id: Optional[str] = None
    id: Optional[int] = Field(default=None, description="Insertion order, used as tie-break")

    ph: Optional[float] = None
    tds: Optional[float] = Field(default=None, description="Total dissolved solids (ppm)")
    temperature: Optional[float] = Field(default=None, description="°C")
    water_level: Optional[float] = Field(default=None, description="m")
    turbidity: Optional[float] = Field(default=None, description="NTU")

    # Secondary chemistry (mg/L unless noted)
    conductivity: Optional[float] = None
    dissolved_oxygen: Optional[float] = None
    hardness: Optional[float] = None
    chloride: Optional[float] = None
    fluoride: Optional[float] = None
    nitrate: Optional[float] = None
    sulfate: Optional[float] = None
    iron: Optional[float] = None
    manganese: Optional[float] = None
    arsenic: Optional[float] = None
    lead: Optional[float] = None

    source: ReadingSource = 'device'
    notes: str = ""
    well_health: Optional[HealthVerdict] = Field(
        default=None,
        description="Verdict attached at classification time"
    )

    @field_validator("timestamp")
    @classmethod
    def force_utc(cls, value: datetime) -> datetime:
        # Assume UTC if naive
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class HealthIssue(EngineBaseModel):
    """A single threshold breach found on a reading."""
    field: str
    value: float
    severity: Literal['warning', 'critical']
    bound: float = Field(..., description="The threshold that was crossed")
    direction: Literal['low', 'high']


class ForecastPoint(EngineBaseModel):
    timestamp: datetime
    water_level: float
    is_projected: bool


class TrendFit(EngineBaseModel):
    """OLS coefficients, x measured in hours since the first point."""
    slope_per_hour: float
    intercept: float
    n_points: int


class GeoPoint(EngineBaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class RouteStop(EngineBaseModel):
    well_id: str
    name: str
    lat: float
    lng: float
    distance_from_previous_km: float


class WellDistance(EngineBaseModel):
    """Straight-line distance from the device to one well."""
    well_id: str
    name: str
    distance_km: float


class RoutePlan(EngineBaseModel):
    origin: Optional[GeoPoint] = None
    origin_source: Literal['device', 'centroid', 'none'] = 'none'
    stops: List[RouteStop] = Field(default_factory=list)
    total_distance_km: float = 0.0
    estimated_minutes: float = 0.0
    excluded_well_ids: List[str] = Field(
        default_factory=list,
        description="Wells left out because they have no coordinates"
    )
