import math
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Tuple

from wellengine.schemas.well_models import METRIC_FIELDS, MetricReading

logger = logging.getLogger(__name__)

# Canonical field -> accepted spellings, checked in this order.
# Device firmware, the manual entry form and CSV imports all disagree on names.
FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    "ph": ("ph", "pH", "PH", "ph_level", "phLevel"),
    "tds": ("tds", "TDS", "total_dissolved_solids", "totalDissolvedSolids"),
    "temperature": ("temperature", "temp", "temperature_c", "temperatureC"),
    "water_level": ("water_level", "waterLevel", "level", "water_level_m"),
    "turbidity": ("turbidity", "turbidity_ntu", "turbidityNtu"),
    "conductivity": ("conductivity", "ec", "electrical_conductivity", "electricalConductivity"),
    "dissolved_oxygen": ("dissolved_oxygen", "dissolvedOxygen", "do"),
    "hardness": ("hardness", "total_hardness", "totalHardness"),
    "chloride": ("chloride",),
    "fluoride": ("fluoride",),
    "nitrate": ("nitrate",),
    "sulfate": ("sulfate", "sulphate"),
    "iron": ("iron",),
    "manganese": ("manganese",),
    "arsenic": ("arsenic",),
    "lead": ("lead",),
}

TIMESTAMP_ALIASES: Tuple[str, ...] = ("timestamp", "ts", "recorded_at", "recordedAt", "lastUpdated")
WELL_ID_ALIASES: Tuple[str, ...] = ("well_id", "wellId")

SOURCE_ALIASES: Dict[str, str] = {
    "device": "device",
    "sensor": "device",
    "manual": "manual",
    "manual_entry": "manual",
    "bulk_import": "bulk_import",
    "bulk": "bulk_import",
    "csv": "bulk_import",
    "import": "bulk_import",
}


def coerce_metric(value: Any) -> Optional[float]:
    """
    Casts a loosely-typed metric value to a finite float.

    Args:
        value: Number, numeric string, None or "".

    Returns:
        float: The parsed value, or None when the value is absent or
        does not parse to a finite number. NaN and Infinity are rejected,
        never coerced to 0.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None

    try:
        f_val = float(value)
    except (ValueError, TypeError):
        return None

    if not math.isfinite(f_val):
        return None
    return f_val


def coerce_coordinate(value: Any, limit: float) -> Optional[float]:
    """
    Casts a latitude (limit 90) or longitude (limit 180).
    Out-of-range or non-finite values become None so the well is treated
    as unmapped rather than breaking distance maths.
    """
    f_val = coerce_metric(value)
    if f_val is None or f_val < -limit or f_val > limit:
        return None
    return f_val


def coerce_timestamp(value: Any) -> Optional[datetime]:
    """
    Parses a timestamp into an aware UTC datetime.
    Accepts datetime objects (naive = UTC), ISO strings and epoch seconds.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            return None
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.strip().replace('Z', '+00:00'))
        except ValueError:
            return None

    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    return None


def _first_present(raw: Mapping[str, Any], aliases: Tuple[str, ...]) -> Any:
    for key in aliases:
        if key in raw and raw[key] is not None and raw[key] != "":
            return raw[key]
    return None


def resolve_metric_fields(raw: Mapping[str, Any]) -> Dict[str, Optional[float]]:
    """Resolves every canonical metric through the alias table."""
    values: Dict[str, Optional[float]] = {}
    for field in METRIC_FIELDS:
        resolved = None
        for key in FIELD_ALIASES[field]:
            if key not in raw:
                continue
            resolved = coerce_metric(raw[key])
            if resolved is not None:
                break
            if raw[key] not in (None, ""):
                logger.debug(f"Dropping unparseable value for '{key}': {raw[key]!r}")
        values[field] = resolved
    return values


def normalize_source(value: Any) -> str:
    if value is None:
        return "device"
    return SOURCE_ALIASES.get(str(value).strip().lower(), "device")


def normalize_reading(raw: Mapping[str, Any], now: Optional[datetime] = None) -> Optional[MetricReading]:
    """
    Converts a raw reading payload into a canonical MetricReading.

    Every metric is either a finite float or None. No rounding is done here.
    A missing or unusable timestamp falls back to `now` only when the caller
    supplies one (e.g. a reading being recorded right now). Otherwise the
    reading is dropped and None is returned, so stale data can never look fresh.
    """
    timestamp = coerce_timestamp(_first_present(raw, TIMESTAMP_ALIASES))
    if timestamp is None and now is not None:
        timestamp = coerce_timestamp(now)
    if timestamp is None:
        logger.debug(f"Dropping reading without a usable timestamp: {dict(raw)!r}")
        return None

    well_id = _first_present(raw, WELL_ID_ALIASES)
    reading_id = raw.get("id")
    if isinstance(reading_id, bool) or not isinstance(reading_id, int):
        reading_id = None

    notes = raw.get("notes")

    return MetricReading(
        timestamp=timestamp,
        well_id=str(well_id) if well_id is not None else None,
        id=reading_id,
        source=normalize_source(raw.get("source")),
        notes="" if notes is None else str(notes),
        **resolve_metric_fields(raw),
    )
