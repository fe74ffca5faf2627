import logging
from datetime import datetime, timezone
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional

from wellengine.forecast.trend import fit_trend, forecast_water_level
from wellengine.health.classifier import evaluate_issues, verdict_from_issues
from wellengine.health.status import latest_reading, resolve_well_status
from wellengine.routing.planner import build_directions_url, distances_from, plan_route
from wellengine.schemas.well_models import ForecastPoint, GeoPoint, WellRecord
from wellengine.transform.normalizer import coerce_metric, coerce_timestamp, normalize_reading

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/engine", tags=["Engine"])


# --- Request Schemas ---
class HistoryPointIn(BaseModel):
    timestamp: Any
    water_level: Any = None


class ForecastRequest(BaseModel):
    history: List[HistoryPointIn]
    horizon_hours: Optional[int] = Field(default=None, ge=0, le=24 * 14)


class RouteRequest(BaseModel):
    wells: List[WellRecord]
    origin: Optional[GeoPoint] = None
    excluded_ids: List[str] = Field(default_factory=list)
    included_ids: Optional[List[str]] = None


class StatusRequest(BaseModel):
    well: WellRecord
    readings: List[Dict[str, Any]] = Field(default_factory=list)
    now: Optional[datetime] = None


# --- Routes ---

@router.post("/classify")
def classify(payload: Dict[str, Any]):
    """Normalizes one raw reading and returns its verdict with the breaches found."""
    # A reading submitted without a timestamp is being recorded now
    reading = normalize_reading(payload, now=datetime.now(timezone.utc))
    issues = evaluate_issues(reading)
    verdict = verdict_from_issues(issues)
    return {
        "reading": reading.model_copy(update={"well_health": verdict}),
        "verdict": verdict,
        "issues": issues,
    }


@router.post("/forecast")
def forecast(payload: ForecastRequest):
    history = []
    for point in payload.history:
        ts = coerce_timestamp(point.timestamp)
        if ts is None:
            raise HTTPException(status_code=422, detail=f"Unparseable timestamp: {point.timestamp!r}")
        history.append((ts, coerce_metric(point.water_level)))

    series: List[ForecastPoint] = forecast_water_level(history, payload.horizon_hours)
    return {
        "points": series,
        "trend": fit_trend(history),
    }


@router.post("/route")
def route(payload: RouteRequest):
    plan = plan_route(
        payload.wells,
        origin=payload.origin,
        excluded_ids=payload.excluded_ids,
        included_ids=payload.included_ids,
    )
    distances = distances_from(payload.origin, payload.wells, payload.excluded_ids) if payload.origin else []
    return {
        "plan": plan,
        "distances": distances,
        "maps_url": build_directions_url(plan),
    }


@router.post("/status")
def status(payload: StatusRequest):
    readings = [normalize_reading(r) for r in payload.readings]
    readings = [r for r in readings if r is not None]
    latest = latest_reading(readings)
    return {
        "well_id": payload.well.id,
        "effective_status": resolve_well_status(payload.well, readings, now=payload.now),
        "last_reading_at": latest.timestamp if latest else None,
    }
