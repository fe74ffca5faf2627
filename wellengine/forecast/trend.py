import logging
import numpy as np
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional, Sequence, Tuple

from wellengine.config import settings
from wellengine.schemas.well_models import ForecastPoint, MetricReading, TrendFit

logger = logging.getLogger(__name__)

HistoryPoint = Tuple[datetime, Optional[float]]


def history_from_readings(readings: Iterable[MetricReading]) -> List[HistoryPoint]:
    """Extracts (timestamp, water_level) pairs from readings."""
    return [(r.timestamp, r.water_level) for r in readings]


def trim_history(
    history: Iterable[HistoryPoint],
    now: Optional[datetime] = None,
    window_hours: Optional[float] = None
) -> List[HistoryPoint]:
    """Keeps only points inside the trailing window (default: last 24h)."""
    now = _as_utc(now or datetime.now(timezone.utc))
    window = window_hours if window_hours is not None else settings.METRICS_HISTORY_WINDOW_HOURS
    since = now - timedelta(hours=window)
    return [(ts, level) for ts, level in history if _as_utc(ts) >= since]


def _as_utc(ts: datetime) -> datetime:
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def _prepare(history: Iterable[HistoryPoint]) -> List[Tuple[datetime, float]]:
    """Drops points without a water level and orders by time (stable)."""
    usable = [(_as_utc(ts), float(level)) for ts, level in history if level is not None]
    return sorted(usable, key=lambda p: p[0])


def _fit(points: Sequence[Tuple[datetime, float]]) -> Tuple[float, float, np.ndarray]:
    """
    Ordinary least squares of level on hours-since-first-point.
    Returns (slope, intercept, x). Zero variance in x gives slope 0.
    """
    t0 = points[0][0]
    x = np.array([(ts - t0).total_seconds() / 3600.0 for ts, _ in points], dtype=float)
    y = np.array([level for _, level in points], dtype=float)

    x_mean = x.mean()
    y_mean = y.mean()
    variance = np.sum((x - x_mean) ** 2)
    if variance == 0:
        slope = 0.0
    else:
        covariance = np.sum((x - x_mean) * (y - y_mean))
        slope = float(covariance / variance)
    intercept = float(y_mean - slope * x_mean)
    return slope, intercept, x


def fit_trend(history: Iterable[HistoryPoint]) -> Optional[TrendFit]:
    """
    Fits the water-level trend. Returns None when there are fewer
    points than the regression minimum.
    """
    points = _prepare(history)
    if len(points) < settings.FORECAST_MIN_POINTS:
        return None
    slope, intercept, _ = _fit(points)
    return TrendFit(slope_per_hour=slope, intercept=intercept, n_points=len(points))


def forecast_water_level(
    history: Iterable[HistoryPoint],
    horizon_hours: Optional[int] = None
) -> List[ForecastPoint]:
    """
    Returns the historical series followed by hourly projected points.

    The projection is a straight OLS line through the history, clamped at 0
    since a water level cannot be negative. With fewer than the minimum
    number of points only the history is returned.
    """
    horizon = settings.FORECAST_HORIZON_HOURS if horizon_hours is None else max(0, int(horizon_hours))
    points = _prepare(history)

    series = [ForecastPoint(timestamp=ts, water_level=level, is_projected=False) for ts, level in points]

    if len(points) < settings.FORECAST_MIN_POINTS:
        logger.debug(f"Only {len(points)} usable points, skipping projection")
        return series

    slope, intercept, x = _fit(points)
    x_last = float(x[-1])
    t_last = points[-1][0]

    for h in range(1, horizon + 1):
        level = intercept + slope * (x_last + h)
        series.append(ForecastPoint(
            timestamp=t_last + timedelta(hours=h),
            water_level=max(0.0, level),
            is_projected=True
        ))

    return series
