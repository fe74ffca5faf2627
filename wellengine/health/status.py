import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, Optional

from wellengine.config import settings
from wellengine.health.classifier import classify_reading
from wellengine.schemas.well_models import HealthVerdict, MetricReading, WellRecord, WellStatus

logger = logging.getLogger(__name__)

VERDICT_TO_STATUS: Dict[str, WellStatus] = {
    'healthy': 'active',
    'warning': 'warning',
    'critical': 'critical',
}

ALERT_STATUSES = ('warning', 'critical')


def effective_status(
    stored_status: WellStatus,
    verdict: Optional[HealthVerdict],
    reading_age: Optional[timedelta],
    inactivity_window: Optional[timedelta] = None
) -> WellStatus:
    """
    Resolves the status shown to users.

    No reading, or a latest reading older than the inactivity window,
    means offline regardless of anything else. Otherwise the verdict maps
    straight onto a status; the stored status is only a cache and is not
    consulted while a fresh reading exists.
    """
    window = inactivity_window if inactivity_window is not None else timedelta(hours=settings.INACTIVITY_WINDOW_HOURS)

    if verdict is None or reading_age is None:
        return 'offline'
    if reading_age > window:
        return 'offline'
    return VERDICT_TO_STATUS[verdict]


def latest_reading(readings: Iterable[MetricReading]) -> Optional[MetricReading]:
    """
    Picks the most recent reading by timestamp.
    Ties go to the highest id, then to the one appearing later in the input.
    """
    best = None
    best_key = None
    for position, reading in enumerate(readings):
        key = (reading.timestamp, reading.id if reading.id is not None else -1, position)
        if best_key is None or key > best_key:
            best, best_key = reading, key
    return best


def resolve_well_status(
    well: WellRecord,
    readings: Iterable[MetricReading],
    now: Optional[datetime] = None,
    inactivity_window: Optional[timedelta] = None
) -> WellStatus:
    """Effective status for one well given its readings, computed live."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    latest = latest_reading(readings)
    if latest is None:
        return effective_status(well.status, None, None, inactivity_window)

    verdict = latest.well_health or classify_reading(latest)
    return effective_status(well.status, verdict, now - latest.timestamp, inactivity_window)


def refresh_stored_status(well: WellRecord, reading: MetricReading) -> WellRecord:
    """
    Returns the well with its cached status replaced by the status derived
    from a newly classified reading. Offline is never cached.
    """
    verdict = reading.well_health or classify_reading(reading)
    new_status = VERDICT_TO_STATUS[verdict]
    if new_status != well.status:
        logger.info(f"Well {well.id} status {well.status} -> {new_status}")
    return well.model_copy(update={"status": new_status})


def requires_alert(previous_status: Optional[str], new_status: str) -> bool:
    """True when the status moved into warning/critical (or a new well starts there)."""
    return new_status in ALERT_STATUSES and previous_status != new_status
