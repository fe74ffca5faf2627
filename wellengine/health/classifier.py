import logging
from typing import Dict, List, Mapping, Optional

from wellengine.config.thresholds import DEFAULT_THRESHOLDS, ThresholdBand
from wellengine.schemas.well_models import HealthIssue, HealthVerdict, MetricReading

logger = logging.getLogger(__name__)

# Parameters that feed the health verdict. Other chemistry is informational.
HEALTH_FIELDS = ("ph", "tds", "temperature", "turbidity", "nitrate", "fluoride", "arsenic", "lead", "iron")


def evaluate_field(field: str, value: Optional[float], band: ThresholdBand) -> Optional[HealthIssue]:
    """
    Checks one value against its band and returns the most severe breach.
    Comparisons are strict, so a value on a bound is not a breach.
    """
    if value is None:
        return None

    if band.critical_low is not None and value < band.critical_low:
        return HealthIssue(field=field, value=value, severity='critical', bound=band.critical_low, direction='low')
    if band.critical_high is not None and value > band.critical_high:
        return HealthIssue(field=field, value=value, severity='critical', bound=band.critical_high, direction='high')
    if band.warning_low is not None and value < band.warning_low:
        return HealthIssue(field=field, value=value, severity='warning', bound=band.warning_low, direction='low')
    if band.warning_high is not None and value > band.warning_high:
        return HealthIssue(field=field, value=value, severity='warning', bound=band.warning_high, direction='high')
    return None


def evaluate_issues(
    reading: MetricReading,
    thresholds: Optional[Mapping[str, ThresholdBand]] = None
) -> List[HealthIssue]:
    """
    Collects every threshold breach on a reading, critical issues first.
    Absent fields contribute nothing.
    """
    table = DEFAULT_THRESHOLDS if thresholds is None else thresholds
    issues = []
    for field in HEALTH_FIELDS:
        band = table.get(field)
        if band is None:
            continue
        issue = evaluate_field(field, getattr(reading, field), band)
        if issue is not None:
            issues.append(issue)

    # Stable sort keeps field order within each severity
    issues.sort(key=lambda i: 0 if i.severity == 'critical' else 1)
    return issues


def verdict_from_issues(issues: List[HealthIssue]) -> HealthVerdict:
    if any(i.severity == 'critical' for i in issues):
        return 'critical'
    if any(i.severity == 'warning' for i in issues):
        return 'warning'
    return 'healthy'


def classify_reading(
    reading: MetricReading,
    thresholds: Optional[Mapping[str, ThresholdBand]] = None
) -> HealthVerdict:
    """
    Classifies a canonical reading as healthy, warning or critical.

    Any critical breach wins over warnings. A reading with nothing measured
    is healthy: absence of evidence is not treated as harm.
    """
    return verdict_from_issues(evaluate_issues(reading, thresholds))


def attach_verdict(
    reading: MetricReading,
    thresholds: Optional[Mapping[str, ThresholdBand]] = None
) -> MetricReading:
    """Returns a copy of the reading with `well_health` set."""
    verdict = classify_reading(reading, thresholds)
    logger.debug(f"Reading for well {reading.well_id} at {reading.timestamp.isoformat()} -> {verdict}")
    return reading.model_copy(update={"well_health": verdict})


def summarize_issues(issues: List[HealthIssue]) -> Dict[str, List[str]]:
    """Groups issue field names by severity for reporting."""
    summary: Dict[str, List[str]] = {"critical": [], "warning": []}
    for issue in issues:
        summary[issue.severity].append(issue.field)
    return summary
