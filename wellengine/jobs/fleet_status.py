import logging
import pandas as pd
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from wellengine.extract.base_source import WellDataSource
from wellengine.health.classifier import attach_verdict, evaluate_issues, summarize_issues
from wellengine.health.status import resolve_well_status

logger = logging.getLogger(__name__)

STATUS_ORDER = ['active', 'warning', 'critical', 'offline']
SEVERITY_RANK = {'critical': 0, 'warning': 1}


def status_counts(rows: List[Dict[str, Any]]) -> Dict[str, int]:
    """Counts wells per effective status, always reporting all four statuses."""
    if not rows:
        return {status: 0 for status in STATUS_ORDER}

    df = pd.DataFrame({'effective_status': [r['effective_status'] for r in rows]})
    counts = df['effective_status'].value_counts().reindex(STATUS_ORDER, fill_value=0)
    return {status: int(n) for status, n in counts.items()}


def build_fleet_snapshot(
    source: WellDataSource,
    now: Optional[datetime] = None,
    user_id: Optional[str] = None
) -> Dict[str, Any]:
    """
    Combines the data source with the engine for a dashboard snapshot.

    1. Fetch wells (optionally for one account)
    2. Fetch the latest reading per well and classify it
    3. Resolve the live effective status
    4. Rank wells with threshold breaches, most severe first
    """
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    wells = source.fetch_wells(user_id)
    latest_map = source.fetch_latest_readings([w.id for w in wells])
    logger.info(f"Evaluating {len(wells)} wells ({len(latest_map)} with readings)")

    rows = []
    flagged = []
    for well in wells:
        latest = latest_map.get(well.id)
        if latest is not None:
            latest = attach_verdict(latest)
        status = resolve_well_status(well, [latest] if latest else [], now=now)

        rows.append({
            "well": well,
            "effective_status": status,
            "latest_metric": latest,
        })

        if latest is None:
            continue
        issues = evaluate_issues(latest)
        if issues:
            flagged.append({
                "well_id": well.id,
                "name": well.name,
                "verdict": latest.well_health,
                "issues": issues,
                "fields": summarize_issues(issues),
            })

    # Stable sort keeps well order inside each severity
    flagged.sort(key=lambda f: SEVERITY_RANK[f["verdict"]])

    summary = status_counts(rows)
    logger.info(f"Fleet status: {summary}")

    return {
        "generated_at": now,
        "wells": rows,
        "status_counts": summary,
        "flagged": flagged,
    }
