import sys
import json
from datetime import datetime, timezone

from wellengine.utils.logger import setup_logger
from wellengine.config.mongo_client import mongo_client
from wellengine.extract.base_source import InMemoryWellSource
from wellengine.extract.mongo_source import MongoWellSource
from wellengine.jobs.fleet_status import build_fleet_snapshot
from wellengine.routing.planner import build_directions_url, plan_route
from wellengine.schemas.well_models import WellRecord
from wellengine.transform.normalizer import normalize_reading

logger = setup_logger()


def load_source(path: str = None):
    """
    Builds an in-memory source from a JSON export:
    {"wells": [...], "readings": [...]}
    Without a path the jobs read the live MongoDB collections.
    """
    if path is None:
        return MongoWellSource(mongo_client.get_db())

    with open(path, 'r', encoding='utf-8') as f:
        payload = json.load(f)

    wells = [WellRecord(**w) for w in payload.get("wells", [])]
    readings = [normalize_reading(r) for r in payload.get("readings", [])]
    # Readings without a timestamp or a well cannot be attributed to anything
    readings = [r for r in readings if r is not None and r.well_id is not None]
    return InMemoryWellSource(wells, readings)


def run_fleet_status(path: str = None):
    snapshot = build_fleet_snapshot(load_source(path), now=datetime.now(timezone.utc))
    for entry in snapshot["flagged"]:
        logger.warning(f"{entry['name']}: {entry['verdict']} ({', '.join(i.field for i in entry['issues'])})")
    print(json.dumps(snapshot["status_counts"], indent=2))


def run_route(path: str = None):
    plan = plan_route(load_source(path).fetch_wells())
    for idx, stop in enumerate(plan.stops, start=1):
        print(f"{idx}. {stop.name} (+{stop.distance_from_previous_km:.2f} km)")
    print(f"Total Distance: {plan.total_distance_km:.2f} km | Est Time: {plan.estimated_minutes:.0f} min")
    if plan.excluded_well_ids:
        logger.warning(f"Wells without coordinates: {', '.join(plan.excluded_well_ids)}")
    url = build_directions_url(plan)
    if url:
        print(url)


JOBS = {
    "fleet_status": run_fleet_status,
    "route": run_route,
}


def main():
    """
    Main Entry Point for offline jobs.
    Usage: python main.py <job_name> [export.json]
    """
    if len(sys.argv) < 2:
        logger.error("Usage: python main.py <job_name> [export.json]")
        sys.exit(1)

    job_name = sys.argv[1]
    path = sys.argv[2] if len(sys.argv) > 2 else None
    job = JOBS.get(job_name)
    if job is None:
        logger.warning(f"Job {job_name} not recognized.")
        sys.exit(1)

    logger.info(f"Starting job: {job_name} | Input: {path or 'mongodb'}")
    try:
        job(path)
    except Exception:
        logger.exception("Critical Job Failure")
        sys.exit(1)
    finally:
        mongo_client.close()


if __name__ == "__main__":
    main()
