import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional
from pymongo import ASCENDING, DESCENDING
from pymongo.database import Database

from wellengine.config import settings
from wellengine.extract.base_source import WellDataSource
from wellengine.schemas.well_models import MetricReading, WellRecord
from wellengine.transform.normalizer import coerce_coordinate, normalize_reading

logger = logging.getLogger(__name__)

WELL_STATUSES = ('active', 'warning', 'critical', 'offline')

WELL_PROJECTION = {
    "_id": 0,
    "id": 1,
    "user_id": 1,
    "name": 1,
    "panchayat_name": 1,
    "village_name": 1,
    "contact_phone": 1,
    "lat": 1,
    "lng": 1,
    "status": 1,
    "created_at": 1,
}


def well_from_document(doc: Dict[str, Any]) -> WellRecord:
    """Maps a user_wells document onto a WellRecord, tolerating loose types."""
    status = doc.get("status")
    return WellRecord(
        id=str(doc["id"]),
        name=str(doc.get("name") or f"Well {doc['id']}"),
        user_id=str(doc["user_id"]) if doc.get("user_id") is not None else None,
        panchayat_name=doc.get("panchayat_name"),
        village_name=doc.get("village_name"),
        contact_phone=doc.get("contact_phone"),
        lat=coerce_coordinate(doc.get("lat"), 90),
        lng=coerce_coordinate(doc.get("lng"), 180),
        status=status if status in WELL_STATUSES else 'active',
        created_at=doc.get("created_at"),
    )


class MongoWellSource(WellDataSource):
    """
    WellDataSource bound to MongoDB collections (`user_wells`, `well_metrics`).
    """

    def __init__(self, db: Database, batch_size: int = 1000):
        """
        Args:
            db (Database): The source database handle (Read-Only).
        """
        self.db = db
        self.batch_size = batch_size

    def fetch_wells(self, user_id: Optional[str] = None) -> List[WellRecord]:
        query = {"user_id": user_id} if user_id is not None else {}
        cursor = (
            self.db[settings.WELLS_COLLECTION]
            .find(query, WELL_PROJECTION)
            .sort("created_at", ASCENDING)
            .batch_size(self.batch_size)
        )

        wells = []
        for doc in cursor:
            if doc.get("id") is None:
                logger.warning("Skipping well document without an id")
                continue
            wells.append(well_from_document(doc))
        return wells

    def fetch_readings(self, well_id: str, since: Optional[datetime] = None) -> List[MetricReading]:
        query: Dict[str, Any] = {"well_id": well_id}
        if since is not None:
            query["ts"] = {"$gte": since}

        cursor = (
            self.db[settings.METRICS_COLLECTION]
            .find(query, {"_id": 0})
            .sort([("ts", ASCENDING), ("id", ASCENDING)])
            .batch_size(self.batch_size)
        )
        readings = [normalize_reading(doc) for doc in cursor]
        return [r for r in readings if r is not None]

    def fetch_latest_readings(self, well_ids: Iterable[str]) -> Dict[str, MetricReading]:
        """
        Gets the 'max' ts document per well with one aggregation.
        """
        well_ids = list(well_ids)
        if not well_ids:
            return {}

        pipeline = [
            {"$match": {"well_id": {"$in": well_ids}, "ts": {"$ne": None}}},
            {"$sort": {"ts": DESCENDING, "id": DESCENDING}},
            {"$group": {
                "_id": "$well_id",
                "latest_doc": {"$first": "$$ROOT"}
            }},
            {"$replaceRoot": {"newRoot": "$latest_doc"}},
            {"$project": {"_id": 0}}
        ]

        latest = {}
        for doc in self.db[settings.METRICS_COLLECTION].aggregate(pipeline):
            reading = normalize_reading(doc)
            if reading is None:
                logger.warning(f"Skipping latest reading with an unusable ts for well {doc.get('well_id')}")
                continue
            latest[reading.well_id] = reading
        return latest
