from abc import ABC, abstractmethod
from collections import defaultdict
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from wellengine.health.status import latest_reading
from wellengine.schemas.well_models import MetricReading, WellRecord


class WellDataSource(ABC):
    """
    Abstract Base Class for the store that holds wells and their readings.
    The engine only ever reads through this interface; callers bind it to
    whichever backend is deployed.
    """

    @abstractmethod
    def fetch_wells(self, user_id: Optional[str] = None) -> List[WellRecord]:
        """
        Returns registered wells, optionally limited to one owning account.
        """
        pass

    @abstractmethod
    def fetch_readings(self, well_id: str, since: Optional[datetime] = None) -> List[MetricReading]:
        """
        Returns readings for one well in ascending timestamp order.

        Args:
            well_id: The well to read.
            since: Optional lower bound (inclusive) on the reading timestamp.
        """
        pass

    def fetch_latest_readings(self, well_ids: Iterable[str]) -> Dict[str, MetricReading]:
        """
        Latest reading per well. Backends can override this with a
        single query; the default walks fetch_readings per well.
        """
        latest = {}
        for well_id in well_ids:
            reading = latest_reading(self.fetch_readings(well_id))
            if reading is not None:
                latest[well_id] = reading
        return latest


class InMemoryWellSource(WellDataSource):
    """
    Concrete implementation over plain lists, used by tests and the CLI runner.
    """

    def __init__(self, wells: Iterable[WellRecord] = (), readings: Iterable[MetricReading] = ()):
        self._wells = list(wells)
        self._readings = defaultdict(list)
        for reading in readings:
            self.add_reading(reading)

    def add_reading(self, reading: MetricReading) -> None:
        """Readings are append-only."""
        if reading.well_id is None:
            raise ValueError("Reading must carry a well_id to be stored")
        self._readings[reading.well_id].append(reading)

    def fetch_wells(self, user_id: Optional[str] = None) -> List[WellRecord]:
        if user_id is None:
            return list(self._wells)
        return [w for w in self._wells if w.user_id == user_id]

    def fetch_readings(self, well_id: str, since: Optional[datetime] = None) -> List[MetricReading]:
        rows = self._readings.get(well_id, [])
        if since is not None:
            rows = [r for r in rows if r.timestamp >= since]
        # Stable sort keeps insertion order for equal timestamps
        return sorted(rows, key=lambda r: r.timestamp)
