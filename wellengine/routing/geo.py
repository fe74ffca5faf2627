import math
from typing import Iterable, Optional, Tuple

from wellengine.config.settings import EARTH_RADIUS_KM


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance between two points in kilometres."""
    lat1, lng1, lat2, lng2 = map(math.radians, [lat1, lng1, lat2, lng2])
    dlat = lat2 - lat1
    dlng = lng2 - lng1
    a = math.sin(dlat / 2.0) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2.0) ** 2
    # Rounding can push a just past 1 for near-antipodal points
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def centroid(points: Iterable[Tuple[float, float]]) -> Optional[Tuple[float, float]]:
    """Arithmetic mean of (lat, lng) pairs, or None for no points."""
    lat_sum = 0.0
    lng_sum = 0.0
    count = 0
    for lat, lng in points:
        lat_sum += lat
        lng_sum += lng
        count += 1
    if count == 0:
        return None
    return lat_sum / count, lng_sum / count
