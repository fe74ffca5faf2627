import logging
from typing import Collection, List, Optional, Sequence, Tuple
from urllib.parse import quote

from wellengine.config import settings
from wellengine.routing.geo import centroid, haversine_km
from wellengine.schemas.well_models import GeoPoint, RoutePlan, RouteStop, WellDistance, WellRecord

logger = logging.getLogger(__name__)


def select_wells(
    wells: Sequence[WellRecord],
    excluded_ids: Collection[str] = (),
    included_ids: Optional[Collection[str]] = None
) -> Tuple[List[WellRecord], List[str]]:
    """
    Applies the include/exclude selection and drops wells without coordinates.

    Returns:
        (plannable wells in input order, ids of selected wells lacking coordinates)
    """
    excluded = set(excluded_ids)
    included = set(included_ids) if included_ids is not None else None

    plannable = []
    missing_coords = []
    for well in wells:
        if well.id in excluded:
            continue
        if included is not None and well.id not in included:
            continue
        if not well.has_coordinates:
            logger.debug(f"Well {well.id} has no coordinates, leaving it out of the route")
            missing_coords.append(well.id)
            continue
        plannable.append(well)
    return plannable, missing_coords


def _nearest_neighbour_order(start: Tuple[float, float], wells: Sequence[WellRecord]) -> List[RouteStop]:
    """
    Greedy nearest-neighbour tour, O(n^2).
    Ties keep the earliest candidate in input order.
    """
    remaining = list(wells)
    current_lat, current_lng = start
    stops = []

    while remaining:
        best_idx = 0
        best_dist = float("inf")
        for i, well in enumerate(remaining):
            d = haversine_km(current_lat, current_lng, well.lat, well.lng)
            if d < best_dist:
                best_idx, best_dist = i, d

        nxt = remaining.pop(best_idx)
        stops.append(RouteStop(
            well_id=nxt.id,
            name=nxt.name,
            lat=nxt.lat,
            lng=nxt.lng,
            distance_from_previous_km=best_dist
        ))
        current_lat, current_lng = nxt.lat, nxt.lng

    return stops


def plan_route(
    wells: Sequence[WellRecord],
    origin: Optional[GeoPoint] = None,
    excluded_ids: Collection[str] = (),
    included_ids: Optional[Collection[str]] = None,
    average_speed_kmh: Optional[float] = None
) -> RoutePlan:
    """
    Plans a field-visit order starting from the device position.

    Without a device position the tour starts at the centroid of the
    planned wells. An empty selection yields an empty plan, not an error.
    The travel time is a rough estimate at a fixed average speed.
    """
    speed = average_speed_kmh if average_speed_kmh is not None else settings.AVERAGE_SPEED_KMH
    plannable, missing_coords = select_wells(wells, excluded_ids, included_ids)

    if not plannable:
        return RoutePlan(
            origin=origin,
            origin_source='device' if origin is not None else 'none',
            excluded_well_ids=missing_coords
        )

    if origin is not None:
        start = (origin.lat, origin.lng)
        origin_source = 'device'
    else:
        start = centroid((w.lat, w.lng) for w in plannable)
        origin = GeoPoint(lat=start[0], lng=start[1])
        origin_source = 'centroid'

    stops = _nearest_neighbour_order(start, plannable)
    total = sum(s.distance_from_previous_km for s in stops)

    logger.info(f"Planned route over {len(stops)} wells ({total:.2f} km, origin: {origin_source})")

    return RoutePlan(
        origin=origin,
        origin_source=origin_source,
        stops=stops,
        total_distance_km=total,
        estimated_minutes=(total / speed) * 60 if speed > 0 else 0.0,
        excluded_well_ids=missing_coords
    )


def distances_from(
    origin: GeoPoint,
    wells: Sequence[WellRecord],
    excluded_ids: Collection[str] = ()
) -> List[WellDistance]:
    """Live straight-line distance from the device to each selected well, in input order."""
    plannable, _ = select_wells(wells, excluded_ids)
    return [
        WellDistance(
            well_id=w.id,
            name=w.name,
            distance_km=haversine_km(origin.lat, origin.lng, w.lat, w.lng)
        )
        for w in plannable
    ]


def build_directions_url(plan: RoutePlan) -> Optional[str]:
    """
    Google Maps directions link for a plan.

    The last stop is the destination and the others become waypoints.
    The origin is only included when it came from the device; otherwise
    Maps falls back to the phone's own location.
    """
    if not plan.stops:
        return None

    coords = [f"{s.lat},{s.lng}" for s in plan.stops]
    destination = coords[-1]
    waypoints = "|".join(coords[:-1])

    url = settings.MAPS_DIRECTIONS_BASE_URL
    if plan.origin_source == 'device' and plan.origin is not None:
        url += f"&origin={quote(f'{plan.origin.lat},{plan.origin.lng}', safe='')}"
    url += f"&destination={quote(destination, safe='')}"
    if waypoints:
        url += f"&waypoints={quote(waypoints, safe='')}"
    return url + "&travelmode=driving"
