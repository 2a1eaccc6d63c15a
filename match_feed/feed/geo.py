"""
Distance orthodromique entre le viewer et un match
"""
import math
from typing import Optional

from match_feed.config.feed_settings import FEED_SETTINGS
from match_feed.contracts.input_models import Coordinates


def haversine_distance_km(
    lat1: float,
    lon1: float,
    lat2: float,
    lon2: float,
    radius_km: Optional[float] = None
) -> float:
    """
    Distance haversine en kilometres

    Args:
        lat1, lon1: Premier point (degres)
        lat2, lon2: Second point (degres)
        radius_km: Rayon terrestre (6371 km par defaut)

    Returns:
        Distance en kilometres
    """
    radius = radius_km if radius_km is not None else FEED_SETTINGS.geo.earth_radius_km

    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2 +
        math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    # L'arrondi peut donner a > 1 pour des points quasi antipodaux
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return radius * c


def distance_to_match_km(
    viewer: Optional[Coordinates],
    match_coordinates: Optional[Coordinates],
    sentinel_km: Optional[float] = None,
    radius_km: Optional[float] = None
) -> float:
    """Distance viewer -> match, ou la valeur sentinelle si une position manque"""
    if viewer is None or match_coordinates is None:
        return sentinel_km if sentinel_km is not None else FEED_SETTINGS.geo.distance_sentinel_km

    return haversine_distance_km(
        viewer.latitude,
        viewer.longitude,
        match_coordinates.latitude,
        match_coordinates.longitude,
        radius_km=radius_km
    )
