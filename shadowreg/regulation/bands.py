"""Distance-band resolution of allowed shadow hours.

Shadow limits apply in two bands measured from the regulated boundary:
5-10 m (band A) and beyond 10 m (band B). Points closer than 5 m are left
unregulated; with no profile at all, nothing is regulated.
"""

from shapely.geometry import Point

from ..geometry.polygon_ops import PolygonLike
from ..models.regulation import RegulationProfile
from ..models.report import Band

BAND_A_MIN_DISTANCE_M = 5.0
BAND_B_MIN_DISTANCE_M = 10.0


def distance_to_boundary(point: tuple[float, float], boundary: PolygonLike) -> float:
    """Shortest planar distance from a point to the boundary (0 inside)."""
    return boundary.distance(Point(point[0], point[1]))


def classify_band(distance: float) -> Band:
    """Band for a distance from the boundary.

    Band A includes both of its edges (5 m and 10 m).
    """
    if distance < BAND_A_MIN_DISTANCE_M:
        return Band.UNREGULATED
    if distance <= BAND_B_MIN_DISTANCE_M:
        return Band.A
    return Band.B


def limit_for_band(band: Band, profile: RegulationProfile | None) -> float | None:
    """Allowed hours for a band, None if unregulated or no profile."""
    if profile is None or band == Band.UNREGULATED:
        return None
    if band == Band.A:
        return profile.band_a_hours
    return profile.band_b_hours


def resolve_limit(
    point: tuple[float, float],
    boundary: PolygonLike,
    profile: RegulationProfile | None,
) -> float | None:
    """Allowed shadow hours at a check point.

    Args:
        point: (x, y) in site-local meters
        boundary: Site or building boundary polygon
        profile: Resolved regulation profile, or None if unresolved

    Returns:
        Allowed hours, or None when the point is not regulated
    """
    if profile is None:
        return None
    return limit_for_band(classify_band(distance_to_boundary(point, boundary)), profile)
