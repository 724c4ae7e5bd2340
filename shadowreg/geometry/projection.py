"""Geographic to site-local coordinate conversion.

Footprints drawn on a map arrive as [lon, lat] rings. The engine works in
site-local meters, so they are projected with an azimuthal equidistant
projection centred on the site location (distances from the origin are
true, and distortion over a few hundred meters is negligible).
"""

import logging

from pyproj import Transformer

from ..models.location import GeoCoordinate
from .polygon_ops import Coords

logger = logging.getLogger(__name__)

WGS84 = "EPSG:4326"


def local_crs(origin: GeoCoordinate) -> str:
    """PROJ string for the site-local frame centred on ``origin``."""
    return (
        f"+proj=aeqd +lat_0={origin.latitude} +lon_0={origin.longitude} "
        f"+x_0=0 +y_0=0 +datum=WGS84 +units=m +no_defs"
    )


def footprint_from_lonlat(coords: list[list[float]], origin: GeoCoordinate) -> Coords:
    """Project a [lon, lat] ring into site-local meters (x east, y north).

    Args:
        coords: Ring of [longitude, latitude] pairs in decimal degrees
        origin: Site location used as the local origin

    Returns:
        List of (x, y) tuples in meters
    """
    transformer = Transformer.from_crs(WGS84, local_crs(origin), always_xy=True)
    lons = [float(c[0]) for c in coords]
    lats = [float(c[1]) for c in coords]
    xs, ys = transformer.transform(lons, lats)
    local = [(float(x), float(y)) for x, y in zip(xs, ys)]
    logger.debug(f"Projected {len(local)} vertices around ({origin.latitude}, {origin.longitude})")
    return local


def footprint_to_lonlat(coords: Coords, origin: GeoCoordinate) -> list[list[float]]:
    """Inverse of :func:`footprint_from_lonlat` (for map overlays)."""
    transformer = Transformer.from_crs(local_crs(origin), WGS84, always_xy=True)
    xs = [float(c[0]) for c in coords]
    ys = [float(c[1]) for c in coords]
    lons, lats = transformer.transform(xs, ys)
    return [[float(lon), float(lat)] for lon, lat in zip(lons, lats)]
