"""Shadow casting test for points on the measurement plane.

A point is in shadow when the ray from the point towards the sun, rising at
tan(altitude), passes through a building volume between the measurement
plane and the volume's top. For a vertical prism that reduces to a planar
test: the horizontal segment from the point towards the sun's azimuth,
between the distances at which the ray crosses the volume's lower and upper
heights, intersects the footprint.

The scalar :func:`is_in_shadow` and the batch :func:`shadow_mask` evaluate
the same predicate with the same float operations, so they agree exactly.
"""

import logging
import math

import numpy as np
import shapely

from ..geometry.massing import Massing, MassingVolume
from ..geometry.polygon_ops import PolygonLike, sweep_polygon, union_polygons
from ..models.location import SunPosition

logger = logging.getLogger(__name__)

# Sun altitudes below this are raised to it before computing shadow reach.
# At 0.5° a 30 m building casts a ~3.4 km shadow, far beyond any check grid.
MIN_SUN_ALTITUDE_DEG = 0.5


def clamp_altitude(altitude: float) -> float:
    """Raise near-horizon altitudes to ``MIN_SUN_ALTITUDE_DEG``."""
    return max(altitude, MIN_SUN_ALTITUDE_DEG)


def sun_direction(azimuth: float) -> tuple[float, float]:
    """Horizontal unit vector pointing towards the sun (x east, y north)."""
    az = math.radians(azimuth)
    return math.sin(az), math.cos(az)


def shadow_length(height: float, altitude: float) -> float:
    """Horizontal length of the shadow cast by a vertical edge of ``height``."""
    return height / math.tan(math.radians(clamp_altitude(altitude)))


def ray_reach(
    volume: MassingVolume,
    tan_altitude: float,
    measurement_height: float,
) -> tuple[float, float] | None:
    """Horizontal distances at which the sun ray enters and leaves a volume's height range.

    Returns:
        (near, far) in meters, or None when the volume does not rise above
        the measurement plane
    """
    if volume.height <= measurement_height:
        return None
    lower = max(volume.base_height, measurement_height)
    near = (lower - measurement_height) / tan_altitude
    far = (volume.height - measurement_height) / tan_altitude
    return near, far


def is_in_shadow(
    point: tuple[float, float],
    sun: SunPosition,
    massing: Massing,
    measurement_height: float,
) -> bool:
    """Check whether a point on the measurement plane is shadowed by the massing.

    Args:
        point: (x, y) in site-local meters
        sun: Sun position for the sample
        massing: Building massing
        measurement_height: Height of the measurement plane (m)

    Returns:
        True if any volume blocks the sun ray from the point
    """
    if not sun.is_daylight:
        return False

    x, y = float(point[0]), float(point[1])
    tan_alt = math.tan(math.radians(clamp_altitude(sun.altitude)))
    dx, dy = sun_direction(sun.azimuth)

    for volume in massing.volumes:
        reach = ray_reach(volume, tan_alt, measurement_height)
        if reach is None:
            continue
        near, far = reach
        segment = shapely.linestrings([
            (x + dx * near, y + dy * near),
            (x + dx * far, y + dy * far),
        ])
        if shapely.intersects(segment, volume.polygon):
            return True

    return False


def shadow_mask(
    xs: np.ndarray,
    ys: np.ndarray,
    sun: SunPosition,
    massing: Massing,
    measurement_height: float,
) -> np.ndarray:
    """Vectorised :func:`is_in_shadow` for many points at one sun position.

    Args:
        xs, ys: Point coordinates (1-D arrays of equal length)
        sun: Sun position for the sample
        massing: Building massing
        measurement_height: Height of the measurement plane (m)

    Returns:
        Boolean array, True where the point is in shadow
    """
    xs = np.asarray(xs, dtype=np.float64)
    ys = np.asarray(ys, dtype=np.float64)
    mask = np.zeros(xs.shape[0], dtype=bool)
    if not sun.is_daylight or xs.shape[0] == 0:
        return mask

    tan_alt = math.tan(math.radians(clamp_altitude(sun.altitude)))
    dx, dy = sun_direction(sun.azimuth)

    for volume in massing.volumes:
        reach = ray_reach(volume, tan_alt, measurement_height)
        if reach is None:
            continue
        near, far = reach

        # Only test points not already shadowed by an earlier volume
        todo = np.flatnonzero(~mask)
        if todo.size == 0:
            break
        px = xs[todo]
        py = ys[todo]
        coords = np.empty((todo.size, 2, 2), dtype=np.float64)
        coords[:, 0, 0] = px + dx * near
        coords[:, 0, 1] = py + dy * near
        coords[:, 1, 0] = px + dx * far
        coords[:, 1, 1] = py + dy * far

        segments = shapely.linestrings(coords)
        mask[todo] = shapely.intersects(segments, volume.polygon)

    return mask


def shadow_polygon(
    massing: Massing,
    sun: SunPosition,
    measurement_height: float,
) -> PolygonLike:
    """Region of the measurement plane shadowed by the massing.

    Each volume's footprint is swept away from the sun between the near and
    far ray distances. Empty at night or when nothing rises above the plane.
    """
    if not sun.is_daylight:
        return shapely.Polygon()

    tan_alt = math.tan(math.radians(clamp_altitude(sun.altitude)))
    dx, dy = sun_direction(sun.azimuth)

    parts = []
    for volume in massing.volumes:
        reach = ray_reach(volume, tan_alt, measurement_height)
        if reach is None:
            continue
        near, far = reach
        parts.append(sweep_polygon(volume.polygon, -dx, -dy, near, far))

    return union_polygons(parts)
