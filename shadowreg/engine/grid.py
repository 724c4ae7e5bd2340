"""Check-point grid generation around the regulated boundary.

Uses Shapely vectorised predicates for containment and distance tests.
Grid nodes sit on integer multiples of the spacing so that the same site
always yields the same points, independent of floating point accumulation.
"""

import logging
import math
from dataclasses import dataclass

import numpy as np
import shapely

from ..geometry.polygon_ops import PolygonLike
from ..models.grid import GridSpec

logger = logging.getLogger(__name__)


@dataclass
class CheckPointGrid:
    """Ordered check points at which compliance is evaluated."""

    points: list[tuple[float, float]]  # (x, y) in meters
    spacing: float | None = None  # None for caller-supplied point sets

    @property
    def num_points(self) -> int:
        return len(self.points)

    @property
    def cell_area(self) -> float:
        """Area represented by one point (m²), 0 for irregular point sets."""
        return self.spacing * self.spacing if self.spacing else 0.0

    @property
    def xs(self) -> np.ndarray:
        return np.array([p[0] for p in self.points], dtype=np.float64)

    @property
    def ys(self) -> np.ndarray:
        return np.array([p[1] for p in self.points], dtype=np.float64)

    @classmethod
    def from_points(cls, points, spacing: float | None = None) -> "CheckPointGrid":
        """Wrap explicit points (e.g. window positions of a neighbor)."""
        return cls(points=[(float(p[0]), float(p[1])) for p in points], spacing=spacing)


def generate_check_points(
    boundary: PolygonLike,
    spec: GridSpec | None = None,
) -> CheckPointGrid:
    """Generate grid check points outside the boundary, within the margin.

    Points covered by the boundary (the site itself) are skipped; every other
    grid node no farther than ``spec.margin`` from the boundary is kept,
    including those closer than 5 m, which are reported as unregulated.

    Args:
        boundary: Site or building boundary polygon
        spec: Grid spacing and margin (defaults to GridSpec())

    Returns:
        CheckPointGrid ordered by x, then y
    """
    spec = spec or GridSpec()
    s = spec.spacing
    m = spec.margin

    min_x, min_y, max_x, max_y = boundary.bounds
    kx = np.arange(math.ceil((min_x - m) / s), math.floor((max_x + m) / s) + 1)
    ky = np.arange(math.ceil((min_y - m) / s), math.floor((max_y + m) / s) + 1)

    gx, gy = np.meshgrid(kx * s, ky * s, indexing="ij")
    gx = gx.ravel()
    gy = gy.ravel()

    shapely.prepare(boundary)
    nodes = shapely.points(gx, gy)
    inside = shapely.covers(boundary, nodes)
    distance = shapely.distance(boundary, nodes)
    keep = ~inside & (distance <= m)

    points = [(float(x), float(y)) for x, y in zip(gx[keep], gy[keep])]

    logger.debug(
        f"Check grid: {len(points)} points at {s}m spacing "
        f"({kx.size}x{ky.size} nodes, margin {m}m)"
    )

    return CheckPointGrid(points=points, spacing=s)
