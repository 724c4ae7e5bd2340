"""Polygon operations using Shapely.

Provides ring normalisation, validity checks, union and sweep operations
for building footprints, site boundaries and cast shadows.
"""

from __future__ import annotations

import logging

from shapely import affinity
from shapely.geometry import LinearRing, MultiPolygon, Polygon
from shapely.ops import unary_union
from shapely.validation import make_valid

logger = logging.getLogger(__name__)

# Type aliases
Coords = list[tuple[float, float]]
PolygonLike = Polygon | MultiPolygon

# Vertices closer than this are treated as duplicates (meters)
VERTEX_TOLERANCE = 1e-9


def normalize_ring(coords) -> Coords:
    """Convert a coordinate sequence to an open ring of float tuples.

    Drops the closing vertex if the ring is explicitly closed and collapses
    consecutive duplicate vertices.

    Args:
        coords: Sequence of [x, y] pairs (open or closed)

    Returns:
        List of (x, y) tuples without the closing vertex
    """
    ring: Coords = []
    for pt in coords:
        x, y = float(pt[0]), float(pt[1])
        if ring and abs(ring[-1][0] - x) <= VERTEX_TOLERANCE and abs(ring[-1][1] - y) <= VERTEX_TOLERANCE:
            continue
        ring.append((x, y))

    if len(ring) > 1:
        first, last = ring[0], ring[-1]
        if abs(first[0] - last[0]) <= VERTEX_TOLERANCE and abs(first[1] - last[1]) <= VERTEX_TOLERANCE:
            ring.pop()

    return ring


def ring_is_simple(ring: Coords) -> bool:
    """Check that a ring has no self-intersections."""
    if len(ring) < 3:
        return False
    return LinearRing(ring).is_simple


def union_polygons(polygons: list[PolygonLike]) -> PolygonLike:
    """Compute union of multiple polygons.

    Args:
        polygons: List of polygons to union

    Returns:
        Unified polygon (may be MultiPolygon)
    """
    if not polygons:
        return Polygon()

    valid_polygons = []
    for p in polygons:
        if p is None or p.is_empty:
            continue
        if not p.is_valid:
            p = make_valid(p)
        valid_polygons.append(p)

    if not valid_polygons:
        return Polygon()

    return unary_union(valid_polygons)


def create_rectangle(
    center_x: float,
    center_y: float,
    width: float,
    depth: float,
) -> Coords:
    """Create an axis-aligned rectangle ring centered at given point.

    Args:
        center_x: X coordinate of center
        center_y: Y coordinate of center
        width: Extent along x (east-west)
        depth: Extent along y (north-south)

    Returns:
        Open ring, counter-clockwise from the south-west corner
    """
    half_w = width / 2
    half_d = depth / 2

    return [
        (center_x - half_w, center_y - half_d),
        (center_x + half_w, center_y - half_d),
        (center_x + half_w, center_y + half_d),
        (center_x - half_w, center_y + half_d),
    ]


def sweep_polygon(polygon: Polygon, dx: float, dy: float, near: float, far: float) -> PolygonLike:
    """Sweep a polygon along a direction between two offsets.

    Returns the union of every copy of ``polygon`` translated by
    ``t * (dx, dy)`` for ``near <= t <= far``: both end copies plus the
    quadrilateral traced by each exterior edge.

    Args:
        polygon: Polygon to sweep
        dx, dy: Unit direction of the sweep
        near: Start offset along the direction
        far: End offset along the direction

    Returns:
        Swept region (Polygon or MultiPolygon)
    """
    start = affinity.translate(polygon, xoff=dx * near, yoff=dy * near)
    end = affinity.translate(polygon, xoff=dx * far, yoff=dy * far)
    parts: list[PolygonLike] = [start, end]

    ring = list(polygon.exterior.coords)
    for (ax, ay), (bx, by) in zip(ring[:-1], ring[1:]):
        quad = Polygon([
            (ax + dx * near, ay + dy * near),
            (bx + dx * near, by + dy * near),
            (bx + dx * far, by + dy * far),
            (ax + dx * far, ay + dy * far),
        ])
        if quad.area > 0:
            parts.append(quad.convex_hull)

    return union_polygons(parts)
