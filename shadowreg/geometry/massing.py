"""Immutable building massing built from extruded footprints.

A massing is one or more vertical prisms (footprint ring + top height,
optionally lifted off the ground by a base height). All coordinates are
site-local meters with x pointing east and y pointing north.

The builder functions are the only way callers are expected to obtain a
``Massing``: they validate the raw building parameters and raise
``DegenerateMassing`` before anything downstream sees the shape.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum

import shapely
from shapely.geometry import Point, Polygon

from ..errors import DegenerateMassing, InvalidBoundary
from .polygon_ops import (
    Coords,
    PolygonLike,
    create_rectangle,
    normalize_ring,
    ring_is_simple,
    union_polygons,
)

logger = logging.getLogger(__name__)


class MassingKind(str, Enum):
    """Massing variant tag."""
    PRISM = "prism"
    MULTI_PRISM = "multi_prism"


@dataclass(frozen=True)
class MassingVolume:
    """One vertically extruded footprint."""

    footprint: tuple[tuple[float, float], ...]
    height: float  # top of the volume above ground (m)
    base_height: float = 0.0  # underside above ground (m)
    polygon: Polygon = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        ring = normalize_ring(self.footprint)
        _validate_ring(ring)
        if not math.isfinite(self.height) or self.height <= 0:
            raise DegenerateMassing(f"Building height must be > 0, got {self.height}")
        if not math.isfinite(self.base_height) or self.base_height < 0:
            raise DegenerateMassing(f"Base height must be >= 0, got {self.base_height}")
        if self.base_height >= self.height:
            raise DegenerateMassing(
                f"Base height {self.base_height} must be below top height {self.height}"
            )

        polygon = Polygon(ring)
        shapely.prepare(polygon)
        object.__setattr__(self, "footprint", tuple(ring))
        object.__setattr__(self, "height", float(self.height))
        object.__setattr__(self, "base_height", float(self.base_height))
        object.__setattr__(self, "polygon", polygon)

    @property
    def area(self) -> float:
        return self.polygon.area

    def to_dict(self) -> dict:
        return {
            "footprint": [list(p) for p in self.footprint],
            "height": self.height,
            "base_height": self.base_height,
        }


@dataclass(frozen=True)
class Massing:
    """Read-only building shape used for shadow casting."""

    volumes: tuple[MassingVolume, ...]
    kind: MassingKind = MassingKind.PRISM
    floors: int | None = None
    outline: PolygonLike = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if not self.volumes:
            raise DegenerateMassing("Massing must have at least one volume")
        expected = MassingKind.PRISM if len(self.volumes) == 1 else MassingKind.MULTI_PRISM
        if self.kind != expected:
            raise DegenerateMassing(
                f"Massing with {len(self.volumes)} volume(s) must be tagged '{expected.value}'"
            )
        outline = union_polygons([v.polygon for v in self.volumes])
        shapely.prepare(outline)
        object.__setattr__(self, "outline", outline)

    @property
    def max_height(self) -> float:
        return max(v.height for v in self.volumes)

    @property
    def footprint_area(self) -> float:
        return self.outline.area

    @property
    def bounding_radius(self) -> float:
        """Distance from the outline centroid to the farthest footprint vertex."""
        c = self.outline.centroid
        return max(
            math.hypot(x - c.x, y - c.y)
            for v in self.volumes
            for x, y in v.footprint
        )

    def contains(self, x: float, y: float) -> bool:
        """Point-in-footprint test (boundary counts as inside)."""
        return self.outline.covers(Point(x, y))

    def distance_to_outline(self, x: float, y: float) -> float:
        """Shortest planar distance to the footprint outline (0 inside)."""
        return self.outline.distance(Point(x, y))

    def volumes_above(self, height: float) -> list[MassingVolume]:
        """Volumes whose top rises above the given plane."""
        return [v for v in self.volumes if v.height > height]

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "floors": self.floors,
            "volumes": [v.to_dict() for v in self.volumes],
        }


def _validate_ring(ring: Coords, error=DegenerateMassing, label: str = "Footprint") -> None:
    """Raise ``error`` if the ring cannot bound a polygon."""
    if len(ring) < 3:
        raise error(f"{label} needs at least 3 distinct vertices, got {len(ring)}")
    for x, y in ring:
        if not (math.isfinite(x) and math.isfinite(y)):
            raise error(f"{label} contains non-finite coordinates")
    if not ring_is_simple(ring):
        raise error(f"{label} ring is self-intersecting")
    if Polygon(ring).area <= 0:
        raise error(f"{label} has zero area")


def site_boundary_from_coords(coords) -> Polygon:
    """Build a validated site boundary polygon.

    Raises:
        InvalidBoundary: If the ring has fewer than 3 distinct vertices,
                         crosses itself or encloses no area
    """
    ring = normalize_ring(coords)
    _validate_ring(ring, InvalidBoundary, "Site boundary")
    return Polygon(ring)


def _resolve_height(
    floors: int | None,
    floor_height: float | None,
    total_height: float | None,
) -> float:
    if total_height is not None:
        return float(total_height)
    if floors is None or floor_height is None:
        raise DegenerateMassing(
            "Either total_height or both floors and floor_height are required"
        )
    if floors <= 0:
        raise DegenerateMassing(f"Floor count must be > 0, got {floors}")
    return floors * float(floor_height)


def build_massing(
    footprint,
    floors: int | None = None,
    floor_height: float | None = None,
    total_height: float | None = None,
    base_height: float = 0.0,
) -> Massing:
    """Build a single-prism massing from raw building parameters.

    Args:
        footprint: Ring of [x, y] points in site-local meters (open or closed)
        floors: Number of floors above ground
        floor_height: Typical floor-to-floor height in meters
        total_height: Total building height in meters (overrides floors x floor_height)
        base_height: Height of the underside above ground (pilotis, bridges)

    Returns:
        Validated Massing

    Raises:
        DegenerateMassing: If the height is not positive or the footprint is invalid
    """
    height = _resolve_height(floors, floor_height, total_height)
    volume = MassingVolume(footprint=tuple(footprint), height=height, base_height=base_height)
    massing = Massing(volumes=(volume,), kind=MassingKind.PRISM, floors=floors)
    logger.debug(
        f"Built prism massing: {len(volume.footprint)} vertices, "
        f"{volume.area:.1f}m² footprint, {height:.2f}m tall"
    )
    return massing


def build_stepped_massing(tiers: list[dict], floors: int | None = None) -> Massing:
    """Build a multi-prism massing (podium + tower, stepped setbacks).

    Args:
        tiers: List of dicts with ``footprint`` and either ``height`` or
               ``floors`` + ``floor_height``; optional ``base_height``
        floors: Total floor count of the building (for applicability checks)

    Returns:
        Validated Massing tagged ``prism`` for one tier, ``multi_prism`` otherwise
    """
    if not tiers:
        raise DegenerateMassing("Stepped massing needs at least one tier")

    volumes = []
    for i, tier in enumerate(tiers):
        if "footprint" not in tier:
            raise DegenerateMassing(f"Tier {i} has no footprint")
        height = _resolve_height(tier.get("floors"), tier.get("floor_height"), tier.get("height"))
        volumes.append(MassingVolume(
            footprint=tuple(tier["footprint"]),
            height=height,
            base_height=tier.get("base_height", 0.0),
        ))

    kind = MassingKind.PRISM if len(volumes) == 1 else MassingKind.MULTI_PRISM
    return Massing(volumes=tuple(volumes), kind=kind, floors=floors)


def rectangle_footprint(
    width: float,
    depth: float,
    center: tuple[float, float] = (0.0, 0.0),
) -> Coords:
    """Axis-aligned rectangular footprint centered on ``center``."""
    if width <= 0 or depth <= 0:
        raise DegenerateMassing(f"Footprint dimensions must be > 0, got {width}x{depth}")
    return create_rectangle(center[0], center[1], width, depth)


def square_footprint_from_area(
    area: float,
    center: tuple[float, float] = (0.0, 0.0),
) -> Coords:
    """Square footprint with the given building area (m²).

    Used when only the building area is known.
    """
    if area <= 0:
        raise DegenerateMassing(f"Building area must be > 0, got {area}")
    side = math.sqrt(area)
    return create_rectangle(center[0], center[1], side, side)
