"""Geometry for building massing and site-local coordinates using Shapely and pyproj."""

from .massing import (
    Massing,
    MassingKind,
    MassingVolume,
    build_massing,
    build_stepped_massing,
    rectangle_footprint,
    site_boundary_from_coords,
    square_footprint_from_area,
)
from .polygon_ops import (
    normalize_ring,
    sweep_polygon,
    union_polygons,
)
from .projection import footprint_from_lonlat, footprint_to_lonlat

__all__ = [
    # Massing
    "Massing",
    "MassingKind",
    "MassingVolume",
    "build_massing",
    "build_stepped_massing",
    "rectangle_footprint",
    "site_boundary_from_coords",
    "square_footprint_from_area",
    # Polygon operations
    "normalize_ring",
    "sweep_polygon",
    "union_polygons",
    # Projection
    "footprint_from_lonlat",
    "footprint_to_lonlat",
]
