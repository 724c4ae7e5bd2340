"""Shadow casting from building massing."""

from .raycaster import (
    MIN_SUN_ALTITUDE_DEG,
    clamp_altitude,
    is_in_shadow,
    shadow_length,
    shadow_mask,
    shadow_polygon,
    sun_direction,
)

__all__ = [
    "MIN_SUN_ALTITUDE_DEG",
    "clamp_altitude",
    "is_in_shadow",
    "shadow_length",
    "shadow_mask",
    "shadow_polygon",
    "sun_direction",
]
