"""Tests for the shadow raycaster."""

import numpy as np
import pytest
from shapely.geometry import Point

from shadowreg.geometry.massing import build_massing, rectangle_footprint
from shadowreg.models.location import SunPosition
from shadowreg.shadow.raycaster import (
    MIN_SUN_ALTITUDE_DEG,
    clamp_altitude,
    is_in_shadow,
    shadow_length,
    shadow_mask,
    shadow_polygon,
)

LOW_SOUTH_SUN = SunPosition(altitude=10.0, azimuth=180.0)
OVERHEAD_SUN = SunPosition(altitude=90.0, azimuth=180.0)


class TestIsInShadow:
    """Test the scalar shadow predicate."""

    def test_anti_solar_point_shadowed_at_low_sun(self, cube_massing):
        """A point just north of the building is shadowed by a low southern sun."""
        assert is_in_shadow((0.0, 20.0), LOW_SOUTH_SUN, cube_massing, 0.0)

    def test_sun_side_point_not_shadowed(self, cube_massing):
        """A point on the sun side is never shadowed."""
        assert not is_in_shadow((0.0, -20.0), LOW_SOUTH_SUN, cube_massing, 0.0)

    def test_overhead_sun_casts_no_shadow_outside(self, cube_massing):
        """At altitude 90 points outside the footprint are never shadowed."""
        for point in [(0.0, 5.5), (6.0, 0.0), (-5.01, -5.01)]:
            assert not is_in_shadow(point, OVERHEAD_SUN, cube_massing, 0.0)

    def test_night_never_shadowed(self, cube_massing):
        """Nothing is shadowed when the sun is below the horizon."""
        night = SunPosition(altitude=-5.0, azimuth=0.0)
        assert not is_in_shadow((0.0, 20.0), night, cube_massing, 0.0)

    def test_beyond_reach_not_shadowed(self, cube_massing):
        """Points farther than the shadow length are lit."""
        sun = SunPosition(altitude=45.0, azimuth=180.0)
        # reach = 15 m from the north face at y = 5
        assert is_in_shadow((0.0, 19.0), sun, cube_massing, 0.0)
        assert not is_in_shadow((0.0, 21.0), sun, cube_massing, 0.0)

    def test_measurement_plane_shortens_shadow(self, cube_massing):
        """A raised measurement plane shortens the reach."""
        sun = SunPosition(altitude=45.0, azimuth=180.0)
        assert is_in_shadow((0.0, 17.0), sun, cube_massing, 0.0)
        assert not is_in_shadow((0.0, 17.0), sun, cube_massing, 4.0)

    def test_building_below_plane_casts_nothing(self):
        """A building lower than the plane never shadows it."""
        low = build_massing(rectangle_footprint(10, 10), total_height=3.0)
        assert not is_in_shadow((0.0, 8.0), LOW_SOUTH_SUN, low, 4.0)

    def test_light_passes_under_elevated_volume(self):
        """Light passes beneath a volume lifted off the ground."""
        footprint = rectangle_footprint(10, 2)  # y in [-1, 1]
        sun = SunPosition(altitude=45.0, azimuth=180.0)
        grounded = build_massing(footprint, total_height=15.0)
        lifted = build_massing(footprint, total_height=15.0, base_height=10.0)
        assert is_in_shadow((0.0, 3.0), sun, grounded, 0.0)
        assert not is_in_shadow((0.0, 3.0), sun, lifted, 0.0)
        # Farther out the ray meets the lifted volume
        assert is_in_shadow((0.0, 12.0), sun, lifted, 0.0)

    def test_monotonic_in_height(self):
        """A taller building shadows every point a shorter one does."""
        footprint = rectangle_footprint(10, 10)
        short = build_massing(footprint, total_height=10.0)
        tall = build_massing(footprint, total_height=20.0)
        sun = SunPosition(altitude=25.0, azimuth=150.0)
        xs, ys = np.meshgrid(np.arange(-40, 41, 4.0), np.arange(-40, 41, 4.0))
        for x, y in zip(xs.ravel(), ys.ravel()):
            if is_in_shadow((x, y), sun, short, 1.5):
                assert is_in_shadow((x, y), sun, tall, 1.5)


class TestShadowMask:
    """Test the vectorised predicate."""

    def test_matches_scalar(self, cube_massing):
        """Batch and scalar predicates agree point by point."""
        xs, ys = np.meshgrid(np.arange(-60, 61, 3.0), np.arange(-60, 61, 3.0))
        xs = xs.ravel()
        ys = ys.ravel()
        for sun in [LOW_SOUTH_SUN, SunPosition(30.9, 180.0), SunPosition(8.1, 126.6), SunPosition(0.2, 235.0)]:
            mask = shadow_mask(xs, ys, sun, cube_massing, 4.0)
            expected = [is_in_shadow((x, y), sun, cube_massing, 4.0) for x, y in zip(xs, ys)]
            assert mask.tolist() == expected

    def test_empty_input(self, cube_massing):
        """No points gives an empty mask."""
        mask = shadow_mask(np.array([]), np.array([]), LOW_SOUTH_SUN, cube_massing, 0.0)
        assert mask.shape == (0,)

    def test_night_all_false(self, cube_massing):
        """Night gives an all-false mask."""
        mask = shadow_mask(np.array([0.0, 0.0]), np.array([20.0, -20.0]),
                           SunPosition(-1.0, 0.0), cube_massing, 0.0)
        assert not mask.any()


class TestShadowGeometry:
    """Test shadow length and polygon helpers."""

    def test_clamp_altitude(self):
        """Near-horizon altitudes are raised to the minimum."""
        assert clamp_altitude(0.1) == MIN_SUN_ALTITUDE_DEG
        assert clamp_altitude(30.0) == 30.0

    def test_shadow_length_45(self):
        """At 45 deg the shadow is as long as the building is tall."""
        assert shadow_length(15.0, 45.0) == pytest.approx(15.0)

    def test_shadow_polygon_covers_shadowed_point(self, cube_massing):
        """The shadow region contains points the predicate marks shadowed."""
        region = shadow_polygon(cube_massing, LOW_SOUTH_SUN, 0.0)
        assert region.covers(Point(0.0, 20.0))
        assert not region.covers(Point(0.0, -20.0))

    def test_shadow_polygon_empty_at_night(self, cube_massing):
        """No shadow region at night."""
        assert shadow_polygon(cube_massing, SunPosition(-3.0, 0.0), 0.0).is_empty
