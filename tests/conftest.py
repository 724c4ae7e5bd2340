"""Shared fixtures: a 10 m x 10 m x 15 m building in Tokyo on the winter solstice."""

from datetime import date

import pytest

from shadowreg.geometry.massing import build_massing, rectangle_footprint
from shadowreg.models.location import GeoCoordinate
from shadowreg.models.regulation import RegulationProfile

TOKYO_LAT = 35.6
TOKYO_LON = 139.7
WINTER_SOLSTICE = date(2024, 12, 21)


@pytest.fixture
def tokyo() -> GeoCoordinate:
    return GeoCoordinate(TOKYO_LAT, TOKYO_LON)


@pytest.fixture
def solstice() -> date:
    return WINTER_SOLSTICE


@pytest.fixture
def tokyo_profile() -> RegulationProfile:
    """4 m plane, 08:00-16:00, 4 h within 5-10 m, 2.5 h beyond."""
    return RegulationProfile(
        zone="residential_1",
        measurement_height=4.0,
        band_a_hours=4.0,
        band_b_hours=2.5,
        target_height=10.0,
    )


@pytest.fixture
def cube_massing():
    """10 m x 10 m footprint centered on the origin, 15 m tall."""
    return build_massing(rectangle_footprint(10.0, 10.0), total_height=15.0)
