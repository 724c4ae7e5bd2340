"""Tests for GeoJSON export."""

from datetime import datetime, time

import pytest

from shadowreg.engine.evaluator import evaluate_compliance
from shadowreg.export.geojson import (
    filter_geojson_by_layer,
    point_status,
    report_to_geojson,
)
from shadowreg.shadow.raycaster import shadow_polygon
from shadowreg.solar.position import solar_position

POINTS = [(0.0, 8.0), (0.0, 13.0), (0.0, 55.0)]


@pytest.fixture
def report(tokyo, cube_massing, tokyo_profile, solstice):
    return evaluate_compliance(tokyo, cube_massing, tokyo_profile, solstice, check_points=POINTS)


class TestReportToGeojson:
    """Test report_to_geojson function."""

    def test_points_only(self, report):
        """Without extras only check points are emitted."""
        geojson = report_to_geojson(report)
        assert geojson["type"] == "FeatureCollection"
        assert len(geojson["features"]) == 3
        assert geojson["properties"]["overall_status"] == report.overall_status.value
        assert geojson["properties"]["crs"] == "site-local"

        first = geojson["features"][0]
        assert first["geometry"]["type"] == "Point"
        assert first["geometry"]["coordinates"] == (0.0, 8.0)
        assert first["properties"]["status"] == "unregulated"
        assert first["properties"]["band"] == "unregulated"
        assert first["properties"]["shadow_measured"] is True

    def test_building_and_shadows(self, report, tokyo, cube_massing, tokyo_profile, solstice):
        """Building volumes and shadow regions get their own layers."""
        sun = solar_position(tokyo, datetime.combine(solstice, time(12, 0)))
        shadows = [(time(12, 0), shadow_polygon(cube_massing, sun, tokyo_profile.measurement_height))]
        geojson = report_to_geojson(report, massing=cube_massing, shadow_polygons=shadows)

        layers = [f["properties"]["layer"] for f in geojson["features"]]
        assert layers.count("building") == 1
        assert layers.count("shadows") == 1
        shadow = filter_geojson_by_layer(geojson, ["shadows"])["features"][0]
        assert shadow["properties"]["time"] == "12:00"

    def test_lonlat_output(self, report, tokyo):
        """With an origin, coordinates are emitted in degrees around the site."""
        geojson = report_to_geojson(report, origin=tokyo)
        lon, lat = geojson["features"][2]["geometry"]["coordinates"]
        assert lon == pytest.approx(139.7, abs=1e-6)
        assert lat == pytest.approx(35.6 + 55.0 / 111_000, abs=1e-5)
        assert geojson["properties"]["crs"] == "EPSG:4326"

    def test_point_status(self, report):
        """Status follows the compliance flag."""
        statuses = [point_status(p) for p in report.points]
        assert statuses[0] == "unregulated"
        assert statuses[2] == "compliant"

    def test_unmeasured_points_flagged(self, tokyo, cube_massing, solstice):
        """Without a profile, points carry shadow_measured = False."""
        unmeasured = evaluate_compliance(tokyo, cube_massing, None, solstice, check_points=POINTS)
        props = [f["properties"] for f in report_to_geojson(unmeasured)["features"]]
        assert all(p["shadow_measured"] is False for p in props)
        assert all(p["status"] == "unregulated" for p in props)


class TestFilterByLayer:
    """Test filter_geojson_by_layer function."""

    def test_filter(self, report, cube_massing):
        """Only requested layers are kept."""
        geojson = report_to_geojson(report, massing=cube_massing)
        filtered = filter_geojson_by_layer(geojson, ["building"])
        assert len(filtered["features"]) == 1
        assert filtered["properties"] == geojson["properties"]
