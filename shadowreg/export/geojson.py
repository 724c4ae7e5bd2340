"""GeoJSON export of compliance reports for map overlays."""

from datetime import time
from typing import Any

from pyproj import Transformer
from shapely.geometry import Point, mapping
from shapely.ops import transform

from ..geometry.massing import Massing
from ..geometry.polygon_ops import PolygonLike
from ..geometry.projection import WGS84, local_crs
from ..models.location import GeoCoordinate
from ..models.report import CheckPointResult, ComplianceReport

# Point status values used for styling
STATUS_COMPLIANT = "compliant"
STATUS_VIOLATION = "violation"
STATUS_UNREGULATED = "unregulated"


def report_to_geojson(
    report: ComplianceReport,
    massing: Massing | None = None,
    site_boundary: PolygonLike | None = None,
    shadow_polygons: list[tuple[time, PolygonLike]] | None = None,
    origin: GeoCoordinate | None = None,
) -> dict[str, Any]:
    """Convert a compliance report to a GeoJSON FeatureCollection.

    Args:
        report: ComplianceReport to export
        massing: Optional building massing (one feature per volume)
        site_boundary: Optional boundary the bands were measured from
        shadow_polygons: Optional (sample time, shadow region) pairs
        origin: Site location; when given, coordinates are emitted as
                [lon, lat] instead of site-local meters

    Returns:
        GeoJSON FeatureCollection dict
    """
    to_output = _make_transform(origin)
    features = []

    # Add boundary if provided
    if site_boundary is not None:
        features.append({
            "type": "Feature",
            "geometry": mapping(to_output(site_boundary)),
            "properties": {
                "kind": "boundary",
                "layer": "site",
            },
        })

    # Add building volumes
    if massing is not None:
        for i, volume in enumerate(massing.volumes):
            features.append({
                "type": "Feature",
                "geometry": mapping(to_output(volume.polygon)),
                "properties": {
                    "kind": "building",
                    "id": f"volume_{i}",
                    "height": volume.height,
                    "base_height": volume.base_height,
                    "layer": "building",
                },
            })

    # Add shadow regions
    if shadow_polygons:
        for sample_time, region in shadow_polygons:
            if region.is_empty:
                continue
            features.append({
                "type": "Feature",
                "geometry": mapping(to_output(region)),
                "properties": {
                    "kind": "shadow",
                    "time": sample_time.isoformat(timespec="minutes"),
                    "layer": "shadows",
                },
            })

    # Add check points
    for p in report.points:
        features.append(_point_to_feature(p, to_output))

    return {
        "type": "FeatureCollection",
        "features": features,
        "properties": {
            "overall_status": report.overall_status.value,
            "compliance_rate": report.compliance_rate,
            "reference_day": report.reference_day.isoformat(),
            "profile_zone": report.profile_zone,
            "crs": WGS84 if origin is not None else "site-local",
        },
    }


def point_status(point: CheckPointResult) -> str:
    """Styling status of a check point."""
    if point.compliant is None:
        return STATUS_UNREGULATED
    return STATUS_COMPLIANT if point.compliant else STATUS_VIOLATION


def _point_to_feature(point: CheckPointResult, to_output) -> dict[str, Any]:
    return {
        "type": "Feature",
        "geometry": mapping(to_output(Point(point.x, point.y))),
        "properties": {
            "kind": "check_point",
            "status": point_status(point),
            "band": point.band.value,
            "distance": point.distance_to_boundary,
            "shadow_hours": point.shadow_hours,
            "shadow_measured": point.shadow_measured,
            "limit_hours": point.limit_hours,
            "violation_hours": point.violation_hours,
            "layer": "check_points",
        },
    }


def _make_transform(origin: GeoCoordinate | None):
    """Geometry mapper from site-local meters to the output frame."""
    if origin is None:
        return lambda geom: geom
    transformer = Transformer.from_crs(local_crs(origin), WGS84, always_xy=True)
    return lambda geom: transform(transformer.transform, geom)


def filter_geojson_by_layer(
    geojson: dict[str, Any],
    layers: list[str],
) -> dict[str, Any]:
    """Filter GeoJSON features by layer property.

    Args:
        geojson: GeoJSON FeatureCollection
        layers: List of layer names to include

    Returns:
        Filtered GeoJSON FeatureCollection
    """
    features = geojson.get("features", [])
    filtered = [
        f for f in features
        if f.get("properties", {}).get("layer") in layers
    ]

    return {
        "type": "FeatureCollection",
        "features": filtered,
        "properties": geojson.get("properties", {}),
    }
