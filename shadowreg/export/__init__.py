"""Export utilities for compliance reports."""

from .geojson import filter_geojson_by_layer, point_status, report_to_geojson

__all__ = [
    "report_to_geojson",
    "filter_geojson_by_layer",
    "point_status",
]
