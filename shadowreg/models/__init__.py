"""Data models for locations, regulation profiles, requests and reports."""

from .grid import GridSpec
from .location import GeoCoordinate, SunPosition
from .regulation import RegulationProfile
from .report import (
    Advisory,
    Band,
    CheckPointResult,
    ComplianceReport,
    OverallStatus,
    Recommendation,
    TimeSeriesEntry,
)
from .request import (
    BuildingInput,
    ComplianceRequest,
    EvaluationInput,
    RegulationInput,
    SiteInput,
)

__all__ = [
    # Location
    "GeoCoordinate",
    "SunPosition",
    # Regulation
    "RegulationProfile",
    "GridSpec",
    # Report
    "Advisory",
    "Band",
    "CheckPointResult",
    "ComplianceReport",
    "OverallStatus",
    "Recommendation",
    "TimeSeriesEntry",
    # Request
    "ComplianceRequest",
    "SiteInput",
    "BuildingInput",
    "RegulationInput",
    "EvaluationInput",
]
