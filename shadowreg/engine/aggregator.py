"""Turn accumulated shadow durations into point results and report statistics."""

import logging
import math
from dataclasses import dataclass, field
from datetime import time
from typing import Optional

import numpy as np
import shapely

from ..geometry.massing import Massing
from ..geometry.polygon_ops import PolygonLike
from ..models.location import SunPosition
from ..models.regulation import RegulationProfile
from ..models.report import (
    Band,
    CheckPointResult,
    OverallStatus,
    Recommendation,
    TimeSeriesEntry,
)
from ..regulation.bands import classify_band, limit_for_band
from .sampling import TimeSample

logger = logging.getLogger(__name__)

# Recommendation thresholds
HEIGHT_REDUCTION_MIN_AVG_HOURS = 1.0
HEIGHT_REDUCTION_CRITICAL_AVG_HOURS = 2.0
METERS_PER_VIOLATION_HOUR = 1.5
SETBACK_TRIGGER_DISTANCE_M = 15.0
SETBACK_SUGGESTED_M = 3.0
SHAPE_CHANGE_EXCESS_HEIGHT_M = 5.0

_PRIORITY_ORDER = {"critical": 0, "high": 1, "medium": 2, "low": 3}


@dataclass
class ComplianceSummary:
    """Aggregate numbers derived from the point results."""

    status: OverallStatus
    compliance_rate: float
    regulated_count: int = 0
    compliant_count: int = 0
    max_violation_hours: float = 0.0
    violation_area_m2: float = 0.0
    regulated_mask: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=bool))


def build_point_results(
    points: list[tuple[float, float]],
    boundary: PolygonLike,
    shadow_hours: np.ndarray,
    profile: Optional[RegulationProfile],
) -> list[CheckPointResult]:
    """Resolve limits and compliance for every check point, in input order.

    Without a profile nothing is sampled: hours stay 0 and every point is
    marked ``shadow_measured=False``.
    """
    if not points:
        return []

    xs = np.array([p[0] for p in points], dtype=np.float64)
    ys = np.array([p[1] for p in points], dtype=np.float64)
    distances = shapely.distance(boundary, shapely.points(xs, ys))

    results = []
    for (x, y), d, hours in zip(points, distances, shadow_hours):
        band = classify_band(float(d))
        limit = limit_for_band(band, profile)
        hours = float(hours)
        results.append(CheckPointResult(
            x=x,
            y=y,
            distance_to_boundary=float(d),
            band=band,
            limit_hours=limit,
            shadow_hours=hours,
            shadow_measured=profile is not None,
            compliant=None if limit is None else hours <= limit,
        ))
    return results


def summarize(
    results: list[CheckPointResult],
    profile: Optional[RegulationProfile],
    cell_area: float = 0.0,
    aborted: bool = False,
) -> ComplianceSummary:
    """Overall verdict and violation statistics.

    NOT_EVALUATED when the profile is absent or the run was cancelled;
    otherwise COMPLIANT iff every regulated point is compliant.
    """
    regulated = [r for r in results if r.limit_hours is not None]
    compliant = [r for r in regulated if r.compliant]
    violating = [r for r in regulated if not r.compliant]

    rate = len(compliant) / len(regulated) if regulated else 1.0

    if profile is None or aborted:
        status = OverallStatus.NOT_EVALUATED
    elif violating:
        status = OverallStatus.NON_COMPLIANT
    else:
        status = OverallStatus.COMPLIANT

    return ComplianceSummary(
        status=status,
        compliance_rate=rate,
        regulated_count=len(regulated),
        compliant_count=len(compliant),
        max_violation_hours=max((r.violation_hours for r in violating), default=0.0),
        violation_area_m2=len(violating) * cell_area,
        regulated_mask=np.array([r.limit_hours is not None for r in results], dtype=bool),
    )


def build_time_series(
    samples: list[TimeSample],
    suns: list[SunPosition],
    step_masks: np.ndarray,
    regulated_mask: np.ndarray,
) -> list[TimeSeriesEntry]:
    """Shadowed regulated points per completed sample.

    Points outside every band are left out of the counts; with no profile
    every point counts, so the overlay still shows where the shadow falls.
    """
    count_mask = regulated_mask if regulated_mask.any() else np.ones(step_masks.shape[1], dtype=bool)
    entries = []
    for k in range(step_masks.shape[0]):
        sample = samples[k]
        sun = suns[k]
        entries.append(TimeSeriesEntry(
            sample_time=sample.when.time(),
            altitude=sun.altitude,
            azimuth=sun.azimuth,
            weight_hours=sample.weight_hours,
            shadowed_points=int(np.count_nonzero(step_masks[k] & count_mask)),
        ))
    return entries


def peak_shadow_time(time_series: list[TimeSeriesEntry]) -> Optional[time]:
    """Earliest sample with the most shadowed points, None if nothing is shadowed."""
    best = None
    for entry in time_series:
        if entry.shadowed_points == 0:
            continue
        if best is None or entry.shadowed_points > best.shadowed_points:
            best = entry
    return best.sample_time if best else None


def generate_recommendations(
    results: list[CheckPointResult],
    massing: Massing,
    profile: Optional[RegulationProfile],
) -> list[Recommendation]:
    """Rule-based remediation hints for violating points, highest priority first."""
    violating = [r for r in results if r.compliant is False]
    if not violating or profile is None:
        return []

    recommendations = []
    avg_violation = sum(r.violation_hours for r in violating) / len(violating)

    if avg_violation > HEIGHT_REDUCTION_MIN_AVG_HOURS:
        reduction = math.ceil(avg_violation * METERS_PER_VIOLATION_HOUR)
        recommendations.append(Recommendation(
            kind="height_reduction",
            priority="critical" if avg_violation > HEIGHT_REDUCTION_CRITICAL_AVG_HOURS else "high",
            description=(
                f"Reduce the building height by about {reduction} m "
                f"(average excess {avg_violation:.1f} h over the limit)"
            ),
        ))

    if any(r.distance_to_boundary <= SETBACK_TRIGGER_DISTANCE_M for r in violating):
        recommendations.append(Recommendation(
            kind="setback",
            priority="high",
            description=(
                f"Set the building back about {SETBACK_SUGGESTED_M:g} m from the site boundary; "
                f"violations occur within {SETBACK_TRIGGER_DISTANCE_M:g} m of it"
            ),
        ))

    if profile.low_rise and profile.target_floors:
        recommendations.append(Recommendation(
            kind="floor_reduction",
            priority="medium",
            description=(
                f"Buildings below {profile.target_floors} floors and no taller than "
                f"{profile.target_height:g} m fall outside the '{profile.zone}' regulation"
                if profile.target_height is not None
                else f"Buildings below {profile.target_floors} floors fall outside the '{profile.zone}' regulation"
            ),
        ))

    if (
        profile.target_height is not None
        and massing.max_height > profile.target_height + SHAPE_CHANGE_EXCESS_HEIGHT_M
    ):
        recommendations.append(Recommendation(
            kind="shape_modification",
            priority="low",
            description="A slimmer plan shape narrows the shadow cast on neighboring land",
        ))

    recommendations.sort(key=lambda r: _PRIORITY_ORDER[r.priority])
    logger.debug(f"Generated {len(recommendations)} recommendations for {len(violating)} violating points")
    return recommendations


def band_counts(results: list[CheckPointResult]) -> dict[str, int]:
    """Number of points per band."""
    counts = {band.value: 0 for band in Band}
    for r in results:
        counts[r.band.value] += 1
    return counts
