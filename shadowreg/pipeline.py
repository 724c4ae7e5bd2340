"""Request-level compliance pipeline.

Turns a JSON-like ComplianceRequest into domain objects and runs the engine:
1. Validate the site location
2. Build the massing (projecting map coordinates if needed)
3. Resolve the regulation profile
4. Evaluate (through the injected cache when one is given)
5. Export the GeoJSON overlay
"""

import logging
import time
import uuid
from typing import Any, Dict, Optional, Tuple

from .cache import ReportCache, content_hash, evaluate_cached
from .engine.cancellation import CancellationToken
from .engine.evaluator import (
    EvaluationConfig,
    ProgressCallback,
    default_reference_day,
    evaluate_compliance,
    sample_instants,
)
from .engine.sampling import IntegrationRule
from .export.geojson import report_to_geojson
from .geometry.massing import (
    Massing,
    build_massing,
    build_stepped_massing,
    site_boundary_from_coords,
    square_footprint_from_area,
)
from .geometry.projection import footprint_from_lonlat
from .models.location import GeoCoordinate
from .models.regulation import RegulationProfile
from .models.report import ComplianceReport
from .models.request import BuildingInput, ComplianceRequest, RegulationInput
from .regulation.loader import load_profile
from .shadow.raycaster import shadow_polygon
from .solar.position import solar_position

logger = logging.getLogger(__name__)


def evaluate_request(
    request: ComplianceRequest,
    progress_callback: Optional[ProgressCallback] = None,
    cancel_token: Optional[CancellationToken] = None,
    cache: Optional[ReportCache] = None,
) -> Tuple[ComplianceReport, Dict[str, Any]]:
    """Run a compliance check for a request.

    Args:
        request: ComplianceRequest with site, building, regulation and sampling
        progress_callback: Optional callback for progress updates (message, percent)
        cancel_token: Optional cooperative cancellation
        cache: Optional report cache

    Returns:
        Tuple of (report, statistics); statistics include the GeoJSON overlay

    Raises:
        InvalidLocation, DegenerateMassing, InvalidBoundary, InvalidWindow,
        ProfileNotFound
    """
    job_id = str(uuid.uuid4())[:8]
    stats: Dict[str, Any] = {"job_id": job_id}
    start_time = time.time()

    # PHASE 1: Location
    location = GeoCoordinate(request.site.latitude, request.site.longitude)

    def to_local(coords):
        if request.site.coordinates == "lonlat":
            return footprint_from_lonlat(coords, location)
        return [(float(c[0]), float(c[1])) for c in coords]

    # PHASE 2: Massing
    massing = build_request_massing(request.building, to_local)
    site_boundary = None
    if request.site.boundary:
        site_boundary = site_boundary_from_coords(to_local(request.site.boundary))

    # PHASE 3: Regulation profile
    profile = resolve_profile(request.regulation)
    stats["profile_source"] = (
        f"preset:{request.regulation.zone}" if request.regulation.zone
        else "explicit" if profile is not None
        else "none"
    )

    ev = request.evaluation
    config = EvaluationConfig(
        time_step_minutes=ev.time_step_minutes,
        integration_rule=IntegrationRule(ev.integration_rule),
        num_workers=ev.num_workers,
        keep_time_series=ev.keep_time_series,
        time_basis=ev.time_basis,
        utc_offset_hours=ev.utc_offset_hours,
    )
    reference_day = ev.reference_day or default_reference_day()

    logger.info(
        f"[{job_id}] Checking {massing.kind.value} massing ({massing.max_height:.1f}m) "
        f"at ({location.latitude}, {location.longitude}) on {reference_day}"
    )

    # PHASE 4: Evaluate
    if cache is not None and site_boundary is None:
        report = evaluate_cached(
            cache, location, massing, profile, reference_day,
            grid=request.grid, config=config,
            cancel_token=cancel_token, progress_callback=progress_callback,
        )
        stats["cache_key"] = content_hash(location, massing, profile, request.grid, reference_day, config)
    else:
        if cache is not None:
            logger.info(f"[{job_id}] Custom site boundary given; bypassing report cache")
        report = evaluate_compliance(
            location, massing, profile,
            reference_day=reference_day,
            grid=request.grid,
            config=config,
            site_boundary=site_boundary,
            cancel_token=cancel_token,
            progress_callback=progress_callback,
        )

    # PHASE 5: Overlay
    shadows = None
    if ev.include_shadow_polygons and profile is not None:
        shadows = []
        for when in sample_instants(reference_day, profile, config):
            sun = solar_position(location, when, config.time_basis, config.utc_offset_hours)
            shadows.append((when.time(), shadow_polygon(massing, sun, profile.measurement_height)))

    stats["geojson"] = report_to_geojson(
        report,
        massing=massing,
        site_boundary=site_boundary,
        shadow_polygons=shadows,
        origin=location if request.site.coordinates == "lonlat" else None,
    )
    stats["num_points"] = len(report.points)
    stats["elapsed_seconds"] = time.time() - start_time

    logger.info(
        f"[{job_id}] {report.overall_status.value}: rate {report.compliance_rate:.3f}, "
        f"{len(report.points)} points in {stats['elapsed_seconds']:.2f}s"
    )

    return report, stats


def build_request_massing(building: BuildingInput, to_local=None) -> Massing:
    """Build a massing from raw building input.

    Heights are converted from millimeters when ``height_unit`` is "mm";
    footprints go through ``to_local`` (identity by default).
    """
    to_local = to_local or (lambda coords: [(float(c[0]), float(c[1])) for c in coords])
    if building.tiers is not None:
        tiers = []
        for tier in building.tiers:
            tier = dict(tier)
            if "footprint" in tier:
                tier["footprint"] = to_local(tier["footprint"])
            for key in ("height", "floor_height", "base_height"):
                if tier.get(key) is not None:
                    tier[key] = building.to_meters(tier[key])
            tiers.append(tier)
        return build_stepped_massing(tiers, floors=building.floors)

    if building.footprint is not None:
        footprint = to_local(building.footprint)
    else:
        footprint = square_footprint_from_area(building.building_area)

    return build_massing(
        footprint,
        floors=building.floors,
        floor_height=building.to_meters(building.floor_height),
        total_height=building.to_meters(building.total_height),
        base_height=building.to_meters(building.base_height),
    )


def resolve_profile(regulation: RegulationInput) -> Optional[RegulationProfile]:
    """Preset, explicit profile, or None when the district is unknown."""
    if regulation.zone is not None:
        return load_profile(regulation.zone, regulation.override)
    if regulation.profile is not None:
        profile = RegulationProfile(**regulation.profile)
        if regulation.override:
            profile = profile.merge_override(regulation.override)
        return profile
    return None
