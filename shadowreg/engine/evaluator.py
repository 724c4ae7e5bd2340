"""Shadow regulation compliance evaluation.

Runs the single-pass evaluation:
1. Validate the window and sampling interval
2. Generate check points around the boundary
3. Compute one sun position per time sample
4. Integrate shadow duration per point (optionally across worker threads)
5. Resolve band limits and aggregate the verdict
"""

import logging
import time as _time
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable, Optional

import numpy as np

from ..errors import InvalidBoundary
from ..geometry.massing import Massing
from ..geometry.polygon_ops import PolygonLike
from ..models.grid import GridSpec
from ..models.location import GeoCoordinate
from ..models.regulation import RegulationProfile
from ..models.report import Advisory, ComplianceReport
from ..regulation.applicability import is_subject_to_regulation
from ..solar.position import TimeBasis, solar_position
from .aggregator import (
    band_counts,
    build_point_results,
    build_time_series,
    generate_recommendations,
    peak_shadow_time,
    summarize,
)
from .cancellation import CancellationToken
from .grid import CheckPointGrid, generate_check_points
from .integrator import integrate_shadow
from .sampling import IntegrationRule, build_time_samples, window_seconds

logger = logging.getLogger(__name__)


# Progress callback type
ProgressCallback = Callable[[str, float], None]

# Share of the progress bar covered by the time loop
_SAMPLING_START_PCT = 15.0
_SAMPLING_END_PCT = 90.0


@dataclass
class EvaluationConfig:
    """Configuration for one compliance evaluation."""

    # Sampling interval in minutes (must be a whole number of seconds)
    time_step_minutes: float = 10.0

    # How sample indicators are weighted into durations
    integration_rule: IntegrationRule = IntegrationRule.TRAPEZOID

    # Worker threads for the time loop (0 = auto, 1 = run inline)
    num_workers: int = 1

    # Steps longer than this fraction of the window raise a SamplingTooCoarse advisory
    coarse_sampling_fraction: float = 0.125

    # Record per-sample shadow counts in the report
    keep_time_series: bool = True

    # Interpretation of window times ("solar" or "clock")
    time_basis: TimeBasis = "solar"
    utc_offset_hours: Optional[float] = None

    @property
    def time_step(self) -> timedelta:
        return timedelta(minutes=self.time_step_minutes)


def default_reference_day(today: Optional[date] = None) -> date:
    """Winter solstice (December 21st) of the previous year."""
    today = today or date.today()
    return date(today.year - 1, 12, 21)


def evaluate_compliance(
    location: GeoCoordinate,
    massing: Massing,
    profile: Optional[RegulationProfile],
    reference_day: Optional[date] = None,
    grid: Optional[GridSpec] = None,
    config: Optional[EvaluationConfig] = None,
    site_boundary: Optional[PolygonLike] = None,
    check_points: Optional[list[tuple[float, float]]] = None,
    cancel_token: Optional[CancellationToken] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> ComplianceReport:
    """Evaluate a massing against a district's shadow-time limits.

    Args:
        location: Validated site location
        massing: Validated building massing
        profile: Resolved regulation profile, or None if unknown
        reference_day: Day to evaluate (defaults to :func:`default_reference_day`)
        grid: Check-point grid spacing and margin
        config: Sampling and worker settings
        site_boundary: Boundary the bands are measured from (defaults to the
                       building outline)
        check_points: Explicit check points; replaces the generated grid
        cancel_token: Cooperative cancellation, polled between time steps
        progress_callback: Optional callback for progress updates (message, percent)

    Returns:
        Immutable ComplianceReport

    Raises:
        InvalidWindow: If the profile's window or the sampling interval cannot
                       be integrated
        InvalidBoundary: If ``site_boundary`` is invalid or encloses no area
    """
    if site_boundary is not None and (not site_boundary.is_valid or site_boundary.area <= 0):
        raise InvalidBoundary("Site boundary must be a valid polygon with positive area")

    config = config or EvaluationConfig()
    reference_day = reference_day or default_reference_day()
    boundary = site_boundary if site_boundary is not None else massing.outline
    start_time = _time.time()

    def report_progress(message: str, percent: float):
        if progress_callback:
            progress_callback(message, percent)
        logger.info(f"{message} ({percent:.0f}%)")

    # PHASE 1: Validate window and sampling
    report_progress("Validating inputs...", 5)

    advisories: list[Advisory] = []
    samples = []
    if profile is not None:
        samples = build_time_samples(
            reference_day,
            profile.window_start,
            profile.window_end,
            config.time_step,
            config.integration_rule,
        )
        window = window_seconds(profile.window_start, profile.window_end)
        step_seconds = config.time_step.total_seconds()
        if step_seconds > config.coarse_sampling_fraction * window:
            message = (
                f"Sampling interval of {config.time_step_minutes:g} min exceeds "
                f"{config.coarse_sampling_fraction:.3g} of the {window / 3600:g} h window"
            )
            logger.warning(message)
            advisories.append(Advisory(kind="SamplingTooCoarse", message=message))
    else:
        message = "No regulation profile resolved for this site; compliance was not evaluated"
        logger.warning(message)
        advisories.append(Advisory(kind="MissingRegulationProfile", message=message))

    subject = is_subject_to_regulation(massing, profile)
    if subject is False:
        message = (
            f"Building ({massing.max_height:.1f} m) is below the '{profile.zone}' "
            f"applicability thresholds"
        )
        logger.info(message)
        advisories.append(Advisory(kind="NotSubjectToRegulation", message=message))

    # PHASE 2: Check points
    report_progress("Generating check points...", 10)

    if check_points is not None:
        point_grid = CheckPointGrid.from_points(check_points)
    else:
        point_grid = generate_check_points(boundary, grid)

    # PHASE 3: Sun positions (shared by every point)
    report_progress(f"Computing sun positions for {len(samples)} samples...", _SAMPLING_START_PCT)

    suns = [
        solar_position(location, s.when, config.time_basis, config.utc_offset_hours)
        for s in samples
    ]

    # PHASE 4: Time integration
    def on_step(fraction: float):
        percent = _SAMPLING_START_PCT + fraction * (_SAMPLING_END_PCT - _SAMPLING_START_PCT)
        if progress_callback:
            progress_callback("Sampling shadows...", percent)
        logger.debug(f"Sampling shadows ({percent:.1f}%)")

    if samples:
        integration = integrate_shadow(
            point_grid.xs,
            point_grid.ys,
            samples,
            suns,
            massing,
            profile.measurement_height,
            num_workers=config.num_workers,
            cancel_token=cancel_token,
            step_callback=on_step,
        )
        shadow_hours = integration.shadow_hours
        step_masks = integration.step_masks
        steps_completed = integration.steps_completed
        aborted = integration.aborted
    else:
        shadow_hours = np.zeros(point_grid.num_points, dtype=np.float64)
        step_masks = np.zeros((0, point_grid.num_points), dtype=bool)
        steps_completed = 0
        aborted = False

    if aborted:
        message = (
            f"Evaluation cancelled after {steps_completed} of {len(samples)} time steps"
        )
        advisories.append(Advisory(kind="EvaluationAborted", message=message))

    # PHASE 5: Aggregate
    report_progress("Aggregating results...", 95)

    results = build_point_results(point_grid.points, boundary, shadow_hours, profile)
    summary = summarize(results, profile, cell_area=point_grid.cell_area, aborted=aborted)

    time_series = []
    if config.keep_time_series and steps_completed:
        time_series = build_time_series(samples, suns, step_masks, summary.regulated_mask)

    recommendations = [] if aborted else generate_recommendations(results, massing, profile)

    elapsed = _time.time() - start_time
    logger.info(
        f"Evaluation {summary.status.value}: {summary.compliant_count}/{summary.regulated_count} "
        f"regulated points compliant, bands {band_counts(results)}, "
        f"{steps_completed}/{len(samples)} steps in {elapsed:.2f}s"
    )
    report_progress("Evaluation complete", 100)

    return ComplianceReport(
        overall_status=summary.status,
        points=tuple(results),
        compliance_rate=summary.compliance_rate,
        regulated_count=summary.regulated_count,
        compliant_count=summary.compliant_count,
        max_violation_hours=summary.max_violation_hours,
        violation_area_m2=summary.violation_area_m2,
        subject_to_regulation=subject,
        aborted=aborted,
        steps_completed=steps_completed,
        steps_total=len(samples),
        reference_day=reference_day,
        time_step_minutes=config.time_step_minutes,
        profile_zone=profile.zone if profile is not None else None,
        advisories=tuple(advisories),
        time_series=tuple(time_series),
        peak_shadow_time=peak_shadow_time(time_series),
        recommendations=tuple(recommendations),
    )


def sample_instants(
    reference_day: date,
    profile: RegulationProfile,
    config: Optional[EvaluationConfig] = None,
) -> list[datetime]:
    """Timestamps the evaluator would sample for this profile and config."""
    config = config or EvaluationConfig()
    samples = build_time_samples(
        reference_day,
        profile.window_start,
        profile.window_end,
        config.time_step,
        config.integration_rule,
    )
    return [s.when for s in samples]
