"""Compliance report models produced by the engine."""

from datetime import date, time
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field


class OverallStatus(str, Enum):
    """Aggregate verdict for one evaluation."""
    COMPLIANT = "COMPLIANT"
    NON_COMPLIANT = "NON_COMPLIANT"
    NOT_EVALUATED = "NOT_EVALUATED"


class Band(str, Enum):
    """Distance band a check point falls into."""
    UNREGULATED = "unregulated"
    A = "band_a"
    B = "band_b"


AdvisoryKind = Literal[
    "MissingRegulationProfile",
    "SamplingTooCoarse",
    "NotSubjectToRegulation",
    "EvaluationAborted",
]


class Advisory(BaseModel):
    """Non-fatal condition reported alongside a normal report."""

    model_config = ConfigDict(frozen=True)

    kind: AdvisoryKind
    message: str


class CheckPointResult(BaseModel):
    """Evaluated check point."""

    model_config = ConfigDict(frozen=True)

    x: float = Field(..., description="Site-local x (east) in meters")
    y: float = Field(..., description="Site-local y (north) in meters")
    distance_to_boundary: float = Field(..., ge=0.0, description="Shortest distance to boundary (m)")
    band: Band = Field(..., description="Distance band")
    limit_hours: Optional[float] = Field(
        default=None, description="Allowed shadow hours, None when the point is not regulated"
    )
    shadow_hours: float = Field(..., ge=0.0, description="Accumulated shadow duration (h)")
    shadow_measured: bool = Field(
        default=True,
        description="False when no profile was resolved and shadow_hours was not computed",
    )
    compliant: Optional[bool] = Field(
        default=None, description="None when the point takes no part in the decision"
    )

    @computed_field
    @property
    def violation_hours(self) -> float:
        """Hours over the limit (0 when compliant or unregulated)."""
        if self.limit_hours is None:
            return 0.0
        return max(0.0, self.shadow_hours - self.limit_hours)

    @property
    def is_regulated(self) -> bool:
        return self.limit_hours is not None


class TimeSeriesEntry(BaseModel):
    """Shadow coverage at one time sample."""

    model_config = ConfigDict(frozen=True)

    sample_time: time
    altitude: float
    azimuth: float
    weight_hours: float
    shadowed_points: int = Field(..., ge=0, description="Regulated points in shadow")


class Recommendation(BaseModel):
    """Remediation hint for a non-compliant massing."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["height_reduction", "setback", "floor_reduction", "shape_modification"]
    priority: Literal["critical", "high", "medium", "low"]
    description: str


class ComplianceReport(BaseModel):
    """Immutable result of one compliance evaluation."""

    model_config = ConfigDict(frozen=True)

    overall_status: OverallStatus
    points: tuple[CheckPointResult, ...] = Field(default_factory=tuple)
    compliance_rate: float = Field(..., ge=0.0, le=1.0)

    regulated_count: int = Field(default=0, ge=0)
    compliant_count: int = Field(default=0, ge=0)
    max_violation_hours: float = Field(default=0.0, ge=0.0)
    violation_area_m2: float = Field(default=0.0, ge=0.0)

    subject_to_regulation: Optional[bool] = Field(
        default=None, description="None when the profile carries no applicability thresholds"
    )
    aborted: bool = Field(default=False, description="Evaluation cancelled between time steps")
    steps_completed: int = Field(default=0, ge=0)
    steps_total: int = Field(default=0, ge=0)

    reference_day: date
    time_step_minutes: float
    profile_zone: Optional[str] = None

    advisories: tuple[Advisory, ...] = Field(default_factory=tuple)
    time_series: tuple[TimeSeriesEntry, ...] = Field(default_factory=tuple)
    peak_shadow_time: Optional[time] = None
    recommendations: tuple[Recommendation, ...] = Field(default_factory=tuple)

    @property
    def is_compliant(self) -> bool:
        return self.overall_status == OverallStatus.COMPLIANT

    @property
    def violations(self) -> list[CheckPointResult]:
        return [p for p in self.points if p.compliant is False]

    def has_advisory(self, kind: str) -> bool:
        return any(a.kind == kind for a in self.advisories)
