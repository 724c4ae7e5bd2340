"""Request schemas for JSON-like compliance input."""

from datetime import date
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from .grid import GridSpec


class SiteInput(BaseModel):
    """Site location and optional boundary."""

    latitude: float = Field(..., description="Site latitude in decimal degrees")
    longitude: float = Field(..., description="Site longitude in decimal degrees")
    boundary: list[list[float]] | None = Field(
        default=None,
        description="Site boundary ring; bands are measured from the building outline when omitted",
    )
    coordinates: Literal["local", "lonlat"] = Field(
        default="local",
        description="'local' for [x, y] meters around the site, 'lonlat' for [lon, lat] degrees",
    )


class BuildingInput(BaseModel):
    """Raw building parameters."""

    footprint: list[list[float]] | None = Field(
        default=None,
        description="Footprint ring in the site's coordinate convention",
    )
    building_area: float | None = Field(
        default=None,
        gt=0.0,
        description="Building area (m²); a square footprint is used when no ring is given",
    )
    floors: int | None = Field(default=None, ge=1, description="Floors above ground")
    floor_height: float | None = Field(default=None, gt=0.0, description="Floor-to-floor height")
    total_height: float | None = Field(default=None, gt=0.0, description="Total height")
    base_height: float = Field(default=0.0, ge=0.0, description="Underside height above ground")
    height_unit: Literal["m", "mm"] = Field(
        default="m",
        description="Unit of floor_height, total_height and base_height",
    )
    tiers: list[dict[str, Any]] | None = Field(
        default=None,
        description="Stepped massing tiers (footprint + height or floors/floor_height)",
    )

    @model_validator(mode="after")
    def validate_shape_source(self) -> "BuildingInput":
        """Exactly one of footprint, building_area or tiers describes the shape."""
        sources = [s for s in (self.footprint, self.building_area, self.tiers) if s is not None]
        if len(sources) != 1:
            raise ValueError("Provide exactly one of footprint, building_area or tiers")
        return self

    def to_meters(self, value: float | None) -> float | None:
        """Convert a height in ``height_unit`` to meters."""
        if value is None:
            return None
        return value / 1000.0 if self.height_unit == "mm" else float(value)


class RegulationInput(BaseModel):
    """Regulation profile source: a preset name, an explicit profile, or nothing."""

    zone: str | None = Field(
        default=None,
        description="Preset name under shadowreg/profiles (e.g. 'residential_1')",
    )
    profile: dict[str, Any] | None = Field(
        default=None,
        description="Explicit profile fields (measurement_height, band_a_hours, ...)",
    )
    override: dict[str, Any] | None = Field(
        default=None,
        description="Values merged into the preset",
    )

    @model_validator(mode="after")
    def validate_source(self) -> "RegulationInput":
        if self.zone is not None and self.profile is not None:
            raise ValueError("Provide either zone or profile, not both")
        return self


class EvaluationInput(BaseModel):
    """Sampling configuration."""

    reference_day: date | None = Field(
        default=None,
        description="Day to evaluate (defaults to the previous winter solstice)",
    )
    time_step_minutes: float = Field(default=10.0, gt=0.0, le=120.0)
    integration_rule: Literal["trapezoid", "left"] = Field(default="trapezoid")
    time_basis: Literal["solar", "clock"] = Field(default="solar")
    utc_offset_hours: float | None = Field(default=None, ge=-12.0, le=14.0)
    num_workers: int = Field(default=1, ge=0, le=64)
    keep_time_series: bool = Field(default=True)
    include_shadow_polygons: bool = Field(
        default=False,
        description="Add the shadow region of every sample to the GeoJSON overlay",
    )

    @field_validator("time_step_minutes")
    @classmethod
    def validate_whole_seconds(cls, v: float) -> float:
        if abs(v * 60.0 - round(v * 60.0)) > 1e-9:
            raise ValueError(f"time_step_minutes must be a whole number of seconds, got {v}")
        return v


class ComplianceRequest(BaseModel):
    """Complete request for a shadow regulation check."""

    site: SiteInput = Field(..., description="Site location and boundary")
    building: BuildingInput = Field(..., description="Proposed building")
    regulation: RegulationInput = Field(
        default_factory=RegulationInput,
        description="Regulation profile source",
    )
    grid: GridSpec = Field(default_factory=GridSpec, description="Check-point grid")
    evaluation: EvaluationInput = Field(
        default_factory=EvaluationInput,
        description="Sampling configuration",
    )
