"""Shadow regulation profile for a use district."""

from datetime import time
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class RegulationProfile(BaseModel):
    """Distance-banded shadow-time limits for one use district.

    Profiles are resolved by the caller (preset loader, regulation lookup
    service, manual entry) and handed to the engine as-is. An absent profile
    is represented by ``None``, never by a profile with default numbers.
    """

    model_config = ConfigDict(frozen=True)

    zone: str = Field(default="unspecified", description="Use district identifier")
    description: Optional[str] = Field(default=None, description="Human readable district name")

    measurement_height: float = Field(
        ..., ge=0.0, le=20.0, description="Height of the measurement plane above ground in meters"
    )
    window_start: time = Field(
        default=time(8, 0), description="Start of the statutory window (local solar time)"
    )
    window_end: time = Field(
        default=time(16, 0), description="End of the statutory window (local solar time)"
    )
    band_a_hours: float = Field(
        ..., ge=0.0, le=24.0, description="Allowed shadow hours 5-10 m from the boundary"
    )
    band_b_hours: float = Field(
        ..., ge=0.0, le=24.0, description="Allowed shadow hours beyond 10 m from the boundary"
    )

    # Applicability (which buildings the district regulates)
    target_height: Optional[float] = Field(
        default=None, ge=0.0, description="Buildings taller than this are regulated (meters)"
    )
    target_floors: Optional[int] = Field(
        default=None, ge=0, description="Buildings with at least this many floors are regulated"
    )
    low_rise: bool = Field(
        default=False, description="Low-rise residential district (floor count also triggers regulation)"
    )

    @model_validator(mode="after")
    def validate_window(self) -> "RegulationProfile":
        """Window must be a non-empty interval on the reference day."""
        if self.window_end <= self.window_start:
            raise ValueError(
                f"window_end ({self.window_end}) must be after window_start ({self.window_start})"
            )
        return self

    @property
    def window_hours(self) -> float:
        start = self.window_start.hour * 3600 + self.window_start.minute * 60 + self.window_start.second
        end = self.window_end.hour * 3600 + self.window_end.minute * 60 + self.window_end.second
        return (end - start) / 3600.0

    @classmethod
    def from_yaml(cls, yaml_content: str) -> "RegulationProfile":
        """Load profile from YAML string."""
        import yaml
        data = yaml.safe_load(yaml_content)
        return cls(**data)

    def merge_override(self, override: Dict) -> "RegulationProfile":
        """Merge override dict into this profile (JSON merge patch semantics)."""
        import json
        base = json.loads(self.model_dump_json())
        _deep_merge(base, override)
        return RegulationProfile(**base)


def _deep_merge(base: Dict, override: Dict) -> None:
    """Deep merge override into base dict (modifies base in place)."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
