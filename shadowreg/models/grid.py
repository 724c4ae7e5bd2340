"""Check-point grid definition."""

from pydantic import BaseModel, ConfigDict, Field


class GridSpec(BaseModel):
    """Regular grid of check points around the regulated boundary."""

    model_config = ConfigDict(frozen=True)

    spacing: float = Field(default=2.0, gt=0.0, le=50.0, description="Grid spacing in meters")
    margin: float = Field(
        default=100.0, gt=0.0, le=500.0,
        description="Maximum distance of a check point from the boundary in meters",
    )
