"""Solar position solver."""

from .position import (
    day_of_year,
    equation_of_time,
    hour_angle,
    solar_declination,
    solar_noon_altitude,
    solar_position,
    sun_path,
)

__all__ = [
    "solar_position",
    "sun_path",
    "solar_declination",
    "equation_of_time",
    "hour_angle",
    "day_of_year",
    "solar_noon_altitude",
]
