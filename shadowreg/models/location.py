"""Geographic location and solar position value types."""

import math
from dataclasses import dataclass

from ..errors import InvalidLocation


@dataclass(frozen=True)
class GeoCoordinate:
    """Site location in decimal degrees (WGS84)."""

    latitude: float
    longitude: float

    def __post_init__(self):
        lat = float(self.latitude)
        lon = float(self.longitude)
        if not (math.isfinite(lat) and math.isfinite(lon)):
            raise InvalidLocation(lat, lon)
        if not (-90.0 <= lat <= 90.0) or not (-180.0 <= lon <= 180.0):
            raise InvalidLocation(lat, lon)
        object.__setattr__(self, "latitude", lat)
        object.__setattr__(self, "longitude", lon)

    def to_dict(self) -> dict[str, float]:
        return {"latitude": self.latitude, "longitude": self.longitude}


@dataclass(frozen=True)
class SunPosition:
    """Sun position seen from the site.

    altitude: degrees above the horizon (negative below it)
    azimuth: compass bearing in [0, 360), north = 0, clockwise
    """

    altitude: float
    azimuth: float

    @property
    def is_daylight(self) -> bool:
        return self.altitude > 0.0
