"""Solar position from date, time and site location.

Uses the standard seasonal approximations (Cooper declination, Spencer
equation of time) rather than an ephemeris: shadow regulations are written
against true solar time on a fixed reference day, where these are the
customary formulas and their determinism matters more than arc-second
accuracy.

Timestamps are interpreted as local *solar* time unless ``time_basis="clock"``
is requested, in which case standard-meridian clock time is converted with
the longitude correction and the equation of time.
"""

import logging
import math
from datetime import date, datetime, time, timedelta
from typing import Literal

from ..models.location import GeoCoordinate, SunPosition

logger = logging.getLogger(__name__)

TimeBasis = Literal["solar", "clock"]

# Axial tilt used by the declination approximation (degrees)
OBLIQUITY_DEG = 23.45

DEGREES_PER_HOUR = 15.0


def day_of_year(day: date) -> int:
    """Ordinal day within the year (1 = January 1st)."""
    return day.timetuple().tm_yday


def solar_declination(doy: int) -> float:
    """Solar declination in degrees for a day of the year."""
    return OBLIQUITY_DEG * math.sin(math.radians(360.0 * (284 + doy) / 365.0))


def equation_of_time(doy: int) -> float:
    """Equation of time in minutes (apparent minus mean solar time)."""
    b = 2.0 * math.pi * (doy - 1) / 365.0
    return 229.18 * (
        0.000075
        + 0.001868 * math.cos(b)
        - 0.032077 * math.sin(b)
        - 0.014615 * math.cos(2.0 * b)
        - 0.040849 * math.sin(2.0 * b)
    )


def hour_angle(solar_hours: float) -> float:
    """Hour angle in degrees (negative before solar noon)."""
    return DEGREES_PER_HOUR * (solar_hours - 12.0)


def _clock_hours(when: datetime) -> float:
    return (
        when.hour
        + when.minute / 60.0
        + when.second / 3600.0
        + when.microsecond / 3_600_000_000.0
    )


def solar_hours(
    when: datetime,
    longitude: float,
    time_basis: TimeBasis = "solar",
    utc_offset_hours: float | None = None,
) -> float:
    """Local solar time of ``when`` in fractional hours.

    Args:
        when: Timestamp on the reference day
        longitude: Site longitude in decimal degrees (east positive)
        time_basis: "solar" if ``when`` already is solar time, "clock" for
                    standard time of the zone given by ``utc_offset_hours``
        utc_offset_hours: Zone offset for clock time; taken from ``when``'s
                          tzinfo if aware, else from the nearest 15° meridian

    Returns:
        Solar time in hours (may fall outside [0, 24) near the date line)
    """
    clock = _clock_hours(when)
    if time_basis == "solar":
        return clock
    if time_basis != "clock":
        raise ValueError(f"Unknown time basis: {time_basis}")

    if utc_offset_hours is None:
        offset = when.utcoffset()
        if offset is not None:
            utc_offset_hours = offset.total_seconds() / 3600.0
        else:
            utc_offset_hours = round(longitude / DEGREES_PER_HOUR)
    meridian = DEGREES_PER_HOUR * utc_offset_hours
    correction_minutes = 4.0 * (longitude - meridian) + equation_of_time(day_of_year(when.date()))
    return clock + correction_minutes / 60.0


def solar_position(
    location: GeoCoordinate,
    when: datetime,
    time_basis: TimeBasis = "solar",
    utc_offset_hours: float | None = None,
) -> SunPosition:
    """Compute solar altitude and azimuth.

    Args:
        location: Validated site location
        when: Timestamp on the reference day
        time_basis: How to interpret ``when`` (see :func:`solar_hours`)
        utc_offset_hours: Zone offset for clock time

    Returns:
        SunPosition with altitude (deg) and azimuth (deg from north, clockwise)
    """
    lat = math.radians(location.latitude)
    dec = math.radians(solar_declination(day_of_year(when.date())))
    h = math.radians(hour_angle(solar_hours(when, location.longitude, time_basis, utc_offset_hours)))

    sin_alt = math.sin(lat) * math.sin(dec) + math.cos(lat) * math.cos(dec) * math.cos(h)
    altitude = math.degrees(math.asin(max(-1.0, min(1.0, sin_alt))))

    # Measured from south, positive towards west; shifted to north = 0
    azimuth = math.degrees(math.atan2(
        math.sin(h),
        math.cos(h) * math.sin(lat) - math.tan(dec) * math.cos(lat),
    )) + 180.0
    azimuth = azimuth % 360.0
    if azimuth >= 360.0:
        azimuth = 0.0

    return SunPosition(altitude=altitude, azimuth=azimuth)


def sun_path(
    location: GeoCoordinate,
    day: date,
    start: time = time(0, 0),
    end: time = time(23, 59),
    step: timedelta = timedelta(minutes=30),
    time_basis: TimeBasis = "solar",
) -> list[tuple[datetime, SunPosition]]:
    """Sun positions sampled over part of a day.

    Args:
        location: Validated site location
        day: Reference day
        start: First sample (inclusive)
        end: Last sample bound (inclusive)
        step: Sampling interval

    Returns:
        List of (timestamp, SunPosition) tuples in time order
    """
    if step.total_seconds() <= 0:
        raise ValueError(f"Sun path step must be positive, got {step}")

    first = datetime.combine(day, start)
    last = datetime.combine(day, end)
    path = []
    k = 0
    while True:
        when = first + k * step
        if when > last:
            break
        path.append((when, solar_position(location, when, time_basis=time_basis)))
        k += 1

    logger.debug(f"Sun path for {day}: {len(path)} samples")
    return path


def solar_noon_altitude(location: GeoCoordinate, day: date) -> float:
    """Maximum solar altitude on ``day`` (at local solar noon)."""
    return solar_position(location, datetime.combine(day, time(12, 0))).altitude
