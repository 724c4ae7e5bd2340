"""Exception types raised by the compliance engine.

Geometric input errors are raised synchronously before any sampling starts.
A missing regulation profile and coarse sampling are *not* exceptions: they
travel with the report as advisories (see ``shadowreg.models.report``).
"""


class ShadowRegError(ValueError):
    """Base class for all input errors raised by shadowreg."""


class InvalidLocation(ShadowRegError):
    """Latitude or longitude outside the valid range."""

    def __init__(self, latitude: float, longitude: float):
        self.latitude = latitude
        self.longitude = longitude
        super().__init__(
            f"Invalid location ({latitude}, {longitude}): latitude must be in "
            f"[-90, 90] and longitude in [-180, 180]"
        )


class DegenerateMassing(ShadowRegError):
    """Building massing with non-positive height or an invalid footprint."""


class InvalidWindow(ShadowRegError):
    """Measurement window or sampling interval that cannot be integrated."""


class ProfileNotFound(FileNotFoundError):
    """Named regulation preset is not shipped with the package."""


class InvalidBoundary(ShadowRegError):
    """Site boundary ring that is self-intersecting, degenerate or too short."""
