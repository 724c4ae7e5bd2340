"""Whether a building falls under a district's shadow regulation."""

import logging

from ..geometry.massing import Massing
from ..models.regulation import RegulationProfile

logger = logging.getLogger(__name__)


def is_subject_to_regulation(
    massing: Massing,
    profile: RegulationProfile | None,
    floors: int | None = None,
) -> bool | None:
    """Check the district's applicability thresholds against the massing.

    Low-rise residential districts regulate buildings that are either taller
    than the target height or have at least the target floor count; other
    districts look at height only.

    Args:
        massing: Building massing
        profile: Regulation profile (None = unknown)
        floors: Floor count, defaults to the one recorded on the massing

    Returns:
        True/False, or None when the profile is absent, has no thresholds, or
        needs a floor count that is not known
    """
    if profile is None or profile.target_height is None:
        return None

    height = massing.max_height
    floors = floors if floors is not None else massing.floors

    if height > profile.target_height:
        return True
    if profile.low_rise and profile.target_floors:
        if floors is None:
            logger.debug(
                f"Floor count unknown; cannot decide the '{profile.zone}' floor threshold"
            )
            return None
        return floors >= profile.target_floors

    logger.debug(
        f"Building ({height:.1f}m, {floors} floors) below '{profile.zone}' thresholds"
    )
    return False
