"""Regulation presets, band resolution and applicability."""

from .applicability import is_subject_to_regulation
from .bands import (
    BAND_A_MIN_DISTANCE_M,
    BAND_B_MIN_DISTANCE_M,
    classify_band,
    distance_to_boundary,
    limit_for_band,
    resolve_limit,
)
from .loader import get_profile_path, list_profiles, load_profile, validate_profile_yaml

__all__ = [
    "BAND_A_MIN_DISTANCE_M",
    "BAND_B_MIN_DISTANCE_M",
    "classify_band",
    "distance_to_boundary",
    "limit_for_band",
    "resolve_limit",
    "is_subject_to_regulation",
    "load_profile",
    "list_profiles",
    "get_profile_path",
    "validate_profile_yaml",
]
