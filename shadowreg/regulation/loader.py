"""YAML regulation preset loading.

Provides functions to:
- List the district presets shipped with the package
- Load a preset into a RegulationProfile
- Merge overrides into a preset

Presets are a convenience for callers that know the use district; the
engine itself only ever receives an already-resolved profile.
"""

import logging
from pathlib import Path

import yaml

from ..errors import ProfileNotFound
from ..models.regulation import RegulationProfile

logger = logging.getLogger(__name__)

# Presets directory (inside the package for proper wheel packaging)
PROFILES_DIR = Path(__file__).parent.parent / "profiles"


def get_profile_path(name: str) -> Path:
    """Get the path to a preset file.

    Args:
        name: Preset name (without .yaml extension)

    Returns:
        Path to the preset YAML file

    Raises:
        ProfileNotFound: If preset doesn't exist
    """
    path = PROFILES_DIR / f"{name}.yaml"
    if not path.exists():
        raise ProfileNotFound(f"Regulation profile '{name}' not found at {path}")
    return path


def list_profiles() -> list[dict[str, str]]:
    """List all available presets.

    Returns:
        List of dicts with 'name' and 'description' keys
    """
    profiles = []

    if not PROFILES_DIR.exists():
        logger.warning(f"Profiles directory not found: {PROFILES_DIR}")
        return profiles

    for yaml_file in PROFILES_DIR.glob("*.yaml"):
        profiles.append({
            "name": yaml_file.stem,
            "description": _extract_description(yaml_file),
        })

    return sorted(profiles, key=lambda p: p["name"])


def _extract_description(yaml_path: Path) -> str:
    """Extract description from first comment line of YAML file."""
    with open(yaml_path, encoding="utf-8") as f:
        first_line = f.readline().strip()
    if first_line.startswith("#"):
        return first_line.lstrip("#").strip()
    return f"Profile from {yaml_path.name}"


def load_profile(
    name: str,
    override: dict | None = None,
) -> RegulationProfile:
    """Load a preset from YAML file with optional overrides.

    Args:
        name: Preset name (without .yaml extension)
        override: Optional dict of values to override

    Returns:
        RegulationProfile instance with merged overrides
    """
    path = get_profile_path(name)

    with open(path, encoding="utf-8") as f:
        yaml_content = f.read()

    profile = RegulationProfile.from_yaml(yaml_content)

    if override:
        profile = profile.merge_override(override)
        logger.debug(f"Applied overrides to profile '{name}'")

    return profile


def validate_profile_yaml(yaml_content: str) -> tuple[bool, str | None]:
    """Validate YAML content as a regulation profile.

    Args:
        yaml_content: YAML string to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    try:
        RegulationProfile.from_yaml(yaml_content)
        return True, None
    except (ValueError, TypeError, yaml.YAMLError) as e:
        return False, str(e)
