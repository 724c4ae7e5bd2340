"""shadowreg - Shadow regulation compliance checks for proposed buildings.

This package provides:
- Solar position on the statutory reference day
- Extruded building massing and shadow casting with Shapely
- Distance-banded shadow-time limits for use districts (YAML presets)
- Time integration over a check-point grid and an immutable compliance report
- GeoJSON overlays and content-addressed report caching

Core entry points:
    from shadowreg.engine import evaluate_compliance
    from shadowreg.pipeline import evaluate_request
"""

__version__ = "0.1.0"


def get_pipeline():
    """Get the pipeline module for direct use."""
    from . import pipeline
    return pipeline


def get_engine():
    """Get the engine module for direct use."""
    from . import engine
    return engine


__all__ = ["get_pipeline", "get_engine", "__version__"]
