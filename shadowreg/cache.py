"""Content-addressed caching of compliance reports.

The engine holds no cache of its own. Callers that want reuse inject a
``ReportCache`` and go through :func:`evaluate_cached`; the key is a sha256
over the canonical JSON of every input that affects the report.

TTLs:
  - Compliance reports: 1 hour by default
"""

import hashlib
import json
import threading
import time
from datetime import date
from typing import Any, Callable, Optional, Protocol

import structlog

from .engine.evaluator import EvaluationConfig, evaluate_compliance
from .geometry.massing import Massing
from .models.grid import GridSpec
from .models.location import GeoCoordinate
from .models.regulation import RegulationProfile
from .models.report import ComplianceReport

logger = structlog.get_logger(__name__)

TTL_REPORT = 3600  # 1 hour

KEY_PREFIX = "shadowreg:report"


class ReportCache(Protocol):
    """Storage for serialized reports keyed by content hash."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str, ttl: float) -> None:
        ...


def content_hash(
    location: GeoCoordinate,
    massing: Massing,
    profile: Optional[RegulationProfile],
    grid: Optional[GridSpec],
    reference_day: date,
    config: Optional[EvaluationConfig] = None,
    check_points: Optional[list[tuple[float, float]]] = None,
) -> str:
    """sha256 of the canonical JSON of the evaluation inputs."""
    config = config or EvaluationConfig()
    payload: dict[str, Any] = {
        "location": location.to_dict(),
        "massing": massing.to_dict(),
        "profile": json.loads(profile.model_dump_json()) if profile is not None else None,
        "grid": (grid or GridSpec()).model_dump(),
        "reference_day": reference_day.isoformat(),
        "time_step_minutes": config.time_step_minutes,
        "integration_rule": config.integration_rule.value,
        "time_basis": config.time_basis,
        "utc_offset_hours": config.utc_offset_hours,
        "keep_time_series": config.keep_time_series,
        "coarse_sampling_fraction": config.coarse_sampling_fraction,
        "check_points": [list(p) for p in check_points] if check_points is not None else None,
    }
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def _make_key(digest: str) -> str:
    return f"{KEY_PREFIX}:{digest}"


class InMemoryReportCache:
    """Thread-safe in-process cache with per-entry expiry."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[str, tuple[float, str]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: str, ttl: float) -> None:
        with self._lock:
            now = self._clock()
            self._purge_expired(now)
            self._entries[key] = (now + ttl, value)

    def _purge_expired(self, now: float) -> None:
        expired = [k for k, (expires_at, _) in self._entries.items() if now >= expires_at]
        for k in expired:
            del self._entries[k]
        if expired:
            logger.debug("report_cache_purged", count=len(expired))

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def evaluate_cached(
    cache: ReportCache,
    location: GeoCoordinate,
    massing: Massing,
    profile: Optional[RegulationProfile],
    reference_day: date,
    grid: Optional[GridSpec] = None,
    config: Optional[EvaluationConfig] = None,
    ttl: float = TTL_REPORT,
    **kwargs,
) -> ComplianceReport:
    """Evaluate through the injected cache.

    Aborted evaluations are never stored. Extra keyword arguments are passed
    to :func:`evaluate_compliance`; ``check_points`` takes part in the key,
    ``site_boundary`` must not be combined with caching.
    """
    if kwargs.get("site_boundary") is not None:
        raise ValueError("evaluate_cached does not support a custom site_boundary")

    digest = content_hash(
        location, massing, profile, grid, reference_day, config, kwargs.get("check_points")
    )
    key = _make_key(digest)

    cached = cache.get(key)
    if cached is not None:
        logger.info("report_cache_hit", key=digest[:12])
        return ComplianceReport.model_validate_json(cached)

    logger.info("report_cache_miss", key=digest[:12])
    report = evaluate_compliance(
        location, massing, profile,
        reference_day=reference_day, grid=grid, config=config, **kwargs,
    )

    if report.aborted:
        logger.warning("report_not_cached", key=digest[:12], reason="aborted")
        return report

    cache.set(key, report.model_dump_json(), ttl)
    logger.info("report_cached", key=digest[:12], ttl=ttl)
    return report
