"""Tests for point aggregation, time series and recommendations."""

from datetime import time

import pytest

from shadowreg.engine.aggregator import (
    generate_recommendations,
    peak_shadow_time,
    summarize,
)
from shadowreg.geometry.massing import build_massing, rectangle_footprint
from shadowreg.models.report import Band, CheckPointResult, OverallStatus, TimeSeriesEntry
from shadowreg.regulation.loader import load_profile


def point(distance, shadow, limit, band=Band.B):
    return CheckPointResult(
        x=0.0, y=distance, distance_to_boundary=distance, band=band,
        limit_hours=limit, shadow_hours=shadow,
        compliant=None if limit is None else shadow <= limit,
    )


def entry(t, count):
    return TimeSeriesEntry(sample_time=t, altitude=20.0, azimuth=180.0, weight_hours=1 / 6, shadowed_points=count)


class TestSummarize:
    """Test overall verdict and statistics."""

    def test_limit_inclusive(self, tokyo_profile):
        """Shadow exactly at the limit is compliant."""
        summary = summarize([point(20, 2.5, 2.5)], tokyo_profile)
        assert summary.status == OverallStatus.COMPLIANT
        assert summary.compliance_rate == 1.0

    def test_mixed(self, tokyo_profile):
        """Rate counts only regulated points."""
        results = [point(3, 7.0, None, Band.UNREGULATED), point(20, 1.0, 2.5), point(20, 3.5, 2.5)]
        summary = summarize(results, tokyo_profile, cell_area=4.0)
        assert summary.status == OverallStatus.NON_COMPLIANT
        assert summary.compliance_rate == 0.5
        assert summary.regulated_count == 2
        assert summary.max_violation_hours == pytest.approx(1.0)
        assert summary.violation_area_m2 == 4.0

    def test_no_regulated_points(self, tokyo_profile):
        """With nothing regulated the rate is 1."""
        summary = summarize([point(3, 7.0, None, Band.UNREGULATED)], tokyo_profile)
        assert summary.compliance_rate == 1.0
        assert summary.status == OverallStatus.COMPLIANT

    def test_aborted(self, tokyo_profile):
        """Aborted runs are never judged."""
        assert summarize([point(20, 0.0, 2.5)], tokyo_profile, aborted=True).status == OverallStatus.NOT_EVALUATED


class TestPeakShadowTime:
    """Test peak detection."""

    def test_earliest_maximum(self):
        """The earliest sample with the most shadowed points wins."""
        series = [entry(time(8), 1), entry(time(9), 4), entry(time(10), 4), entry(time(11), 2)]
        assert peak_shadow_time(series) == time(9)

    def test_no_shadow(self):
        """No shadowed points gives no peak."""
        assert peak_shadow_time([entry(time(8), 0)]) is None


class TestRecommendations:
    """Test remediation hints."""

    def test_low_rise_floor_reduction(self):
        """Low-rise districts suggest staying under the floor threshold."""
        profile = load_profile("residential_low_rise_1")
        massing = build_massing(rectangle_footprint(10, 10), floors=3, total_height=9.0)
        recs = generate_recommendations([point(30, 2.5, 2.0)], massing, profile)
        assert [r.kind for r in recs] == ["floor_reduction"]
        assert "3 floors" in recs[0].description

    def test_high_priority_height_reduction(self, tokyo_profile, cube_massing):
        """Average excess between 1 and 2 hours gives a high-priority height cut."""
        recs = generate_recommendations([point(30, 4.0, 2.5)], cube_massing, tokyo_profile)
        assert recs[0].kind == "height_reduction"
        assert recs[0].priority == "high"
        assert "3 m" in recs[0].description

    def test_none_when_compliant(self, tokyo_profile, cube_massing):
        """Compliant results need no recommendations."""
        assert generate_recommendations([point(30, 1.0, 2.5)], cube_massing, tokyo_profile) == []
