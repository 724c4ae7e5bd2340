"""Tests for time sampling and the integrator."""

from datetime import date, time, timedelta

import numpy as np
import pytest

from shadowreg.engine.cancellation import CancellationToken
from shadowreg.engine.integrator import integrate_shadow, resolve_num_workers
from shadowreg.engine.sampling import (
    HALF_SECONDS_PER_HOUR,
    IntegrationRule,
    build_time_samples,
)
from shadowreg.errors import InvalidWindow
from shadowreg.models.location import SunPosition

DAY = date(2024, 12, 21)
WINDOW_HALF_SECONDS = 8 * HALF_SECONDS_PER_HOUR


class TestBuildTimeSamples:
    """Test sample placement and weights."""

    def test_ten_minute_trapezoid(self):
        """Ten-minute steps over 8 h give 49 samples with inclusive bounds."""
        samples = build_time_samples(DAY, time(8), time(16), timedelta(minutes=10))
        assert len(samples) == 49
        assert samples[0].when.time() == time(8, 0)
        assert samples[-1].when.time() == time(16, 0)
        assert samples[0].weight_hours == pytest.approx(5 / 60)
        assert samples[1].weight_hours == pytest.approx(10 / 60)
        assert sum(s.weight for s in samples) == WINDOW_HALF_SECONDS

    def test_left_rule(self):
        """Left rule drops the end sample and weights whole intervals."""
        samples = build_time_samples(DAY, time(8), time(16), timedelta(minutes=10), IntegrationRule.LEFT)
        assert len(samples) == 48
        assert samples[-1].when.time() == time(15, 50)
        assert sum(s.weight for s in samples) == WINDOW_HALF_SECONDS

    def test_partial_final_step_truncated(self):
        """A step that does not divide the window is cut at the window end."""
        samples = build_time_samples(DAY, time(8), time(16), timedelta(minutes=7))
        assert samples[-1].when.time() == time(16, 0)
        assert samples[-2].when.time() == time(15, 56)
        assert len(samples) == 70
        assert sum(s.weight for s in samples) == WINDOW_HALF_SECONDS

    @pytest.mark.parametrize("start,end", [(time(16), time(8)), (time(8), time(8))])
    def test_empty_window_rejected(self, start, end):
        """Window end not after start raises InvalidWindow."""
        with pytest.raises(InvalidWindow):
            build_time_samples(DAY, start, end, timedelta(minutes=10))

    @pytest.mark.parametrize("step", [timedelta(0), timedelta(minutes=-5), timedelta(milliseconds=1500)])
    def test_bad_step_rejected(self, step):
        """Non-positive or fractional-second steps raise InvalidWindow."""
        with pytest.raises(InvalidWindow):
            build_time_samples(DAY, time(8), time(16), step)


class TestIntegrateShadow:
    """Test accumulation and cancellation."""

    def _inputs(self, n_steps=5):
        samples = build_time_samples(DAY, time(8), time(8, 10 * (n_steps - 1)), timedelta(minutes=10))
        suns = [SunPosition(altitude=10.0, azimuth=180.0) for _ in samples]
        xs = np.array([0.0, 0.0, 50.0])
        ys = np.array([20.0, -20.0, 0.0])
        return xs, ys, samples, suns

    def test_accumulates_window(self, cube_massing):
        """A point shadowed at every sample accumulates the whole window."""
        xs, ys, samples, suns = self._inputs()
        result = integrate_shadow(xs, ys, samples, suns, cube_massing, 0.0)
        assert result.shadow_hours.tolist() == [40 / 60, 0.0, 0.0]
        assert result.steps_completed == 5
        assert not result.aborted

    def test_worker_count_does_not_change_result(self, cube_massing):
        """Results are identical for any worker count."""
        xs, ys, samples, suns = self._inputs()
        one = integrate_shadow(xs, ys, samples, suns, cube_massing, 0.0, num_workers=1)
        three = integrate_shadow(xs, ys, samples, suns, cube_massing, 0.0, num_workers=3)
        assert np.array_equal(one.half_seconds, three.half_seconds)
        assert np.array_equal(one.step_masks, three.step_masks)
        assert three.num_partitions == 3

    def test_cancel_before_start(self, cube_massing):
        """A cancelled token stops before the first step."""
        xs, ys, samples, suns = self._inputs()
        token = CancellationToken()
        token.cancel()
        result = integrate_shadow(xs, ys, samples, suns, cube_massing, 0.0, cancel_token=token)
        assert result.aborted
        assert result.steps_completed == 0
        assert not result.half_seconds.any()

    def test_cancel_between_steps(self, cube_massing):
        """Cancelling during a step lets that step finish and stops after it."""
        xs, ys, samples, suns = self._inputs()
        token = CancellationToken()
        calls = []

        def on_step(fraction):
            calls.append(fraction)
            if len(calls) == 2:
                token.cancel()

        result = integrate_shadow(
            xs, ys, samples, suns, cube_massing, 0.0,
            cancel_token=token, step_callback=on_step,
        )
        assert result.steps_completed == 2
        assert result.aborted
        assert result.shadow_hours[0] == pytest.approx((5 + 10) / 60)

    def test_mismatched_suns_rejected(self, cube_massing):
        """Sun positions must match the samples."""
        xs, ys, samples, suns = self._inputs()
        with pytest.raises(ValueError):
            integrate_shadow(xs, ys, samples, suns[:-1], cube_massing, 0.0)

    def test_resolve_num_workers(self):
        """Zero means one worker per CPU; negatives are rejected."""
        assert resolve_num_workers(0) >= 1
        assert resolve_num_workers(4) == 4
        with pytest.raises(ValueError):
            resolve_num_workers(-1)
