"""Time samples over the statutory window.

Samples run from ``window_start`` to ``window_end`` inclusive in steps of
Δt; when Δt does not divide the window, the last interval is truncated at
``window_end``. Each sample carries the duration it stands for, kept as an
integer number of half-seconds so that accumulated shadow time is exact and
independent of summation order.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum

from ..errors import InvalidWindow

logger = logging.getLogger(__name__)

HALF_SECONDS_PER_HOUR = 7200


class IntegrationRule(str, Enum):
    """How sample indicators are weighted into durations."""
    TRAPEZOID = "trapezoid"  # every sample, half of each adjacent interval
    LEFT = "left"            # each interval takes the value at its start


@dataclass(frozen=True)
class TimeSample:
    """One sampling instant and the duration it represents."""

    when: datetime
    weight: int  # half-seconds

    @property
    def weight_hours(self) -> float:
        return self.weight / HALF_SECONDS_PER_HOUR


def _seconds_of_day(t: time) -> int:
    return t.hour * 3600 + t.minute * 60 + t.second


def build_time_samples(
    day: date,
    window_start: time,
    window_end: time,
    step: timedelta,
    rule: IntegrationRule = IntegrationRule.TRAPEZOID,
) -> list[TimeSample]:
    """Build weighted samples for the window.

    Args:
        day: Reference day
        window_start: Window start (inclusive)
        window_end: Window end (inclusive)
        step: Sampling interval Δt, a whole number of seconds
        rule: Weighting rule

    Returns:
        Samples in time order; their weights sum to the window length

    Raises:
        InvalidWindow: If the window is empty or the step is not a positive
                       whole number of seconds
    """
    start = _seconds_of_day(window_start)
    end = _seconds_of_day(window_end)
    if end <= start:
        raise InvalidWindow(f"Window end {window_end} must be after start {window_start}")

    step_seconds = step.total_seconds()
    if step_seconds <= 0 or step_seconds != int(step_seconds):
        raise InvalidWindow(f"Sampling interval must be a positive whole number of seconds, got {step}")
    step_seconds = int(step_seconds)

    offsets = list(range(start, end, step_seconds)) + [end]
    intervals = [b - a for a, b in zip(offsets[:-1], offsets[1:])]

    if rule == IntegrationRule.TRAPEZOID:
        # half-seconds: interval/2 from each side, doubled
        weights = [
            (intervals[k - 1] if k > 0 else 0) + (intervals[k] if k < len(intervals) else 0)
            for k in range(len(offsets))
        ]
    elif rule == IntegrationRule.LEFT:
        offsets = offsets[:-1]
        weights = [2 * d for d in intervals]
    else:
        raise ValueError(f"Unknown integration rule: {rule}")

    base = datetime.combine(day, time(0, 0))
    samples = [
        TimeSample(when=base + timedelta(seconds=offset), weight=weight)
        for offset, weight in zip(offsets, weights)
    ]

    if intervals[-1] != step_seconds:
        logger.debug(
            f"Final interval truncated to {intervals[-1]}s (step {step_seconds}s) at {window_end}"
        )

    return samples


def window_seconds(window_start: time, window_end: time) -> int:
    """Window length in seconds."""
    return _seconds_of_day(window_end) - _seconds_of_day(window_start)
