"""Time integration of shadow indicators over the check points.

Each worker owns a contiguous slice of the check points and runs the whole
time loop for it against the shared, read-only massing. Workers record one
boolean shadow mask per completed step; the masks are merged in point order
and reduced with integer half-second weights, so the totals do not depend on
the worker count or on the order in which partitions finish.
"""

import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Optional

import numpy as np

from ..geometry.massing import Massing
from ..models.location import SunPosition
from ..shadow.raycaster import shadow_mask
from .cancellation import CancellationToken
from .sampling import HALF_SECONDS_PER_HOUR, TimeSample

logger = logging.getLogger(__name__)

# Called with the fraction of (step x partition) units finished so far
StepCallback = Callable[[float], None]


@dataclass
class IntegrationResult:
    """Merged output of the time loop."""

    half_seconds: np.ndarray  # int64 per point
    step_masks: np.ndarray  # bool (steps_completed, num_points)
    steps_completed: int
    steps_total: int
    aborted: bool = False
    num_partitions: int = 1
    partition_steps: list[int] = field(default_factory=list)

    @property
    def shadow_hours(self) -> np.ndarray:
        return self.half_seconds / HALF_SECONDS_PER_HOUR


def resolve_num_workers(num_workers: int) -> int:
    """0 means one worker per CPU."""
    if num_workers < 0:
        raise ValueError(f"num_workers must be >= 0, got {num_workers}")
    if num_workers == 0:
        return os.cpu_count() or 1
    return num_workers


def _run_partition(
    xs: np.ndarray,
    ys: np.ndarray,
    suns: list[SunPosition],
    massing: Massing,
    measurement_height: float,
    cancel_token: Optional[CancellationToken],
    on_step: Callable[[], None],
) -> list[np.ndarray]:
    masks = []
    for sun in suns:
        if cancel_token is not None and cancel_token.is_cancelled():
            break
        masks.append(shadow_mask(xs, ys, sun, massing, measurement_height))
        on_step()
    return masks


def integrate_shadow(
    xs: np.ndarray,
    ys: np.ndarray,
    samples: list[TimeSample],
    suns: list[SunPosition],
    massing: Massing,
    measurement_height: float,
    num_workers: int = 1,
    cancel_token: Optional[CancellationToken] = None,
    step_callback: Optional[StepCallback] = None,
) -> IntegrationResult:
    """Accumulate shadow duration per point over all samples.

    Args:
        xs, ys: Check point coordinates
        samples: Weighted time samples
        suns: Sun position per sample (same length as samples)
        massing: Building massing
        measurement_height: Measurement plane height (m)
        num_workers: Thread count (0 = auto)
        cancel_token: Polled between time steps
        step_callback: Progress hook, called after every completed step

    Returns:
        IntegrationResult truncated to the steps every partition completed
    """
    if len(samples) != len(suns):
        raise ValueError(f"Got {len(samples)} samples but {len(suns)} sun positions")

    xs = np.asarray(xs, dtype=np.float64)
    ys = np.asarray(ys, dtype=np.float64)
    n_points = xs.shape[0]
    n_steps = len(samples)

    workers = min(resolve_num_workers(num_workers), max(n_points, 1))
    partitions = [p for p in np.array_split(np.arange(n_points), workers) if p.size > 0]
    if not partitions:
        partitions = [np.arange(0)]

    units_total = n_steps * len(partitions)
    units_done = 0
    lock = threading.Lock()

    def on_step():
        nonlocal units_done
        if step_callback is None:
            return
        with lock:
            units_done += 1
            fraction = units_done / units_total
        step_callback(fraction)

    if len(partitions) == 1:
        per_partition = [_run_partition(
            xs, ys, suns, massing, measurement_height, cancel_token, on_step
        )]
    else:
        logger.debug(f"Integrating {n_points} points over {n_steps} steps on {len(partitions)} threads")
        with ThreadPoolExecutor(max_workers=len(partitions)) as executor:
            futures = [
                executor.submit(
                    _run_partition,
                    xs[idx], ys[idx], suns, massing, measurement_height, cancel_token, on_step,
                )
                for idx in partitions
            ]
            per_partition = [f.result() for f in futures]

    partition_steps = [len(m) for m in per_partition]
    steps_completed = min(partition_steps) if per_partition else 0
    aborted = steps_completed < n_steps

    if aborted:
        logger.warning(
            f"Integration cancelled after {steps_completed}/{n_steps} steps "
            f"(partitions reached {partition_steps})"
        )

    step_masks = np.zeros((steps_completed, n_points), dtype=bool)
    for k in range(steps_completed):
        step_masks[k] = np.concatenate([m[k] for m in per_partition])

    weights = np.array([s.weight for s in samples[:steps_completed]], dtype=np.int64)
    half_seconds = weights @ step_masks.astype(np.int64) if steps_completed else np.zeros(n_points, dtype=np.int64)

    return IntegrationResult(
        half_seconds=np.asarray(half_seconds, dtype=np.int64),
        step_masks=step_masks,
        steps_completed=steps_completed,
        steps_total=n_steps,
        aborted=aborted,
        num_partitions=len(partitions),
        partition_steps=partition_steps,
    )
