"""
Adaptive-quantity timing for a single benchmark cell.

A single wall-clock sample is noisy and the right batch size is unknown up
front. ``run_single_test`` first grows the batch until it takes long enough to
amortize timer overhead, then keeps the best of several timed trials.
"""
import logging
from typing import Tuple

from raster_bench.backend import Backend, BenchAssets, BenchParams

logger = logging.getLogger("raster_bench.calibration")

INITIAL_QUANTITY = 25
MIN_DURATION_US = 1000
MAX_QUANTITY = 1_000_000


def next_quantity(quantity: int, duration_us: int) -> int:
    """Geometric back-off used while auto-detecting the batch size."""
    if duration_us < 100:
        return quantity * 10
    if duration_us < 500:
        return quantity * 3
    return quantity * 2


def run_single_test(backend: Backend, assets: BenchAssets, params: BenchParams,
                    configured_quantity: int, min_runs: int) -> Tuple[int, int]:
    """
    Measure one (test, size, backend) cell.

    Args:
        backend: Backend to drive.
        assets: Shared assets passed through to the backend.
        params: Batch parameters; ``params.quantity`` is overwritten.
        configured_quantity: Fixed batch size, or 0 to auto-detect one.
        min_runs: Number of timed attempts, counting the final auto-detect run.

    Returns:
        Tuple of (best duration in microseconds, quantity used).
    """
    required_runs = max(min_runs, 1)
    quantity = configured_quantity if configured_quantity > 0 else INITIAL_QUANTITY
    best = None
    attempts = 0

    if configured_quantity == 0:
        while True:
            params.quantity = quantity
            duration = backend.run(assets, params).duration_us
            best = duration
            if duration >= MIN_DURATION_US or quantity > MAX_QUANTITY:
                attempts = 1
                break
            quantity = next_quantity(quantity, duration)
        logger.debug(f"{backend.name}/{params.test}/{params.shape_size}: settled on quantity {quantity} "
                     f"({best} us)")

    while attempts < required_runs:
        params.quantity = quantity
        duration = backend.run(assets, params).duration_us
        if best is None or duration < best:
            best = duration
        attempts += 1

    return best, quantity


def compute_cpms(quantity: int, duration_us: int) -> float:
    """Operations per millisecond; a zero duration yields zero throughput."""
    if duration_us == 0:
        return 0.0
    return quantity * 1000.0 / duration_us
