# src/gain_lineup/sweeps.py
"""
Characterization sweeps over a whole chain.

Single-block curves live on Block itself; these helpers drive the full
cascade with a CW input at each swept level and report the last node.
"""
from __future__ import annotations

from concurrent.futures import ProcessPoolExecutor, as_completed
import logging
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .block import Block, sweep_points
from .cascade import cascade_vector_return_output
from .input_signal import Input

logger = logging.getLogger(__name__)

# Frequency has no effect on the scalar model; any positive value will do.
NOMINAL_SWEEP_FREQUENCY_HZ = 1.0e9

SweepCurve = List[Tuple[float, float]]


def cascade_output_power(blocks: Sequence[Block], input_power_dbm: float) -> float:
    signal = Input(power_dbm=input_power_dbm, frequency_hz=NOMINAL_SWEEP_FREQUENCY_HZ)
    return cascade_vector_return_output(signal, blocks).signal_power_dbm


def cascade_power_gain(blocks: Sequence[Block], input_power_dbm: float) -> float:
    signal = Input(power_dbm=input_power_dbm, frequency_hz=NOMINAL_SWEEP_FREQUENCY_HZ)
    return cascade_vector_return_output(signal, blocks).cumulative_gain_db


def _evaluate(
    func: Callable[[Sequence[Block], float], float],
    blocks: Sequence[Block],
    input_powers: List[float],
    parallel: bool,
    max_workers: Optional[int],
) -> SweepCurve:
    blocks = list(blocks)
    if not parallel or len(input_powers) < 2:
        return [(pin, func(blocks, pin)) for pin in input_powers]

    values: Dict[int, float] = {}
    with ProcessPoolExecutor(max_workers=max_workers) as ex:
        futures = {ex.submit(func, blocks, pin): i for i, pin in enumerate(input_powers)}
        for fut in as_completed(futures):
            values[futures[fut]] = fut.result()
    logger.debug("Evaluated %d sweep points on a process pool.", len(values))
    # completion order is arbitrary; restore sweep order
    return [(pin, values[i]) for i, pin in enumerate(input_powers)]


def cascade_am_am_sweep(
    blocks: Sequence[Block],
    start_dbm: float,
    stop_dbm: float,
    step_db: float,
    parallel: bool = False,
    max_workers: Optional[int] = None,
) -> SweepCurve:
    """Chain Pin vs Pout over the inclusive range [start_dbm, stop_dbm]."""
    return _evaluate(
        cascade_output_power,
        blocks,
        sweep_points(start_dbm, stop_dbm, step_db),
        parallel,
        max_workers,
    )


def cascade_gain_compression_sweep(
    blocks: Sequence[Block],
    start_dbm: float,
    stop_dbm: float,
    step_db: float,
    parallel: bool = False,
    max_workers: Optional[int] = None,
) -> SweepCurve:
    """Chain Pin vs cumulative effective gain over [start_dbm, stop_dbm]."""
    return _evaluate(
        cascade_power_gain,
        blocks,
        sweep_points(start_dbm, stop_dbm, step_db),
        parallel,
        max_workers,
    )
