# src/gain_lineup/block.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

import numpy as np

from .constants import COMPRESSION_CLAMP_DB
from .conversions import (
    dB,
    dBm,
    dbm_to_mw,
    mw_to_dbm,
    db_to_linear,
    noise_floor_dbm,
    noise_temperature_from_figure,
    thermal_noise_power_dbm,
)


def sweep_points(start: float, stop: float, step: float) -> List[float]:
    """
    Evenly spaced inclusive grid start, start + step, ..., <= stop.

    `stop` itself is included when (stop - start) is a whole number of steps.
    A non-positive step or stop < start yields an empty grid.
    """
    if step <= 0.0 or stop < start:
        return []
    # small tolerance so float ratios like 0.3 / 0.1 still reach stop
    n_steps = int(np.floor((stop - start) / step + 1e-9)) + 1
    return [float(p) for p in start + np.arange(n_steps) * step]


@dataclass(frozen=True)
class Imd3Point:
    """One point of a two-tone IMD3 sweep (powers are per tone)."""
    input_per_tone_dbm: dBm
    output_per_tone_dbm: dBm
    im3_output_dbm: dBm
    rejection_db: dB


@dataclass(frozen=True)
class Block:
    """
    Scalar model of one chain element.

    Compression is a hard knee: output power follows pin + gain until it
    would exceed output_p1db_dbm + 1 dB, then sticks there. A missing P1dB
    means the block never compresses; a missing OIP3 means it produces no
    IMD3 and does not limit the cascaded OIP3.
    """
    name: str = "default"
    gain_db: dB = 0.0
    noise_figure_db: dB = 0.0
    output_p1db_dbm: Optional[dBm] = None
    output_ip3_dbm: Optional[dBm] = None

    def __post_init__(self) -> None:
        if self.noise_figure_db < 0.0:
            raise ValueError(
                f"Block '{self.name}': noise_figure_db must be >= 0, got {self.noise_figure_db!r}"
            )

    # Linear / compression ---------------------------------------------

    def _clamp(self, linear_output_dbm: dBm) -> dBm:
        if self.output_p1db_dbm is not None:
            knee = self.output_p1db_dbm + COMPRESSION_CLAMP_DB
            if linear_output_dbm > knee:
                return knee
        return linear_output_dbm

    def output_power(self, input_power_dbm: dBm) -> dBm:
        return self._clamp(input_power_dbm + self.gain_db)

    def power_gain(self, input_power_dbm: dBm) -> dB:
        """Effective gain at this drive level; below gain_db once clamped."""
        return self.output_power(input_power_dbm) - input_power_dbm

    def is_compressed(self, input_power_dbm: dBm) -> bool:
        return self.power_gain(input_power_dbm) < self.gain_db

    # Noise -------------------------------------------------------------

    def noise_temperature_k(self) -> float:
        return noise_temperature_from_figure(self.noise_figure_db)

    def output_noise_power_dbm(
        self,
        input_noise_dbm: Optional[dBm],
        bandwidth_hz: float,
    ) -> Optional[dBm]:
        """
        Noise at the block output: incoming noise plus the block's own kT_eB,
        amplified by the small-signal gain. The noise trajectory has its own
        P1dB clamp, independent of the signal drive level.
        """
        if input_noise_dbm is None or bandwidth_hz <= 0.0:
            return None
        added_dbm = thermal_noise_power_dbm(self.noise_temperature_k(), bandwidth_hz)
        total_mw = dbm_to_mw(input_noise_dbm)
        if added_dbm is not None:
            total_mw += dbm_to_mw(added_dbm)
        return self._clamp(mw_to_dbm(total_mw * db_to_linear(self.gain_db)))

    # Sweeps ------------------------------------------------------------

    def am_am_curve(self, input_powers: Iterable[dBm]) -> List[Tuple[dBm, dBm]]:
        return [(float(p), self.output_power(float(p))) for p in input_powers]

    def am_am_sweep(self, start_dbm: dBm, stop_dbm: dBm, step_db: dB) -> List[Tuple[dBm, dBm]]:
        """Pin vs Pout over the inclusive range [start_dbm, stop_dbm]."""
        return self.am_am_curve(sweep_points(start_dbm, stop_dbm, step_db))

    def gain_compression_curve(self, input_powers: Iterable[dBm]) -> List[Tuple[dBm, dB]]:
        return [(float(p), self.power_gain(float(p))) for p in input_powers]

    def gain_compression_sweep(
        self, start_dbm: dBm, stop_dbm: dBm, step_db: dB
    ) -> List[Tuple[dBm, dB]]:
        """Pin vs effective gain over the inclusive range [start_dbm, stop_dbm]."""
        return self.gain_compression_curve(sweep_points(start_dbm, stop_dbm, step_db))

    # IMD3 --------------------------------------------------------------

    def imd3_output_power_dbm(self, input_power_dbm: dBm) -> Optional[dBm]:
        """IM3 product level: 3*Pout - 2*OIP3 (per tone)."""
        if self.output_ip3_dbm is None:
            return None
        return 3.0 * self.output_power(input_power_dbm) - 2.0 * self.output_ip3_dbm

    def imd3_rejection_db(self, input_power_dbm: dBm) -> Optional[dB]:
        """Carrier-to-IM3 ratio: 2*(OIP3 - Pout)."""
        if self.output_ip3_dbm is None:
            return None
        return 2.0 * (self.output_ip3_dbm - self.output_power(input_power_dbm))

    def imd3_sweep(self, start_dbm: dBm, stop_dbm: dBm, step_db: dB) -> List[Imd3Point]:
        if self.output_ip3_dbm is None:
            return []
        points: List[Imd3Point] = []
        for pin in sweep_points(start_dbm, stop_dbm, step_db):
            points.append(
                Imd3Point(
                    input_per_tone_dbm=pin,
                    output_per_tone_dbm=self.output_power(pin),
                    im3_output_dbm=self.imd3_output_power_dbm(pin),
                    rejection_db=self.imd3_rejection_db(pin),
                )
            )
        return points

    # Dynamic range -----------------------------------------------------

    def dynamic_range_db(self, bandwidth_hz: float) -> Optional[dB]:
        """P1dB minus the thermal floor at this block's NF; None without P1dB."""
        if self.output_p1db_dbm is None:
            return None
        floor = noise_floor_dbm(bandwidth_hz, self.noise_figure_db)
        if floor is None:
            return None
        return self.output_p1db_dbm - floor

    def input_dynamic_range_db(self, bandwidth_hz: float) -> Optional[dB]:
        dr = self.dynamic_range_db(bandwidth_hz)
        if dr is None:
            return None
        return dr - self.gain_db
