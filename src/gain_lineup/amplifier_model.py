# src/gain_lineup/amplifier_model.py
from __future__ import annotations

from dataclasses import dataclass, replace
import math
from typing import Callable, List, Optional

from .block import Block, sweep_points
from .constants import COMPRESSION_CLAMP_DB
from .conversions import dB, dBm

# Maps an AM-PM phase shift (degrees) to an RMS EVM fraction (not %).
EvmConverter = Callable[[float], float]


def small_angle_evm(phase_deg: float) -> float:
    """EVM ~= |delta_phi| in radians (small-angle approximation)."""
    return abs(math.radians(phase_deg))


def sine_evm(phase_deg: float) -> float:
    """EVM = |sin(delta_phi)|."""
    return abs(math.sin(math.radians(phase_deg)))


@dataclass(frozen=True)
class AmplifierPoint:
    """One point of a combined AM-AM / AM-PM sweep."""
    input_dbm: dBm
    output_dbm: dBm
    gain_db: dB
    phase_shift_deg: Optional[float] = None

    def __str__(self) -> str:
        phase = f"{self.phase_shift_deg:.2f} deg" if self.phase_shift_deg is not None else "N/A"
        return (
            f"Pin: {self.input_dbm:.2f} dBm, Pout: {self.output_dbm:.2f} dBm, "
            f"Gain: {self.gain_db:.2f} dB, Phase: {phase}"
        )


@dataclass(frozen=True)
class AmplifierModel:
    """
    A Block plus AM-PM characterization.

    The AM-PM model is linear in gain compression:
        delta_phi(Pin) = am_pm_coefficient_deg_per_db * (G_ss - G(Pin))
    so it is zero in the linear region and grows once the block clamps.
    saturation_power_dbm is carried for reporting; the hard-knee block model
    already fixes the saturated output at P1dB + 1 dB.
    """
    block: Block
    am_pm_coefficient_deg_per_db: Optional[float] = None
    saturation_power_dbm: Optional[dBm] = None
    evm_converter: EvmConverter = small_angle_evm

    @classmethod
    def new(cls, block: Block) -> "AmplifierModel":
        return cls(block=block)

    @classmethod
    def with_am_pm(cls, block: Block, coeff_deg_per_db: float) -> "AmplifierModel":
        return cls(block=block, am_pm_coefficient_deg_per_db=coeff_deg_per_db)

    @classmethod
    def with_saturation(cls, block: Block, psat_dbm: dBm) -> "AmplifierModel":
        return cls(block=block, saturation_power_dbm=psat_dbm)

    @classmethod
    def builder(cls, block: Block) -> "AmplifierModelBuilder":
        return AmplifierModelBuilder(block=block)

    def input_p1db_dbm(self) -> Optional[dBm]:
        """Input-referred P1dB (output P1dB minus small-signal gain)."""
        if self.block.output_p1db_dbm is None:
            return None
        return self.block.output_p1db_dbm - self.block.gain_db

    def gain_compression_db(self, input_power_dbm: dBm) -> dB:
        return self.block.gain_db - self.block.power_gain(input_power_dbm)

    def phase_shift_at(self, input_power_dbm: dBm) -> Optional[float]:
        coeff = self.am_pm_coefficient_deg_per_db
        if coeff is None:
            return None
        return coeff * self.gain_compression_db(input_power_dbm)

    def am_am_am_pm_sweep(
        self, start_dbm: dBm, stop_dbm: dBm, step_db: dB
    ) -> List[AmplifierPoint]:
        points: List[AmplifierPoint] = []
        for pin in sweep_points(start_dbm, stop_dbm, step_db):
            points.append(
                AmplifierPoint(
                    input_dbm=pin,
                    output_dbm=self.block.output_power(pin),
                    gain_db=self.block.power_gain(pin),
                    phase_shift_deg=self.phase_shift_at(pin),
                )
            )
        return points

    def backoff_for_target_phase(self, target_phase_deg: float) -> Optional[dB]:
        """
        Input backoff (dB below input P1dB) at which the AM-PM shift reaches
        target_phase_deg. Negative means the drive sits above input P1dB.

        Inverting the clamp: compression at Pin is Pin + G - (P1dB + 1), so
            Pin = P1dB + 1 - G + target / coeff
            backoff = input_P1dB - Pin = -(1 + target / coeff)
        A target of 0 returns the highest drive that still has no shift.
        """
        coeff = self.am_pm_coefficient_deg_per_db
        input_p1db = self.input_p1db_dbm()
        if coeff is None or coeff == 0.0 or input_p1db is None:
            return None
        compression_db = target_phase_deg / coeff
        if compression_db < 0.0:
            # sign opposite to the coefficient: never reached
            return None
        pin = input_p1db + COMPRESSION_CLAMP_DB + compression_db
        return input_p1db - pin

    def evm_from_am_pm(self, input_power_dbm: dBm) -> Optional[float]:
        phase = self.phase_shift_at(input_power_dbm)
        if phase is None:
            return None
        return self.evm_converter(phase)


@dataclass
class AmplifierModelBuilder:
    block: Block
    _am_pm_coefficient_deg_per_db: Optional[float] = None
    _saturation_power_dbm: Optional[dBm] = None
    _evm_converter: EvmConverter = small_angle_evm

    def am_pm_coefficient(self, coeff_deg_per_db: float) -> "AmplifierModelBuilder":
        return replace(self, _am_pm_coefficient_deg_per_db=coeff_deg_per_db)

    def saturation_power(self, psat_dbm: dBm) -> "AmplifierModelBuilder":
        return replace(self, _saturation_power_dbm=psat_dbm)

    def evm_converter(self, converter: EvmConverter) -> "AmplifierModelBuilder":
        return replace(self, _evm_converter=converter)

    def build(self) -> AmplifierModel:
        return AmplifierModel(
            block=self.block,
            am_pm_coefficient_deg_per_db=self._am_pm_coefficient_deg_per_db,
            saturation_power_dbm=self._saturation_power_dbm,
            evm_converter=self._evm_converter,
        )
