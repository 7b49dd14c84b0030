# src/gain_lineup/input_signal.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .constants import BOLTZMANN, T0_KELVIN
from .conversions import dBm, thermal_noise_power_dbm, watts_to_dbm

Freq = float  # Hz


@dataclass(frozen=True)
class Input:
    """
    Signal entering the chain.

    bandwidth_hz == 0 describes a CW tone: no noise floor, SFDR or dynamic
    range can be derived from it. noise_temperature_k is the source noise
    temperature; None means the 290 K reference.
    """
    power_dbm: dBm
    frequency_hz: Freq
    bandwidth_hz: Freq = 0.0
    noise_temperature_k: Optional[float] = None

    def __post_init__(self) -> None:
        if not self.frequency_hz > 0.0:
            raise ValueError(f"frequency_hz must be > 0, got {self.frequency_hz!r}")
        if self.bandwidth_hz < 0.0:
            raise ValueError(f"bandwidth_hz must be >= 0, got {self.bandwidth_hz!r}")
        if self.noise_temperature_k is not None and self.noise_temperature_k < 0.0:
            raise ValueError(
                f"noise_temperature_k must be >= 0, got {self.noise_temperature_k!r}"
            )

    @classmethod
    def new(
        cls,
        frequency_hz: Freq,
        bandwidth_hz: Freq,
        power_dbm: dBm,
        noise_temperature_k: Optional[float] = None,
    ) -> "Input":
        return cls(
            power_dbm=power_dbm,
            frequency_hz=frequency_hz,
            bandwidth_hz=bandwidth_hz,
            noise_temperature_k=noise_temperature_k,
        )

    @property
    def is_cw(self) -> bool:
        return self.bandwidth_hz == 0.0

    @property
    def source_noise_temperature_k(self) -> float:
        if self.noise_temperature_k is None:
            return T0_KELVIN
        return self.noise_temperature_k

    def noise_spectral_density_dbm_per_hz(self) -> Optional[dBm]:
        """kT of the source in dBm/Hz (None for a 0 K source)."""
        density_w = BOLTZMANN * self.source_noise_temperature_k
        if density_w <= 0.0:
            return None
        return watts_to_dbm(density_w)

    def noise_power_dbm(self) -> Optional[dBm]:
        """Source kTB in dBm; None for a CW input."""
        return thermal_noise_power_dbm(self.source_noise_temperature_k, self.bandwidth_hz)
