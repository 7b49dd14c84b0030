# src/gain_lineup/node.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .conversions import dB, dBm, noise_floor_dbm


@dataclass(frozen=True)
class DynamicRange:
    """Dynamic-range summary of one node, all input-referred except SFDR."""
    linear_dr_db: dB
    sfdr_db: Optional[dB]
    mds_dbm: dBm
    max_input_dbm: dBm


@dataclass(frozen=True)
class SignalNode:
    """
    State of the chain at one position.

    Every cumulative_* field covers the chain from the input up to and
    including this node. Noise temperature is the chain's equivalent input
    noise temperature T_e (0 K at the input node); the source temperature is
    kept separately.
    """
    name: str
    signal_power_dbm: dBm
    noise_power_dbm: Optional[dBm]
    cumulative_gain_db: dB
    cumulative_noise_figure_db: dB
    cumulative_noise_temperature_k: float
    cumulative_oip3_dbm: Optional[dBm] = None
    sfdr_db: Optional[dB] = None
    frequency_hz: float = 0.0
    bandwidth_hz: float = 0.0
    output_p1db_dbm: Optional[dBm] = None
    source_noise_temperature_k: Optional[float] = None

    @property
    def system_noise_temperature_k(self) -> Optional[float]:
        if self.source_noise_temperature_k is None:
            return None
        return self.source_noise_temperature_k + self.cumulative_noise_temperature_k

    def signal_to_noise_ratio_db(self) -> Optional[dB]:
        if self.noise_power_dbm is None:
            return None
        return self.signal_power_dbm - self.noise_power_dbm

    def noise_floor_dbm(self) -> Optional[dBm]:
        """Input-referred thermal floor at the cumulative NF."""
        return noise_floor_dbm(self.bandwidth_hz, self.cumulative_noise_figure_db)

    def input_p1db_dbm(self) -> Optional[dBm]:
        if self.output_p1db_dbm is None:
            return None
        return self.output_p1db_dbm - self.cumulative_gain_db

    def dynamic_range_db(self) -> Optional[dB]:
        """Linear dynamic range between the cascaded P1dB and the thermal floor."""
        summary = self.dynamic_range_summary()
        if summary is None:
            return None
        return summary.linear_dr_db

    def dynamic_range_summary(self) -> Optional[DynamicRange]:
        max_input = self.input_p1db_dbm()
        mds = self.noise_floor_dbm()
        if max_input is None or mds is None:
            return None
        return DynamicRange(
            linear_dr_db=max_input - mds,
            sfdr_db=self.sfdr_db,
            mds_dbm=mds,
            max_input_dbm=max_input,
        )
