# src/gain_lineup/conversions.py
from __future__ import annotations

import math
from typing import Optional

from .constants import BOLTZMANN, T0_KELVIN, THERMAL_NOISE_FLOOR_DBM_PER_HZ

dB = float
dBm = float


def db_to_linear(value_db: dB) -> float:
    """Power ratio from dB: 10^(x/10)."""
    return 10.0 ** (value_db / 10.0)


def linear_to_db(ratio: float) -> dB:
    return 10.0 * math.log10(ratio)


def dbm_to_mw(power_dbm: dBm) -> float:
    return 10.0 ** (power_dbm / 10.0)


def mw_to_dbm(power_mw: float) -> dBm:
    return 10.0 * math.log10(power_mw)


def watts_to_dbm(power_w: float) -> dBm:
    return 10.0 * math.log10(power_w * 1e3)


def noise_factor_from_figure(noise_figure_db: dB) -> float:
    return db_to_linear(noise_figure_db)


def noise_figure_from_factor(noise_factor: float) -> dB:
    return linear_to_db(noise_factor)


def noise_temperature_from_factor(noise_factor: float) -> float:
    """Equivalent input noise temperature T_e = (F - 1) * T0."""
    return (noise_factor - 1.0) * T0_KELVIN


def noise_temperature_from_figure(noise_figure_db: dB) -> float:
    return noise_temperature_from_factor(noise_factor_from_figure(noise_figure_db))


def thermal_noise_power_dbm(temperature_k: float, bandwidth_hz: float) -> Optional[dBm]:
    """
    kTB in dBm. Returns None when the product is not positive (CW signal,
    or a 0 K source), since there is no finite noise power to express in dB.
    """
    power_w = BOLTZMANN * temperature_k * bandwidth_hz
    if power_w <= 0.0:
        return None
    return watts_to_dbm(power_w)


def noise_floor_dbm(bandwidth_hz: float, noise_figure_db: dB) -> Optional[dBm]:
    """
    Input-referred thermal floor: -174 dBm/Hz + 10*log10(B) + NF.

    Returns None for a non-positive bandwidth.
    """
    if bandwidth_hz <= 0.0:
        return None
    return THERMAL_NOISE_FLOOR_DBM_PER_HZ + 10.0 * math.log10(bandwidth_hz) + noise_figure_db


def combine_intercepts_mw(
    previous_mw: Optional[float],
    stage_gain_linear: float,
    stage_mw: Optional[float],
) -> Optional[float]:
    """
    Cascade an output-referred intercept / compression point (mW) across one stage.

    The running value is referred forward through the stage gain, then combined
    with the stage's own point by reciprocal sum. None means "no limiting
    stage yet" (infinite), so an absent stage point leaves the cascade alone.
    """
    referred = previous_mw * stage_gain_linear if previous_mw is not None else None
    if referred is None:
        return stage_mw
    if stage_mw is None:
        return referred
    return 1.0 / (1.0 / referred + 1.0 / stage_mw)
