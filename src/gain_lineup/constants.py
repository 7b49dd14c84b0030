# src/gain_lineup/constants.py
"""Physical constants shared by the cascade engine."""
from __future__ import annotations

BOLTZMANN = 1.380649e-23  # J/K

# IEEE reference temperature for noise figure / noise temperature conversion.
T0_KELVIN = 290.0

# kT0 in a 1 Hz bandwidth, rounded the way lineup spreadsheets quote it.
THERMAL_NOISE_FLOOR_DBM_PER_HZ = -174.0

# Output power above P1dB at which the hard compression knee clamps.
COMPRESSION_CLAMP_DB = 1.0
