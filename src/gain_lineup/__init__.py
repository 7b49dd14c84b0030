# src/gain_lineup/__init__.py
"""
RF signal-chain gain lineup: cascaded gain, noise figure, OIP3, P1dB, SNR
and SFDR of an ordered block list, plus AM-AM / AM-PM / IMD3 sweeps.
"""

__version__ = "0.1.0"

from .amplifier_model import (
    AmplifierModel,
    AmplifierModelBuilder,
    AmplifierPoint,
    sine_evm,
    small_angle_evm,
)
from .block import Block, Imd3Point, sweep_points
from .cascade import cascade_block, cascade_vector_return_output, cascade_vector_return_vector
from .config_models import ConfigError, GainLineupConfig, load_config
from .input_signal import Input
from .node import DynamicRange, SignalNode
from .sweeps import cascade_am_am_sweep, cascade_gain_compression_sweep

__all__ = [
    "AmplifierModel",
    "AmplifierModelBuilder",
    "AmplifierPoint",
    "Block",
    "ConfigError",
    "DynamicRange",
    "GainLineupConfig",
    "Imd3Point",
    "Input",
    "SignalNode",
    "cascade_am_am_sweep",
    "cascade_block",
    "cascade_gain_compression_sweep",
    "cascade_vector_return_output",
    "cascade_vector_return_vector",
    "load_config",
    "sine_evm",
    "small_angle_evm",
    "sweep_points",
]
