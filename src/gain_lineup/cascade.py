# src/gain_lineup/cascade.py
"""
Stage-by-stage cascade of an Input through an ordered list of Blocks.

Node 0 is the bare Input; node i (i >= 1) is the output of block i-1:

    Input -> Block[0] -> Node[1] -> Block[1] -> Node[2] -> ...

Gain is accumulated from the effective (possibly compressed) stage gain,
noise figure with Friis in linear units, and OIP3 / P1dB by reciprocal sum of
output-referred points in mW.
"""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from .block import Block
from .conversions import (
    db_to_linear,
    dbm_to_mw,
    mw_to_dbm,
    combine_intercepts_mw,
    noise_factor_from_figure,
    noise_figure_from_factor,
    noise_temperature_from_factor,
    noise_floor_dbm,
)
from .input_signal import Input
from .node import SignalNode

logger = logging.getLogger(__name__)

INPUT_NODE_NAME = "Input"


def input_node(signal: Input) -> SignalNode:
    """Node representing the signal before any block."""
    return SignalNode(
        name=INPUT_NODE_NAME,
        signal_power_dbm=signal.power_dbm,
        noise_power_dbm=signal.noise_power_dbm(),
        cumulative_gain_db=0.0,
        cumulative_noise_figure_db=0.0,
        cumulative_noise_temperature_k=0.0,
        cumulative_oip3_dbm=None,
        sfdr_db=None,
        frequency_hz=signal.frequency_hz,
        bandwidth_hz=signal.bandwidth_hz,
        output_p1db_dbm=None,
        source_noise_temperature_k=signal.source_noise_temperature_k,
    )


def _to_mw(value_dbm: Optional[float]) -> Optional[float]:
    return dbm_to_mw(value_dbm) if value_dbm is not None else None


def _to_dbm(value_mw: Optional[float]) -> Optional[float]:
    return mw_to_dbm(value_mw) if value_mw is not None else None


def sfdr_db(
    oip3_dbm: Optional[float],
    bandwidth_hz: float,
    noise_figure_db: float,
) -> Optional[float]:
    """2/3 * (OIP3 - floor); None for CW or when no stage limits OIP3."""
    if oip3_dbm is None:
        return None
    floor = noise_floor_dbm(bandwidth_hz, noise_figure_db)
    if floor is None:
        return None
    return (2.0 / 3.0) * (oip3_dbm - floor)


def cascade_block(node: SignalNode, block: Block) -> SignalNode:
    """Advance the chain state across one block."""
    pin = node.signal_power_dbm
    signal_out = block.output_power(pin)
    stage_gain_db = block.power_gain(pin)
    if stage_gain_db < block.gain_db:
        logger.info(
            "Block '%s' compressed: Pin=%.2f dBm, Pout=%.2f dBm, gain %.2f dB of %.2f dB.",
            block.name,
            pin,
            signal_out,
            stage_gain_db,
            block.gain_db,
        )

    cumulative_gain_db = node.cumulative_gain_db + stage_gain_db

    # Friis, weighted by the effective gain of every preceding stage
    prior_gain_linear = db_to_linear(node.cumulative_gain_db)
    f_prev = noise_factor_from_figure(node.cumulative_noise_figure_db)
    f_stage = noise_factor_from_figure(block.noise_figure_db)
    f_total = f_prev + (f_stage - 1.0) / prior_gain_linear
    cumulative_nf_db = noise_figure_from_factor(f_total)

    stage_gain_linear = db_to_linear(stage_gain_db)
    oip3_mw = combine_intercepts_mw(
        _to_mw(node.cumulative_oip3_dbm),
        stage_gain_linear,
        _to_mw(block.output_ip3_dbm),
    )
    p1db_mw = combine_intercepts_mw(
        _to_mw(node.output_p1db_dbm),
        stage_gain_linear,
        _to_mw(block.output_p1db_dbm),
    )
    oip3_dbm = _to_dbm(oip3_mw)

    out = SignalNode(
        name=f"{block.name} Output",
        signal_power_dbm=signal_out,
        noise_power_dbm=block.output_noise_power_dbm(node.noise_power_dbm, node.bandwidth_hz),
        cumulative_gain_db=cumulative_gain_db,
        cumulative_noise_figure_db=cumulative_nf_db,
        cumulative_noise_temperature_k=noise_temperature_from_factor(f_total),
        cumulative_oip3_dbm=oip3_dbm,
        sfdr_db=sfdr_db(oip3_dbm, node.bandwidth_hz, cumulative_nf_db),
        frequency_hz=node.frequency_hz,
        bandwidth_hz=node.bandwidth_hz,
        output_p1db_dbm=_to_dbm(p1db_mw),
        source_noise_temperature_k=node.source_noise_temperature_k,
    )
    logger.debug(
        "%s: Pout=%.2f dBm, G=%.2f dB, NF=%.3f dB, Te=%.1f K, OIP3=%s dBm",
        out.name,
        out.signal_power_dbm,
        out.cumulative_gain_db,
        out.cumulative_noise_figure_db,
        out.cumulative_noise_temperature_k,
        f"{oip3_dbm:.2f}" if oip3_dbm is not None else "-",
    )
    return out


def cascade_vector_return_vector(signal: Input, blocks: Iterable[Block]) -> List[SignalNode]:
    """All nodes of the chain, input node first (len == len(blocks) + 1)."""
    node = input_node(signal)
    nodes = [node]
    for block in blocks:
        node = cascade_block(node, block)
        nodes.append(node)
    return nodes


def cascade_vector_return_output(signal: Input, blocks: Iterable[Block]) -> SignalNode:
    """Final node of the chain; the input node for an empty chain."""
    node = input_node(signal)
    for block in blocks:
        node = cascade_block(node, block)
    return node