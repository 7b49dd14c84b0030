# tests/test_cascade.py
from __future__ import annotations

import logging
import math

import pytest

from gain_lineup.block import Block
from gain_lineup.cascade import (
    INPUT_NODE_NAME,
    cascade_block,
    cascade_vector_return_output,
    cascade_vector_return_vector,
    input_node,
    sfdr_db,
)
from gain_lineup.input_signal import Input


def test_empty_chain_returns_only_the_input_node(weak_input):
    nodes = cascade_vector_return_vector(weak_input, [])
    assert len(nodes) == 1
    assert nodes[0].name == INPUT_NODE_NAME
    assert nodes[0].cumulative_gain_db == 0.0
    assert nodes[0].cumulative_noise_figure_db == 0.0
    assert nodes[0].cumulative_oip3_dbm is None
    assert cascade_vector_return_output(weak_input, []) == nodes[0]


def test_two_stage_friis():
    """3 dB / 20 dB followed by 6 dB NF gives the textbook 3.06 dB."""
    blocks = [
        Block(name="LNA", gain_db=20.0, noise_figure_db=3.0),
        Block(name="Mixer", gain_db=10.0, noise_figure_db=6.0),
    ]
    out = cascade_vector_return_output(Input(power_dbm=-60.0, frequency_hz=1e9), blocks)
    assert out.cumulative_noise_figure_db == pytest.approx(3.0645, abs=1e-3)
    assert out.cumulative_gain_db == pytest.approx(30.0)


def test_receiver_end_to_end(receiver_blocks, weak_input):
    nodes = cascade_vector_return_vector(weak_input, receiver_blocks)
    assert len(nodes) == len(receiver_blocks) + 1
    assert [n.name for n in nodes] == ["Input", "LNA Output", "Mixer Output", "IF Amp Output"]

    out = nodes[-1]
    assert out.cumulative_gain_db == pytest.approx(45.0)
    assert out.signal_power_dbm == pytest.approx(-15.0)
    assert out.cumulative_noise_figure_db == pytest.approx(3.069, abs=5e-3)
    assert 3.06 <= out.cumulative_noise_figure_db <= 3.07
    f_total = 10.0 ** (out.cumulative_noise_figure_db / 10.0)
    assert out.cumulative_noise_temperature_k == pytest.approx((f_total - 1.0) * 290.0)


def test_noise_figure_is_monotone_and_first_stage_dominates(receiver_blocks, weak_input):
    nodes = cascade_vector_return_vector(weak_input, receiver_blocks)
    nfs = [n.cumulative_noise_figure_db for n in nodes]
    assert all(a <= b + 1e-12 for a, b in zip(nfs, nfs[1:]))
    assert nfs[1] == pytest.approx(3.0)


def test_output_snr_degrades_by_the_cascaded_noise_figure(receiver_blocks, weak_input):
    nodes = cascade_vector_return_vector(weak_input, receiver_blocks)
    snr_in = nodes[0].signal_to_noise_ratio_db()
    snr_out = nodes[-1].signal_to_noise_ratio_db()
    assert snr_in == pytest.approx(-60.0 + 103.975, abs=1e-3)
    assert snr_in - snr_out == pytest.approx(nodes[-1].cumulative_noise_figure_db, abs=1e-6)


def test_cw_input_has_no_noise_or_sfdr(receiver_blocks, cw_input):
    nodes = cascade_vector_return_vector(cw_input, receiver_blocks)
    for n in nodes:
        assert n.noise_power_dbm is None
        assert n.signal_to_noise_ratio_db() is None
        assert n.sfdr_db is None
    # OIP3 still cascades for a CW drive
    assert nodes[-1].cumulative_oip3_dbm is not None


def test_oip3_of_two_identical_stages_is_halved():
    blocks = [
        Block(name="A", gain_db=0.0, noise_figure_db=1.0, output_ip3_dbm=10.0),
        Block(name="B", gain_db=0.0, noise_figure_db=1.0, output_ip3_dbm=10.0),
    ]
    out = cascade_vector_return_output(Input(power_dbm=-50.0, frequency_hz=1e9), blocks)
    assert out.cumulative_oip3_dbm == pytest.approx(10.0 - 10.0 * math.log10(2.0))


def test_oip3_referred_through_later_gain():
    blocks = [
        Block(name="A", gain_db=10.0, noise_figure_db=1.0, output_ip3_dbm=20.0),
        Block(name="B", gain_db=10.0, noise_figure_db=1.0),
    ]
    nodes = cascade_vector_return_vector(Input(power_dbm=-50.0, frequency_hz=1e9), blocks)
    assert nodes[1].cumulative_oip3_dbm == pytest.approx(20.0)
    assert nodes[2].cumulative_oip3_dbm == pytest.approx(30.0)


def test_cascaded_oip3_never_exceeds_referred_stage_points(receiver_blocks, weak_input):
    out = cascade_vector_return_output(weak_input, receiver_blocks)
    assert out.cumulative_oip3_dbm < 35.0
    assert out.cumulative_oip3_dbm == pytest.approx(33.774, abs=1e-2)


def test_sfdr_formula(receiver_blocks, weak_input):
    out = cascade_vector_return_output(weak_input, receiver_blocks)
    floor = -174.0 + 70.0 + out.cumulative_noise_figure_db
    assert out.sfdr_db == pytest.approx(2.0 / 3.0 * (out.cumulative_oip3_dbm - floor))
    assert sfdr_db(30.0, 0.0, 3.0) is None
    assert sfdr_db(None, 1e6, 3.0) is None
    assert sfdr_db(30.0, 1e6, 3.0) == pytest.approx(2.0 / 3.0 * (30.0 + 111.0))


def test_compressed_stage_uses_effective_gain(caplog):
    pa = Block(name="PA", gain_db=30.0, noise_figure_db=5.0, output_p1db_dbm=20.0)
    with caplog.at_level(logging.INFO, logger="gain_lineup.cascade"):
        out = cascade_block(input_node(Input(power_dbm=0.0, frequency_hz=1e9)), pa)
    assert out.signal_power_dbm == pytest.approx(21.0)
    assert out.cumulative_gain_db == pytest.approx(21.0)
    assert "compressed" in caplog.text


def test_compression_changes_friis_weighting():
    """A compressed first stage suppresses later noise less than its nominal gain would."""
    first = Block(name="PA", gain_db=30.0, noise_figure_db=5.0, output_p1db_dbm=20.0)
    second = Block(name="Att", gain_db=-10.0, noise_figure_db=10.0)
    driven = cascade_vector_return_output(Input(power_dbm=0.0, frequency_hz=1e9), [first, second])
    quiet = cascade_vector_return_output(Input(power_dbm=-40.0, frequency_hz=1e9), [first, second])

    f1 = 10 ** 0.5
    f2 = 10.0
    assert quiet.cumulative_noise_figure_db == pytest.approx(
        10 * math.log10(f1 + (f2 - 1) / 1000.0)
    )
    assert driven.cumulative_noise_figure_db == pytest.approx(
        10 * math.log10(f1 + (f2 - 1) / 10 ** 2.1)
    )
    assert driven.cumulative_noise_figure_db > quiet.cumulative_noise_figure_db


def test_cascaded_p1db_reported_at_nodes(receiver_blocks, weak_input):
    nodes = cascade_vector_return_vector(weak_input, receiver_blocks)
    assert nodes[0].output_p1db_dbm is None
    assert nodes[1].output_p1db_dbm == pytest.approx(20.0)
    # 20 dBm referred through 10 dB combined with the mixer's 15 dBm
    expected = 10 * math.log10(1.0 / (1.0 / 1000.0 + 1.0 / 10 ** 1.5))
    assert nodes[2].output_p1db_dbm == pytest.approx(expected)


def test_linear_chain_gain_is_additive():
    gains = [12.5, -3.2, 18.0, 7.7, -1.1]
    blocks = [Block(name=f"s{i}", gain_db=g, noise_figure_db=1.0) for i, g in enumerate(gains)]
    out = cascade_vector_return_output(Input(power_dbm=-80.0, frequency_hz=1e9), blocks)
    assert out.cumulative_gain_db == pytest.approx(sum(gains), rel=1e-9)


def test_six_ghz_receiver_without_nonlinear_points():
    blocks = [
        Block(name="LNA", gain_db=20.0, noise_figure_db=3.0),
        Block(name="Mixer", gain_db=10.0, noise_figure_db=6.0),
        Block(name="IF Amp", gain_db=15.0, noise_figure_db=5.0),
    ]
    sig = Input(power_dbm=-60.0, frequency_hz=6e9, bandwidth_hz=1e6)
    nodes = cascade_vector_return_vector(sig, blocks)
    out = nodes[-1]
    assert out.cumulative_gain_db == pytest.approx(45.0)
    assert out.signal_power_dbm == pytest.approx(-15.0)
    assert out.cumulative_noise_figure_db == pytest.approx(3.07, abs=0.01)
    # no OIP3 anywhere: nothing limits the chain, so no SFDR either
    assert all(n.cumulative_oip3_dbm is None and n.sfdr_db is None for n in nodes)
    assert out.dynamic_range_summary() is None
