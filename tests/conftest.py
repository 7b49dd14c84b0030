# tests/conftest.py
from __future__ import annotations

import matplotlib

matplotlib.use("Agg")

import pytest

from gain_lineup.block import Block
from gain_lineup.input_signal import Input


@pytest.fixture
def receiver_blocks() -> list[Block]:
    """
    Three-stage receiver front end: LNA, mixer, IF amplifier.
    Total small-signal gain 45 dB.
    """
    return [
        Block(name="LNA", gain_db=20.0, noise_figure_db=3.0, output_p1db_dbm=20.0, output_ip3_dbm=30.0),
        Block(name="Mixer", gain_db=10.0, noise_figure_db=6.0, output_p1db_dbm=15.0, output_ip3_dbm=25.0),
        Block(name="IF Amp", gain_db=15.0, noise_figure_db=5.0, output_p1db_dbm=25.0, output_ip3_dbm=35.0),
    ]


@pytest.fixture
def weak_input() -> Input:
    """-60 dBm at 2.4 GHz in 10 MHz, far below any compression point."""
    return Input(power_dbm=-60.0, frequency_hz=2.4e9, bandwidth_hz=10e6)


@pytest.fixture
def cw_input() -> Input:
    return Input(power_dbm=-60.0, frequency_hz=2.4e9)


@pytest.fixture
def lineup_toml(tmp_path):
    """A lineup config using a mix of full field names and aliases."""
    p = tmp_path / "lineup.toml"
    p.write_text(
        'description = "test receiver"\n'
        "input_power_dbm = -60.0\n"
        "frequency_hz = 2.4e9\n"
        "bandwidth_hz = 10e6\n"
        "\n"
        "[[blocks]]\n"
        'name = "LNA"\n'
        "gain_db = 20.0\n"
        "noise_figure_db = 3.0\n"
        "output_p1db_dbm = 20.0\n"
        "output_ip3_dbm = 30.0\n"
        "\n"
        "[[blocks]]\n"
        'name = "Mixer"\n'
        "gain = 10.0\n"
        "nf = 6.0\n"
        "op1db = 15.0\n"
        "oip3 = 25.0\n"
        "\n"
        "[[blocks]]\n"
        'name = "IF Amp"\n'
        "gain_db = 15.0\n"
        "noise_figure = 5.0\n"
    )
    return p
