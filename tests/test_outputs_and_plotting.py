# tests/test_outputs_and_plotting.py
from __future__ import annotations

import json
from pathlib import Path

import pytest

from gain_lineup.cascade import cascade_vector_return_vector
from gain_lineup.input_signal import Input
from gain_lineup.outputs import (
    CASCADE_COLUMNS,
    cascade_rows,
    format_frequency,
    html_output_path,
    write_cascade_json,
    write_html_table,
)
from gain_lineup.plotting import plot_am_am, plot_gain_compression, plot_lineup
from gain_lineup.sweeps import cascade_am_am_sweep, cascade_gain_compression_sweep


def test_html_output_path_replaces_suffix():
    assert html_output_path("lineups/rx.toml") == Path("lineups/rx.html")
    assert html_output_path(Path("/tmp/a.b.yaml")) == Path("/tmp/a.b.html")


@pytest.mark.parametrize(
    "freq, expected",
    [
        (2.4e9, (2.4, "GHz")),
        (10e6, (10.0, "MHz")),
        (1.5e3, (1.5, "kHz")),
        (50.0, (50.0, "Hz")),
        (3e12, (3.0, "THz")),
    ],
)
def test_format_frequency(freq, expected):
    value, unit = format_frequency(freq)
    assert unit == expected[1]
    assert value == pytest.approx(expected[0])


def test_cascade_rows_pair_nodes_with_blocks(receiver_blocks, weak_input):
    nodes = cascade_vector_return_vector(weak_input, receiver_blocks)
    rows = cascade_rows(nodes, receiver_blocks)
    assert len(rows) == 4
    assert all(len(r) == len(CASCADE_COLUMNS) for r in rows)
    # input row has no block columns
    assert rows[0][:8] == ["0", "Input", "-", "-", "-", "-", "-", "-60.00"]
    assert rows[1][1] == "LNA Output"
    assert rows[1][2] == "20.00"
    assert rows[1][6] == "-60.00"
    assert rows[3][7] == "-15.00"

    with pytest.raises(ValueError):
        cascade_rows(nodes[:-1], receiver_blocks)


def test_write_html_table(tmp_path, receiver_blocks, weak_input):
    nodes = cascade_vector_return_vector(weak_input, receiver_blocks)
    out = write_html_table(tmp_path / "rx.html", weak_input, nodes, receiver_blocks)
    text = out.read_text()
    assert text.startswith("<!DOCTYPE html>")
    assert "2.40</td><td>GHz" in text
    assert "10.00</td><td>MHz" in text
    assert "IF Amp Output" in text
    assert "Dynamic Range" in text


def test_write_html_table_cw_and_escaping(tmp_path):
    from gain_lineup.block import Block

    blocks = [Block(name="<amp>", gain_db=10.0, noise_figure_db=2.0)]
    sig = Input(power_dbm=-20.0, frequency_hz=900e6)
    nodes = cascade_vector_return_vector(sig, blocks)
    text = write_html_table(tmp_path / "cw.html", sig, nodes, blocks).read_text()
    assert "&lt;amp&gt; Output" in text
    assert "<td>CW</td>" in text
    assert "Dynamic Range" not in text


def test_write_cascade_json(tmp_path, receiver_blocks, cw_input):
    nodes = cascade_vector_return_vector(cw_input, receiver_blocks)
    out = write_cascade_json(tmp_path / "rx.json", cw_input, nodes)
    data = json.loads(out.read_text())
    assert data["input"]["power_dbm"] == -60.0
    assert len(data["nodes"]) == 4
    assert data["nodes"][0]["cumulative_oip3_dbm"] is None
    assert data["nodes"][-1]["noise_power_dbm"] is None
    assert data["nodes"][-1]["cumulative_gain_db"] == pytest.approx(45.0)


def test_plots_write_png(tmp_path, receiver_blocks, weak_input):
    curves = {b.name: b.am_am_sweep(-60.0, 0.0, 1.0) for b in receiver_blocks}
    curves["Cascade"] = cascade_am_am_sweep(receiver_blocks, -60.0, 0.0, 1.0)
    curves["empty"] = []
    am_am = tmp_path / "am_am.png"
    plot_am_am(curves, out_path=am_am)
    assert am_am.exists() and am_am.stat().st_size > 0

    gc = tmp_path / "gc.png"
    plot_gain_compression(
        {"Cascade": cascade_gain_compression_sweep(receiver_blocks, -60.0, 0.0, 1.0)},
        out_path=gc,
    )
    assert gc.exists()

    lineup = tmp_path / "lineup.png"
    plot_lineup(cascade_vector_return_vector(weak_input, receiver_blocks), out_path=lineup)
    assert lineup.exists()
