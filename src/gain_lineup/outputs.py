# src/gain_lineup/outputs.py
from __future__ import annotations

import html
import json
from dataclasses import asdict
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from .block import Block
from .input_signal import Input
from .node import SignalNode

_FREQ_UNITS = (
    (1e12, "THz"),
    (1e9, "GHz"),
    (1e6, "MHz"),
    (1e3, "kHz"),
)

_STYLE = """\
table { border-collapse: collapse; }
.cascade { width: 100%; }
.parameters { width: auto; }
.parameters td:nth-child(2) { text-align: right; }
th, td { border: 1px solid #ddd; padding: 8px; text-align: left; }
th { background-color: #f2f2f2; }
tr:nth-child(even) { background-color: #f9f9f9; }
"""

CASCADE_COLUMNS = (
    "Stage",
    "Name",
    "Gain (dB)",
    "NF (dB)",
    "Output P1dB (dBm)",
    "Output IP3 (dBm)",
    "Input Power (dBm)",
    "Output Power (dBm)",
    "Cumulative Gain (dB)",
    "Cumulative NF (dB)",
    "Cumulative OIP3 (dBm)",
    "SNR (dB)",
    "SFDR (dB)",
)


def format_frequency(frequency_hz: float) -> Tuple[float, str]:
    """Scale a frequency to the largest unit it reaches."""
    for scale, unit in _FREQ_UNITS:
        if frequency_hz >= scale:
            return frequency_hz / scale, unit
    return frequency_hz, "Hz"


def _fmt(value: Optional[float]) -> str:
    return f"{value:.2f}" if value is not None else "-"


def html_output_path(config_path: str | Path) -> Path:
    """Report path beside the config: lineup.toml -> lineup.html."""
    return Path(config_path).with_suffix(".html")


def report_paths(html_path: str | Path) -> Dict[str, Path]:
    """
    Every file a lineup run writes, keyed by kind. All sit beside the HTML
    report and share its stem:
      rx.html -> rx_cascade.json, rx_am_am.png, rx_lineup.png
    """
    html_path = Path(html_path)
    stem = html_path.stem
    return {
        "html": html_path,
        "json": html_path.with_name(f"{stem}_cascade.json"),
        "am_am": html_path.with_name(f"{stem}_am_am.png"),
        "lineup": html_path.with_name(f"{stem}_lineup.png"),
    }


def cascade_rows(nodes: Sequence[SignalNode], blocks: Sequence[Block]) -> List[List[str]]:
    """
    Table cells per node. Row 0 is the input node; row i pairs node i with
    the block that produced it (blocks[i - 1]).
    """
    if len(nodes) != len(blocks) + 1:
        raise ValueError(
            f"expected {len(blocks) + 1} nodes for {len(blocks)} blocks, got {len(nodes)}"
        )
    rows: List[List[str]] = []
    for i, node in enumerate(nodes):
        block = blocks[i - 1] if i > 0 else None
        stage_input = nodes[i - 1].signal_power_dbm if i > 0 else None
        rows.append(
            [
                str(i),
                node.name,
                _fmt(block.gain_db if block else None),
                _fmt(block.noise_figure_db if block else None),
                _fmt(block.output_p1db_dbm if block else None),
                _fmt(block.output_ip3_dbm if block else None),
                _fmt(stage_input),
                _fmt(node.signal_power_dbm),
                _fmt(node.cumulative_gain_db),
                _fmt(node.cumulative_noise_figure_db),
                _fmt(node.cumulative_oip3_dbm),
                _fmt(node.signal_to_noise_ratio_db()),
                _fmt(node.sfdr_db),
            ]
        )
    return rows


def write_html_table(
    path: str | Path,
    signal: Input,
    nodes: Sequence[SignalNode],
    blocks: Sequence[Block],
    title: str = "Gain Lineup Cascade",
) -> Path:
    """
    Write a standalone HTML gain-lineup report.

    Layout:
      * input parameter table (power, frequency, bandwidth, noise temperature)
      * cascade table, one row per node (see CASCADE_COLUMNS)
      * final dynamic-range summary when the chain has a P1dB and a bandwidth
    """
    path = Path(path)
    freq_val, freq_unit = format_frequency(signal.frequency_hz)
    bw_val, bw_unit = format_frequency(signal.bandwidth_hz)
    params = [
        ("Input Power", f"{signal.power_dbm:.2f}", "dBm"),
        ("Frequency", f"{freq_val:.2f}", freq_unit),
        ("Bandwidth", f"{bw_val:.2f}", bw_unit) if not signal.is_cw else ("Bandwidth", "CW", ""),
        ("Source Noise Temperature", f"{signal.source_noise_temperature_k:.1f}", "K"),
    ]

    lines = [
        "<!DOCTYPE html>",
        "<html>",
        "<head>",
        f"<title>{html.escape(title)}</title>",
        "<style>",
        _STYLE,
        "</style>",
        "</head>",
        "<body>",
        f"<h1>{html.escape(title)}</h1>",
        "<h2>Input Parameters</h2>",
        '<table class="parameters">',
        "<tr><th>Parameter</th><th>Value</th><th>Unit</th></tr>",
    ]
    for name, value, unit in params:
        lines.append(f"<tr><td>{name}</td><td>{value}</td><td>{unit}</td></tr>")
    lines += ["</table>", "<br>", "<h2>Signal Cascade</h2>", '<table class="cascade">']
    lines.append("<tr>" + "".join(f"<th>{c}</th>" for c in CASCADE_COLUMNS) + "</tr>")
    for row in cascade_rows(nodes, blocks):
        lines.append("<tr>" + "".join(f"<td>{html.escape(c)}</td>" for c in row) + "</tr>")
    lines.append("</table>")

    summary = nodes[-1].dynamic_range_summary() if nodes else None
    if summary is not None:
        lines += [
            "<h2>Dynamic Range (chain output)</h2>",
            '<table class="parameters">',
            "<tr><th>Quantity</th><th>Value</th><th>Unit</th></tr>",
            f"<tr><td>Linear DR</td><td>{summary.linear_dr_db:.2f}</td><td>dB</td></tr>",
            f"<tr><td>SFDR</td><td>{_fmt(summary.sfdr_db)}</td><td>dB</td></tr>",
            f"<tr><td>MDS</td><td>{summary.mds_dbm:.2f}</td><td>dBm</td></tr>",
            f"<tr><td>Max Input</td><td>{summary.max_input_dbm:.2f}</td><td>dBm</td></tr>",
            "</table>",
        ]
    lines += ["</body>", "</html>"]

    path.write_text("\n".join(lines) + "\n")
    return path


def write_cascade_json(
    path: str | Path,
    signal: Input,
    nodes: Sequence[SignalNode],
) -> Path:
    """
    JSON dump of the run:
      {"input": {...Input fields...}, "nodes": [{...SignalNode fields...}, ...]}
    Absent quantities are written as null.
    """
    path = Path(path)
    blob = {
        "input": asdict(signal),
        "nodes": [asdict(n) for n in nodes],
    }
    path.write_text(json.dumps(blob, indent=2))
    return path
