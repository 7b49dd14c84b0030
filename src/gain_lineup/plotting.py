# src/gain_lineup/plotting.py
from __future__ import annotations

from pathlib import Path
from typing import Mapping, Optional, Sequence

import numpy as np
import matplotlib.pyplot as plt

from .node import SignalNode
from .sweeps import SweepCurve


def _finish(out_path: Optional[str | Path]) -> None:
    plt.legend()
    plt.grid(True)
    if out_path:
        out_path = Path(out_path)
        plt.savefig(out_path, dpi=150, bbox_inches="tight")
        plt.close()
    else:
        plt.show()


def plot_am_am(
    curves: Mapping[str, SweepCurve],
    out_path: Optional[str | Path] = None,
) -> None:
    """
    Overlay Pin vs Pout curves, one line per label.

    A dashed unity-slope reference through the first point of each curve
    makes the onset of compression easy to see.
    """
    plt.figure()
    for label, curve in curves.items():
        if not curve:
            continue
        pts = np.asarray(curve, dtype=float)
        line, = plt.plot(pts[:, 0], pts[:, 1], label=label)
        linear = pts[0, 1] + (pts[:, 0] - pts[0, 0])
        plt.plot(pts[:, 0], linear, linestyle="--", alpha=0.4, color=line.get_color(), label="_linear")

    plt.xlabel("Input Power (dBm)")
    plt.ylabel("Output Power (dBm)")
    plt.title("AM-AM Transfer")
    _finish(out_path)


def plot_gain_compression(
    curves: Mapping[str, SweepCurve],
    out_path: Optional[str | Path] = None,
) -> None:
    plt.figure()
    for label, curve in curves.items():
        if not curve:
            continue
        pts = np.asarray(curve, dtype=float)
        plt.plot(pts[:, 0], pts[:, 1], label=label)
    plt.xlabel("Input Power (dBm)")
    plt.ylabel("Gain (dB)")
    plt.title("Gain Compression")
    _finish(out_path)


def plot_lineup(
    nodes: Sequence[SignalNode],
    out_path: Optional[str | Path] = None,
) -> None:
    """Signal and noise power at every node of the chain."""
    x = np.arange(len(nodes))
    plt.figure()
    plt.plot(x, [n.signal_power_dbm for n in nodes], marker="o", label="Signal (dBm)")
    noise = [n.noise_power_dbm for n in nodes]
    if any(v is not None for v in noise):
        plt.plot(
            x,
            [np.nan if v is None else v for v in noise],
            marker="s",
            label="Noise (dBm)",
        )
    plt.xticks(x, [n.name for n in nodes], rotation=30, ha="right")
    plt.ylabel("Power (dBm)")
    plt.title("Gain Lineup")
    _finish(out_path)
