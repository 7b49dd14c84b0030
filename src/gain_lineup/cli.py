# src/gain_lineup/cli.py
from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys
from typing import Sequence
import webbrowser

from . import __version__
from .block import Block
from .cascade import cascade_vector_return_vector
from .config_models import ConfigError, load_config
from .node import SignalNode
from .outputs import html_output_path, report_paths, write_cascade_json, write_html_table
from .plotting import plot_am_am, plot_lineup
from .sweeps import cascade_am_am_sweep

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_USAGE = 2
EXIT_NOT_FOUND = 3
EXIT_CONFIG = 4
EXIT_WRITE = 5


def _opt(value, fmt: str = ".2f") -> str:
    return format(value, fmt) if value is not None else "-"


def format_lineup(nodes: Sequence[SignalNode]) -> str:
    header = (
        f"{'#':>3}  {'Node':<24} {'Pout':>8} {'Gain':>7} {'NF':>6} "
        f"{'OIP3':>7} {'SNR':>7} {'SFDR':>7}"
    )
    lines = [header, "-" * len(header)]
    for i, n in enumerate(nodes):
        lines.append(
            f"{i:>3}  {n.name[:24]:<24} {n.signal_power_dbm:>8.2f} "
            f"{n.cumulative_gain_db:>7.2f} {n.cumulative_noise_figure_db:>6.2f} "
            f"{_opt(n.cumulative_oip3_dbm):>7} {_opt(n.signal_to_noise_ratio_db()):>7} "
            f"{_opt(n.sfdr_db):>7}"
        )
    return "\n".join(lines)


def _am_am_curves(blocks: Sequence[Block], start: float, stop: float, step: float):
    curves = {b.name: b.am_am_sweep(start, stop, step) for b in blocks}
    curves["Cascade"] = cascade_am_am_sweep(blocks, start, stop, step)
    return curves


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="RF Gain Lineup Calculator (cascaded gain, NF, OIP3, SFDR)"
    )
    parser.add_argument("config", type=str, help="Path to TOML/YAML/JSON lineup config")
    parser.add_argument(
        "--out",
        type=str,
        default=None,
        help="HTML report path (default: <config>.html beside the config)",
    )
    parser.add_argument(
        "--no-browser",
        action="store_true",
        help="Do not open the HTML report in a browser",
    )
    parser.add_argument(
        "--no-plots",
        action="store_true",
        help="Disable AM-AM and lineup plot generation",
    )
    parser.add_argument("--sweep-start", type=float, default=None, help="AM-AM sweep start (dBm)")
    parser.add_argument("--sweep-stop", type=float, default=None, help="AM-AM sweep stop (dBm)")
    parser.add_argument("--sweep-step", type=float, default=1.0, help="AM-AM sweep step (dB)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        cfg = load_config(args.config)
    except FileNotFoundError as exc:
        logger.error("%s", exc)
        return EXIT_NOT_FOUND
    except ConfigError as exc:
        logger.error("Invalid config: %s", exc)
        return EXIT_CONFIG

    signal = cfg.to_input()
    nodes = cascade_vector_return_vector(signal, cfg.blocks)
    if cfg.description:
        print(cfg.description)
    print(format_lineup(nodes))

    html_path = Path(args.out) if args.out else html_output_path(args.config)
    paths = report_paths(html_path)
    config_path = Path(args.config).resolve()
    clashes = [p for p in paths.values() if p.resolve() == config_path]
    if clashes:
        logger.error("Refusing to overwrite the config file %s with a report.", clashes[0])
        return EXIT_WRITE

    try:
        write_html_table(paths["html"], signal, nodes, cfg.blocks)
        write_cascade_json(paths["json"], signal, nodes)
        if not args.no_plots and cfg.blocks:
            start = args.sweep_start if args.sweep_start is not None else signal.power_dbm - 30.0
            stop = args.sweep_stop if args.sweep_stop is not None else signal.power_dbm + 20.0
            plot_am_am(
                _am_am_curves(cfg.blocks, start, stop, args.sweep_step),
                out_path=paths["am_am"],
            )
            plot_lineup(nodes, out_path=paths["lineup"])
    except OSError as exc:
        logger.error("Could not write report %s: %s", html_path, exc)
        return EXIT_WRITE
    logger.info("Wrote %s", html_path)

    if not args.no_browser:
        if not webbrowser.open(html_path.resolve().as_uri()):
            logger.warning("No browser available; open %s manually.", html_path)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
