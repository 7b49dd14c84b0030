# src/gain_lineup/config_models.py
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple, Union
import tomllib

import yaml

from .block import Block
from .input_signal import Input

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Raised for a config document that cannot be turned into a lineup."""


# canonical name -> accepted aliases, in precedence order after the canonical name
INPUT_FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    "input_power_dbm": ("input_power", "pin"),
    "frequency_hz": ("frequency", "f"),
    "bandwidth_hz": ("bandwidth", "bw"),
    "noise_temperature_k": ("noise_temperature",),
}

BLOCK_FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    "gain_db": ("gain",),
    "noise_figure_db": ("noise_figure", "nf"),
    "output_p1db_dbm": ("output_p1db", "op1db"),
    "output_ip3_dbm": ("output_ip3", "oip3"),
}

BLOCK_TYPES = ("explicit", "include")

_MISSING = object()


@dataclass
class GainLineupConfig:
    """
    Top-level configuration of a lineup run: the input signal plus the
    ordered, include-expanded block list.
    """
    input_power_dbm: float
    frequency_hz: float
    bandwidth_hz: float = 0.0
    noise_temperature_k: Optional[float] = None
    blocks: List[Block] = field(default_factory=list)
    description: Optional[str] = None
    source_path: Optional[Path] = None

    def to_input(self) -> Input:
        return Input(
            power_dbm=self.input_power_dbm,
            frequency_hz=self.frequency_hz,
            bandwidth_hz=self.bandwidth_hz,
            noise_temperature_k=self.noise_temperature_k,
        )


def _load_document(path: Path) -> dict:
    """
    Parse TOML / YAML / JSON by suffix. A missing file raises FileNotFoundError;
    any other unreadable or undecodable file is a ConfigError.
    """
    suffix = path.suffix.lower()
    try:
        if suffix == ".toml":
            with path.open("rb") as fh:
                raw = tomllib.load(fh)
        elif suffix in {".yaml", ".yml"}:
            raw = yaml.safe_load(path.read_text(encoding="utf-8"))
        else:
            raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise
    except UnicodeDecodeError as exc:
        raise ConfigError(f"{path}: config is not valid UTF-8: {exc}") from exc
    except (tomllib.TOMLDecodeError, yaml.YAMLError, json.JSONDecodeError) as exc:
        raise ConfigError(f"{path}: cannot parse config: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"{path}: cannot read config: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError(f"{path}: top level must be a table/mapping")
    return raw


def _as_float(value: Any, where: str) -> float:
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{where}: expected a number, got {value!r}")
    return float(value)


def resolve_field(
    d: dict,
    canonical: str,
    aliases: Sequence[str],
    where: str,
    default: Any = _MISSING,
) -> Any:
    """
    Look up a field by its canonical name, then by its aliases.

    The canonical name always wins; among aliases the first listed wins.
    Shadowed keys carrying a different value are logged.
    """
    present = [(key, d[key]) for key in (canonical, *aliases) if key in d]
    if not present:
        if default is _MISSING:
            raise ConfigError(
                f"{where}: missing required field '{canonical}' "
                f"(aliases: {', '.join(aliases) or 'none'})"
            )
        return default
    key, value = present[0]
    for other_key, other_value in present[1:]:
        if other_value != value:
            logger.warning(
                "%s: '%s'=%r ignored, '%s'=%r takes precedence.",
                where,
                other_key,
                other_value,
                key,
                value,
            )
    return value


def _optional_float(d: dict, canonical: str, aliases: Sequence[str], where: str) -> Optional[float]:
    value = resolve_field(d, canonical, aliases, where, default=None)
    return None if value is None else _as_float(value, f"{where}.{canonical}")


def _block_from_table(d: dict, where: str) -> Block:
    name = d.get("name")
    if not isinstance(name, str) or not name:
        raise ConfigError(f"{where}: block needs a non-empty 'name'")
    where = f"{where} ('{name}')"
    gain = _as_float(
        resolve_field(d, "gain_db", BLOCK_FIELD_ALIASES["gain_db"], where),
        f"{where}.gain_db",
    )
    nf = _as_float(
        resolve_field(d, "noise_figure_db", BLOCK_FIELD_ALIASES["noise_figure_db"], where),
        f"{where}.noise_figure_db",
    )
    try:
        return Block(
            name=name,
            gain_db=gain,
            noise_figure_db=nf,
            output_p1db_dbm=_optional_float(
                d, "output_p1db_dbm", BLOCK_FIELD_ALIASES["output_p1db_dbm"], where
            ),
            output_ip3_dbm=_optional_float(
                d, "output_ip3_dbm", BLOCK_FIELD_ALIASES["output_ip3_dbm"], where
            ),
        )
    except ValueError as exc:
        raise ConfigError(f"{where}: {exc}") from exc


def _load_blocks(
    tables: Any,
    base_dir: Path,
    where: str,
    include_stack: Set[Path],
) -> List[Block]:
    if tables is None:
        return []
    if not isinstance(tables, list):
        raise ConfigError(f"{where}: 'blocks' must be a list of tables")

    blocks: List[Block] = []
    for i, d in enumerate(tables):
        item_where = f"{where}.blocks[{i}]"
        if not isinstance(d, dict):
            raise ConfigError(f"{item_where}: expected a table, got {d!r}")
        block_type = d.get("type", "explicit")
        if block_type == "explicit":
            blocks.append(_block_from_table(d, item_where))
        elif block_type == "include":
            rel = d.get("path")
            if not isinstance(rel, str) or not rel:
                raise ConfigError(f"{item_where}: include needs a 'path'")
            inc_path = (base_dir / rel).resolve()
            if inc_path in include_stack:
                raise ConfigError(f"{item_where}: include cycle through {inc_path}")
            if not inc_path.exists():
                raise ConfigError(f"{item_where}: included file not found: {inc_path}")
            if not inc_path.is_file():
                raise ConfigError(f"{item_where}: include path is not a file: {inc_path}")
            logger.debug("Including blocks from %s", inc_path)
            raw = _load_document(inc_path)
            blocks.extend(
                _load_blocks(
                    raw.get("blocks"),
                    inc_path.parent,
                    str(inc_path),
                    include_stack | {inc_path},
                )
            )
        else:
            raise ConfigError(
                f"{item_where}: unknown block type {block_type!r} "
                f"(expected one of {', '.join(BLOCK_TYPES)})"
            )
    return blocks


def config_from_dict(
    raw: dict,
    base_dir: Union[str, Path] = ".",
    where: str = "config",
    source: Optional[Path] = None,
) -> GainLineupConfig:
    """
    Build a GainLineupConfig from an already-parsed document.

    Include paths are resolved against base_dir; `source` (the file the
    document came from, if any) seeds include-cycle detection.
    """
    def r_float(canonical: str, default: Any = _MISSING) -> Any:
        value = resolve_field(raw, canonical, INPUT_FIELD_ALIASES[canonical], where, default)
        if value is None:
            if default is _MISSING:
                raise ConfigError(f"{where}: '{canonical}' must not be null")
            return None
        return _as_float(value, f"{where}.{canonical}")

    input_power = r_float("input_power_dbm")
    frequency = r_float("frequency_hz")
    bandwidth = r_float("bandwidth_hz", default=None) or 0.0
    noise_temp = r_float("noise_temperature_k", default=None)

    if frequency <= 0.0:
        raise ConfigError(f"{where}: frequency_hz must be > 0, got {frequency}")
    if bandwidth < 0.0:
        raise ConfigError(f"{where}: bandwidth_hz must be >= 0, got {bandwidth}")
    if noise_temp is not None and noise_temp < 0.0:
        raise ConfigError(f"{where}: noise_temperature_k must be >= 0, got {noise_temp}")

    base_dir = Path(base_dir).resolve()
    include_stack = {source.resolve()} if source is not None else set()
    blocks = _load_blocks(raw.get("blocks"), base_dir, where, include_stack)
    description = raw.get("description")

    return GainLineupConfig(
        input_power_dbm=input_power,
        frequency_hz=frequency,
        bandwidth_hz=bandwidth,
        noise_temperature_k=noise_temp,
        blocks=blocks,
        description=str(description) if description is not None else None,
    )


def load_config(path: Union[str, Path]) -> GainLineupConfig:
    """
    Load a GainLineupConfig from a TOML, YAML or JSON file.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")
    raw = _load_document(path)
    cfg = config_from_dict(raw, base_dir=path.parent, where=str(path), source=path)
    cfg.source_path = path
    logger.info("Loaded %d blocks from %s", len(cfg.blocks), path)
    return cfg
