# src/hydrolab/utils/io.py
import json
from pathlib import Path
from typing import Any, Dict, List

import pandas as pd

from hydrolab.hydrodynamics.fluid import HydrodynamicsSettings, settings_from_preset


def force_history_frame(history: List[Dict[str, Any]]) -> pd.DataFrame:
    """
    Flatten a force history into a DataFrame.

    Vector entries (e.g. ``ForceAccumulator.as_dict()`` values) are split
    into ``<key>_x``, ``<key>_y``, ``<key>_z`` columns; scalars are kept.

    Args:
        history: List of dicts, e.g. [{'t': 0.1, 'Fb': array([0, 0, 98.1])}, ...]
    """
    rows = []
    for record in history:
        row = {}
        for key, value in record.items():
            if hasattr(value, "__len__") and not isinstance(value, str):
                if len(value) != 3:
                    raise ValueError(f"Entry '{key}' must be a scalar or a 3-vector")
                for component, v in zip("xyz", value):
                    row[f"{key}_{component}"] = float(v)
            else:
                row[key] = value
        rows.append(row)
    return pd.DataFrame(rows)


def save_force_history(history: List[Dict[str, Any]], filepath: str) -> Path:
    """
    Saves a force history to a CSV file.

    Args:
        history: List of dicts, see ``force_history_frame``
        filepath: Destination path (e.g., 'results/forces.csv')

    Returns:
        Path of the written file
    """
    if not history:
        raise ValueError("Force history is empty. Nothing to save.")

    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)

    force_history_frame(history).to_csv(path, index=False)
    return path


def load_hydrodynamics_settings(filepath: str) -> HydrodynamicsSettings:
    """
    Load hydrodynamic settings from a JSON file.

    The file holds an object with an optional ``preset`` name and any of
    ``damping_forces``, ``realistic_buoyancy`` and ``gravity``, e.g.
    ``{"preset": "buoyancy_only", "gravity": [0, 0, -9.80665]}``.
    """
    path = Path(filepath)
    with open(path, encoding="utf-8") as fh:
        config = json.load(fh)
    if not isinstance(config, dict):
        raise ValueError(f"Settings file {path} must contain a JSON object")

    config = dict(config)
    preset = config.pop("preset", "default")
    if "gravity" in config:
        config["gravity"] = tuple(config["gravity"])
    return settings_from_preset(preset, **config)
