"""Experiment I/O utilities for reproducible metadata and standardized output.

Provides helpers to:
- Collect experiment metadata (git SHA, timestamp, machine info, full config)
- Save results in a standardized format
"""

import json
import os
import platform
import subprocess
from dataclasses import fields, is_dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import numpy as np


def get_git_sha() -> Optional[str]:
    """Get current git SHA, or None if not in a git repo."""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "HEAD"],
            capture_output=True, text=True, timeout=5
        )
    except (OSError, subprocess.SubprocessError):
        return None
    if result.returncode == 0:
        return result.stdout.strip()
    return None


def get_machine_info() -> Dict[str, str]:
    """Collect basic machine info."""
    return {
        "platform": platform.platform(),
        "python_version": platform.python_version(),
        "machine": platform.machine(),
        "node": platform.node(),
    }


def build_metadata(config: Any, extra: Optional[Dict] = None) -> Dict[str, Any]:
    """Build a metadata dict from a config object.

    Includes timestamp, git SHA, machine info, and the full config
    serialized as a dict.

    Parameters
    ----------
    config : dataclass or object
        Experiment config. Callable fields are stored by their qualified name.
    extra : dict, optional
        Additional metadata to merge in (e.g., synthesis time).
    """
    meta = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "git_sha": get_git_sha(),
        "machine": get_machine_info(),
        "config": _serialize_config(config),
    }
    if extra:
        meta.update(extra)
    return meta


def _serialize_config(config: Any) -> Dict[str, Any]:
    """Serialize a config object to a JSON-compatible dict."""
    if is_dataclass(config):
        items = ((f.name, getattr(config, f.name)) for f in fields(config))
    else:
        items = (config.__dict__ if hasattr(config, "__dict__") else {}).items()
    return {key: _serialize_value(val) for key, val in items}


def _serialize_value(val: Any) -> Any:
    """Make a value JSON-serializable."""
    if val is None or isinstance(val, (bool, int, float, str)):
        return val
    if callable(val):
        return f"{val.__module__}.{val.__qualname__}" if hasattr(val, "__qualname__") else str(val)
    if isinstance(val, dict):
        return {str(k): _serialize_value(v) for k, v in val.items()}
    if isinstance(val, (list, tuple)):
        return [_serialize_value(v) for v in val]
    if isinstance(val, np.ndarray):
        return val.tolist()
    if hasattr(val, "name"):  # enums
        return val.name
    if isinstance(val, np.integer):
        return int(val)
    if isinstance(val, np.floating):
        return float(val)
    return str(val)


def save_experiment_results(
    path: str,
    results: Dict[str, Any],
    metadata: Dict[str, Any],
) -> None:
    """Save experiment results to JSON.

    Parameters
    ----------
    path : str
        Path for the JSON results file.
    results : dict
        The experiment results.
    metadata : dict
        Metadata from build_metadata().
    """
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)

    output = {
        "metadata": metadata,
        "results": results,
    }
    with open(path, "w") as f:
        json.dump(output, f, indent=2, default=str)
