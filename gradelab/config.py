"""
YAML configuration for GradeLab.

The packaged ``config.yaml`` mirrors ``DEFAULTS``. User files only need the
keys they change; everything else falls back to the defaults. String values
may reference environment variables as ``${NAME}``.
"""

import copy
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.yaml"

_ENV_REF = re.compile(r'\$\{([^}]+)\}')

DEFAULTS: Dict[str, Any] = {
    'processing': {'validate_adjustments': True},
    'lut': {
        'format': 'CUBE',
        'resolution': 33,
        'title': 'GradeLab LUT',
        'description': '',
        'domain': {'min': 0.0, 'max': 1.0},
        'progress_interval': 1000,
        'apply_hsl': False,
    },
    'color_wheel': {'radius': 100.0},
    'history': {'max_actions': 100, 'max_snapshots': 10},
    'presets': {'storage_path': None},
    'logging': {
        'level': 'INFO',
        'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        'color': True,
    },
}


def get_default_config() -> Dict[str, Any]:
    """Fresh copy of the built-in defaults."""
    return copy.deepcopy(DEFAULTS)


def _expand(value: Any) -> Any:
    # Unset variables are left as written
    if isinstance(value, str):
        return _ENV_REF.sub(lambda m: os.environ.get(m.group(1), m.group(0)), value)
    if isinstance(value, dict):
        return {k: _expand(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_expand(v) for v in value]
    return value


def _overlay(target: Dict[str, Any], changes: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in changes.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _overlay(target[key], value)
        else:
            target[key] = value
    return target


def load_config(config_path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """
    Read a YAML config file on top of the defaults.

    A missing or unreadable file is logged and the defaults are returned.

    Args:
        config_path: File to read; the packaged config.yaml when None

    Returns:
        Complete configuration dictionary
    """
    path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH
    config = get_default_config()

    if not path.exists():
        logger.warning(f"No config at {path}, using defaults")
        return config

    try:
        with open(path, 'r', encoding='utf-8') as f:
            loaded = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Could not read config {path}: {e}")
        return config

    logger.info(f"Config loaded from {path}")
    return _overlay(config, _expand(loaded))


def save_config(config: Dict[str, Any], config_path: Union[str, Path]) -> bool:
    """Write ``config`` as YAML; returns False (and logs) when the write fails."""
    try:
        with open(config_path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(config, f, default_flow_style=False, sort_keys=False)
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Could not write config {config_path}: {e}")
        return False
    logger.info(f"Config written to {config_path}")
    return True


def get_config_value(config: Dict[str, Any], key_path: str, default: Any = None) -> Any:
    """Look up a dotted path such as ``'lut.domain.max'``."""
    node: Any = config
    for part in key_path.split('.'):
        if not isinstance(node, dict) or part not in node:
            return default
        node = node[part]
    return node


def update_config_value(config: Dict[str, Any], key_path: str, value: Any) -> None:
    """Set a dotted path in place, creating intermediate sections."""
    *parents, leaf = key_path.split('.')
    node = config
    for part in parents:
        node = node.setdefault(part, {})
    node[leaf] = value
