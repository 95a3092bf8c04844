"""
Utility functions for receipt text parsing
Configuration loading and logging setup
"""

import copy
import os
import sys
from pathlib import Path
from typing import Dict, List, Optional, Union

import yaml
from loguru import logger


DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config" / "parser_config.yaml"


class ConfigError(ValueError):
    """Raised when a configuration file exists but cannot be used."""


def default_config() -> Dict:
    """Return default configuration"""
    return {
        'normalizer': {
            'ocr_corrections': True,
            'currency_normalization': True,
        },
        'store_names': {
            'known': [],
            'fuzzy_threshold': 0.7,
        },
        'logging': {
            'level': 'INFO',
            'file': None,
            'rotation': '10 MB',
            'retention': '30 days',
        },
    }


def _deep_merge(base: Dict, override: Dict) -> Dict:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path: Optional[str] = None) -> Dict:
    """
    Load configuration from a YAML file, merged over the defaults

    Args:
        config_path: Path to YAML file (default: config/parser_config.yaml)

    Returns:
        Configuration dict

    Raises:
        ConfigError: the file exists but does not hold a YAML mapping
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    if not os.path.exists(config_path):
        logger.warning(f"Config file not found: {config_path}, using defaults")
        return default_config()

    with open(config_path, 'r', encoding='utf-8') as f:
        try:
            loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if loaded is None:
        return default_config()
    if not isinstance(loaded, dict):
        raise ConfigError(f"Config file must contain a mapping: {config_path}")

    return _deep_merge(default_config(), loaded)


# ─── Logging ─────────────────────────────────────────────────────────────────

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan> | <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | {message}"


def ensure_parent_dir(file_path: Union[str, Path]) -> Path:
    """Create the directory a file is about to be written into"""
    parent = Path(file_path).expanduser().parent
    parent.mkdir(parents=True, exist_ok=True)
    return parent


def setup_logging(
    log_file: Optional[Union[str, Path]] = None,
    level: str = "INFO",
    rotation: str = "10 MB",
    retention: str = "30 days",
) -> List[int]:
    """
    Route parser logs to stderr and, optionally, a rotating file

    Args:
        log_file: Log file path (stderr only when None)
        level: Minimum level for every sink (DEBUG shows per-field detail)
        rotation: loguru rotation rule for the file sink
        retention: loguru retention rule for the file sink

    Returns:
        loguru handler ids, console first
    """
    logger.remove()
    handler_ids = [logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level)]

    if log_file:
        ensure_parent_dir(log_file)
        handler_ids.append(logger.add(
            str(log_file),
            format=FILE_FORMAT,
            level=level,
            rotation=rotation,
            retention=retention,
            encoding="utf-8",
        ))

    logger.debug(f"[receipt_utils] logging at {level}, file sink: {log_file or 'none'}")
    return handler_ids


def setup_logging_from_config(config: Dict) -> List[int]:
    """Apply the 'logging' section of a loaded configuration"""
    defaults = default_config()['logging']
    settings = {**defaults, **(config.get('logging') or {})}
    return setup_logging(
        log_file=settings['file'],
        level=settings['level'],
        rotation=settings['rotation'],
        retention=settings['retention'],
    )
