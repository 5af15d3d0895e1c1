"""
perfsight Threshold File Loader
===============================

Load threshold overrides from YAML. Section names match
``perfsight.config.thresholds`` (case-insensitive); values are merged over
the defaults, or over a named profile when the file sets ``profile:``.

Usage:
    from perfsight.config.loader import load_threshold_file, load_config

    thresholds = load_threshold_file('thresholds.yaml')
    engine = RecommendationEngine(thresholds=thresholds)

Example file:

    profile: strict
    anomaly:
      z_threshold: 2.2
    recommendation:
      max_recommendations: 5
"""

import logging
import yaml
from pathlib import Path
from typing import Dict, Any, Optional, Union

from perfsight.config.thresholds import get_active_thresholds
from perfsight.validation import ValidationError

logger = logging.getLogger(__name__)

# Default config file name looked up by load_config()
CONFIG_FILENAME = 'perfsight.yaml'


def get_config_path() -> Path:
    """Get config directory path."""
    candidates = [
        Path('config'),
        Path.cwd(),
        Path(__file__).parent,
    ]

    for path in candidates:
        if (path / CONFIG_FILENAME).exists():
            return path

    return Path('config')


def load_threshold_file(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load thresholds from a YAML file merged over the defaults.

    Args:
        path: YAML file with optional ``profile`` and per-section overrides

    Returns:
        Dict shaped like ``get_thresholds()``

    Raises:
        FileNotFoundError: when the file does not exist
        ValidationError: unknown sections or non-mapping section values
    """
    path = Path(path)
    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise ValidationError([f"{path}: top level must be a mapping"])

    profile = raw.pop('profile', None)
    try:
        result = get_active_thresholds(profile)
    except KeyError as exc:
        raise ValidationError([str(exc.args[0])]) from exc

    errors = []
    for key, values in raw.items():
        section = str(key).upper()
        if section not in result or section in ('DESCRIPTION', 'PROFILE'):
            errors.append(f"{path}: unknown threshold section '{key}'")
        elif not isinstance(values, dict):
            errors.append(f"{path}: section '{key}' must be a mapping")
        else:
            result[section].update(values)

    if errors:
        raise ValidationError(errors)

    logger.debug("Loaded thresholds from %s (profile=%s)", path, profile)
    return result


def load_config(path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """
    Load thresholds from ``path``, or from the default config file if present.

    Falls back to the active defaults when no file is found.
    """
    config_file = Path(path) if path else get_config_path() / CONFIG_FILENAME

    if not config_file.exists():
        logger.info("No %s found at %s, using defaults", CONFIG_FILENAME, config_file)
        return get_active_thresholds()

    return load_threshold_file(config_file)
