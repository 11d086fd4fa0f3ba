"""
Config — parse config.yaml into run arguments.

Example config.yaml:

    paths:
      data: expression.parquet      # required, relative to the config file
      metadata: samples.csv         # optional
      output_dir: output
    id_column: sample
    metadata_key: sample
    features: [gene_a, gene_b]      # default: all numeric columns
    n_components: 5                 # or variance_threshold: 0.9
    normalize: zscore               # none | center | zscore
    method: eigh                    # eigh | svd
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from pcacore.config import DEFAULT_METHOD, DEFAULT_NORMALIZE, DEFAULT_OUTPUT_DIR, METHODS
from pcacore.core.normalization import NormMethod
from pcacore.validation import ConfigError


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load config.yaml.

    Tries:
        1. config_path/config.yaml
        2. config_path itself (if it's a .yaml file)
    """
    p = Path(config_path)

    if p.is_file() and p.suffix in ('.yaml', '.yml'):
        path = p
    else:
        path = p / 'config.yaml'

    if not path.exists():
        raise FileNotFoundError(f"No config.yaml in {config_path}")

    with open(path) as f:
        config = yaml.safe_load(f) or {}

    if not isinstance(config, dict):
        raise ConfigError([f"{path} must contain a mapping, got {type(config).__name__}"])

    # Stash the config path for resolving relative paths
    config['_config_path'] = str(path)
    config['_config_dir'] = str(path.parent)

    return config


def validate_config(config: Dict[str, Any]) -> Tuple[List[str], List[str]]:
    """
    Check config values before any computation.

    Returns:
        (errors, warnings). Empty errors = config is usable.
    """
    errors: List[str] = []
    warnings: List[str] = []

    paths = config.get('paths') or {}
    if not isinstance(paths, dict):
        errors.append("paths must be a mapping")
        paths = {}

    data = paths.get('data')
    if not data:
        errors.append("paths.data is required")
    elif not _resolve(config, data).exists():
        errors.append(f"data file not found: {_resolve(config, data)}")

    metadata = paths.get('metadata')
    if metadata:
        if not _resolve(config, metadata).exists():
            errors.append(f"metadata file not found: {_resolve(config, metadata)}")
        if not (config.get('metadata_key') or config.get('id_column')):
            errors.append("paths.metadata needs metadata_key or id_column")

    k = config.get('n_components')
    if k is not None and (isinstance(k, bool) or not isinstance(k, int) or k < 1):
        errors.append(f"n_components must be a positive integer, got {k!r}")

    threshold = config.get('variance_threshold')
    if threshold is not None:
        if isinstance(threshold, bool) or not isinstance(threshold, (int, float)) or not 0 < threshold <= 1:
            errors.append(f"variance_threshold must be in (0, 1], got {threshold!r}")
        elif k is not None:
            warnings.append("n_components and variance_threshold both set; n_components wins")

    norm = config.get('normalize', DEFAULT_NORMALIZE)
    if norm not in [m.value for m in NormMethod]:
        errors.append(f"normalize must be one of {[m.value for m in NormMethod]}, got {norm!r}")

    method = config.get('method', DEFAULT_METHOD)
    if method not in METHODS:
        errors.append(f"method must be one of {METHODS}, got {method!r}")

    features = config.get('features')
    if features is not None and (not isinstance(features, list) or not features):
        errors.append("features must be a non-empty list of column names")
    elif features is not None and len(set(map(str, features))) != len(features):
        errors.append(f"features has duplicate column names: {features}")

    return errors, warnings


def check_config(config: Dict[str, Any]) -> List[str]:
    """validate_config(), raising ConfigError on errors. Returns warnings."""
    errors, warnings = validate_config(config)
    if errors:
        raise ConfigError(errors, warnings)
    return warnings


def _resolve(config: Dict[str, Any], rel: str) -> Path:
    p = Path(rel)
    if p.is_absolute():
        return p
    return Path(config.get('_config_dir', '.')) / p


def get_data_path(config: Dict[str, Any]) -> str:
    """Get absolute path to the data table from config."""
    return str(_resolve(config, config['paths']['data']))


def get_metadata_path(config: Dict[str, Any]) -> Optional[str]:
    """Get path to the metadata table, or None if not configured."""
    rel = (config.get('paths') or {}).get('metadata')
    return str(_resolve(config, rel)) if rel else None


def get_output_dir(config: Dict[str, Any]) -> str:
    """Get absolute path to output directory from config."""
    rel = (config.get('paths') or {}).get('output_dir', DEFAULT_OUTPUT_DIR)
    return str(_resolve(config, rel))
