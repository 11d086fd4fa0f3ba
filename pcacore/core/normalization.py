"""
Normalization
=============

Explicit preprocessing before PCA. fit() always centers internally;
scaling to unit variance is never implicit and only happens here.

Methods:
- none: leave data as-is
- center: x - mean (column-wise)
- zscore: (x - mean) / std - equalizes feature scales, like prcomp(scale.=TRUE)

Every method returns (normalized, params); params is enough for
inverse_normalize() to map a reconstruction back to original units.
"""

from enum import Enum
from typing import Any, Dict, Tuple

import numpy as np

from pcacore.config import EIGENVALUE_FLOOR
from pcacore.validation import check_matrix, InvalidInput


class NormMethod(str, Enum):
    """Preprocessing applied before fit()."""
    NONE = "none"
    CENTER = "center"
    ZSCORE = "zscore"


def center(data: np.ndarray) -> Tuple[np.ndarray, Dict[str, Any]]:
    """
    Column centering: x - mean.

    Args:
        data: Input array (N x D)

    Returns:
        Tuple of (centered_data, params_dict with 'mean')
    """
    data = check_matrix(data, name="data")
    mean = data.mean(axis=0)
    return data - mean, {'method': 'center', 'mean': mean}


def zscore(data: np.ndarray, ddof: int = 1) -> Tuple[np.ndarray, Dict[str, Any]]:
    """
    Z-score normalization: (x - mean) / std

    Constant columns get std = 1.0 so they map to zeros instead of NaN.

    Args:
        data: Input array (N x D)
        ddof: Degrees of freedom for std (1 = sample std)

    Returns:
        Tuple of (normalized_data, params_dict with 'mean' and 'std')
    """
    data = check_matrix(data, name="data", min_rows=ddof + 1)

    mean = data.mean(axis=0)
    std = data.std(axis=0, ddof=ddof)
    std = np.where(std < EIGENVALUE_FLOOR, 1.0, std)

    return (data - mean) / std, {'method': 'zscore', 'mean': mean, 'std': std}


def normalize(data: np.ndarray, method: str = "center", **kwargs) -> Tuple[np.ndarray, Dict[str, Any]]:
    """
    Unified normalization interface.

    Args:
        data: Input array
        method: One of 'none', 'center', 'zscore'
        **kwargs: Method-specific parameters

    Returns:
        Tuple of (normalized_data, params_dict)
    """
    try:
        method = NormMethod(str(getattr(method, 'value', method)).lower())
    except ValueError:
        raise InvalidInput(
            f"Unknown normalization method: {method}. Use one of: "
            + ", ".join(m.value for m in NormMethod)
        ) from None

    if method is NormMethod.NONE:
        return check_matrix(data, name="data").copy(), {'method': 'none'}
    elif method is NormMethod.CENTER:
        return center(data)
    return zscore(data, **kwargs)


def inverse_normalize(normalized_data: np.ndarray, params: Dict[str, Any]) -> np.ndarray:
    """
    Inverse transform normalized data back to original scale.

    Args:
        normalized_data: Normalized array (N x D)
        params: Parameters from normalize()

    Returns:
        Data in original scale
    """
    normalized_data = np.asarray(normalized_data, dtype=np.float64)
    method = params.get('method', 'none')

    if method == 'none':
        return normalized_data.copy()
    elif method == 'center':
        return normalized_data + params['mean']
    elif method == 'zscore':
        return normalized_data * params['std'] + params['mean']

    raise InvalidInput(f"Unknown method in params: {method}")
